from __future__ import annotations
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_NAME = "Unknown"

# strings that stand in for a missing name in upstream data
PLACEHOLDER_NAMES = frozenset({
    "unknown",
    "n/a",
    "null",
    "undefined",
    "none",
    "not available",
    "not specified",
})


def is_placeholder(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in PLACEHOLDER_NAMES


class SourceTag(str, Enum):
    CURATED = "curated"
    PUBLIC = "public"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class SearchCandidate(_Frozen):
    id: str
    brand_name: str
    generic_name: str = ""
    manufacturer: str = ""
    purpose_text: str = ""
    ndc_codes: Tuple[str, ...] = ()
    # priority ordering only; never serialized for callers
    source: SourceTag = Field(exclude=True)


class SideEffects(_Frozen):
    emergency: Tuple[str, ...] = ()
    common: Tuple[str, ...] = ()


class FullDrugRecord(SearchCandidate):
    drug_class: Optional[str] = None
    brand_names: Tuple[str, ...] = ()
    uses: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    before_taking: Tuple[str, ...] = ()
    side_effects: SideEffects = Field(default_factory=SideEffects)
    dosage_notes: Optional[str] = None
    interactions_note: Optional[str] = None
    pregnancy_category: Optional[str] = None
    availability: Optional[str] = None
    controlled_substance: Optional[str] = None
    source_url: Optional[str] = None
    label_effective_date: Optional[date] = None
    healed: bool = False

    @classmethod
    def from_candidate(cls, candidate: SearchCandidate) -> "FullDrugRecord":
        """Basic record with empty rich fields."""
        return cls(**candidate.model_dump(), source=candidate.source)

    def quality_subject(self) -> "QualitySubject":
        return QualitySubject(
            brand_name=self.brand_name,
            generic_name=self.generic_name,
            description=self.purpose_text,
            uses=self.uses,
            warnings=self.warnings,
            side_effects=self.side_effects.emergency + self.side_effects.common,
        )


class QualitySubject(_Frozen):
    brand_name: Optional[str] = None
    generic_name: Optional[str] = None
    description: Optional[str] = None
    uses: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    side_effects: Tuple[str, ...] = ()

    def text_fields(self) -> Tuple[str, ...]:
        return (self.description or "",) + self.uses + self.warnings + self.side_effects


class QualityReport(_Frozen):
    needs_healing: bool
    issues: Tuple[str, ...] = ()
    severity: Severity = Severity.LOW
