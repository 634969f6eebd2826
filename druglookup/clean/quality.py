from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Pattern, Tuple, Union

from ..utils.schemas import QualityReport, QualitySubject, Severity, is_placeholder

MISSING_NAME = "Missing or unknown brand name"
SHORT_NAME = "Brand name too short"
MIN_BRAND_LENGTH = 3
HIGH_SEVERITY_ISSUES = 4
MEDIUM_SEVERITY_ISSUES = 2

_SECTION_MARKERS = 'Section number markers (e.g., "7 )")'
_CROSS_REFERENCES = "Cross-reference brackets"
_EMPTY_BRACKETS = "Empty brackets"


@dataclass(frozen=True)
class ArtifactPattern:
    """One kind of leftover document markup; entries sharing a label count once."""
    id: str
    pattern: Pattern[str]
    label: str

    def matches(self, text: str) -> bool:
        return bool(self.pattern.search(text))


ARTIFACT_PATTERNS: Tuple[ArtifactPattern, ...] = (
    ArtifactPattern("section_marker", re.compile(r"\d+\s*\)\]?"), _SECTION_MARKERS),
    ArtifactPattern("parenthesized_number", re.compile(r"\(\s*\d+\s*\)"), _SECTION_MARKERS),
    ArtifactPattern(
        "section_header",
        re.compile(r"^\d+\.?\d*\s+[A-Z][A-Z\s]{3,}", re.MULTILINE),
        'Section headers (e.g., "6 ADVERSE REACTIONS")',
    ),
    ArtifactPattern("cross_reference_bracket", re.compile(r"\[see\s+[^\]]+\]", re.IGNORECASE), _CROSS_REFERENCES),
    ArtifactPattern("cross_reference_paren", re.compile(r"\(see\s+[^)]+\)", re.IGNORECASE), _CROSS_REFERENCES),
    ArtifactPattern("subsection_number", re.compile(r"\(\s*\d+\.\d+\s*\)"), 'Subsection numbers (e.g., "(5.1)")'),
    ArtifactPattern(
        "chemical_formula",
        re.compile(r"C\s*\d+\s*H\s*\d+.*molecular|molecular.*C\s*\d+\s*H\s*\d+", re.IGNORECASE | re.DOTALL),
        "Raw chemical formula data",
    ),
    ArtifactPattern("bullet_marker", re.compile(r"^[•·▪▸►]\s*", re.MULTILINE), "Bullet markers"),
    ArtifactPattern("empty_square_brackets", re.compile(r"\[\s*\]"), _EMPTY_BRACKETS),
    ArtifactPattern("empty_parentheses", re.compile(r"\(\s*\)"), _EMPTY_BRACKETS),
)


def _severity(issues: List[str]) -> Severity:
    if MISSING_NAME in issues or len(issues) >= HIGH_SEVERITY_ISSUES:
        return Severity.HIGH
    if len(issues) >= MEDIUM_SEVERITY_ISSUES:
        return Severity.MEDIUM
    return Severity.LOW


class QualityAnalyzer:
    """Scores how much leftover label markup a record's text carries."""

    def __init__(self, patterns: Tuple[ArtifactPattern, ...] = ARTIFACT_PATTERNS):
        self.patterns = patterns

    def analyze(self, subject: QualitySubject) -> QualityReport:
        issues: List[str] = []

        brand = (subject.brand_name or "").strip()
        if not brand or is_placeholder(brand):
            issues.append(MISSING_NAME)
        elif len(brand) < MIN_BRAND_LENGTH:
            issues.append(SHORT_NAME)

        for text in subject.text_fields():
            if not text:
                continue
            for artifact in self.patterns:
                if artifact.label not in issues and artifact.matches(text):
                    issues.append(artifact.label)

        return QualityReport(
            needs_healing=bool(issues),
            issues=tuple(issues),
            severity=_severity(issues),
        )


_default_analyzer = QualityAnalyzer()


def _as_subject(data: Union[QualitySubject, Mapping[str, Any]]) -> QualitySubject:
    if isinstance(data, QualitySubject):
        return data
    return QualitySubject(**dict(data))


def analyze_data_quality(data: Union[QualitySubject, Mapping[str, Any]]) -> QualityReport:
    return _default_analyzer.analyze(_as_subject(data))


def needs_healing(data: Union[QualitySubject, Mapping[str, Any]]) -> bool:
    return analyze_data_quality(data).needs_healing
