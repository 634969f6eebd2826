"""
druglookup: drug record search, dedup and data-quality repair over a curated
store and the openFDA label API.
"""

from .service import DrugLookupService, sanitize_record
from .utils.config import Settings, load_settings
from .utils.schemas import (
    FullDrugRecord,
    QualityReport,
    QualitySubject,
    SearchCandidate,
    Severity,
    SideEffects,
    SourceTag,
)

__all__ = [
    "DrugLookupService",
    "FullDrugRecord",
    "QualityReport",
    "QualitySubject",
    "SearchCandidate",
    "Severity",
    "Settings",
    "SideEffects",
    "SourceTag",
    "load_settings",
    "sanitize_record",
]
