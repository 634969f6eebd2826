"""
Final gate before search results reach callers.

Rejects candidates whose names are placeholders ("Unknown", "N/A"), too short,
bare codes ("12345") or punctuation. Rejections are logged at debug level for
monitoring and never surfaced.
"""
from __future__ import annotations
import re
import unicodedata
from typing import Iterable, List, Optional

from ..utils.logger import get_logger
from ..utils.schemas import PLACEHOLDER_NAMES, SearchCandidate

log = get_logger("search.validation")

MIN_NAME_LENGTH = 3
MIN_GENERIC_LENGTH = 2

_DIGITS = re.compile(r"^\d+$")
# Unicode punctuation (P*) and symbols (S*), e.g. "………", "¿¿¿", "•••", "+++"
_NON_NAME_CATEGORIES = ("P", "S")


def _only_space_or_punct(text: str) -> bool:
    return all(ch.isspace() or unicodedata.category(ch)[0] in _NON_NAME_CATEGORIES for ch in text)


def is_valid_drug_name(name: Optional[str]) -> bool:
    if not name:
        return False
    trimmed = name.strip()
    if len(trimmed) < MIN_NAME_LENGTH:
        return False
    if trimmed.lower() in PLACEHOLDER_NAMES:
        return False
    if _DIGITS.match(trimmed):
        return False
    if _only_space_or_punct(trimmed):
        return False
    return True


def looks_like_garbage(text: Optional[str]) -> bool:
    if not text:
        return True
    trimmed = text.strip().lower()
    if len(trimmed) < MIN_GENERIC_LENGTH:
        return True
    if trimmed in PLACEHOLDER_NAMES:
        return True
    if _DIGITS.match(trimmed):
        return True
    return not any(ch.isalnum() for ch in trimmed)


def rejection_reason(candidate: SearchCandidate) -> Optional[str]:
    """Why a candidate would be rejected, or None when it passes."""
    if not candidate.id or not candidate.id.strip():
        return "missing id"
    if not is_valid_drug_name(candidate.brand_name):
        return "invalid brand name"
    generic = candidate.generic_name
    if generic and generic != candidate.brand_name:
        # a generic that is merely short/odd is tolerated; garbage is not
        if not is_valid_drug_name(generic) and looks_like_garbage(generic):
            return "garbage generic name"
    return None


def validate_search_result(candidate: SearchCandidate) -> bool:
    return rejection_reason(candidate) is None


def log_validation_failure(candidate: SearchCandidate, reason: str) -> None:
    log.debug(
        f"[validation] rejected id={candidate.id!r} brand={candidate.brand_name!r} "
        f"generic={candidate.generic_name!r}: {reason}"
    )


def validate_search_results(candidates: Iterable[SearchCandidate]) -> List[SearchCandidate]:
    out: List[SearchCandidate] = []
    for candidate in candidates:
        reason = rejection_reason(candidate)
        if reason is None:
            out.append(candidate)
        else:
            log_validation_failure(candidate, reason)
    return out
