"""
Canonical dedup keys for drug names.

The same active ingredient is labeled many ways across manufacturers
("Metformin HCL", "METFORMIN HYDROCHLORIDE 500 MG Tablets", "Metformin ER").
`canonicalize` reduces a generic name to a key by stripping salts, formulation
modifiers, strengths, dosage forms and package descriptors, in that order.
Every step is a whole-word match so ingredient names that merely contain
one of these tokens ("CALCITRIOL", "SODIUMLESS") are left intact.
"""
from __future__ import annotations
import re
from typing import Iterable, Optional, Pattern, Tuple

SALT_WORDS = (
    "HYDROCHLORIDE", "HCL", "HYDROBROMIDE", "HBR", "SULFATE", "SODIUM",
    "POTASSIUM", "ACETATE", "TARTRATE", "MALEATE", "FUMARATE", "SUCCINATE",
    "MESYLATE", "BESYLATE", "CITRATE", "PHOSPHATE", "NITRATE", "BROMIDE",
    "CHLORIDE", "MONOHYDRATE", "DIHYDRATE", "TRIHYDRATE", "HYDRATE",
    "ANHYDROUS", "CALCIUM", "MAGNESIUM", "ZINC", "OXIDE", "CARBONATE",
)

MODIFIER_WORDS = (
    "USP", "BP", "NF", "EP", "ER", "XR", "CR", "SR", "DR", "IR", "LA", "EC",
    "ODT", "XL", "CD", "PM", "AM", "PLUS", "EXTRA", "STRENGTH", "FORMULA",
    "MAXIMUM", "REGULAR", "ADVANCED",
)

STRENGTH_UNITS = ("MCG", "MG", "UG", "GR", "G", "ML", "L", "%", "IU", "UNITS")

DOSAGE_FORMS = (
    "TABLETS?", "CAPSULES?", "PILLS?", "ORAL", "INJECTIONS?", "SOLUTIONS?",
    "SUSPENSIONS?", "SYRUPS?", "CREAMS?", "OINTMENTS?", "GELS?", "PATCH(?:ES)?",
    "SPRAYS?", "DROPS?", "POWDERS?", "GRANULES?",
)

PACKAGE_WORDS = ("COUNT", "CT", "PACKS?", "PK", "BOX(?:ES)?", "BOTTLES?", "VIALS?")

MIN_KEY_LENGTH = 3


def _words(alternatives: Iterable[str]) -> Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")\b")


_UNIT = "(?:" + "|".join(re.escape(u) for u in STRENGTH_UNITS) + ")"

# (name, pattern) applied in order; each match is replaced with a space
CANONICAL_STEPS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("parenthetical", re.compile(r"\([^)]*\)")),
    ("salt", _words(SALT_WORDS)),
    ("modifier", _words(MODIFIER_WORDS)),
    ("strength", re.compile(
        r"\b\d+(?:[.,]\d+)?\s*" + _UNIT
        + r"(?:\s*/\s*(?:\d+(?:[.,]\d+)?\s*)?" + _UNIT + r"?)?(?![A-Z0-9])"
    )),
    ("dosage_form", _words(DOSAGE_FORMS)),
    ("package", re.compile(r"(?:\b\d+\s*)?\b(?:" + "|".join(PACKAGE_WORDS) + r")\b")),
)

_DANGLING = re.compile(r"(?:(?<=\s)|^)[/,;+\-&]+(?=\s|$)")
_WS = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WS.sub(" ", text).strip()


def normalize_name(name: Optional[str]) -> str:
    """Upper-case and collapse whitespace."""
    return _collapse((name or "").upper())


def strip_name(name: Optional[str]) -> str:
    """Run every canonicalization step; may return an empty string."""
    out = normalize_name(name)
    for _step, pattern in CANONICAL_STEPS:
        out = _collapse(pattern.sub(" ", out))
    return _collapse(_DANGLING.sub(" ", out))


def canonicalize(generic_name: Optional[str], brand_fallback: Optional[str] = None) -> str:
    key = strip_name(generic_name)
    if len(key) < MIN_KEY_LENGTH:
        return normalize_name(brand_fallback)
    return key
