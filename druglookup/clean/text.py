"""
Text cleanup for regulatory label text.

Label sections arrive with leftovers of the source document structure
("11 DESCRIPTION", "[see Warnings and Precautions (5.1)]", "7 )]", bullet
glyphs). The helpers here strip those artifacts and normalize capitalization
for display. All functions are pure and never raise on empty input.
"""
from __future__ import annotations
import re
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup

LOWERCASE_WORDS = frozenset({
    "a", "an", "and", "as", "at", "but", "by", "for", "in", "nor",
    "of", "on", "or", "so", "the", "to", "up", "yet", "with",
})

UPPERCASE_WORDS = frozenset({
    "OTC", "RX", "HCL", "MG", "ML", "MCG", "USP", "ER", "XR", "CR",
    "SR", "DR", "IR", "LA", "EC", "ODT", "XL", "CD", "FDA", "DEA",
    "NDC", "NDA", "ANDA", "CVS", "USA", "UK", "EU",
})

_HTML_TAG = re.compile(r"<[^>]+>")
_CROSS_REF = re.compile(r"\[\s*see\s+[^\]]*\]|\(\s*see\s+[^)]*\)", re.IGNORECASE)
_SUBSECTION = re.compile(r"\(\s*\d+(?:\.\d+)*\s*\)")
# "11 DESCRIPTION", "1 INDICATIONS AND USAGE" at the start of a line or sentence
_SECTION_HEADER = re.compile(
    r"(?:^|(?<=[.:;]\s))\d{1,2}(?:\.\d{1,2})*\s+(?:[A-Z][A-Z&/,\-]*\s+)*[A-Z][A-Z&/,\-]{2,}(?=\s|$|[.:])",
    re.MULTILINE,
)
_SECTION_MARKER = re.compile(r"(?<![\w.])\d+\s*\)\]?")
_BULLET = re.compile(r"[•·▪▸►]\s*")
_EMPTY_BRACKETS = re.compile(r"\[\s*\]|\(\s*\)")
_STRAY_CLOSERS = re.compile(r"(?<=\s)[\])]+(?=\s|$)")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([.,;:!?])")
_MISSING_SPACE_AFTER_PUNCT = re.compile(r"([,;:!?])(?=[A-Za-z])|(\.)(?=[A-Z][a-z])")
_WS = re.compile(r"\s+")


def _drop_bare_marker(m: re.Match) -> str:
    # "(ages 2 to 12)" closes a real parenthesis; only unopened markers go
    before = m.string[:m.start()]
    if before.rfind("(") > before.rfind(")"):
        return m.group(0)
    return " "


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace and tidy spacing around punctuation."""
    if not text:
        return ""
    out = _WS.sub(" ", text)
    out = _SPACE_BEFORE_PUNCT.sub(r"\1", out)
    out = _MISSING_SPACE_AFTER_PUNCT.sub(lambda m: (m.group(1) or m.group(2)) + " ", out)
    return out.strip()


def strip_html(text: Optional[str]) -> str:
    if not text:
        return ""
    if not _HTML_TAG.search(text):
        return text
    return BeautifulSoup(text, "html.parser").get_text(" ", strip=True)


def clean_fda_text(text: Optional[str]) -> str:
    """Remove document-extraction artifacts from one label section."""
    if not text:
        return ""
    out = strip_html(text)
    out = _CROSS_REF.sub(" ", out)
    out = _SUBSECTION.sub(" ", out)
    out = _SECTION_HEADER.sub(" ", out)
    out = _SECTION_MARKER.sub(_drop_bare_marker, out)
    out = _BULLET.sub(" ", out)
    out = _EMPTY_BRACKETS.sub(" ", out)
    out = _STRAY_CLOSERS.sub(" ", out)
    out = clean_text(out)
    return out.strip(" ,;:")


def clean_fda_list(items: Optional[Iterable[str]]) -> List[str]:
    """Clean each entry, dropping empties and case-insensitive repeats."""
    out: List[str] = []
    seen = set()
    for item in items or []:
        if not isinstance(item, str):
            continue
        cleaned = clean_fda_text(item)
        if len(cleaned) < 3:
            continue
        key = cleaned.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(cleaned)
    return out


def to_title_case(text: Optional[str]) -> str:
    if not text:
        return ""
    words = text.lower().split()
    out: List[str] = []
    for i, word in enumerate(words):
        if word.upper() in UPPERCASE_WORDS:
            out.append(word.upper())
        elif i > 0 and word in LOWERCASE_WORDS:
            out.append(word)
        else:
            out.append(word[:1].upper() + word[1:])
    return " ".join(out)


def format_drug_name(name: Optional[str]) -> str:
    """ALL-CAPS label names become title case; parentheticals are lower-cased."""
    if not name:
        return ""
    name = name.strip()
    if name == name.upper() and len(name) > 3:
        return to_title_case(name)
    return re.sub(r"\(([^)]+)\)", lambda m: f"({m.group(1).lower()})", name)


def format_sentence(text: Optional[str]) -> str:
    if not text:
        return ""
    out = text.strip()
    if not out:
        return ""
    out = out[:1].upper() + out[1:]
    if not re.search(r"[.!?]$", out):
        out += "."
    out = re.sub(r"\.{2,}$", ".", out)
    out = re.sub(r"([.!?,;:])(?!\d)\s*", r"\1 ", out).strip()
    return re.sub(r"\s+\.$", ".", out)


def format_list(items: Iterable[str]) -> List[str]:
    """Capitalize list entries; short fragments are left without a period."""
    out: List[str] = []
    for item in items:
        formatted = item.strip()
        if not formatted:
            continue
        formatted = formatted[:1].upper() + formatted[1:]
        if not re.search(r"[.!?:,]$", formatted):
            if len(formatted) >= 50 or ". " in formatted:
                formatted += "."
        out.append(formatted)
    return out


def clean_for_display(text: Optional[str]) -> str:
    return clean_fda_text(text)


def clean_array_for_display(items: Optional[Iterable[str]]) -> List[str]:
    if not items:
        return []
    return clean_fda_list(items)
