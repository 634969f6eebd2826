from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dateutil.parser import isoparse

from ..clean.text import clean_fda_list, clean_fda_text, format_drug_name, to_title_case
from ..utils.logger import get_logger
from ..utils.schemas import (
    PLACEHOLDER_NAME,
    FullDrugRecord,
    SearchCandidate,
    SideEffects,
    SourceTag,
    is_placeholder,
)
from .base import TRANSPORT_ERRORS, SourceAdapter
from .registry import register

log = get_logger("openfda")

MAX_LIMIT = 100
DAILYMED_URL = "https://dailymed.nlm.nih.gov/dailymed/drugInfo.cfm?setid={set_id}"


@dataclass(frozen=True)
class QueryStrategy:
    """Wildcard text match on one label field."""
    name: str
    field: str

    def build(self, query: str) -> str:
        terms = query.split()
        # every term must match; only the last one is a prefix
        parts = [f"{self.field}:{t}" for t in terms[:-1]]
        parts.append(f"{self.field}:{terms[-1]}*")
        return " AND ".join(parts)


@dataclass(frozen=True)
class IdLookup:
    """Exact match of an identifier against one id scheme."""
    name: str
    field: str

    def build(self, drug_id: str) -> str:
        return f'{self.field}:"{drug_id.replace(chr(34), "")}"'


# tried in order, first non-empty result wins
SEARCH_STRATEGIES: Tuple[QueryStrategy, ...] = (
    QueryStrategy("brand_name", "openfda.brand_name"),
    QueryStrategy("generic_name", "openfda.generic_name"),
    QueryStrategy("substance_name", "openfda.substance_name"),
)

ID_STRATEGIES: Tuple[IdLookup, ...] = (
    IdLookup("spl_id", "openfda.spl_id"),
    IdLookup("document_id", "id"),
)

# strategies used when re-fetching a record by name for healing
FRESH_STRATEGIES: Tuple[QueryStrategy, ...] = SEARCH_STRATEGIES[:2]


def sanitize_query(query: Optional[str]) -> str:
    cleaned = re.sub(r"[^a-z0-9\s]", "", (query or "").lower())
    return re.sub(r"\s+", " ", cleaned).strip()


def _first(value: Any) -> Optional[str]:
    if isinstance(value, list):
        for v in value:
            if isinstance(v, str) and v.strip():
                return v.strip()
        return None
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _many(*values: Any) -> List[str]:
    out: List[str] = []
    for value in values:
        if isinstance(value, list):
            out.extend(v.strip() for v in value if isinstance(v, str) and v.strip())
        elif isinstance(value, str) and value.strip():
            out.append(value.strip())
    return out


def _joined(value: Any) -> Optional[str]:
    parts = _many(value)
    return " ".join(parts) if parts else None


def _document_id(doc: Dict[str, Any]) -> Optional[str]:
    openfda = doc.get("openfda") or {}
    return _first(openfda.get("spl_id")) or _first(doc.get("id"))


def _name(doc: Dict[str, Any], key: str) -> str:
    openfda = doc.get("openfda") or {}
    return _first(doc.get(key)) or _first(openfda.get(key)) or PLACEHOLDER_NAME


def _purpose(doc: Dict[str, Any], max_chars: int) -> str:
    purpose = _first(doc.get("purpose"))
    if purpose:
        return purpose
    indications = _first(doc.get("indications_and_usage"))
    return indications[:max_chars] if indications else ""


def _effective_date(doc: Dict[str, Any]):
    raw = _first(doc.get("effective_time"))
    if not raw:
        return None
    try:
        return isoparse(raw).date()
    except ValueError:
        return None


def _availability(product_type: Optional[str]) -> Optional[str]:
    if not product_type:
        return None
    upper = product_type.upper()
    if "OTC" in upper:
        return "Over the counter"
    if "PRESCRIPTION" in upper:
        return "Prescription only"
    return to_title_case(product_type)


@register("openfda")
class OpenFDALabelAdapter(SourceAdapter):
    """
    Adapter for the openFDA drug label endpoint.

    Search walks SEARCH_STRATEGIES and stops at the first strategy that yields
    usable candidates; a transport failure on one strategy falls through to
    the next. HTTP 404 is how openFDA reports "no matches".
    """

    source_tag = SourceTag.PUBLIC

    @property
    def label_url(self) -> str:
        return self.settings.openfda_base_url.rstrip("/") + "/label.json"

    async def _query(self, search: str, limit: int) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"search": search, "limit": max(1, min(MAX_LIMIT, limit))}
        if self.settings.openfda_api_key:
            params["api_key"] = self.settings.openfda_api_key
        response = await self._get(self.label_url, params=params)
        if response.status_code == 404:
            return []
        response.raise_for_status()
        payload = response.json()
        results = payload.get("results") if isinstance(payload, dict) else None
        return [r for r in (results or []) if isinstance(r, dict)]

    async def _first_hit(self, strategies: Iterable, value: str, limit: int) -> Tuple[Optional[str], List[Dict[str, Any]]]:
        for strategy in strategies:
            try:
                docs = await self._query(strategy.build(value), limit)
            except TRANSPORT_ERRORS as e:
                log.warning(f"[openfda] {strategy.name} lookup failed for '{value}': {e}")
                continue
            if docs:
                return strategy.name, docs
        return None, []

    # ------------------------------------------------------------------
    # parsing
    # ------------------------------------------------------------------
    def to_candidate(self, doc: Dict[str, Any], fallback_id: Optional[str] = None) -> Optional[SearchCandidate]:
        """Map one label document; None when it has no usable id or name."""
        drug_id = _document_id(doc) or fallback_id
        brand = _name(doc, "brand_name")
        generic = _name(doc, "generic_name")
        if not drug_id or (is_placeholder(brand) and is_placeholder(generic)):
            log.debug(f"[openfda] dropping unusable label id={drug_id!r} brand={brand!r} generic={generic!r}")
            return None
        openfda = doc.get("openfda") or {}
        return SearchCandidate(
            id=drug_id,
            brand_name=brand,
            generic_name=generic,
            manufacturer=_first(doc.get("manufacturer_name")) or _first(openfda.get("manufacturer_name")) or "",
            purpose_text=_purpose(doc, self.settings.purpose_max_chars),
            ndc_codes=tuple(_many(openfda.get("product_ndc"))),
            source=self.source_tag,
        )

    def parse(self, docs: Iterable[Dict[str, Any]]) -> List[SearchCandidate]:
        out: List[SearchCandidate] = []
        for doc in docs:
            candidate = self.to_candidate(doc)
            if candidate is not None:
                out.append(candidate)
        return out

    def to_full_record(self, doc: Dict[str, Any], fallback_id: str, formatted: bool = False) -> FullDrugRecord:
        """
        Map a label document into a full record. With `formatted`, names get
        display casing and every text section is cleaned of label markup.
        """
        openfda = doc.get("openfda") or {}
        brand = _name(doc, "brand_name")
        generic = _name(doc, "generic_name")
        manufacturer = _first(doc.get("manufacturer_name")) or _first(openfda.get("manufacturer_name")) or ""
        purpose = _first(doc.get("purpose")) or _first(doc.get("indications_and_usage")) or ""

        uses = _many(doc.get("indications_and_usage"))
        warnings = _many(doc.get("boxed_warning"), doc.get("warnings"), doc.get("warnings_and_cautions"))
        before = _many(doc.get("contraindications"), doc.get("do_not_use"), doc.get("ask_doctor"),
                       doc.get("ask_doctor_or_pharmacist"))
        emergency = _many(doc.get("stop_use"))
        common = _many(doc.get("adverse_reactions"))
        dosage = _joined(doc.get("dosage_and_administration"))
        interactions = _joined(doc.get("drug_interactions"))

        if formatted:
            if not is_placeholder(brand):
                brand = format_drug_name(brand)
            if not is_placeholder(generic):
                generic = format_drug_name(generic)
            manufacturer = to_title_case(manufacturer)
            purpose = clean_fda_text(purpose[:500])
            uses, warnings, before = clean_fda_list(uses), clean_fda_list(warnings), clean_fda_list(before)
            emergency, common = clean_fda_list(emergency), clean_fda_list(common)
            dosage = clean_fda_text(dosage) or None
            interactions = clean_fda_text(interactions) or None

        set_id = _first(doc.get("set_id"))
        return FullDrugRecord(
            id=_document_id(doc) or fallback_id,
            brand_name=brand,
            generic_name=generic,
            manufacturer=manufacturer,
            purpose_text=purpose,
            ndc_codes=tuple(_many(openfda.get("product_ndc"))),
            source=self.source_tag,
            drug_class=_first(openfda.get("pharm_class_epc")),
            brand_names=tuple(dict.fromkeys(_many(openfda.get("brand_name")))),
            uses=tuple(uses),
            warnings=tuple(warnings),
            before_taking=tuple(before),
            side_effects=SideEffects(emergency=tuple(emergency), common=tuple(common)),
            dosage_notes=dosage,
            interactions_note=interactions,
            availability=_availability(_first(openfda.get("product_type"))),
            controlled_substance=_first(doc.get("controlled_substance")) or _first(doc.get("dea_schedule")),
            source_url=DAILYMED_URL.format(set_id=set_id) if set_id else None,
            label_effective_date=_effective_date(doc),
        )

    # ------------------------------------------------------------------
    # public contract
    # ------------------------------------------------------------------
    async def search(self, query: str, limit: int) -> List[SearchCandidate]:
        clean = sanitize_query(query)
        if not clean or limit <= 0:
            return []
        for strategy in SEARCH_STRATEGIES:
            try:
                docs = await self._query(strategy.build(clean), limit)
            except TRANSPORT_ERRORS as e:
                log.warning(f"[openfda] {strategy.name} search failed for '{clean}': {e}")
                continue
            candidates = self.parse(docs)
            if candidates:
                log.debug(f"[openfda] '{clean}' matched via {strategy.name}: {len(candidates)} candidates")
                return candidates[:limit]
        return []

    async def fetch_document(self, drug_id: str) -> Optional[Dict[str, Any]]:
        if not drug_id or not drug_id.strip():
            return None
        _, docs = await self._first_hit(ID_STRATEGIES, drug_id.strip(), 1)
        return docs[0] if docs else None

    async def fetch_by_id(self, drug_id: str) -> Optional[SearchCandidate]:
        doc = await self.fetch_document(drug_id)
        if doc is None:
            return None
        return self.to_candidate(doc, fallback_id=drug_id)

    async def fetch_full_by_id(self, drug_id: str) -> Optional[FullDrugRecord]:
        doc = await self.fetch_document(drug_id)
        if doc is None:
            return None
        return self.to_full_record(doc, fallback_id=drug_id)

    async def fetch_fresh(self, name: str) -> Optional[FullDrugRecord]:
        """Re-fetch a display-ready record by name (brand, then generic)."""
        clean = sanitize_query(name)
        if not clean:
            return None
        strategy, docs = await self._first_hit(FRESH_STRATEGIES, clean, 1)
        if not docs:
            return None
        log.debug(f"[openfda] fresh label for '{clean}' via {strategy}")
        return self.to_full_record(docs[0], fallback_id=clean, formatted=True)
