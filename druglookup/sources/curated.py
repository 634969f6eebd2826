"""
Curated store adapter.

The curated store is a PostgREST endpoint exposing two tables:
  - drug_details : rich, manually verified monographs, optionally linked to a
                   medications row through `medication_id`
  - medications  : the base medication/pricing catalogue
Search queries both tables concurrently so medications without a monograph
are still found. The store is treated as authoritative by the aggregator.
"""
from __future__ import annotations
import asyncio
import re
from typing import Any, Dict, List, Optional

from ..utils.logger import get_logger
from ..utils.schemas import FullDrugRecord, SearchCandidate, SideEffects, SourceTag
from .base import TRANSPORT_ERRORS, SourceAdapter
from .registry import register

log = get_logger("curated")

DETAIL_TABLE = "drug_details"
BASE_TABLE = "medications"
DETAIL_SELECT = "*,medications:medication_id(name,generic_name,quantity,unit)"

# characters with meaning inside a PostgREST filter expression
_FILTER_META = re.compile(r"[,()*%:\"\\]")


def sanitize_pattern(query: Optional[str]) -> str:
    return re.sub(r"\s+", " ", _FILTER_META.sub(" ", query or "")).strip()


def _str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def _optional(value: Any) -> Optional[str]:
    return _str(value) or None


def _detail_generic(row: Dict[str, Any]) -> str:
    med = row.get("medications") or {}
    return _str(row.get("generic_name")) or _str(med.get("generic_name")) or _str(row.get("drug_name"))


def detail_to_candidate(row: Dict[str, Any]) -> Optional[SearchCandidate]:
    name = _str(row.get("drug_name"))
    if not name or row.get("id") is None:
        return None
    generic = _detail_generic(row)
    uses = _list(row.get("uses"))
    purpose = _str(row.get("description")) or (uses[0] if uses else "") or f"Generic: {generic}"
    return SearchCandidate(
        id=str(row["id"]),
        brand_name=name,
        generic_name=generic,
        manufacturer=_str(row.get("drug_class")),
        purpose_text=purpose,
        source=SourceTag.CURATED,
    )


def medication_to_candidate(row: Dict[str, Any]) -> Optional[SearchCandidate]:
    name = _str(row.get("name"))
    if not name or row.get("id") is None:
        return None
    generic = _str(row.get("generic_name"))
    return SearchCandidate(
        id=str(row["id"]),
        brand_name=name,
        generic_name=generic or name,
        purpose_text=f"Generic: {generic}" if generic else "",
        ndc_codes=tuple(_list(row.get("ndc_codes"))),
        source=SourceTag.CURATED,
    )


def detail_to_full_record(row: Dict[str, Any]) -> Optional[FullDrugRecord]:
    base = detail_to_candidate(row)
    if base is None:
        return None
    return FullDrugRecord(
        **base.model_dump(),
        source=base.source,
        drug_class=_optional(row.get("drug_class")),
        brand_names=tuple(_list(row.get("brand_names"))),
        uses=tuple(_list(row.get("uses"))),
        warnings=tuple(_list(row.get("warnings"))),
        before_taking=tuple(_list(row.get("before_taking"))),
        side_effects=SideEffects(
            emergency=tuple(_list(row.get("side_effects_emergency"))),
            common=tuple(_list(row.get("side_effects_common"))),
        ),
        dosage_notes=_optional(row.get("dosage_notes")),
        interactions_note=_optional(row.get("interactions_note")),
        pregnancy_category=_optional(row.get("pregnancy_category")),
        availability=_optional(row.get("availability")),
        controlled_substance=_optional(row.get("controlled_substance")),
        source_url=_optional(row.get("source_url")),
    )


@register("curated")
class CuratedStoreAdapter(SourceAdapter):
    """PostgREST-backed adapter for the curated medication store."""

    source_tag = SourceTag.CURATED

    @property
    def configured(self) -> bool:
        return bool(self.settings.curated_url)

    @property
    def store_headers(self) -> Dict[str, str]:
        key = self.settings.curated_api_key
        if not key:
            return {}
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    def _table_url(self, table: str) -> str:
        return f"{self.settings.curated_url.rstrip('/')}/rest/v1/{table}"

    async def _select(self, table: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Run one table lookup; transport failures degrade to no rows."""
        if not self.configured:
            return []
        try:
            rows = await self._get_json(self._table_url(table), params=params, headers=self.store_headers)
        except TRANSPORT_ERRORS as e:
            log.warning(f"[curated] {table} lookup failed: {e}")
            return []
        if not isinstance(rows, list):
            log.warning(f"[curated] {table} returned {type(rows).__name__}, expected a row list")
            return []
        return [r for r in rows if isinstance(r, dict)]

    async def _search_details(self, pattern: str, limit: int) -> List[Dict[str, Any]]:
        return await self._select(DETAIL_TABLE, {
            "select": DETAIL_SELECT,
            "or": f"(drug_name.ilike.*{pattern}*,generic_name.ilike.*{pattern}*)",
            "limit": limit,
        })

    async def _search_medications(self, pattern: str, limit: int) -> List[Dict[str, Any]]:
        return await self._select(BASE_TABLE, {
            "select": "*",
            "or": f"(name.ilike.*{pattern}*,generic_name.ilike.*{pattern}*)",
            "limit": limit,
        })

    async def _detail_row(self, drug_id: str) -> Optional[Dict[str, Any]]:
        rows = await self._select(DETAIL_TABLE, {"select": DETAIL_SELECT, "id": f"eq.{drug_id}", "limit": 1})
        return rows[0] if rows else None

    async def _medication_row(self, drug_id: str) -> Optional[Dict[str, Any]]:
        rows = await self._select(BASE_TABLE, {"select": "*", "id": f"eq.{drug_id}", "limit": 1})
        return rows[0] if rows else None

    async def search(self, query: str, limit: int) -> List[SearchCandidate]:
        pattern = sanitize_pattern(query)
        if not pattern or limit <= 0:
            return []
        detail_rows, med_rows = await asyncio.gather(
            self._search_details(pattern, limit),
            self._search_medications(pattern, limit),
        )

        results: List[SearchCandidate] = []
        seen = set()
        mapped = [detail_to_candidate(r) for r in detail_rows] + [medication_to_candidate(r) for r in med_rows]
        for candidate in mapped:
            if candidate is None:
                continue
            key = candidate.brand_name.lower()
            if key in seen:
                continue
            seen.add(key)
            results.append(candidate)
        return results[:limit]

    async def fetch_by_id(self, drug_id: str) -> Optional[SearchCandidate]:
        if not drug_id or not drug_id.strip():
            return None
        row = await self._detail_row(drug_id.strip())
        if row is not None:
            candidate = detail_to_candidate(row)
            if candidate is not None:
                return candidate
        row = await self._medication_row(drug_id.strip())
        return medication_to_candidate(row) if row is not None else None

    async def fetch_full(self, drug_id: str) -> Optional[FullDrugRecord]:
        """Detail-table record with every monograph field populated."""
        if not drug_id or not drug_id.strip():
            return None
        row = await self._detail_row(drug_id.strip())
        return detail_to_full_record(row) if row is not None else None
