"""
Public entry points for drug lookup.

    async with DrugLookupService.from_settings(load_settings()) as svc:
        hits = await svc.search_drugs("metformin")
        record = await svc.get_full_drug_details(hits[0].id)

The service owns the shared httpx.AsyncClient unless one is injected, in
which case closing the client is left to the caller.
"""
from __future__ import annotations
from typing import List, Optional

import httpx

from .clean.quality import QualityAnalyzer
from .clean.text import clean_array_for_display, clean_for_display
from .healing import HealingAttemptLedger, HealingCoordinator
from .search import SearchAggregator, validate_search_results
from .sources import get_source
from .sources.curated import CuratedStoreAdapter
from .sources.openfda import OpenFDALabelAdapter
from .utils.config import Settings
from .utils.logger import get_logger
from .utils.schemas import FullDrugRecord, SearchCandidate, SideEffects, is_placeholder

log = get_logger("service")


def sanitize_record(record: FullDrugRecord) -> FullDrugRecord:
    """Strip label markup from every free-text field of a record."""
    return record.model_copy(update={
        "purpose_text": clean_for_display(record.purpose_text),
        "uses": tuple(clean_array_for_display(record.uses)),
        "warnings": tuple(clean_array_for_display(record.warnings)),
        "before_taking": tuple(clean_array_for_display(record.before_taking)),
        "side_effects": SideEffects(
            emergency=tuple(clean_array_for_display(record.side_effects.emergency)),
            common=tuple(clean_array_for_display(record.side_effects.common)),
        ),
        "dosage_notes": clean_for_display(record.dosage_notes) or None,
        "interactions_note": clean_for_display(record.interactions_note) or None,
    })


class DrugLookupService:
    def __init__(
        self,
        curated: CuratedStoreAdapter,
        public: OpenFDALabelAdapter,
        settings: Optional[Settings] = None,
        ledger: Optional[HealingAttemptLedger] = None,
        client: Optional[httpx.AsyncClient] = None,
        owns_client: bool = False,
    ):
        self.settings = settings or Settings()
        self.curated = curated
        self.public = public
        self.aggregator = SearchAggregator(curated, public, self.settings.min_query_length)
        self.analyzer = QualityAnalyzer()
        self.ledger = ledger or HealingAttemptLedger(self.settings.max_healing_attempts)
        self.healer = HealingCoordinator(public, self.ledger)
        self._client = client
        self._owns_client = owns_client

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        ledger: Optional[HealingAttemptLedger] = None,
    ) -> "DrugLookupService":
        settings = settings or Settings()
        owns = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=True)
        curated = get_source("curated")(client, settings)
        public = get_source("openfda")(client, settings)
        return cls(curated, public, settings=settings, ledger=ledger, client=client, owns_client=owns)

    async def __aenter__(self) -> "DrugLookupService":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------
    async def search_drugs(self, query: str, limit: Optional[int] = None) -> List[SearchCandidate]:
        limit = self.settings.default_search_limit if limit is None else limit
        merged = await self.aggregator.search(query, limit)
        return validate_search_results(merged)

    async def get_drug_by_name(self, name: str) -> Optional[SearchCandidate]:
        results = await self.search_drugs(name, 1)
        return results[0] if results else None

    async def _fetch_record(self, drug_id: str) -> Optional[FullDrugRecord]:
        record = await self.curated.fetch_full(drug_id)
        if record is not None:
            return record
        basic = await self.curated.fetch_by_id(drug_id)
        if basic is not None:
            return FullDrugRecord.from_candidate(basic)
        return await self.public.fetch_full_by_id(drug_id)

    async def get_full_drug_details(self, drug_id: str) -> Optional[FullDrugRecord]:
        if not drug_id or not drug_id.strip():
            return None
        drug_id = drug_id.strip()
        record = await self._fetch_record(drug_id)
        if record is None:
            log.info(f"[service] no record for {drug_id}")
            return None

        report = self.analyzer.analyze(record.quality_subject())
        if report.needs_healing:
            self.healer.report_bad_data(drug_id, report.issues)
            brand = record.brand_name.strip()
            known_name = brand if brand and not is_placeholder(brand) else record.generic_name
            healed = await self.healer.heal(drug_id, known_name)
            if healed is not None:
                return healed.model_copy(update={"id": record.id, "source": record.source, "healed": True})
            log.debug(f"[service] {drug_id}: serving sanitized original ({report.severity.value})")

        return sanitize_record(record)
