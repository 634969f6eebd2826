from __future__ import annotations
from typing import Optional, Sequence

from ..sources.openfda import OpenFDALabelAdapter
from ..utils.logger import get_logger
from ..utils.schemas import FullDrugRecord, is_placeholder
from .ledger import HealingAttemptLedger

log = get_logger("healing")


class HealingCoordinator:
    """Replaces a record with corrupted text by a freshly fetched label."""

    def __init__(self, public: OpenFDALabelAdapter, ledger: Optional[HealingAttemptLedger] = None):
        self.public = public
        self.ledger = ledger or HealingAttemptLedger()

    async def heal(self, drug_id: str, known_name: Optional[str]) -> Optional[FullDrugRecord]:
        # counted before the first await; a bad name still uses up an attempt
        if not self.ledger.try_acquire(drug_id):
            log.info(f"[healing] attempt cap reached for {drug_id}")
            return None
        attempt = self.ledger.attempts(drug_id)

        name = (known_name or "").strip()
        if not name or is_placeholder(name):
            log.warning(f"[healing] no usable name for {drug_id}; cannot re-fetch")
            return None

        log.info(f"[healing] {drug_id}: re-fetching '{name}' (attempt {attempt}/{self.ledger.max_attempts})")
        fresh = await self.public.fetch_fresh(name)
        if fresh is None or is_placeholder(fresh.brand_name):
            log.warning(f"[healing] {drug_id}: no usable label found for '{name}'")
            return None

        log.info(f"[healing] {drug_id}: healed from label {fresh.id}")
        return fresh

    def report_bad_data(self, drug_id: str, issues: Sequence[str]) -> None:
        log.warning(f"[healing] bad data for {drug_id}: {', '.join(issues)}")
