"""Shared fakes and builders for the test suite."""
from __future__ import annotations
import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx

from druglookup.utils.config import Settings
from druglookup.utils.schemas import FullDrugRecord, SearchCandidate, SourceTag

STORE_URL = "https://store.test"


def make_settings(**overrides) -> Settings:
    values = dict(
        curated_url=STORE_URL,
        curated_api_key="test-key",
        rate_limit_per_sec=1000.0,
    )
    values.update(overrides)
    return Settings(**values)


def candidate(**overrides) -> SearchCandidate:
    values: Dict[str, Any] = dict(
        id="c-1",
        brand_name="Metformin",
        generic_name="Metformin Hydrochloride",
        source=SourceTag.CURATED,
    )
    values.update(overrides)
    return SearchCandidate(**values)


def full_record(**overrides) -> FullDrugRecord:
    values: Dict[str, Any] = dict(
        id="c-1",
        brand_name="Metformin",
        generic_name="Metformin Hydrochloride",
        purpose_text="Used to treat type 2 diabetes.",
        uses=("Lowers blood sugar in adults with type 2 diabetes.",),
        warnings=("Lactic acidosis is rare but serious.",),
        source=SourceTag.CURATED,
    )
    values.update(overrides)
    return FullDrugRecord(**values)


def label_doc(brand: Optional[str] = "GLUCOPHAGE", generic: Optional[str] = "METFORMIN HYDROCHLORIDE",
              spl_id: Optional[str] = "spl-1", **fields) -> Dict[str, Any]:
    openfda: Dict[str, Any] = {}
    if brand is not None:
        openfda["brand_name"] = [brand]
    if generic is not None:
        openfda["generic_name"] = [generic]
    if spl_id is not None:
        openfda["spl_id"] = [spl_id]
    openfda.update(fields.pop("openfda", {}))
    doc: Dict[str, Any] = {"openfda": openfda}
    doc.update(fields)
    return doc


def run_with_client(handler: Callable[[httpx.Request], httpx.Response], fn):
    """Run `fn(client)` on a fresh event loop against a mocked transport."""
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fn(client)
    return asyncio.run(go())


class FakeSource:
    """Stands in for a SourceAdapter; records every call it receives."""

    def __init__(self, name: str = "fake", results: Optional[List[SearchCandidate]] = None,
                 error: Optional[Exception] = None, delay: float = 0.0):
        self.name = name
        self.results = list(results or [])
        self.error = error
        self.delay = delay
        self.calls: List[tuple] = []

    async def search(self, query: str, limit: int) -> List[SearchCandidate]:
        self.calls.append(("search", query, limit))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.results[:limit]


class FakeCurated(FakeSource):
    def __init__(self, full: Optional[FullDrugRecord] = None, basic: Optional[SearchCandidate] = None, **kw):
        super().__init__(name="curated", **kw)
        self.full = full
        self.basic = basic

    async def fetch_full(self, drug_id: str) -> Optional[FullDrugRecord]:
        self.calls.append(("fetch_full", drug_id))
        return self.full

    async def fetch_by_id(self, drug_id: str) -> Optional[SearchCandidate]:
        self.calls.append(("fetch_by_id", drug_id))
        return self.basic


class FakePublic(FakeSource):
    def __init__(self, fresh: Optional[FullDrugRecord] = None, by_id: Optional[FullDrugRecord] = None, **kw):
        super().__init__(name="openfda", **kw)
        self.fresh = fresh
        self.by_id = by_id

    async def fetch_fresh(self, name: str) -> Optional[FullDrugRecord]:
        self.calls.append(("fetch_fresh", name))
        return self.fresh

    async def fetch_full_by_id(self, drug_id: str) -> Optional[FullDrugRecord]:
        self.calls.append(("fetch_full_by_id", drug_id))
        return self.by_id

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)
