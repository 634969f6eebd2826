# Tests for SearchAggregator
# ==========================

import asyncio

import httpx

from druglookup.search.aggregator import SearchAggregator, merge_candidates
from druglookup.search.validation import validate_search_results
from druglookup.utils.schemas import SourceTag

from helpers import FakeSource, candidate


def public(**kw):
    kw.setdefault("source", SourceTag.PUBLIC)
    return candidate(**kw)


class TestSearchAggregator:
    """Concurrent fan-out with curated-first merge."""

    def setup_method(self):
        self.curated = FakeSource("curated", [candidate(id="c-1", brand_name="Metformin", generic_name="Metformin HCL")])
        self.public = FakeSource("openfda", [
            public(id="p-1", brand_name="GLUCOPHAGE", generic_name="METFORMIN HYDROCHLORIDE"),
            public(id="p-2", brand_name="LIPITOR", generic_name="ATORVASTATIN CALCIUM"),
        ])
        self.aggregator = SearchAggregator(self.curated, self.public)

    def _search(self, query, limit=10):
        return asyncio.run(self.aggregator.search(query, limit))

    def test_same_ingredient_merged_once(self):
        results = self._search("metformin")
        assert [r.id for r in results] == ["c-1", "p-2"]
        assert results[0].source == SourceTag.CURATED

    def test_short_query_skips_sources(self):
        assert self._search(" a ") == []
        assert self.curated.calls == []
        assert self.public.calls == []

    def test_query_normalized_and_public_limit_halved(self):
        self._search("  METFORMIN ", limit=10)
        assert self.curated.calls == [("search", "metformin", 10)]
        assert self.public.calls == [("search", "metformin", 5)]

    def test_public_limit_never_zero(self):
        self._search("metformin", limit=1)
        assert self.public.calls == [("search", "metformin", 1)]

    def test_curated_first_regardless_of_completion(self):
        self.curated.delay = 0.05
        results = self._search("metformin")
        assert results[0].source == SourceTag.CURATED

    def test_failing_source_degrades_to_empty(self):
        self.public.error = httpx.ConnectError("boom")
        assert [r.id for r in self._search("metformin")] == ["c-1"]
        self.public.error = None
        self.curated.error = RuntimeError("store down")
        assert [r.id for r in self._search("metformin")] == ["p-1", "p-2"]

    def test_truncates_to_limit(self):
        self.curated.results = [candidate(id=str(i), brand_name=f"Drug{i}", generic_name=f"Ingredient{i}")
                                for i in range(6)]
        assert len(self._search("drug", limit=4)) == 4


class TestMergeCandidates:
    def test_brand_collision_dropped(self):
        a = candidate(id="1", brand_name="Advil", generic_name="Ibuprofen")
        b = public(id="2", brand_name="ADVIL", generic_name="Ibuprofen Sodium 200 MG")
        assert merge_candidates([[a], [b]], 10) == [a]

    def test_canonical_key_falls_back_to_brand(self):
        a = candidate(id="1", brand_name="Vitamin Gummies", generic_name="")
        b = public(id="2", brand_name="Other Gummies", generic_name="")
        assert [c.id for c in merge_candidates([[a], [b]], 10)] == ["1", "2"]

    def test_input_order_kept(self):
        items = [candidate(id=str(i), brand_name=name, generic_name=name)
                 for i, name in enumerate(["Zocor", "Lipitor", "Crestor"])]
        assert [c.brand_name for c in merge_candidates([items], 10)] == ["Zocor", "Lipitor", "Crestor"]

    def test_placeholder_brand_claims_no_keys(self):
        """An unusable candidate must not shadow a later one for the same ingredient."""
        unknown = public(id="p-1", brand_name="Unknown", generic_name="METFORMIN HCl")
        glucophage = public(id="p-2", brand_name="GLUCOPHAGE", generic_name="METFORMIN HCl")
        merged = merge_candidates([[unknown, glucophage]], 10)
        assert [c.id for c in merged] == ["p-1", "p-2"]
        assert [c.id for c in validate_search_results(merged)] == ["p-2"]
