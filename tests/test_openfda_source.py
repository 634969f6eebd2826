# Tests for the openFDA label adapter
# ===================================

from datetime import date

import httpx

from druglookup.sources.openfda import (
    ID_STRATEGIES,
    SEARCH_STRATEGIES,
    OpenFDALabelAdapter,
    QueryStrategy,
    sanitize_query,
)
from druglookup.utils.schemas import SourceTag

from helpers import label_doc, make_settings, run_with_client


def _results(*docs):
    return httpx.Response(200, json={"meta": {}, "results": list(docs)})


class TestQueryBuilding:
    """Strategies are ordered data and build openFDA search expressions."""

    def test_strategy_order(self):
        assert [s.name for s in SEARCH_STRATEGIES] == ["brand_name", "generic_name", "substance_name"]
        assert [s.name for s in ID_STRATEGIES] == ["spl_id", "document_id"]

    def test_multi_term_prefix(self):
        q = QueryStrategy("brand_name", "openfda.brand_name").build("metformin er")
        assert q == "openfda.brand_name:metformin AND openfda.brand_name:er*"

    def test_sanitize_query(self):
        assert sanitize_query("  Tylenol® 500!  ") == "tylenol 500"
        assert sanitize_query(None) == ""


class TestSearch:
    """Strategy fall-through and parsing against a mocked openFDA."""

    def setup_method(self):
        self.settings = make_settings()
        self.searches = []

    def _search(self, handler, query="metformin", limit=5, settings=None):
        def recording(request):
            self.searches.append(request.url.params.get("search"))
            return handler(request)
        return run_with_client(
            recording,
            lambda client: OpenFDALabelAdapter(client, settings or self.settings).search(query, limit),
        )

    def test_falls_through_on_not_found(self):
        def handler(request):
            if request.url.params["search"].startswith("openfda.brand_name"):
                return httpx.Response(404, json={"error": {"code": "NOT_FOUND"}})
            return _results(label_doc())

        results = self._search(handler)
        assert self.searches == ["openfda.brand_name:metformin*", "openfda.generic_name:metformin*"]
        assert [r.brand_name for r in results] == ["GLUCOPHAGE"]
        assert results[0].source == SourceTag.PUBLIC
        assert results[0].id == "spl-1"

    def test_transport_failure_falls_through(self):
        def handler(request):
            if request.url.params["search"].startswith("openfda.brand_name"):
                return httpx.Response(500, text="upstream down")
            return _results(label_doc())

        results = self._search(handler)
        assert len(results) == 1
        assert len(self.searches) == 2

    def test_invalid_json_falls_through(self):
        def handler(request):
            if request.url.params["search"].startswith("openfda.brand_name"):
                return httpx.Response(200, text="<html>not json</html>")
            return _results(label_doc())

        assert len(self._search(handler)) == 1

    def test_stops_at_first_hit(self):
        results = self._search(lambda request: _results(label_doc()))
        assert len(results) == 1
        assert len(self.searches) == 1

    def test_no_matches_anywhere(self):
        results = self._search(lambda request: httpx.Response(404))
        assert results == []
        assert len(self.searches) == len(SEARCH_STRATEGIES)

    def test_empty_query_makes_no_request(self):
        assert self._search(lambda request: _results(label_doc()), query="!!") == []
        assert self.searches == []

    def test_unusable_documents_dropped(self):
        docs = [
            label_doc(spl_id=None),
            label_doc(brand=None, generic=None, spl_id="spl-2"),
            label_doc(brand=None, generic="IBUPROFEN", spl_id="spl-3"),
        ]
        results = self._search(lambda request: _results(*docs))
        assert [(r.id, r.brand_name, r.generic_name) for r in results] == [("spl-3", "Unknown", "IBUPROFEN")]

    def test_top_level_id_used_when_no_spl_id(self):
        results = self._search(lambda request: _results(label_doc(spl_id=None, id="doc-9")))
        assert results[0].id == "doc-9"

    def test_purpose_falls_back_to_indications(self):
        doc = label_doc(indications_and_usage=["x" * 500])
        results = self._search(lambda request: _results(doc))
        assert results[0].purpose_text == "x" * 200

    def test_api_key_sent(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return _results(label_doc())

        self._search(handler, settings=make_settings(openfda_api_key="abc123"))
        assert seen["api_key"] == "abc123"
        assert seen["limit"] == "5"


class TestFetch:
    """Lookups by id and fresh re-fetches by name."""

    def setup_method(self):
        self.settings = make_settings()

    def _run(self, handler, fn):
        return run_with_client(handler, lambda client: fn(OpenFDALabelAdapter(client, self.settings)))

    def test_fetch_by_id_falls_back_to_document_id(self):
        tried = []

        def handler(request):
            search = request.url.params["search"]
            tried.append(search)
            if search.startswith("openfda.spl_id"):
                return httpx.Response(404)
            return _results(label_doc(spl_id=None, id="doc-7"))

        result = self._run(handler, lambda a: a.fetch_by_id("doc-7"))
        assert tried == ['openfda.spl_id:"doc-7"', 'id:"doc-7"']
        assert result.id == "doc-7"

    def test_fetch_by_id_none_after_both(self):
        result = self._run(lambda request: httpx.Response(404), lambda a: a.fetch_by_id("missing"))
        assert result is None

    def test_full_record_mapping(self, metformin_label):
        record = self._run(lambda request: _results(metformin_label), lambda a: a.fetch_full_by_id("spl-glucophage"))
        assert record.id == "spl-glucophage"
        assert record.warnings[0].startswith("WARNING: LACTIC ACIDOSIS")
        assert record.warnings[1] == "Hypoglycemia may occur with insulin."
        assert record.side_effects.common == ("Diarrhea, nausea and vomiting.",)
        assert record.dosage_notes == "Take with meals."
        assert record.availability == "Prescription only"
        assert record.drug_class == "Biguanide [EPC]"
        assert record.label_effective_date == date(2024, 1, 15)
        assert record.source_url.endswith("setid=set-glucophage")
        assert record.ndc_codes == ("0087-6060",)
        assert record.healed is False

    def test_controlled_substance_from_dea_schedule(self):
        doc = label_doc(dea_schedule=["CII"])
        record = self._run(lambda request: _results(doc), lambda a: a.fetch_full_by_id("spl-1"))
        assert record.controlled_substance == "CII"

    def test_fetch_fresh_is_formatted(self, metformin_label):
        limits = []

        def handler(request):
            limits.append(request.url.params["limit"])
            return _results(metformin_label)

        record = self._run(handler, lambda a: a.fetch_fresh("Metformin"))
        assert limits == ["1"]
        assert record.brand_name == "Glucophage"
        assert record.generic_name == "Metformin Hydrochloride"
        assert record.manufacturer == "Bristol-myers Squibb"
        assert record.uses == ("Metformin is indicated as an adjunct to diet.",)
        assert "[see" not in record.warnings[0]

    def test_fetch_fresh_tries_generic_second(self, metformin_label):
        def handler(request):
            if request.url.params["search"].startswith("openfda.brand_name"):
                return httpx.Response(404)
            return _results(metformin_label)

        record = self._run(handler, lambda a: a.fetch_fresh("metformin"))
        assert record.brand_name == "Glucophage"

    def test_fetch_fresh_nothing_found(self):
        assert self._run(lambda request: httpx.Response(404), lambda a: a.fetch_fresh("nothing")) is None
