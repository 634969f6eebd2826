# Pytest configuration for druglookup tests
"""
Fixtures shared across the suite. Network access is always mocked with
httpx.MockTransport; nothing here talks to a live service.
"""

import pytest

from helpers import label_doc, make_settings


@pytest.fixture
def settings():
    """Settings pointing at a fake curated store, with throttling effectively off."""
    return make_settings()


@pytest.fixture
def metformin_label():
    """A realistic prescription label document for metformin."""
    return label_doc(
        brand="GLUCOPHAGE",
        generic="METFORMIN HYDROCHLORIDE",
        spl_id="spl-glucophage",
        id="doc-glucophage",
        set_id="set-glucophage",
        effective_time="20240115",
        manufacturer_name=["BRISTOL-MYERS SQUIBB"],
        indications_and_usage=["1 INDICATIONS AND USAGE Metformin is indicated as an adjunct to diet."],
        boxed_warning=["WARNING: LACTIC ACIDOSIS [see Warnings and Precautions (5.1)]."],
        warnings_and_cautions=["Hypoglycemia may occur with insulin."],
        adverse_reactions=["Diarrhea, nausea and vomiting."],
        dosage_and_administration=["Take with meals."],
        drug_interactions=["Carbonic anhydrase inhibitors may increase risk."],
        openfda={
            "manufacturer_name": ["Bristol-Myers Squibb"],
            "product_ndc": ["0087-6060"],
            "product_type": ["HUMAN PRESCRIPTION DRUG"],
            "pharm_class_epc": ["Biguanide [EPC]"],
        },
    )
