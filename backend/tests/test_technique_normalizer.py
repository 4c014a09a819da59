"""
Tests for flattening a criterion's technique sections into ordered references.
"""

import pytest

from backend.schedule_generator import DEFAULT_TECHNIQUES_BASE_URL, normalize_techniques, technique_url
from backend.tests.utils.wcag_trees import direct, grouped, technique


def _ids(references):
    return [ref.id for ref in references]


def test_sufficient_is_deduplicated_across_groups():
    techniques = {
        "sufficient": [
            grouped(
                [technique("H37", "Using alt attributes on img elements")],
                [technique("H37", "Using alt attributes on img elements"), technique("G94", "Short text alternative", "general")],
            )
        ]
    }
    assert _ids(normalize_techniques(techniques, "sufficient")) == ["H37", "G94"]


def test_sufficient_is_deduplicated_between_direct_and_grouped_entries():
    techniques = {
        "sufficient": [
            direct(technique("G1", "First")),
            grouped([technique("G1", "First"), technique("G2", "Second")]),
        ]
    }
    assert _ids(normalize_techniques(techniques, "sufficient")) == ["G1", "G2"]


def test_direct_techniques_come_before_groups_of_the_same_entry():
    entry = {
        "groups": [{"id": "g", "title": "Group", "techniques": [technique("H2", "Grouped")]}],
        "techniques": [technique("G1", "Direct", "general")],
    }
    assert _ids(normalize_techniques({"sufficient": [entry]}, "sufficient")) == ["G1", "H2"]


def test_incomplete_records_are_dropped():
    techniques = {
        "sufficient": [direct({"id": "H1", "technology": "html"}, technique("H2", "Complete"))],
        "advisory": [{"id": "G5", "title": "No technology"}, technique("G6", "Fine", "general")],
        "failure": [{"technology": "failures", "title": "No id"}],
    }
    assert _ids(normalize_techniques(techniques, "sufficient")) == ["H2"]
    assert _ids(normalize_techniques(techniques, "advisory")) == ["G6"]
    assert normalize_techniques(techniques, "failure") == []


def test_advisory_and_failure_lists_keep_duplicates():
    techniques = {"advisory": [technique("G1", "Repeated"), technique("G1", "Repeated")]}
    assert _ids(normalize_techniques(techniques, "advisory")) == ["G1", "G1"]


def test_urls_per_category():
    techniques = {
        "sufficient": [direct(technique("H37", "Using alt attributes on img elements"))],
        "failure": [technique("F65", "Omitting the alt attribute", "failures")],
    }
    (sufficient,) = normalize_techniques(techniques, "sufficient")
    (failure,) = normalize_techniques(techniques, "failure")

    assert sufficient.url == f"{DEFAULT_TECHNIQUES_BASE_URL}/html/H37"
    assert failure.url == f"{DEFAULT_TECHNIQUES_BASE_URL}/failures/F65"


def test_failure_url_ignores_technology():
    url = technique_url("F3", "css", "failure", "https://example.test/techniques")
    assert url == "https://example.test/techniques/failures/F3"


def test_base_url_trailing_slash_is_not_doubled():
    techniques = {"advisory": [technique("C9", "Decorative images", "css")]}
    (reference,) = normalize_techniques(techniques, "advisory", "https://example.test/techniques/")
    assert reference.url == "https://example.test/techniques/css/C9"


@pytest.mark.parametrize("techniques", [None, {}, {"sufficient": "not-a-list"}, "bogus"])
def test_missing_or_malformed_sections_yield_nothing(techniques):
    assert normalize_techniques(techniques, "sufficient") == []


def test_unknown_category_raises():
    with pytest.raises(ValueError):
        normalize_techniques({"sufficient": []}, "optional")
