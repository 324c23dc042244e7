import pytest

from shipment_query.config import SCORE_DATE, SCORE_STATUS
from shipment_query.search import search, search_tier


@pytest.mark.parametrize(
    "text, tier",
    [("", None), ("   ", None), ("ab", "short"), ("abc", "short"), ("abcd", "medium"),
     ("abcdef", "medium"), ("abcdefg", "long")],
)
def test_search_tier(text, tier):
    assert search_tier(text) == tier


def test_blank_query_passes_everything_through_in_order(make_shipment):
    records = [make_shipment("B"), make_shipment("A"), make_shipment("C")]
    results = search(records, "  ")
    assert [r.record for r in results] == records
    assert all(r.record is rec for r, rec in zip(results, records))
    assert {r.score for r in results} == {0}


def test_exact_id_has_the_top_score(make_shipment):
    records = [make_shipment("IC-10012"), make_shipment("IC-1001"), make_shipment("XX-1")]
    results = search(records, "IC-1001")
    assert results[0].record is records[1]
    assert results[0].score == 1000
    assert records[2] not in [r.record for r in results]


def test_short_query_ignores_address_fields(make_shipment):
    in_address_only = make_shipment("IC-555", city="Abcville")
    by_prefix = make_shipment("ABC-1")
    results = search([in_address_only, by_prefix], "abc")
    assert [r.record for r in results] == [by_prefix]


def test_short_query_substring_in_id(make_shipment):
    record = make_shipment("IC-9ABC9")
    assert [r.record for r in search([record], "abc")] == [record]


def test_medium_query_exact_city(make_shipment):
    barrie = make_shipment("IC-1", city="Barrie")
    toronto = make_shipment("IC-2", city="Toronto")
    results = search([toronto, barrie], "barrie")
    assert [r.record for r in results] == [barrie]
    assert results[0].score == 700


def test_medium_query_tolerates_a_typo(make_shipment):
    barrie = make_shipment("IC-1", city="Barrie")
    results = search([barrie], "barie")
    assert [r.record for r in results] == [barrie]


def test_medium_containment_needs_long_field_values(make_shipment):
    short_city = make_shipment("IC-1", city="Ayrx")
    assert search([short_city], "ayr") == []  # short tier: city is not searched
    assert search([short_city], "ayrx") != []  # exact still applies


def test_medium_fuzzy_does_not_reopen_short_value_containment(make_shipment):
    short_city = make_shipment("IC-1", city="Ayrxz")
    assert search([short_city], "ayrx") == []


def test_hyphenated_id_is_not_read_as_a_date(make_shipment, today):
    record = make_shipment("IC-10-12", createdAt="2025-10-12")
    other = make_shipment("IC-2", createdAt="2025-10-12")
    results = search([other, record], "10-12", today=today)
    assert [r.record for r in results] == [record]
    assert results[0].score != SCORE_DATE


def test_long_query_word_boundary_on_notes(make_shipment):
    record = make_shipment("IC-1", notes="Deliver to loading dock B")
    other = make_shipment("IC-2", notes="nothing relevant")
    results = search([other, record], "loading dock")
    assert [r.record for r in results] == [record]


def test_status_alias_matches_at_any_length(make_shipment):
    moving = make_shipment("IC-1", status="In Transit")
    done = make_shipment("IC-2", status="delivered")
    results = search([done, moving], "on the way")
    assert [r.record for r in results] == [moving]
    assert results[0].score == SCORE_STATUS


def test_date_phrase_skips_the_tiers(make_shipment, today):
    hit = make_shipment("IC-1", createdAt="2025-03-13")
    miss = make_shipment("yesterday-99", createdAt="2025-01-01")
    results = search([hit, miss], "yesterday", today=today)
    assert [r.record for r in results] == [hit]
    assert results[0].score == SCORE_DATE


def test_results_are_ranked_and_stable(make_shipment):
    contains_a = make_shipment("XIC-77-A")
    exact = make_shipment("IC-77")
    contains_b = make_shipment("XIC-77-B")
    results = search([contains_a, exact, contains_b], "ic-77")
    assert [r.record for r in results] == [exact, contains_a, contains_b]


def test_records_are_not_mutated(make_shipment):
    record = make_shipment("IC-1", city="Barrie")
    before = dict(record)
    search([record], "barrie")
    assert record == before
