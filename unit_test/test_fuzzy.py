import pytest

from shipment_query.fuzzy import edit_distance, fuzzy_match, similarity


@pytest.mark.parametrize(
    "a, b, expected",
    [("kitten", "sitting", 3), ("flaw", "lawn", 2), ("", "abc", 3), ("same", "same", 0), ("ab", "ba", 2)],
)
def test_edit_distance(a, b, expected):
    assert edit_distance(a, b) == expected
    assert edit_distance(b, a) == expected


def test_similarity():
    assert similarity("barrie", "barie") == pytest.approx(1 - 1 / 6)
    assert similarity("", "") == 1.0


def test_containment_is_always_tried():
    assert fuzzy_match("Toronto", "RON", 0.99)


def test_short_needles_never_go_fuzzy():
    assert not fuzzy_match("abc", "abd", 0.1)


def test_threshold_applies_from_four_characters():
    assert fuzzy_match("Barrie", "barie", 0.8)
    assert not fuzzy_match("Barrie", "bxrxe", 0.8)
