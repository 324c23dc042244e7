import pytest

from shipment_query.semantic import (SemanticSearchEngine,
                                     looks_like_natural_language)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("delivered yesterday", True),
        ("fedex shipments this week", True),
        ("IC-1001", False),
        ("delivered", False),
        ("hello world", False),
        (None, False),
    ],
)
def test_looks_like_natural_language(text, expected):
    assert looks_like_natural_language(text) is expected


def test_extract_components(today):
    c = SemanticSearchEngine().extract_components("FedEx shipments in transit this week", today=today)
    assert c.statuses == ("in_transit",)
    assert c.carriers == ("fedex",)
    assert c.time_expressions == ("this week",)
    assert c.date_range.label == "This Week"
    assert not c.has_delivery_intent


def test_delivery_intent_checks_the_delivered_date(make_shipment, today):
    on_time = make_shipment("A", status="Delivered", createdAt="2025-03-01", deliveredAt="2025-03-13T15:00:00")
    older = make_shipment("B", status="delivered", createdAt="2025-03-13", deliveredAt="2025-03-11")
    moving = make_shipment("C", status="in transit", createdAt="2025-03-13")
    result = SemanticSearchEngine().search("delivered yesterday", [on_time, older, moving], today=today)
    assert result.records == [on_time]
    assert result.confidence == pytest.approx(1.0)


def test_picked_up_group_matches_collected(make_shipment, today):
    collected = make_shipment("A", status="Picked_Up", createdAt="2025-03-13")
    earlier = make_shipment("B", status="picked up", createdAt="2025-03-01")
    moving = make_shipment("C", status="in transit", createdAt="2025-03-13")
    engine = SemanticSearchEngine()
    assert engine.extract_components("collected yesterday", today=today).statuses == ("picked_up",)
    result = engine.search("collected yesterday", [collected, earlier, moving], today=today)
    assert result.records == [collected]


def test_carrier_filter(make_shipment, today):
    records = [make_shipment("A", carrier="FedEx Ground"), make_shipment("B", carrier="UPS")]
    result = SemanticSearchEngine().search("fedex shipments", records, today=today)
    assert result.records == [records[0]]


def test_nothing_recognised_returns_nothing(make_shipment):
    result = SemanticSearchEngine().search("hello there", [make_shipment("A")])
    assert result.records == []
    assert result.confidence == pytest.approx(0.3)


def test_smart_suggestions_for_an_empty_delivered_today(make_shipment, today):
    result = SemanticSearchEngine().search("delivered today", [make_shipment("A")], today=today)
    assert result.records == []
    assert len(result.suggestions) == 3
    assert result.suggestions[0].value == "delivered yesterday"
