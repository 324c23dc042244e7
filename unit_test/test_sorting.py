import pytest

from shipment_query.sorting import paginate, sort_records


def _ids(records):
    return [r["shipmentID"] for r in records]


@pytest.fixture
def eta_records(make_shipment):
    return [
        make_shipment("EARLY", ETA1="2025-03-01"),
        make_shipment("NONE"),
        make_shipment("LATE", shipmentInfo={"eta2": "2025-03-05"}),
    ]


def test_missing_eta_is_always_oldest(eta_records):
    assert _ids(sort_records(eta_records, "eta", "desc")) == ["LATE", "EARLY", "NONE"]
    assert _ids(sort_records(eta_records, "eta", "asc")) == ["NONE", "EARLY", "LATE"]


def test_ship_date_round_trip_reverses(make_shipment):
    records = [
        make_shipment("A", createdAt="2025-03-02"),
        make_shipment("B", bookedAt="2025-03-09"),
        make_shipment("C", bookingTimestamp="2025-03-05"),
        make_shipment("D", createdAt="2025-03-01"),
    ]
    first = sort_records(records, "shipDate", "desc")
    second = sort_records(first, "shipDate", "asc")
    assert _ids(first) == ["B", "C", "A", "D"]
    assert second == list(reversed(first))


def test_unknown_key_keeps_order(make_shipment):
    records = [make_shipment("B"), make_shipment("A")]
    out = sort_records(records, "colour", "asc")
    assert out == records
    assert out is not records
    assert sort_records(records, None) == records


@pytest.mark.parametrize("direction", ["asc", "desc"])
def test_equal_keys_keep_prior_order(make_shipment, direction):
    records = [
        make_shipment("A", totalCharges=10),
        make_shipment("B", totalCharges=10),
        make_shipment("C", totalCharges=10),
    ]
    assert _ids(sort_records(records, "charges", direction)) == ["A", "B", "C"]


def test_charges_default_to_zero(make_shipment):
    records = [
        make_shipment("A", totalCharges="n/a"),
        make_shipment("B", markupRates={"totalCharges": "12.50"}),
        make_shipment("C", selectedRate={"totalCharges": 3}),
    ]
    assert _ids(sort_records(records, "charges", "asc")) == ["A", "C", "B"]


def test_customer_sort_prefers_directory_names(make_shipment):
    records = [
        make_shipment("A", shipTo={"customerID": "C1", "companyName": "Zed Freight"}),
        make_shipment("B", shipTo={"customerID": "C2", "companyName": "Mid Co"}),
    ]
    customers = {"C1": "Alpha Inc"}
    assert _ids(sort_records(records, "customer", "asc", customers=customers)) == ["A", "B"]
    assert _ids(sort_records(records, "customer", "asc")) == ["B", "A"]


def test_carrier_sort_uses_directory_summary(make_shipment):
    records = [make_shipment("A", carrier="UPS"), make_shipment("B", carrier="Canpar")]
    carriers = {"A": {"name": "Apex"}}
    assert _ids(sort_records(records, "carrier", "asc", carriers=carriers)) == ["A", "B"]


def test_paginate(make_shipment):
    records = [make_shipment(str(i)) for i in range(12)]
    assert paginate(records, 5, 10) == []
    assert _ids(paginate(records, 1, 10)) == ["10", "11"]
    assert paginate(records, 0, -1) == records
    assert paginate(records, 0, 0) == []
    assert paginate(records, -1, 10) == []
