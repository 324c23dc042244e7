import datetime

import pandas as pd

from shipment_query.normalizer import (NormalizedIndex, get_path, normalize,
                                       status_code, to_number, to_timestamp)


def test_tracking_numbers_follow_priority_order():
    record = {
        "trackingNumber": "T1",
        "selectedRate": {"trackingNumber": "T2"},
        "carrierBookingConfirmation": {"proNumber": "T1"},
    }
    n = normalize(record)
    assert n.tracking_numbers == ("T1", "T2")
    assert n.primary_tracking == "T1"


def test_first_present_alias_wins_and_blank_is_absent():
    record = {"carrier": "  ", "selectedCarrier": "FedEx", "carrierName": "UPS"}
    assert normalize(record).carrier_name == "FedEx"


def test_missing_paths_never_raise():
    n = normalize({"shipTo": "not a mapping", "selectedRate": None})
    assert n.id is None
    assert n.destination.city is None
    assert n.dates.best() is None
    assert n.tracking_numbers == ()


def test_non_mapping_record_gives_empty_view():
    assert normalize(None).id is None


def test_get_path_stops_at_non_mapping():
    assert get_path({"a": {"b": 1}}, ("a", "b")) == 1
    assert get_path({"a": 5}, ("a", "b")) is None


def test_address_aliases():
    n = normalize({"shipTo": {"companyName": "Acme Ltd", "zipPostal": "L4N 1A1", "province": "ON"}})
    assert n.destination.company == "Acme Ltd"
    assert n.destination.postal_code == "L4N 1A1"
    assert n.destination.state == "ON"


def test_date_only_string_is_local_calendar_date():
    assert to_timestamp("2025-03-14") == pd.Timestamp(2025, 3, 14)


def test_epoch_wrappers_and_numbers():
    expected = pd.Timestamp.fromtimestamp(1_700_000_000)
    assert to_timestamp({"seconds": 1_700_000_000}) == expected
    assert to_timestamp({"_seconds": 1_700_000_000, "_nanoseconds": 0}) == expected
    assert to_timestamp(1_700_000_000) == expected
    assert to_timestamp(1_700_000_000_000) == expected


def test_native_and_store_timestamp_objects():
    class StoreTimestamp:
        def to_datetime(self):
            return datetime.datetime(2025, 3, 14, 9, 30)

    assert to_timestamp(StoreTimestamp()) == pd.Timestamp(2025, 3, 14, 9, 30)
    assert to_timestamp(datetime.date(2025, 3, 14)) == pd.Timestamp(2025, 3, 14)


def test_invalid_timestamps_are_absent():
    assert to_timestamp("not a date") is None
    assert to_timestamp({"foo": 1}) is None
    assert to_timestamp("") is None
    assert to_timestamp(True) is None


def test_malformed_date_leaves_other_fields_intact():
    n = normalize({"shipmentID": "IC-1", "createdAt": "garbage", "bookedAt": "2025-03-01"})
    assert n.display_id == "IC-1"
    assert n.dates.created is None
    assert n.dates.ship_date() == pd.Timestamp(2025, 3, 1)


def test_to_number():
    assert to_number("$1,234.50") == 1234.5
    assert to_number(12) == 12.0
    assert to_number("abc") is None
    assert to_number(None) is None


def test_weight_falls_back_to_packages():
    record = {"packages": [{"weight": 10, "packagingQuantity": 2}, {"weight": 5}]}
    assert normalize(record).weight == 25.0


def test_status_code():
    assert status_code(" In Transit ") == "in_transit"
    assert status_code("out-for-delivery") == "out_for_delivery"
    assert status_code(None) is None


def test_normalized_index_memoises_per_record():
    calls = []

    def counting(record):
        calls.append(record)
        return normalize(record)

    index = NormalizedIndex(counting)
    a, b = {"shipmentID": "A"}, {"shipmentID": "A"}
    assert index(a).display_id == "A"
    index(a)
    index(b)
    assert len(calls) == 2
    assert len(index) == 2
