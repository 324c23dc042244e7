import sys
from pathlib import Path

import pandas as pd
import pytest

# Add parent to path
base_dir = Path(__file__).resolve().parent.parent
sys.path.append(str(base_dir))

TODAY = pd.Timestamp("2025-03-14")  # a Friday


def build_shipment(shipment_id, status="pending", city=None, origin_city=None, **extra):
    record = {"shipmentID": shipment_id, "status": status}
    if city is not None:
        record["shipTo"] = {"city": city}
    if origin_city is not None:
        record["shipFrom"] = {"city": origin_city}
    record.update(extra)
    return record


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_shipment():
    return build_shipment


@pytest.fixture
def fleet():
    """100 shipments, 3 of them drafts."""
    records = [build_shipment(f"IC-{1000 + i}", status="in transit") for i in range(100)]
    for i in (5, 50, 95):
        records[i]["status"] = "draft"
    return records
