"""
sorting.py

Column sort and the pagination window.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd

from .config import LOGGER_NAME, SHOW_ALL_PAGE_SIZE, SORTABLE_KEYS
from .directories import display_carrier, display_customer
from .models import (CarrierDirectory, CustomerDirectory, NormalizedShipment,
                     ShipmentRecord)
from .normalizer import NormalizeFn, normalize

logger = logging.getLogger(LOGGER_NAME)

# Missing dates sort as the oldest possible instant.
OLDEST = pd.Timestamp.min

SortValue = Callable[[NormalizedShipment, Optional[CustomerDirectory], Optional[CarrierDirectory]], Any]


def _date_or_oldest(ts: Optional[pd.Timestamp]) -> pd.Timestamp:
    return OLDEST if ts is None else ts


def _text(v: Optional[str]) -> str:
    return (v or "").strip().lower()


SORT_VALUES: Dict[str, SortValue] = {
    "shipmentID": lambda n, cu, ca: n.display_id or "",
    "customer": lambda n, cu, ca: _text(display_customer(cu, n)),
    "shipDate": lambda n, cu, ca: _date_or_oldest(n.dates.ship_date()),
    "eta": lambda n, cu, ca: _date_or_oldest(n.dates.eta()),
    "carrier": lambda n, cu, ca: _text(display_carrier(ca, n)),
    "status": lambda n, cu, ca: n.status_code or "",
    "reference": lambda n, cu, ca: _text(n.primary_reference),
    "route": lambda n, cu, ca: _text(n.route()),
    "charges": lambda n, cu, ca: n.total_charge if n.total_charge is not None else 0.0,
}


def sort_records(
    records: Sequence[ShipmentRecord],
    key: Optional[str],
    direction: str = "desc",
    customers: Optional[CustomerDirectory] = None,
    carriers: Optional[CarrierDirectory] = None,
    normalize_fn: NormalizeFn = normalize,
) -> List[ShipmentRecord]:
    """
    Stable sort by one of SORTABLE_KEYS. An unknown key leaves the order as
    it is. Equal keys keep their prior relative order in both directions.
    """
    extract = SORT_VALUES.get(key) if key in SORTABLE_KEYS else None
    if extract is None:
        if key:
            logger.debug("Unknown sort key %r; keeping current order.", key)
        return list(records)

    descending = str(direction or "").strip().lower() == "desc"
    keyed = [(extract(normalize_fn(r), customers, carriers), r) for r in records]
    keyed = sorted(keyed, key=lambda pair: pair[0], reverse=descending)
    return [r for _, r in keyed]


def paginate(records: Sequence[ShipmentRecord], page: int, page_size: int) -> List[ShipmentRecord]:
    """``page_size == -1`` returns everything; out-of-range pages are empty."""
    if page_size == SHOW_ALL_PAGE_SIZE:
        return list(records)
    if page < 0 or page_size <= 0:
        return []
    start = page * page_size
    return list(records[start:start + page_size])
