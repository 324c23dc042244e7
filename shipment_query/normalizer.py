"""
normalizer.py

Canonical view over loosely-structured shipment records.

Every canonical field walks a fixed priority list of source paths
(config.FIELD_ALIASES / DATE_ALIASES) and takes the first present, non-empty
value. Missing paths, malformed timestamps and unparsable numbers come back
as None; nothing in here raises for bad data.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .config import (ADDRESS_ALIASES, DATE_ALIASES, EPOCH_MILLIS_CUTOFF,
                     FIELD_ALIASES, LOGGER_NAME)
from .models import Address, NormalizedShipment, ShipmentDates, ShipmentRecord

logger = logging.getLogger(LOGGER_NAME)

_DATE_ONLY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_STATUS_SEP_RE = re.compile(r"[\s\-]+")


# -------------------------------------------------------------------------
# Path access
# -------------------------------------------------------------------------
def get_path(record: Any, path: Sequence[str]) -> Any:
    """Follow ``path`` through nested mappings; None when any hop is missing."""
    cur = record
    for key in path:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
        if cur is None:
            return None
    return cur


def is_present(v: Any) -> bool:
    if v is None:
        return False
    if isinstance(v, str):
        return bool(v.strip())
    if isinstance(v, (list, tuple, set, dict)):
        return len(v) > 0
    try:
        if pd.isna(v):
            return False
    except (TypeError, ValueError):
        pass
    return True


def first_present(record: Any, paths: Iterable[Sequence[str]]) -> Any:
    for path in paths:
        val = get_path(record, path)
        if is_present(val):
            return val
    return None


def safe_text(v: Any, default: Optional[str] = None) -> Optional[str]:
    if not is_present(v) or isinstance(v, (dict, list, tuple, set)):
        return default
    s = str(v).strip()
    return s if s else default


def collect_text(record: Any, paths: Iterable[Sequence[str]]) -> Tuple[str, ...]:
    """
    Every present value across ``paths`` in priority order, flattening list
    values and dropping duplicates (case-insensitive).
    """
    out: List[str] = []
    seen = set()
    for path in paths:
        val = get_path(record, path)
        items = val if isinstance(val, (list, tuple)) else [val]
        for item in items:
            if isinstance(item, Mapping):
                item = item.get("number") or item.get("value")
            s = safe_text(item)
            if s is None or s.lower() in seen:
                continue
            seen.add(s.lower())
            out.append(s)
    return tuple(out)


# -------------------------------------------------------------------------
# Timestamps & numbers
# -------------------------------------------------------------------------
def _local_tz():
    return datetime.now().astimezone().tzinfo


def _to_local_naive(ts: pd.Timestamp) -> pd.Timestamp:
    if ts.tzinfo is not None:
        return ts.tz_convert(_local_tz()).tz_localize(None)
    return ts


def _from_epoch(seconds: float) -> Optional[pd.Timestamp]:
    try:
        return pd.Timestamp.fromtimestamp(float(seconds))
    except (ValueError, OverflowError, OSError, TypeError):
        return None


def to_timestamp(v: Any) -> Optional[pd.Timestamp]:
    """
    Convert any of the timestamp shapes found in shipment records to a local,
    timezone-naive pandas Timestamp, or None.

    Accepts:
    - {"seconds": ..} / {"_seconds": ..} epoch wrappers (store exports)
    - store timestamp objects exposing to_datetime() / toDate() / ToDatetime()
    - datetime / date / pd.Timestamp
    - epoch numbers (seconds, or milliseconds above EPOCH_MILLIS_CUTOFF)
    - ISO strings, and bare YYYY-MM-DD strings read as local calendar dates
    """
    if not is_present(v):
        return None

    if isinstance(v, Mapping):
        seconds = v.get("seconds", v.get("_seconds"))
        if seconds is None:
            return None
        ts = _from_epoch(seconds)
        if ts is None:
            return None
        nanos = v.get("nanoseconds", v.get("_nanoseconds")) or 0
        try:
            return ts + pd.Timedelta(nanoseconds=int(nanos))
        except (TypeError, ValueError, OverflowError):
            return ts

    if isinstance(v, pd.Timestamp):
        return None if pd.isna(v) else _to_local_naive(v)

    if isinstance(v, (datetime, date)):
        try:
            return _to_local_naive(pd.Timestamp(v))
        except (ValueError, OverflowError):
            return None

    for attr in ("to_datetime", "toDate", "ToDatetime"):
        converter = getattr(v, attr, None)
        if callable(converter):
            try:
                return to_timestamp(converter())
            except (ValueError, TypeError, OverflowError):
                return None

    if isinstance(v, bool):
        return None

    if isinstance(v, (int, float)):
        seconds = v / 1000.0 if abs(v) > EPOCH_MILLIS_CUTOFF else v
        return _from_epoch(seconds)

    if isinstance(v, str):
        text = v.strip()
        m = _DATE_ONLY_RE.match(text)
        try:
            if m:
                return pd.Timestamp(int(m.group(1)), int(m.group(2)), int(m.group(3)))
            ts = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
        if pd.isna(ts):
            return None
        return _to_local_naive(ts)

    return None


def to_number(v: Any) -> Optional[float]:
    if not is_present(v) or isinstance(v, (bool, dict, list, tuple, set)):
        return None
    if isinstance(v, str):
        v = v.strip().replace(",", "").lstrip("$")
    num = pd.to_numeric(v, errors="coerce")
    if pd.isna(num):
        return None
    return float(num)


def status_code(raw: Any) -> Optional[str]:
    s = safe_text(raw)
    if s is None:
        return None
    return _STATUS_SEP_RE.sub("_", s.lower())


# -------------------------------------------------------------------------
# Composite fields
# -------------------------------------------------------------------------
def to_address(v: Any) -> Address:
    if not isinstance(v, Mapping):
        return Address()
    values = {}
    for name, keys in ADDRESS_ALIASES.items():
        values[name] = safe_text(first_present(v, [(k,) for k in keys]))
    return Address(**values)


def _package_total(record: ShipmentRecord, key: str) -> Optional[float]:
    packages = record.get("packages") if isinstance(record, Mapping) else None
    if not isinstance(packages, (list, tuple)) or not packages:
        return None
    total = 0.0
    found = False
    for pkg in packages:
        if not isinstance(pkg, Mapping):
            continue
        val = to_number(pkg.get(key))
        if val is None:
            continue
        qty = to_number(pkg.get("packagingQuantity")) or 1.0
        total += val * qty if key == "weight" else val
        found = True
    return total if found else None


def _dates(record: ShipmentRecord) -> ShipmentDates:
    values = {}
    for slot, paths in DATE_ALIASES.items():
        ts = None
        for path in paths:
            ts = to_timestamp(get_path(record, path))
            if ts is not None:
                break
        values[slot] = ts
    return ShipmentDates(**values)


def normalize(record: ShipmentRecord) -> NormalizedShipment:
    """Alias-resolved, canonical view of one shipment record."""
    if not isinstance(record, Mapping):
        logger.debug("Cannot normalize non-mapping record of type %s.", type(record).__name__)
        return NormalizedShipment()

    def text(name: str) -> Optional[str]:
        return safe_text(first_present(record, FIELD_ALIASES[name]))

    raw_status = text("status")
    weight = to_number(first_present(record, FIELD_ALIASES["weight"]))
    pieces = to_number(first_present(record, FIELD_ALIASES["pieces"]))
    notes = collect_text(record, FIELD_ALIASES["notes"])

    return NormalizedShipment(
        id=text("id"),
        display_id=text("display_id"),
        company_id=text("company_id"),
        customer_id=text("customer_id"),
        customer_name=text("customer_name"),
        carrier_name=text("carrier_name"),
        carrier_service=text("carrier_service"),
        tracking_numbers=collect_text(record, FIELD_ALIASES["tracking_numbers"]),
        reference_numbers=collect_text(record, FIELD_ALIASES["reference_numbers"]),
        status_code=status_code(raw_status),
        raw_status=raw_status,
        shipment_type=text("shipment_type"),
        invoice_status=text("invoice_status"),
        origin=to_address(first_present(record, FIELD_ALIASES["origin"])),
        destination=to_address(first_present(record, FIELD_ALIASES["destination"])),
        dates=_dates(record),
        weight=weight if weight is not None else _package_total(record, "weight"),
        pieces=pieces if pieces is not None else _package_total(record, "packagingQuantity"),
        total_charge=to_number(first_present(record, FIELD_ALIASES["total_charge"])),
        currency=text("currency"),
        notes=" ".join(notes) if notes else None,
        billing_contact=to_address(first_present(record, FIELD_ALIASES["billing_contact"])),
    )


NormalizeFn = Callable[[ShipmentRecord], NormalizedShipment]


class NormalizedIndex:
    """
    Per-run memo of normalize(), keyed on record identity.

    Owned by one pipeline invocation and dropped afterwards, so nothing is
    shared between runs.
    """

    def __init__(self, normalize_fn: NormalizeFn = normalize) -> None:
        self._normalize = normalize_fn
        self._cache: Dict[int, Tuple[ShipmentRecord, NormalizedShipment]] = {}

    def __call__(self, record: ShipmentRecord) -> NormalizedShipment:
        key = id(record)
        hit = self._cache.get(key)
        if hit is not None and hit[0] is record:
            return hit[1]
        norm = self._normalize(record)
        # Keep the record referenced so its id() cannot be reused mid-run.
        self._cache[key] = (record, norm)
        return norm

    def __len__(self) -> int:
        return len(self._cache)
