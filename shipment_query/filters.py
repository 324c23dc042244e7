"""
filters.py

Structured filtering stages. Every function returns a new list holding the
same record objects, in input order; nothing is mutated.

Order used by the engine:
    tab -> (search) -> advanced -> legacy fields -> carrier -> status
        -> invoice status -> shipment type -> date range
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .config import ALL_SENTINEL, LOGGER_NAME
from .dates import day_range
from .directories import carrier_summary, customer_name, display_carrier
from .models import (AdvancedFilterCriteria, CarrierDirectory,
                     CustomerDirectory, DateRange, LegacyFieldFilters,
                     NormalizedShipment, SearchQuery, ShipmentRecord)
from .normalizer import NormalizeFn, normalize, safe_text, to_number, to_timestamp
from .status import is_known_tab, matches_tab, status_key, status_matches

logger = logging.getLogger(LOGGER_NAME)

Predicate = Callable[[NormalizedShipment], bool]
DateBounds = Union[DateRange, Tuple[Any, Any], None]


# -------------------------------------------------------------------------
# Small matching helpers
# -------------------------------------------------------------------------
def _lower(v: Any) -> str:
    s = safe_text(v)
    return s.lower() if s else ""


def _contains(haystack: Any, needle: Any) -> bool:
    n = _lower(needle)
    return bool(n) and n in _lower(haystack)


def _any_contains(haystacks: Sequence[Any], needles: Sequence[Any]) -> bool:
    return any(_contains(h, nd) for nd in needles for h in haystacks)


def _terms(values: Sequence[Any]) -> List[str]:
    return [v for v in (safe_text(x) for x in values) if v]


def _is_off(criterion: Any) -> bool:
    s = safe_text(criterion)
    return s is None or s.lower() == ALL_SENTINEL


def to_date_range(start: Any, end: Any = None) -> Optional[DateRange]:
    """
    Inclusive whole-day range. A start without an end is that single day;
    an end without a start is open to the past. None when nothing parses.
    """
    start_ts = to_timestamp(start)
    end_ts = to_timestamp(end)
    if start_ts is None and end_ts is None:
        return None
    if start_ts is None:
        return DateRange(start=pd.Timestamp.min, end=day_range(end_ts).end)
    return day_range(start_ts, end_ts)


def _as_range(bounds: DateBounds) -> Optional[DateRange]:
    if bounds is None or isinstance(bounds, DateRange):
        return bounds
    start, end = (tuple(bounds) + (None, None))[:2]
    return to_date_range(start, end)


def _in_number_range(value: Optional[float], lo: Any, hi: Any) -> bool:
    if value is None:
        return False
    lo_n, hi_n = to_number(lo), to_number(hi)
    if lo_n is not None and value < lo_n:
        return False
    if hi_n is not None and value > hi_n:
        return False
    return True


def _keep(records: Sequence[ShipmentRecord], normalize_fn: NormalizeFn, pred: Predicate) -> List[ShipmentRecord]:
    return [r for r in records if pred(normalize_fn(r))]


# -------------------------------------------------------------------------
# Tab filter
# -------------------------------------------------------------------------
def apply_tab_filter(
    records: Sequence[ShipmentRecord], tab: Optional[str], normalize_fn: NormalizeFn = normalize
) -> List[ShipmentRecord]:
    if status_key(tab) and not is_known_tab(tab):
        logger.debug("Unknown tab '%s'; showing every record.", tab)
    return _keep(records, normalize_fn, lambda n: matches_tab(n.raw_status, tab))


# -------------------------------------------------------------------------
# Advanced filter
# -------------------------------------------------------------------------
def _advanced_predicates(
    c: AdvancedFilterCriteria,
    customers: Optional[CustomerDirectory],
    carriers: Optional[CarrierDirectory],
) -> List[Tuple[str, Predicate]]:
    preds: List[Tuple[str, Predicate]] = []

    def add(name: str, pred: Predicate) -> None:
        preds.append((name, pred))

    ids = _terms(c.shipment_ids)
    if ids:
        add("shipment_ids", lambda n: _any_contains([n.display_id, n.id], ids))

    customer_ids = _terms(c.customer_ids)
    if customer_ids:
        add("customer_ids", lambda n: _any_contains([n.customer_id], customer_ids))

    if safe_text(c.customer_name):
        add(
            "customer_name",
            lambda n: _any_contains(
                [customer_name(customers, n), n.customer_name, n.destination.company],
                [c.customer_name],
            ),
        )

    statuses = _terms(c.statuses)
    if statuses:
        add("statuses", lambda n: any(status_matches(n.raw_status, s) for s in statuses))

    carrier_terms = _terms(c.carriers)
    if carrier_terms:
        add(
            "carriers",
            lambda n: _any_contains([n.carrier_name, display_carrier(carriers, n)], carrier_terms),
        )

    services = _terms(c.carrier_services)
    if services:
        add("carrier_services", lambda n: _any_contains([n.carrier_service], services))

    types = _terms(c.shipment_types)
    if types:
        add("shipment_types", lambda n: _any_contains([n.shipment_type], types))

    invoice = [status_key(s) for s in _terms(c.invoice_statuses)]
    if invoice:
        add("invoice_statuses", lambda n: status_key(n.invoice_status) in invoice)

    tracking = _terms(c.tracking_numbers)
    if tracking:
        add("tracking_numbers", lambda n: _any_contains(n.tracking_numbers, tracking))

    refs = _terms(c.reference_numbers)
    if refs:
        add("reference_numbers", lambda n: _any_contains(n.reference_numbers, refs))

    if safe_text(c.currency):
        add("currency", lambda n: _lower(n.currency) == _lower(c.currency))

    if safe_text(c.notes):
        add("notes", lambda n: _contains(n.notes, c.notes))

    for side in ("origin", "destination"):
        for part in ("company", "city", "state", "postal_code", "country"):
            value = getattr(c, f"{side}_{part}")
            if safe_text(value):
                add(
                    f"{side}_{part}",
                    lambda n, side=side, part=part, value=value: _contains(
                        getattr(getattr(n, side), part), value
                    ),
                )

    for slot, getter in (
        ("created", lambda n: n.dates.created),
        ("shipped", lambda n: n.dates.best()),
        ("eta", lambda n: n.dates.eta()),
        ("delivered", lambda n: n.dates.delivered),
    ):
        start, end = getattr(c, f"{slot}_from"), getattr(c, f"{slot}_to")
        if start is None and end is None:
            continue
        rng = to_date_range(start, end)
        if rng is None:
            logger.debug("Ignoring unparsable %s date range (%r, %r).", slot, start, end)
            continue
        add(f"{slot}_date", lambda n, rng=rng, getter=getter: rng.contains(getter(n)))

    for name, getter in (
        ("weight", lambda n: n.weight),
        ("pieces", lambda n: n.pieces),
        ("charge", lambda n: n.total_charge),
    ):
        lo, hi = getattr(c, f"{name}_min"), getattr(c, f"{name}_max")
        if to_number(lo) is None and to_number(hi) is None:
            continue
        add(f"{name}_range", lambda n, lo=lo, hi=hi, getter=getter: _in_number_range(getter(n), lo, hi))

    return preds


def apply_advanced(
    records: Sequence[ShipmentRecord],
    criteria: Optional[AdvancedFilterCriteria],
    customers: Optional[CustomerDirectory] = None,
    carriers: Optional[CarrierDirectory] = None,
    normalize_fn: NormalizeFn = normalize,
) -> List[ShipmentRecord]:
    """
    Keep records passing every non-empty predicate of ``criteria``.
    ``company_ids`` is decided when records are fetched and is not applied here.
    """
    if criteria is None or criteria.is_empty():
        return list(records)
    if _terms(criteria.company_ids):
        logger.debug("company_ids is resolved upstream; skipping it in the advanced filter.")

    preds = _advanced_predicates(criteria, customers, carriers)
    logger.debug("Advanced filter active predicates: %s", [name for name, _ in preds])
    return _keep(records, normalize_fn, lambda n: all(pred(n) for _, pred in preds))


# -------------------------------------------------------------------------
# Legacy per-field search boxes
# -------------------------------------------------------------------------
def apply_legacy_fields(
    records: Sequence[ShipmentRecord],
    legacy: Optional[LegacyFieldFilters],
    customers: Optional[CustomerDirectory] = None,
    normalize_fn: NormalizeFn = normalize,
) -> List[ShipmentRecord]:
    if legacy is None or legacy.is_empty():
        return list(records)

    checks: List[Predicate] = []
    if safe_text(legacy.shipment_id):
        checks.append(lambda n: _any_contains([n.display_id, n.id], [legacy.shipment_id]))
    if safe_text(legacy.reference_number):
        checks.append(lambda n: _any_contains(n.reference_numbers, [legacy.reference_number]))
    if safe_text(legacy.tracking_number):
        checks.append(lambda n: _any_contains(n.tracking_numbers, [legacy.tracking_number]))
    if safe_text(legacy.customer_name):
        checks.append(
            lambda n: _contains(customer_name(customers, n) or n.destination.company, legacy.customer_name)
        )
    if safe_text(legacy.origin):
        checks.append(lambda n: _contains(n.origin.text(), legacy.origin))
    if safe_text(legacy.destination):
        checks.append(lambda n: _contains(n.destination.text(), legacy.destination))

    return _keep(records, normalize_fn, lambda n: all(check(n) for check in checks))


# -------------------------------------------------------------------------
# Sub-filters
# -------------------------------------------------------------------------
def filter_by_carrier(
    records: Sequence[ShipmentRecord],
    carrier: Optional[str],
    carriers: Optional[CarrierDirectory] = None,
    normalize_fn: NormalizeFn = normalize,
) -> List[ShipmentRecord]:
    if _is_off(carrier):
        return list(records)
    wanted = _lower(carrier)

    def match(n: NormalizedShipment) -> bool:
        summary = carrier_summary(carriers, n)
        if summary is not None:
            ids = [_lower(summary.get(k)) for k in ("carrierID", "carrierId", "id", "key")]
            if wanted in ids:
                return True
        return _contains(display_carrier(carriers, n), wanted)

    return _keep(records, normalize_fn, match)


def filter_by_status(
    records: Sequence[ShipmentRecord], status: Optional[str], normalize_fn: NormalizeFn = normalize
) -> List[ShipmentRecord]:
    if _is_off(status):
        return list(records)
    return _keep(records, normalize_fn, lambda n: status_matches(n.raw_status, status))


def filter_by_invoice_status(
    records: Sequence[ShipmentRecord], invoice_status: Optional[str], normalize_fn: NormalizeFn = normalize
) -> List[ShipmentRecord]:
    if _is_off(invoice_status):
        return list(records)
    wanted = status_key(invoice_status)
    return _keep(records, normalize_fn, lambda n: status_key(n.invoice_status) == wanted)


def filter_by_shipment_type(
    records: Sequence[ShipmentRecord], shipment_type: Optional[str], normalize_fn: NormalizeFn = normalize
) -> List[ShipmentRecord]:
    if _is_off(shipment_type):
        return list(records)
    return _keep(records, normalize_fn, lambda n: _contains(n.shipment_type, shipment_type))


def filter_by_date_range(
    records: Sequence[ShipmentRecord], bounds: DateBounds, normalize_fn: NormalizeFn = normalize
) -> List[ShipmentRecord]:
    rng = _as_range(bounds)
    if rng is None:
        return list(records)
    return _keep(records, normalize_fn, lambda n: rng.contains(n.dates.created))


def apply_sub_filters(
    records: Sequence[ShipmentRecord],
    query: SearchQuery,
    carriers: Optional[CarrierDirectory] = None,
    normalize_fn: NormalizeFn = normalize,
) -> List[ShipmentRecord]:
    out = filter_by_carrier(records, query.carrier, carriers, normalize_fn)
    out = filter_by_status(out, query.status, normalize_fn)
    out = filter_by_invoice_status(out, query.invoice_status, normalize_fn)
    out = filter_by_shipment_type(out, query.shipment_type, normalize_fn)
    out = filter_by_date_range(out, query.date_range, normalize_fn)
    return out
