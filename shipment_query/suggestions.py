"""
suggestions.py

Live autocomplete: one containment pass (no length tiers) over a wider field
set than the unified search, capped at SUGGESTION_LIMIT. When no record
matches, a small menu of status / date quick actions keeps the box useful.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .config import (LOGGER_NAME, QUICK_ACTION_LIMIT, QUICK_ACTIONS,
                     SUGGESTION_FIELD_WEIGHTS, SUGGESTION_LIMIT,
                     SUGGESTION_MATCH_BONUS, SUGGESTION_MIN_QUERY_LEN)
from .directories import display_customer
from .models import CustomerDirectory, NormalizedShipment, ShipmentRecord, Suggestion
from .normalizer import NormalizeFn, normalize
from .status import status_matches

logger = logging.getLogger(LOGGER_NAME)

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


def suggestion_fields(n: NormalizedShipment, customers: Optional[CustomerDirectory] = None) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, Optional[str]]] = [
        ("id", n.display_id),
        ("id", n.id),
        ("customer_id", n.customer_id),
        ("customer", display_customer(customers, n)),
        ("carrier", n.carrier_name),
        ("service", n.carrier_service),
        ("notes", n.notes),
    ]
    pairs += [("reference", v) for v in n.reference_numbers]
    pairs += [("tracking", v) for v in n.tracking_numbers]
    for addr in (n.origin, n.destination):
        pairs += [
            ("company", addr.company),
            ("contact", addr.contact),
            ("street", addr.street),
            ("city", addr.city),
            ("state", addr.state),
            ("postal", addr.postal_code),
            ("country", addr.country),
        ]
    pairs += [("billing", v) for v in n.billing_contact.values()]
    for ts in n.dates.present():
        pairs += [("date", ts.strftime(fmt)) for fmt in _DATE_FORMATS]
    return [(f, v) for f, v in pairs if v]


def _match_kind(value: str, q: str) -> Optional[str]:
    if value == q:
        return "exact"
    if value.startswith(q):
        return "prefix"
    if q in value:
        return "contains"
    return None


def _best_field(n: NormalizedShipment, q: str, customers: Optional[CustomerDirectory]) -> Tuple[int, Optional[str], Optional[str]]:
    best: Tuple[int, Optional[str], Optional[str]] = (0, None, None)
    for field_name, value in suggestion_fields(n, customers):
        kind = _match_kind(value.strip().lower(), q)
        if kind is None:
            continue
        score = SUGGESTION_FIELD_WEIGHTS.get(field_name, 10) + SUGGESTION_MATCH_BONUS[kind]
        if score > best[0]:
            best = (score, field_name, value)
    if status_matches(n.raw_status, q):
        score = SUGGESTION_FIELD_WEIGHTS["status"] + SUGGESTION_MATCH_BONUS["exact"]
        if score > best[0]:
            best = (score, "status", n.raw_status)
    return best


def quick_actions(query_text: str, limit: int = QUICK_ACTION_LIMIT) -> List[Suggestion]:
    q = (query_text or "").strip().lower()
    out = [
        Suggestion(kind=kind, label=label, value=value)
        for kind, label, value in QUICK_ACTIONS
        if q and q in label.lower()
    ]
    return out[:limit]


def suggest(
    records: Sequence[ShipmentRecord],
    query_text: Optional[str],
    limit: int = SUGGESTION_LIMIT,
    customers: Optional[CustomerDirectory] = None,
    normalize_fn: NormalizeFn = normalize,
) -> List[Suggestion]:
    """At most ``limit`` shipment suggestions for text of 2+ characters."""
    q = (query_text or "").strip().lower()
    if len(q) < SUGGESTION_MIN_QUERY_LEN:
        return []

    hits: List[Suggestion] = []
    for record in records:
        n = normalize_fn(record)
        score, field_name, value = _best_field(n, q, customers)
        if not score:
            continue
        shown_id = n.display_id or n.id or ""
        label = f"{shown_id} | {value}" if value and value != shown_id else shown_id
        hits.append(
            Suggestion(
                kind="shipment",
                label=label,
                value=shown_id,
                score=score,
                record=record,
                matched_field=field_name,
            )
        )

    if not hits:
        logger.debug("No live matches for %r; offering quick actions.", q)
        return quick_actions(q)

    hits = sorted(hits, key=lambda s: -s.score)
    return hits[:limit]
