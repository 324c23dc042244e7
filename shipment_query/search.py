"""
search.py

Unified free-text search over shipment records.

The strategy is picked by the trimmed query length:
- short  (<= 3): identifier fields only (shipment / company IDs)
- medium (4-6):  IDs, customer, references, tracking, city / state / company
- long   (>= 7): the full normalized field set, word-boundary and fuzzy rules

A date phrase ("last week", "03/14/2025", "march") short-circuits the tiers.
Status aliases ("on the way") match at any length and score highest.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .config import (ID_LIKE_FIELDS, LOGGER_NAME, LONG_FUZZY_THRESHOLD,
                     LONG_TIER_FIELDS, MEDIUM_FUZZY_THRESHOLD,
                     MEDIUM_MIN_CONTAINS_FIELD_LEN, MEDIUM_QUERY_MAX_LEN,
                     MEDIUM_TIER_FIELDS, SCORE_DATE, SCORE_RUBRIC,
                     SCORE_STATUS, SHORT_QUERY_MAX_LEN, SHORT_TIER_FIELDS)
from .dates import resolve_date_phrase
from .fuzzy import fuzzy_match
from .models import NormalizedShipment, RankedResult, ShipmentRecord
from .normalizer import NormalizeFn, normalize
from .status import status_matches

logger = logging.getLogger(LOGGER_NAME)

_ID_SPLIT_RE = re.compile(r"[-_]")

Candidate = Tuple[str, str]
Rule = Tuple[str, Callable[[str, str], bool], Optional[frozenset]]


def search_tier(query_text: Optional[str]) -> Optional[str]:
    n = len((query_text or "").strip())
    if n == 0:
        return None
    if n <= SHORT_QUERY_MAX_LEN:
        return "short"
    if n <= MEDIUM_QUERY_MAX_LEN:
        return "medium"
    return "long"


def field_candidates(n: NormalizedShipment) -> List[Candidate]:
    """(field class, lower-cased value) pairs for every searchable field."""
    pairs: List[Tuple[str, Optional[str]]] = [
        ("id", n.display_id),
        ("id", n.id),
        ("company_id", n.company_id),
        ("customer_id", n.customer_id),
        ("company", n.customer_name),
        ("carrier", n.carrier_name),
        ("carrier", n.carrier_service),
        ("notes", n.notes),
    ]
    pairs += [("reference", v) for v in n.reference_numbers]
    pairs += [("tracking", v) for v in n.tracking_numbers]
    for addr in (n.origin, n.destination):
        pairs += [
            ("company", addr.company),
            ("contact", addr.contact),
            ("street", addr.street),
            ("street", addr.street2),
            ("city", addr.city),
            ("state", addr.state),
            ("postal", addr.postal_code),
            ("country", addr.country),
        ]
    out: List[Candidate] = []
    seen = set()
    for cls, value in pairs:
        if not value:
            continue
        item = (cls, value.strip().lower())
        if item[1] and item not in seen:
            seen.add(item)
            out.append(item)
    return out


def _score(rule: str, field_class: str) -> int:
    table = SCORE_RUBRIC[rule]
    return table.get(field_class, table["default"])


def _exact(value: str, q: str) -> bool:
    return value == q


def _id_prefix(value: str, q: str) -> bool:
    if value.startswith(q):
        return True
    return any(seg.startswith(q) for seg in _ID_SPLIT_RE.split(value) if seg)


def _contains(value: str, q: str) -> bool:
    return q in value


def _contains_long_field(value: str, q: str) -> bool:
    return len(value) >= MEDIUM_MIN_CONTAINS_FIELD_LEN and q in value


def _word_boundary(value: str, q: str) -> bool:
    return re.search(r"\b" + re.escape(q) + r"\b", value) is not None


def _fuzzy(threshold: float, min_contains_len: int = 0) -> Callable[[str, str], bool]:
    def match(value: str, q: str) -> bool:
        # containment on values shorter than min_contains_len is not a fuzzy hit
        if len(value) < min_contains_len and q in value:
            return False
        return fuzzy_match(value, q, threshold)

    return match


_ID_LIKE = frozenset(ID_LIKE_FIELDS)

TIERS: Dict[str, Tuple[frozenset, List[Rule]]] = {
    "short": (
        frozenset(SHORT_TIER_FIELDS),
        [
            ("exact", _exact, None),
            ("prefix", _id_prefix, frozenset({"id"})),
            ("contains", _contains, None),
        ],
    ),
    "medium": (
        frozenset(MEDIUM_TIER_FIELDS),
        [
            ("exact", _exact, None),
            ("prefix", _id_prefix, _ID_LIKE),
            ("contains", _contains_long_field, None),
            ("fuzzy", _fuzzy(MEDIUM_FUZZY_THRESHOLD, MEDIUM_MIN_CONTAINS_FIELD_LEN), None),
        ],
    ),
    "long": (
        frozenset(LONG_TIER_FIELDS),
        [
            ("exact", _exact, None),
            ("word", _word_boundary, None),
            ("contains", _contains, None),
            ("fuzzy", _fuzzy(LONG_FUZZY_THRESHOLD), None),
        ],
    ),
}


def tier_score(n: NormalizedShipment, q: str, tier: str) -> int:
    """
    Walk the tier's rules in order; the first rule that hits any field decides
    the score (best rubric entry among the fields it hit). 0 means no match.
    """
    allowed, rules = TIERS[tier]
    candidates = [c for c in field_candidates(n) if c[0] in allowed]
    for rule, matcher, restrict in rules:
        best = 0
        for cls, value in candidates:
            if restrict is not None and cls not in restrict:
                continue
            if matcher(value, q):
                best = max(best, _score(rule, cls))
        if best:
            return best
    return 0


def search(
    records: Sequence[ShipmentRecord],
    query_text: Optional[str],
    normalize_fn: NormalizeFn = normalize,
    today: Optional[pd.Timestamp] = None,
) -> List[RankedResult]:
    """
    Filter and score ``records`` against free text.

    Blank text passes every record through unranked (score 0, input order).
    Otherwise a record qualifies by date phrase, status alias or the length
    tier (OR'd), and results come back by descending score; ties keep input
    order.
    """
    q = (query_text or "").strip().lower()
    if not q:
        return [RankedResult(record=r, score=0) for r in records]

    date_range = resolve_date_phrase(q, today=today)
    tier = None if date_range is not None else search_tier(q)
    logger.debug(
        "Unified search q=%r tier=%s date_phrase=%s over %d records.",
        q, tier, date_range.label if date_range else None, len(records),
    )

    ranked: List[RankedResult] = []
    for record in records:
        n = normalize_fn(record)
        score = 0
        if date_range is not None and date_range.contains(n.dates.best()):
            score = SCORE_DATE
        if status_matches(n.raw_status, q):
            score = max(score, SCORE_STATUS)
        if tier is not None:
            score = max(score, tier_score(n, q, tier))
        if score > 0:
            ranked.append(RankedResult(record=record, score=score))

    # sorted() is stable, so equal scores keep input order
    ranked = sorted(ranked, key=lambda r: -r.score)
    logger.debug("Unified search matched %d of %d records.", len(ranked), len(records))
    return ranked
