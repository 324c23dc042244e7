"""
semantic.py

Natural-language search over shipments ("delivered yesterday", "fedex
shipments in transit this week"). It is the default provider for the
semantic collaborator of the engine: its ranked subset replaces the unified
search output when the caller passes it to ShipmentQueryEngine.run().
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from .config import (LOGGER_NAME, SEMANTIC_CARRIER_TERMS,
                     SEMANTIC_STATUS_TERMS, SEMANTIC_SUGGESTION_LIMIT,
                     SEMANTIC_TIME_TERMS)
from .dates import resolve_date_phrase
from .models import DateRange, NormalizedShipment, ShipmentRecord, Suggestion
from .normalizer import NormalizeFn, normalize
from .status import status_key

logger = logging.getLogger(LOGGER_NAME)


@dataclass(frozen=True)
class QueryComponents:
    statuses: Tuple[str, ...] = ()
    time_expressions: Tuple[str, ...] = ()
    carriers: Tuple[str, ...] = ()
    date_range: Optional[DateRange] = None
    has_delivery_intent: bool = False

    def is_empty(self) -> bool:
        return not (self.statuses or self.carriers or self.date_range)


@dataclass(frozen=True)
class SemanticResult:
    query: str
    components: QueryComponents
    records: List[ShipmentRecord] = field(default_factory=list)
    suggestions: List[Suggestion] = field(default_factory=list)
    confidence: float = 0.5


def _mentions(query: str, aliases: Sequence[str]) -> bool:
    return any(alias in query for alias in aliases)


def looks_like_natural_language(text: Optional[str]) -> bool:
    """Several words and at least one status, time or carrier term."""
    q = (text or "").strip().lower()
    if len(q.split()) < 2:
        return False
    vocab = (SEMANTIC_STATUS_TERMS, SEMANTIC_TIME_TERMS, SEMANTIC_CARRIER_TERMS)
    return any(_mentions(q, aliases) for terms in vocab for aliases in terms.values())


class SemanticSearchEngine:
    def __init__(self, logger_: Optional[logging.Logger] = None) -> None:
        self.logger = logger_ or logger

    def extract_components(self, query: str, today: Optional[pd.Timestamp] = None) -> QueryComponents:
        q = query.strip().lower()
        statuses = tuple(s for s, aliases in SEMANTIC_STATUS_TERMS.items() if _mentions(q, aliases))
        carriers = tuple(c for c, aliases in SEMANTIC_CARRIER_TERMS.items() if _mentions(q, aliases))
        times = tuple(t for t, aliases in SEMANTIC_TIME_TERMS.items() if _mentions(q, aliases))

        date_range = None
        for phrase in times:
            # the last recognised expression wins
            date_range = resolve_date_phrase(phrase, today=today) or date_range

        return QueryComponents(
            statuses=statuses,
            time_expressions=times,
            carriers=carriers,
            date_range=date_range,
            has_delivery_intent="delivered" in q or "delivery" in q,
        )

    @staticmethod
    def _status_ok(n: NormalizedShipment, c: QueryComponents) -> bool:
        if not c.statuses:
            return True
        current = status_key(n.raw_status)
        if not current:
            return False
        return any(status_key(alias) in current for s in c.statuses for alias in SEMANTIC_STATUS_TERMS[s])

    @staticmethod
    def _date_ok(n: NormalizedShipment, c: QueryComponents) -> bool:
        if c.date_range is None:
            return True
        if c.has_delivery_intent or "delivered" in c.statuses:
            when = n.dates.delivered
        else:
            when = n.dates.best()
        return c.date_range.contains(when)

    @staticmethod
    def _carrier_ok(n: NormalizedShipment, c: QueryComponents) -> bool:
        if not c.carriers:
            return True
        name = (n.carrier_name or "").lower()
        return bool(name) and any(
            alias in name for carrier in c.carriers for alias in SEMANTIC_CARRIER_TERMS[carrier]
        )

    def filter_records(
        self,
        records: Sequence[ShipmentRecord],
        components: QueryComponents,
        normalize_fn: NormalizeFn = normalize,
    ) -> List[ShipmentRecord]:
        out = []
        for record in records:
            n = normalize_fn(record)
            if self._status_ok(n, components) and self._date_ok(n, components) and self._carrier_ok(n, components):
                out.append(record)
        return out

    @staticmethod
    def smart_suggestions(query: str, c: QueryComponents, result_count: int) -> List[Suggestion]:
        tips: List[Suggestion] = []
        if "delivered" in c.statuses and "today" in c.time_expressions and result_count == 0:
            tips.append(Suggestion("alternative", 'No deliveries today. Try "delivered yesterday"', "delivered yesterday"))
            tips.append(Suggestion("alternative", "Show all delivered shipments", "delivered"))
        if 0 < result_count < 5 and c.date_range is not None:
            tips.append(
                Suggestion("broaden", f"Only {result_count} results. Remove date filter to see more", " ".join(c.statuses))
            )
        if result_count > 20:
            if c.date_range is None:
                tips.append(Suggestion("narrow", 'Add "today" to see recent shipments', f"{query} today"))
            if not c.statuses:
                tips.append(Suggestion("narrow", 'Filter by "delivered" status', f"{query} delivered"))
        if "delayed" not in c.statuses:
            tips.append(Suggestion("quick_filter", "Show delayed shipments", "delayed"))
        if "in_transit" not in c.statuses:
            tips.append(Suggestion("quick_filter", "Show shipments in transit", "in transit"))
        return tips[:SEMANTIC_SUGGESTION_LIMIT]

    @staticmethod
    def confidence(c: QueryComponents, result_count: int) -> float:
        score = 0.5
        if c.statuses:
            score += 0.2
        if c.date_range is not None:
            score += 0.2
        if c.carriers:
            score += 0.1
        if 0 < result_count <= 20:
            score += 0.1
        elif result_count == 0:
            score -= 0.2
        return max(0.1, min(score, 1.0))

    def search(
        self,
        query: str,
        records: Sequence[ShipmentRecord],
        normalize_fn: NormalizeFn = normalize,
        today: Optional[pd.Timestamp] = None,
    ) -> SemanticResult:
        q = (query or "").strip().lower()
        components = self.extract_components(q, today=today)
        if components.is_empty():
            self.logger.debug("Semantic query %r has no recognisable components.", q)
            matched: List[ShipmentRecord] = []
        else:
            matched = self.filter_records(records, components, normalize_fn)
        self.logger.info(
            "Semantic search q=%r statuses=%s carriers=%s time=%s -> %d results.",
            q, list(components.statuses), list(components.carriers),
            list(components.time_expressions), len(matched),
        )
        return SemanticResult(
            query=q,
            components=components,
            records=matched,
            suggestions=self.smart_suggestions(q, components, len(matched)),
            confidence=self.confidence(components, len(matched)),
        )
