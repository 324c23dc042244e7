"""
engine.py

ShipmentQueryEngine: composes the query stages over an already-fetched,
in-memory record set.

    tab filter -> unified search (or semantic results) -> advanced filter
        -> legacy fields -> carrier / status / invoice / type / date range
        -> sort -> page

Key properties:
- Pure and synchronous; input records are never mutated and the outputs hold
  the same record objects.
- Ordering is decided by the last stage that orders: input order, then
  relevance from the search stage, then the user's sort key when given.
- Degrades instead of failing: unknown tabs, sort keys and filter fields are
  no-ops.
"""

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .config import LOGGER_NAME
from .filters import (apply_advanced, apply_legacy_fields, apply_sub_filters,
                      apply_tab_filter)
from .models import (CarrierDirectory, CustomerDirectory, QueryResult,
                     SearchQuery, ShipmentRecord, Suggestion)
from .normalizer import NormalizedIndex, normalize
from .search import search
from .sorting import paginate, sort_records
from .status import tab_counts
from .suggestions import suggest

logger = logging.getLogger(LOGGER_NAME)


class ShipmentQueryEngine:
    """
    Resolve a SearchQuery against a record set.

    The customer and carrier directories are read-only lookups supplied by
    the caller; the engine never filters by company (that decided which
    records were fetched).
    """

    def __init__(
        self,
        customers: Optional[CustomerDirectory] = None,
        carriers: Optional[CarrierDirectory] = None,
        logger_: Optional[logging.Logger] = None,
    ) -> None:
        self.customers = customers or {}
        self.carriers = carriers or {}
        self.logger = logger_ or logger

    # -------------------------------------------------------------------------
    # Public entrypoints
    # -------------------------------------------------------------------------
    def run(
        self,
        records: Sequence[ShipmentRecord],
        query: Optional[SearchQuery] = None,
        semantic_results: Optional[Sequence[ShipmentRecord]] = None,
        today: Optional[pd.Timestamp] = None,
    ) -> QueryResult:
        """
        Run the full pipeline. ``semantic_results``, when given, replaces the
        unified search output; only records that survived the tab filter are
        kept from it, in the semantic order.
        """
        query = query or SearchQuery()
        index = NormalizedIndex()

        out = apply_tab_filter(records, query.tab_filter, index)
        self.logger.debug("Tab filter '%s' done. Count=%d", query.tab_filter, len(out))

        if semantic_results is not None:
            allowed = {id(r) for r in out}
            out = [r for r in semantic_results if id(r) in allowed]
            self.logger.debug("Semantic results replaced unified search. Count=%d", len(out))
        else:
            out = [hit.record for hit in search(out, query.text, index, today=today)]
            self.logger.debug("Unified search done. Count=%d", len(out))

        out = apply_advanced(out, query.advanced_filter, self.customers, self.carriers, index)
        self.logger.debug("Advanced filter done. Count=%d", len(out))

        out = apply_legacy_fields(out, query.legacy_fields, self.customers, index)
        self.logger.debug("Legacy field filters done. Count=%d", len(out))

        out = apply_sub_filters(out, query, self.carriers, index)
        self.logger.debug("Carrier/status/invoice/type/date filters done. Count=%d", len(out))

        if query.sort_key:
            out = sort_records(out, query.sort_key, query.sort_direction, self.customers, self.carriers, index)
            self.logger.debug("Sorted by %s %s.", query.sort_key, query.sort_direction)

        page = paginate(out, query.page, query.page_size)
        self.logger.info(
            "Query resolved: text=%r tab=%s total=%d page=%d size=%d returned=%d",
            query.text, query.tab_filter, len(out), query.page, query.page_size, len(page),
        )
        return QueryResult(page=page, all_filtered=out, total_count=len(out))

    def suggest(self, records: Sequence[ShipmentRecord], query_text: Optional[str]) -> List[Suggestion]:
        return suggest(records, query_text, customers=self.customers, normalize_fn=NormalizedIndex())

    def tab_counts(self, records: Sequence[ShipmentRecord]) -> Dict[str, int]:
        return tab_counts(normalize(r).raw_status for r in records)
