"""
status.py

Bidirectional mapping between canonical status groups and the raw /
natural-language status strings found in records and queries, plus the
tab-bar grouping (drafts, awaiting shipment, in transit, ...).
"""

import re
from typing import Any, Dict, FrozenSet, Iterable, Optional

from .config import (ALL_TAB, DRAFT_STATUSES, DRAFT_TAB,
                     STATUS_GROUPS, TAB_GROUPS)

_SEP_RE = re.compile(r"[\s_\-]+")


def status_key(value: Any) -> str:
    """Trimmed, lower-cased, with '_', '-' and whitespace runs collapsed to one space."""
    if value is None:
        return ""
    return _SEP_RE.sub(" ", str(value).strip().lower()).strip()


# group key -> every raw spelling in the group, group name included
_GROUPS: Dict[str, FrozenSet[str]] = {
    status_key(name): frozenset({status_key(name)} | {status_key(a) for a in aliases})
    for name, aliases in STATUS_GROUPS.items()
}
_GROUP_NAMES: Dict[str, str] = {status_key(name): name for name in STATUS_GROUPS}
_DRAFTS = frozenset(status_key(s) for s in DRAFT_STATUSES)
_TABS: Dict[str, FrozenSet[str]] = {
    status_key(tab): frozenset(status_key(g) for g in groups) for tab, groups in TAB_GROUPS.items()
}


def status_matches(record_status: Any, query_term: Any) -> bool:
    """
    True when the record's raw status equals the term, the term names a group
    containing the status, or the term is an alias in a group that also
    contains the status.
    """
    s = status_key(record_status)
    t = status_key(query_term)
    if not s or not t:
        return False
    if s == t:
        return True
    group = _GROUPS.get(t)
    if group is not None and s in group:
        return True
    return any(t in members and s in members for members in _GROUPS.values())


def status_group(record_status: Any) -> Optional[str]:
    """Canonical group name (e.g. 'in_transit') of a raw status, or None."""
    s = status_key(record_status)
    if not s:
        return None
    if s in _GROUPS:
        return _GROUP_NAMES[s]
    for key, members in _GROUPS.items():
        if s in members:
            return _GROUP_NAMES[key]
    return None


def canonical_status(record_status: Any) -> Optional[str]:
    """Group name when the status belongs to one, else the snake-cased raw status."""
    group = status_group(record_status)
    if group is not None:
        return group
    s = status_key(record_status)
    return s.replace(" ", "_") if s else None


def is_draft(record_status: Any) -> bool:
    return status_key(record_status) in _DRAFTS


def is_known_tab(tab: Any) -> bool:
    t = status_key(tab)
    return t in (status_key(ALL_TAB), status_key(DRAFT_TAB)) or t in _TABS


def matches_tab(record_status: Any, tab: Any) -> bool:
    """
    Tab membership of a status. 'all' shows everything except drafts,
    'draft' only drafts; an unknown tab shows everything.
    """
    t = status_key(tab) or status_key(ALL_TAB)
    if t == status_key(ALL_TAB):
        return not is_draft(record_status)
    if t == status_key(DRAFT_TAB):
        return is_draft(record_status)
    groups = _TABS.get(t)
    if groups is None:
        return True
    if is_draft(record_status):
        return False
    group = status_group(record_status)
    return group is not None and status_key(group) in groups


def tab_counts(statuses: Iterable[Any]) -> Dict[str, int]:
    """Badge counts for the tab bar; 'all' leaves drafts out."""
    counts: Dict[str, int] = {ALL_TAB: 0, DRAFT_TAB: 0}
    counts.update({tab: 0 for tab in TAB_GROUPS})
    for status in statuses:
        if is_draft(status):
            counts[DRAFT_TAB] += 1
            continue
        counts[ALL_TAB] += 1
        for tab in TAB_GROUPS:
            if matches_tab(status, tab):
                counts[tab] += 1
    return counts
