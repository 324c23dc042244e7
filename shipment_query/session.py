"""
session.py

Caller-owned state for the interactive layer around the engine: the
sequence guard for late semantic responses and the navigation session that
rate-limits view changes. Neither is ambient; callers create and pass them.
"""

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from .config import LOGGER_NAME
from .models import ShipmentRecord

logger = logging.getLogger(LOGGER_NAME)

T = TypeVar("T")

SemanticProvider = Callable[[str, Sequence[ShipmentRecord]], Awaitable[T]]


class SemanticRequestGuard:
    """
    Tags each semantic request with a monotonically increasing sequence number.
    Only the response to the latest issued request is accepted; anything older
    is dropped so it cannot overwrite a fresher synchronous result.
    """

    def __init__(self) -> None:
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def invalidate(self) -> None:
        """Mark every in-flight request stale (e.g. the query was cleared)."""
        self._latest += 1

    def is_current(self, seq: int) -> bool:
        return seq == self._latest

    async def run(
        self,
        provider: SemanticProvider,
        query: str,
        records: Sequence[ShipmentRecord],
    ) -> Optional[T]:
        """Await ``provider``; None when a newer request was issued meanwhile."""
        seq = self.issue()
        result = await provider(query, records)
        if not self.is_current(seq):
            logger.info("Discarding stale semantic response #%d (latest is #%d).", seq, self._latest)
            return None
        return result


@dataclass
class NavigationSession:
    """
    Replaces window-level "last navigation time" / "already auto-opened" flags.
    One instance per table view, owned by the caller.
    """

    last_action_at: Optional[float] = None
    has_auto_opened: bool = False

    def should_throttle(self, min_interval: float, now: Optional[float] = None) -> bool:
        if self.last_action_at is None:
            return False
        now = time.monotonic() if now is None else now
        return (now - self.last_action_at) < min_interval

    def mark_action(self, now: Optional[float] = None) -> None:
        self.last_action_at = time.monotonic() if now is None else now

    def claim_auto_open(self) -> bool:
        """True exactly once per session: the first caller gets to auto-open."""
        if self.has_auto_opened:
            return False
        self.has_auto_opened = True
        return True

    def reset(self) -> None:
        self.last_action_at = None
        self.has_auto_opened = False
