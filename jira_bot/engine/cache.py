"""Time-bounded set of ticket keys whose last pass had no effect."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable

from jira_bot.core.config import DEDUP_TTL_SECONDS


class TicketCache:
    """Ticket key -> expiry map, swept lazily on every lookup.

    Each key holds exactly one expiry; re-adding a key replaces it, so no
    earlier removal can fire before the new deadline.
    """

    def __init__(self, ttl: float = DEDUP_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._expiry: dict[str, float] = {}
        self._lock = threading.Lock()

    def add(self, key: str) -> None:
        with self._lock:
            self._expiry[key] = self._clock() + self.ttl

    def discard(self, key: str) -> None:
        with self._lock:
            self._expiry.pop(key, None)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            self._sweep()
            return key in self._expiry

    def __len__(self) -> int:
        with self._lock:
            self._sweep()
            return len(self._expiry)

    def filter_new(self, keys: Iterable[str]) -> list[str]:
        """Keys not currently cached, in their original order."""
        with self._lock:
            self._sweep()
            return [k for k in keys if k not in self._expiry]

    def _sweep(self) -> None:
        now = self._clock()
        expired = [k for k, deadline in self._expiry.items() if deadline <= now]
        for k in expired:
            del self._expiry[k]
