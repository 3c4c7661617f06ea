"""
University List Cache

Holds a single snapshot of the university list (static attributes only,
never counts) together with the time it was captured. The component owns
the TTL policy; the backend entry itself never expires, so a stale entry is
still returned by get() and it is up to the caller to decide, via
is_fresh(), whether to recompute.

There is no lock around refills: two requests that see a stale entry at the
same time will both reload the list. The reload is idempotent, so the only
cost is a duplicate query.
"""

import logging
import time
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)

CACHE_KEY = 'universities:list'
DEFAULT_TTL_SECONDS = 300


class UniversityListCache:
    """Single-slot, time-bounded cache for the university listing."""

    def __init__(self, backend, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        self.backend = backend
        self.ttl = ttl_seconds
        self.clock = clock

    def get(self) -> Tuple[Optional[Any], float, float]:
        """
        Return (value, timestamp, ttl).

        value is None and timestamp is 0 when nothing is cached or the
        entry was invalidated.
        """
        entry = self.backend.get(CACHE_KEY)
        if not entry:
            return None, 0, self.ttl
        return entry.get('value'), entry.get('timestamp', 0), self.ttl

    def set(self, value: Any, timestamp: float = None) -> None:
        if timestamp is None:
            timestamp = self.clock()
        # timeout=0: never expire in the backend, freshness is decided here
        self.backend.set(CACHE_KEY, {'value': value, 'timestamp': timestamp}, timeout=0)

    def invalidate(self) -> None:
        self.backend.delete(CACHE_KEY)
        logger.info("University list cache invalidated")

    def is_fresh(self, timestamp: float, now: float = None) -> bool:
        if not timestamp:
            return False
        if now is None:
            now = self.clock()
        return (now - timestamp) < self.ttl
