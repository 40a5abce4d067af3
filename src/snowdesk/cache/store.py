"""In-memory caches for forecasts and generated summaries.

Forecasts are time-boxed (1 hour). Summaries are keyed by location and
UTC calendar date, so they roll over once per day.

Neither store coalesces concurrent fetches: two callers that both miss on
the same key will both call their fetch function, and the last write wins.
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Generic, Optional, TypeVar

from snowdesk.config import FORECAST_TTL_SECONDS
from snowdesk.models import CacheEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ForecastStore(Generic[T]):
    """Time-boxed memoizing cache keyed by location id.

    Example:
        >>> store = ForecastStore()
        >>> store.get_or_fetch("alta", lambda: {"snowfall": [1.2]})
        {'snowfall': [1.2]}
        >>> store.get_or_fetch("alta", lambda: {"snowfall": [9.9]})
        {'snowfall': [1.2]}
    """

    def __init__(
        self,
        ttl_seconds: float = FORECAST_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize an empty store.

        Args:
            ttl_seconds: Freshness window for entries
            clock: Returns the current epoch time in seconds
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        """Return the cached value if fresh, otherwise None."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(self._clock(), self.ttl_seconds):
            return entry.value
        return None

    def get_or_fetch(self, key: str, fetch_fn: Callable[[], T]) -> T:
        """Return the fresh cached value, or fetch, store and return a new one.

        Exceptions from ``fetch_fn`` propagate and leave the cache untouched.
        """
        with self._lock:
            entry = self._entries.get(key)

        if entry is not None and entry.is_fresh(self._clock(), self.ttl_seconds):
            logger.debug(f"Cache HIT for {key}")
            return entry.value

        logger.debug(f"Cache MISS for {key}")
        value = fetch_fn()

        with self._lock:
            self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())
        return value

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def utc_date_key(location_id: str, now: float) -> str:
    """Summary cache key: ``{location_id}_{YYYY-MM-DD}`` in UTC.

    Examples:
        >>> utc_date_key("alta", 0)
        'alta_1970-01-01'
    """
    day = datetime.fromtimestamp(now, tz=timezone.utc).date().isoformat()
    return f"{location_id}_{day}"


class SummaryStore:
    """Once-per-day cache of generated summaries.

    The day is the UTC calendar date at call time, not the location's local
    date, so entries roll over at UTC midnight everywhere.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_or_fetch(self, location_id: str, fetch_fn: Callable[[], str]) -> str:
        """Return today's summary for a location, generating it on a miss."""
        key = utc_date_key(location_id, self._clock())

        with self._lock:
            if key in self._entries:
                return self._entries[key]

        summary = fetch_fn()

        with self._lock:
            self._entries[key] = summary
        return summary

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
