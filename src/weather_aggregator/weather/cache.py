"""In-memory forecast cache with per-calendar-day validity."""

import asyncio
import functools
import logging
import zoneinfo
from datetime import date, datetime
from typing import Awaitable, Callable, Dict, Optional, Tuple

from weather_aggregator.config import CACHE_TIMEZONE
from weather_aggregator.weather.models import AggregatedForecast, CacheEntry

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, int]
Compute = Callable[[], Awaitable[AggregatedForecast]]


def calendar_today(timezone_str: str = CACHE_TIMEZONE) -> date:
    """Return today's date in the given timezone."""
    return datetime.now(zoneinfo.ZoneInfo(timezone_str)).date()


def _consume_exception(task: "asyncio.Task[AggregatedForecast]") -> None:
    # Marks the failure as retrieved when every waiter was cancelled
    if not task.cancelled():
        task.exception()


class ForecastCache:
    """Aggregated forecasts keyed by (city, day), valid until the date changes.

    Staleness is checked lazily on lookup. Failed computations are never
    stored. Concurrent misses on one key share a single computation.
    All access must happen on one event loop.
    """

    def __init__(
        self,
        today: Optional[Callable[[], date]] = None,
        timezone_str: str = CACHE_TIMEZONE
    ):
        """Initialize the cache.

        Args:
            today: Returns the current calendar date (defaults to today in timezone_str)
            timezone_str: Timezone whose midnight starts a new cache day

        Raises:
            zoneinfo.ZoneInfoNotFoundError: If timezone_str is not a known timezone
        """
        if today is None:
            # Unknown zones fail here rather than on the first lookup
            zoneinfo.ZoneInfo(timezone_str)
            today = functools.partial(calendar_today, timezone_str)
        self._today = today
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._pending: Dict[CacheKey, "asyncio.Task[AggregatedForecast]"] = {}

    def get(self, city: str, day: int) -> Optional[AggregatedForecast]:
        """Return a fresh cached value without computing anything."""
        entry = self._entries.get((city, day))
        if entry is not None and entry.inserted_at == self._today():
            return entry.value
        return None

    async def get_or_compute(self, city: str, day: int, compute: Compute) -> AggregatedForecast:
        """Return the cached forecast, computing and storing it on a miss.

        Args:
            city: City identity
            day: Day offset
            compute: Coroutine factory producing the forecast on a miss

        Returns:
            Cached or freshly computed forecast

        Raises:
            Whatever compute raises; the failure is not cached
        """
        key = (city, day)

        cached = self.get(city, day)
        if cached is not None:
            logger.debug(f"Cache hit for {city} day {day}")
            return cached

        task = self._pending.get(key)
        if task is None:
            logger.debug(f"Cache miss for {city} day {day}")
            task = asyncio.ensure_future(self._compute_and_store(key, compute))
            task.add_done_callback(_consume_exception)
            self._pending[key] = task
        else:
            logger.debug(f"Joining in-flight computation for {city} day {day}")

        # A cancelled waiter must not cancel the computation other waiters share
        return await asyncio.shield(task)

    async def _compute_and_store(self, key: CacheKey, compute: Compute) -> AggregatedForecast:
        # Entries are dated by the day their computation started
        started_on = self._today()
        try:
            value = await compute()
            self._entries[key] = CacheEntry(key=key, value=value, inserted_at=started_on)
            return value
        finally:
            self._pending.pop(key, None)

    def purge_stale(self) -> int:
        """Drop entries not inserted today.

        Returns:
            Number of entries removed
        """
        today = self._today()
        stale = [key for key, entry in self._entries.items() if entry.inserted_at != today]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.info(f"Purged {len(stale)} stale cache entries")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
