"""Forecast engine combining city lookup, provider aggregation and caching."""

import asyncio
import logging
from typing import List, Optional, Sequence

from weather_aggregator.config import (
    FORECAST_DAYS, MAX_DAY_OFFSET, MIN_DAY_OFFSET, PROVIDER_TIMEOUT_SECONDS
)
from weather_aggregator.weather.aggregator import aggregate
from weather_aggregator.weather.cache import ForecastCache
from weather_aggregator.weather.cities import CityResolver
from weather_aggregator.weather.errors import InvalidDayOffsetError, WeatherServiceError
from weather_aggregator.weather.models import AggregatedForecast, Location
from weather_aggregator.weather.providers.base import WeatherProvider

logger = logging.getLogger(__name__)


def validate_day_offset(day: int) -> int:
    """Check a day offset against the forecast horizon.

    Raises:
        InvalidDayOffsetError: If day is outside [MIN_DAY_OFFSET, MAX_DAY_OFFSET]
    """
    if isinstance(day, bool) or not isinstance(day, int) or not MIN_DAY_OFFSET <= day <= MAX_DAY_OFFSET:
        raise InvalidDayOffsetError(day, MIN_DAY_OFFSET, MAX_DAY_OFFSET)
    return day


class ForecastEngine:
    """Answers current and five day forecast queries for known cities."""

    def __init__(
        self,
        resolver: CityResolver,
        providers: Sequence[WeatherProvider],
        cache: Optional[ForecastCache] = None,
        provider_timeout: Optional[float] = PROVIDER_TIMEOUT_SECONDS
    ):
        """Initialize the engine.

        Args:
            resolver: City table
            providers: Weather providers to aggregate over
            cache: Forecast cache (creates an empty one if None)
            provider_timeout: Upper bound in seconds for each provider call

        Raises:
            ValueError: If no providers are given
        """
        if not providers:
            raise ValueError("Tried to initialize forecast engine with zero providers")

        self.resolver = resolver
        self.providers = list(providers)
        self.cache = cache if cache is not None else ForecastCache()
        self.provider_timeout = provider_timeout

    def locate(self, country: str, city: str) -> Location:
        """Resolve a city, raising UnknownCityError if it is not registered."""
        return self.resolver.resolve(country, city)

    async def current(self, country: str, city: str, day_offset: int = 0) -> AggregatedForecast:
        """Get the averaged temperature for one day.

        Args:
            country: Country code
            city: City name
            day_offset: Days from today, 0 to 4

        Returns:
            AggregatedForecast for the requested day

        Raises:
            InvalidDayOffsetError: If day_offset is out of range
            UnknownCityError: If the city is not registered
            AllProvidersFailedError: If no provider answered
        """
        day = validate_day_offset(day_offset)
        location = self.locate(country, city)
        return await self._for_day(location, day)

    async def forecast(self, country: str, city: str) -> List[AggregatedForecast]:
        """Get the averaged temperature for each of the next five days.

        All days are fetched concurrently. If any day fails the whole
        forecast fails, reporting the earliest failing day.

        Args:
            country: Country code
            city: City name

        Returns:
            Five forecasts ordered by day offset, today first

        Raises:
            UnknownCityError: If the city is not registered
            AllProvidersFailedError: If no provider answered for some day
        """
        location = self.locate(country, city)
        days = range(MIN_DAY_OFFSET, MIN_DAY_OFFSET + FORECAST_DAYS)

        results = await asyncio.gather(
            *(self._for_day(location, day) for day in days),
            return_exceptions=True
        )

        forecast: List[AggregatedForecast] = []
        for day, result in zip(days, results):
            if isinstance(result, BaseException):
                if isinstance(result, WeatherServiceError):
                    logger.warning(f"Forecast for {location.key} failed on day {day}: {result}")
                raise result
            forecast.append(result)

        return forecast

    async def _for_day(self, location: Location, day: int) -> AggregatedForecast:
        async def compute() -> AggregatedForecast:
            return await aggregate(location, day, self.providers, timeout=self.provider_timeout)

        return await self.cache.get_or_compute(location.key, day, compute)

    async def aclose(self):
        """Close all provider clients."""
        for provider in self.providers:
            try:
                await provider.aclose()
            except Exception as e:
                logger.error(f"Error closing provider {provider.provider_id}: {e}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
