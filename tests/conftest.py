"""Shared fixtures and fake providers."""

import asyncio
from typing import List, Optional

import pytest

from weather_aggregator.weather.cache import ForecastCache
from weather_aggregator.weather.cities import CityResolver
from weather_aggregator.weather.errors import ProviderError
from weather_aggregator.weather.models import Location, ProviderReading
from weather_aggregator.weather.providers.base import WeatherProvider
from weather_aggregator.weather.service import ForecastEngine

CITY_RECORDS = [
    {"country": "US", "name": "Chicago", "lat": 41.85003, "lng": -87.65005},
    {"country": "RU", "name": "Moscow", "lat": 55.75222, "lng": 37.61556, "keys": {"accuweather": "294021"}},
    {"country": "DE", "name": "Berlin", "lat": 52.52437, "lng": 13.41053},
]


class FakeProvider(WeatherProvider):
    """Provider returning ``base + day`` or raising a fixed error, without any I/O."""

    def __init__(
        self,
        base: Optional[float] = None,
        error: Optional[ProviderError] = None,
        provider_id: str = "fake",
        delay: float = 0.0,
        fail_days: Optional[List[int]] = None
    ):
        self.provider_id = provider_id
        self.base = base
        self.error = error
        self.delay = delay
        self.fail_days = fail_days or []
        self.calls: List[int] = []
        self.closed = False

    async def fetch(self, location: Location, day: int) -> ProviderReading:
        self.calls.append(day)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None and (not self.fail_days or day in self.fail_days):
            raise self.error
        return ProviderReading(
            provider_id=self.provider_id,
            day=day,
            temperature_celsius=self.base + day
        )

    async def aclose(self):
        self.closed = True


@pytest.fixture
def resolver() -> CityResolver:
    return CityResolver.from_records(CITY_RECORDS)


@pytest.fixture
def moscow(resolver: CityResolver) -> Location:
    return resolver.resolve("RU", "Moscow")


@pytest.fixture
def providers() -> List[FakeProvider]:
    return [FakeProvider(2.0, provider_id="first"), FakeProvider(4.0, provider_id="second")]


@pytest.fixture
def engine(resolver: CityResolver, providers: List[FakeProvider]) -> ForecastEngine:
    return ForecastEngine(resolver, providers, cache=ForecastCache(), provider_timeout=1.0)
