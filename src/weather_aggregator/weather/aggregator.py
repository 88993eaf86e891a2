"""Concurrent fan-out to providers and averaging of their readings."""

import asyncio
import logging
from typing import List, Optional, Sequence, Union

from weather_aggregator.weather.errors import (
    AllProvidersFailedError, ProviderError, ProviderUnavailableError
)
from weather_aggregator.weather.models import AggregatedForecast, Location, ProviderReading
from weather_aggregator.weather.providers.base import WeatherProvider

logger = logging.getLogger(__name__)


async def _fetch_one(
    provider: WeatherProvider,
    location: Location,
    day: int,
    timeout: Optional[float]
) -> Union[ProviderReading, ProviderError]:
    """Run a single provider call, returning its failure instead of raising it."""
    try:
        return await asyncio.wait_for(provider.fetch(location, day), timeout=timeout)
    except asyncio.TimeoutError:
        return ProviderUnavailableError(provider.provider_id, f"no answer within {timeout}s")
    except ProviderError as e:
        return e


async def aggregate(
    location: Location,
    day: int,
    providers: Sequence[WeatherProvider],
    timeout: Optional[float] = None
) -> AggregatedForecast:
    """Query all providers concurrently and average the successful readings.

    Args:
        location: City to query
        day: Day offset
        providers: Providers to query, each contributes at most one sample
        timeout: Upper bound in seconds for each provider call

    Returns:
        Mean temperature over the providers that answered

    Raises:
        AllProvidersFailedError: If no provider produced a reading
        ValueError: If providers is empty
    """
    if not providers:
        raise ValueError("aggregate requires at least one provider")

    # Every call runs to completion before an unexpected error is re-raised
    results = await asyncio.gather(
        *(_fetch_one(provider, location, day, timeout) for provider in providers),
        return_exceptions=True
    )

    unexpected = [r for r in results if isinstance(r, BaseException) and not isinstance(r, ProviderError)]
    if unexpected:
        raise unexpected[0]

    readings: List[ProviderReading] = []
    failures: List[ProviderError] = []
    for result in results:
        if isinstance(result, ProviderError):
            logger.warning(f"Provider failed for {location.key} day {day}: {result} ({result.kind})")
            failures.append(result)
        else:
            readings.append(result)

    if not readings:
        raise AllProvidersFailedError(location.city, day, failures)

    temperature = sum(r.temperature_celsius for r in readings) / len(readings)
    logger.info(
        f"Aggregated {location.key} day {day}: {temperature:.2f}C from "
        f"{len(readings)}/{len(providers)} providers"
    )

    return AggregatedForecast(
        city=location.city,
        day=day,
        temperature_celsius=temperature,
        sample_count=len(readings),
        providers=[r.provider_id for r in readings]
    )
