"""AccuWeather provider.

https://developer.accuweather.com/apis
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from weather_aggregator.config import ACCU_API_BASE_URL, PROVIDER_TIMEOUT_SECONDS
from weather_aggregator.weather.errors import ProviderParseError
from weather_aggregator.weather.models import (
    AccuForecastResponse, AccuLocationResponse, AccuTemperatureValue,
    Location, ProviderReading
)
from weather_aggregator.weather.providers.base import WeatherProvider

logger = logging.getLogger(__name__)


def _to_celsius(value: AccuTemperatureValue) -> float:
    if value.unit.upper() == "F":
        return (value.value - 32) * 5 / 9
    return value.value


class AccuWeatherProvider(WeatherProvider):
    """Daily temperatures from the AccuWeather 5 day forecast API.

    AccuWeather addresses forecasts by its own location key. The key is
    taken from the city table when present; otherwise it is looked up by
    geoposition first, which costs one extra request.
    """

    provider_id = "accuweather"

    def __init__(
        self,
        token: str,
        base_url: str = ACCU_API_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = PROVIDER_TIMEOUT_SECONDS
    ):
        super().__init__(token, base_url, client=client, timeout=timeout)

    async def location_key(self, location: Location) -> str:
        """Return the AccuWeather location key for a city.

        Args:
            location: Resolved city

        Returns:
            AccuWeather location key

        Raises:
            ProviderUnavailableError: If the search request fails
            ProviderParseError: If the search response has no key
        """
        key = location.provider_keys.get(self.provider_id)
        if key:
            return key

        logger.debug(f"Searching AccuWeather location key for {location.key}")
        data = await self._get_json(
            f"{self.base_url}/locations/v1/cities/geoposition/search",
            {"apikey": self.token, "q": f"{location.lat},{location.lon}"}
        )

        try:
            return AccuLocationResponse.model_validate(data).key
        except ValidationError as e:
            logger.warning(f"Invalid AccuWeather location response format: {e}")
            raise ProviderParseError(self.provider_id, "unexpected location search format") from e

    async def fetch(self, location: Location, day: int) -> ProviderReading:
        key = await self.location_key(location)

        logger.debug(f"Fetching AccuWeather forecast for {location.key} day {day}")
        data = await self._get_json(
            f"{self.base_url}/forecasts/v1/daily/5day/{key}",
            {"metric": "true", "apikey": self.token}
        )

        try:
            forecast = AccuForecastResponse.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid AccuWeather forecast response format: {e}")
            raise ProviderParseError(self.provider_id, "unexpected response format") from e

        if day >= len(forecast.daily_forecasts):
            raise ProviderParseError(
                self.provider_id,
                f"response has {len(forecast.daily_forecasts)} days, wanted day {day}"
            )

        temperature = forecast.daily_forecasts[day].temperature
        low = _to_celsius(temperature.minimum)
        high = _to_celsius(temperature.maximum)
        return self._reading(day, (low + high) / 2)
