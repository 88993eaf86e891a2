"""OpenWeatherMap One Call provider.

https://openweathermap.org/api/one-call-3
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from weather_aggregator.config import OWM_API_BASE_URL, PROVIDER_TIMEOUT_SECONDS
from weather_aggregator.weather.errors import ProviderParseError
from weather_aggregator.weather.models import Location, OwmForecastResponse, ProviderReading
from weather_aggregator.weather.providers.base import WeatherProvider

logger = logging.getLogger(__name__)


class OpenWeatherMapProvider(WeatherProvider):
    """Daily temperatures from the OpenWeatherMap One Call API.

    ``daily[0]`` is today at the location, so the day offset is used as the
    index directly. The reported temperature is the mean of the day and night
    temperatures.
    """

    provider_id = "openweathermap"

    def __init__(
        self,
        token: str,
        base_url: str = OWM_API_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = PROVIDER_TIMEOUT_SECONDS
    ):
        super().__init__(token, base_url, client=client, timeout=timeout)

    async def fetch(self, location: Location, day: int) -> ProviderReading:
        params = {
            "lat": round(location.lat, 4),
            "lon": round(location.lon, 4),
            "exclude": "current,minutely,hourly,alerts",
            "units": "metric",
            "appid": self.token,
        }

        logger.debug(f"Fetching OpenWeatherMap forecast for {location.key} day {day}")
        data = await self._get_json(self.base_url, params)

        try:
            forecast = OwmForecastResponse.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid OpenWeatherMap response format: {e}")
            raise ProviderParseError(self.provider_id, "unexpected response format") from e

        if day >= len(forecast.daily):
            raise ProviderParseError(
                self.provider_id, f"response has {len(forecast.daily)} days, wanted day {day}"
            )

        temp = forecast.daily[day].temp
        return self._reading(day, (temp.day + temp.night) / 2)
