"""Build the configured provider set."""

import logging
from typing import List, Optional

from weather_aggregator.config import (
    ACCU_API_BASE_URL, ACCU_TOKEN, OWM_API_BASE_URL, OWM_TOKEN,
    PROVIDER_TIMEOUT_SECONDS
)
from weather_aggregator.weather.providers.accuweather import AccuWeatherProvider
from weather_aggregator.weather.providers.base import WeatherProvider
from weather_aggregator.weather.providers.openweathermap import OpenWeatherMapProvider

logger = logging.getLogger(__name__)


def build_providers(
    owm_token: Optional[str] = OWM_TOKEN,
    accu_token: Optional[str] = ACCU_TOKEN,
    timeout: float = PROVIDER_TIMEOUT_SECONDS
) -> List[WeatherProvider]:
    """Instantiate every provider that has a token configured.

    Args:
        owm_token: OpenWeatherMap API token
        accu_token: AccuWeather API token
        timeout: Per-request timeout in seconds

    Returns:
        Configured providers

    Raises:
        ValueError: If no provider has a token
    """
    providers: List[WeatherProvider] = []

    if owm_token:
        providers.append(OpenWeatherMapProvider(owm_token, OWM_API_BASE_URL, timeout=timeout))
    else:
        logger.warning("OWM_TOKEN is not set, OpenWeatherMap provider disabled")

    if accu_token:
        providers.append(AccuWeatherProvider(accu_token, ACCU_API_BASE_URL, timeout=timeout))
    else:
        logger.warning("ACCU_TOKEN is not set, AccuWeather provider disabled")

    if not providers:
        raise ValueError("No weather providers configured, set OWM_TOKEN and/or ACCU_TOKEN")

    logger.info(f"Configured providers: {', '.join(p.provider_id for p in providers)}")
    return providers
