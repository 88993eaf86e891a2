"""Base class for upstream weather providers."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from weather_aggregator.config import PROVIDER_TIMEOUT_SECONDS, USER_AGENT
from weather_aggregator.weather.errors import ProviderParseError, ProviderUnavailableError
from weather_aggregator.weather.models import Location, ProviderReading

logger = logging.getLogger(__name__)


class WeatherProvider(ABC):
    """A third-party weather source that can produce a reading for one day.

    Subclasses translate the day offset to their upstream convention and
    normalize the answer to Celsius. Failures are reported as
    ProviderUnavailableError (network, timeout, non-2xx) or
    ProviderParseError (unexpected body); nothing is retried here.
    """

    provider_id: str = "provider"

    def __init__(
        self,
        token: str,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = PROVIDER_TIMEOUT_SECONDS
    ):
        """Initialize the provider.

        Args:
            token: API token for the upstream service
            base_url: Base URL of the upstream API
            client: HTTP client to use (creates one if None)
            timeout: Request timeout in seconds for the created client
        """
        if not token:
            raise ValueError(f"{self.provider_id} requires an API token")

        self.token = token
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout
        )

    @abstractmethod
    async def fetch(self, location: Location, day: int) -> ProviderReading:
        """Fetch the temperature for a location and day offset.

        Raises:
            ProviderUnavailableError: On network errors, timeouts and non-2xx responses
            ProviderParseError: If the response body has an unexpected shape
        """

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        """Perform one GET request and decode its JSON body."""
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"{self.provider_id} timed out: {type(e).__name__}")
            raise ProviderUnavailableError(self.provider_id, "request timed out") from e
        except httpx.HTTPStatusError as e:
            # Upstream bodies stay in the log
            logger.warning(
                f"{self.provider_id} returned HTTP {e.response.status_code}: {e.response.text[:200]}"
            )
            raise ProviderUnavailableError(
                self.provider_id, f"upstream returned HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"{self.provider_id} request failed: {type(e).__name__}")
            raise ProviderUnavailableError(self.provider_id, "request failed") from e

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{self.provider_id} returned a non-JSON body")
            raise ProviderParseError(self.provider_id, "response is not valid JSON") from e

    def _reading(self, day: int, temperature_celsius: float) -> ProviderReading:
        return ProviderReading(
            provider_id=self.provider_id,
            day=day,
            temperature_celsius=temperature_celsius
        )

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
