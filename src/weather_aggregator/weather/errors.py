"""Error taxonomy for the forecast engine."""

from typing import List, Sequence


class WeatherServiceError(Exception):
    """Base class for all errors raised by the forecast engine."""

    kind: str = "weather_service_error"


class UnknownCityError(WeatherServiceError):
    """Raised when a (country, city) pair is not in the city table."""

    kind = "unknown_city"

    def __init__(self, country: str, city: str):
        self.country = country
        self.city = city
        super().__init__(f"Unknown city '{city}' in country '{country}'")


class InvalidDayOffsetError(WeatherServiceError):
    """Raised when a day offset is outside the forecast horizon."""

    kind = "invalid_day_offset"

    def __init__(self, day: int, min_day: int, max_day: int):
        self.day = day
        super().__init__(f"Day offset {day} is outside [{min_day}, {max_day}]")


class ProviderError(WeatherServiceError):
    """Base class for a single provider failing to produce a reading."""

    kind = "provider_error"

    def __init__(self, provider_id: str, message: str):
        self.provider_id = provider_id
        super().__init__(f"{provider_id}: {message}")


class ProviderUnavailableError(ProviderError):
    """Network failure, timeout or non-2xx status from a provider."""

    kind = "provider_unavailable"


class ProviderParseError(ProviderError):
    """Provider answered with a body we could not understand."""

    kind = "provider_parse_error"


class AllProvidersFailedError(WeatherServiceError):
    """Raised when no provider produced a reading for a city and day."""

    kind = "all_providers_failed"

    def __init__(self, city: str, day: int, failures: Sequence[ProviderError]):
        self.city = city
        self.day = day
        self.failures: List[ProviderError] = list(failures)
        kinds = ", ".join(f"{f.provider_id}={f.kind}" for f in self.failures)
        super().__init__(
            f"All {len(self.failures)} providers failed for {city} day {day} ({kinds})"
        )
