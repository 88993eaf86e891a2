"""Data models for the weather aggregator service."""

from datetime import date
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from weather_aggregator.config import MAX_DAY_OFFSET, MIN_DAY_OFFSET


def normalize_name(value: str) -> str:
    """Lowercase a name and collapse its whitespace for table lookups."""
    return " ".join(value.split()).lower()


class Location(BaseModel):
    """A city from the static city table."""
    model_config = ConfigDict(frozen=True)

    country: str = Field(..., description="ISO 3166 alpha-2 country code")
    city: str = Field(..., description="City display name")
    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    provider_keys: Dict[str, str] = Field(
        default_factory=dict,
        description="Provider specific location identifiers keyed by provider id"
    )

    @property
    def key(self) -> str:
        """Normalized 'country/city' identity used for caching."""
        return f"{normalize_name(self.country)}/{normalize_name(self.city)}"

    def as_lat_lon(self) -> Tuple[float, float]:
        return self.lat, self.lon


class ProviderReading(BaseModel):
    """One provider's temperature for one day."""
    model_config = ConfigDict(allow_inf_nan=False)

    provider_id: str
    day: int = Field(..., ge=MIN_DAY_OFFSET, le=MAX_DAY_OFFSET)
    temperature_celsius: float


class AggregatedForecast(BaseModel):
    """Averaged temperature for one city and day."""
    model_config = ConfigDict(allow_inf_nan=False)

    city: str = Field(..., description="City the forecast belongs to")
    day: int = Field(..., ge=MIN_DAY_OFFSET, le=MAX_DAY_OFFSET, description="Day offset from today")
    temperature_celsius: float = Field(..., description="Mean temperature in Celsius")
    sample_count: int = Field(..., ge=1, description="Number of providers that contributed")
    providers: List[str] = Field(default_factory=list, description="Contributing provider ids")


class CacheEntry(BaseModel):
    """Cached aggregation, valid for the calendar day it was inserted on."""
    key: Tuple[str, int]
    value: AggregatedForecast
    inserted_at: date


class CurrentWeather(BaseModel):
    """Response model for a single day lookup."""
    country: str
    city: str
    pos: Tuple[float, float] = Field(..., description="Latitude and longitude")
    day: int
    temperature_celsius: float
    sample_count: int


class WeatherForecast(BaseModel):
    """Response model for the five day forecast."""
    country: str
    city: str
    pos: Tuple[float, float] = Field(..., description="Latitude and longitude")
    forecast: List[AggregatedForecast] = Field(..., description="Forecast ordered by day offset")


class ErrorResponse(BaseModel):
    """Error response model."""
    code: int = Field(..., description="HTTP status code")
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")


# OpenWeatherMap One Call payload

class OwmTemperature(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    day: float
    night: float


class OwmDaily(BaseModel):
    temp: OwmTemperature


class OwmForecastResponse(BaseModel):
    """Raw response from the OpenWeatherMap One Call API."""
    daily: List[OwmDaily] = Field(..., description="Daily forecasts, today first")


# AccuWeather payloads

class AccuLocationResponse(BaseModel):
    """Raw response from the AccuWeather geoposition search."""
    key: str = Field(..., alias="Key")


class AccuTemperatureValue(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    value: float = Field(..., alias="Value")
    unit: str = Field("C", alias="Unit")


class AccuTemperature(BaseModel):
    minimum: AccuTemperatureValue = Field(..., alias="Minimum")
    maximum: AccuTemperatureValue = Field(..., alias="Maximum")


class AccuDailyForecast(BaseModel):
    temperature: AccuTemperature = Field(..., alias="Temperature")


class AccuForecastResponse(BaseModel):
    """Raw response from the AccuWeather 5 day forecast API."""
    daily_forecasts: List[AccuDailyForecast] = Field(..., alias="DailyForecasts")
