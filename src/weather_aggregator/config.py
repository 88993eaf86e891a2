"""Configuration settings for the weather aggregator service."""

import os
from typing import Final, Optional
from dotenv import load_dotenv

load_dotenv()

# Forecast horizon
MIN_DAY_OFFSET: Final[int] = 0
MAX_DAY_OFFSET: Final[int] = 4
FORECAST_DAYS: Final[int] = MAX_DAY_OFFSET - MIN_DAY_OFFSET + 1

# Provider configuration
OWM_TOKEN: Optional[str] = os.getenv("OWM_TOKEN") or None
OWM_API_BASE_URL: str = os.getenv("OWM_API_BASE_URL", "https://api.openweathermap.org/data/3.0/onecall")
ACCU_TOKEN: Optional[str] = os.getenv("ACCU_TOKEN") or None
ACCU_API_BASE_URL: str = os.getenv("ACCU_API_BASE_URL", "https://dataservice.accuweather.com")
PROVIDER_TIMEOUT_SECONDS: float = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "10"))
USER_AGENT: Final[str] = "WeatherAggregator/0.1"

# City table
CITIES_FILE: str = os.getenv(
    "CITIES_FILE",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "weather", "cities.json")
)

# Cache day boundary
CACHE_TIMEZONE: str = os.getenv("CACHE_TIMEZONE", "UTC")

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Rate limiting configuration
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
RATE_LIMIT_REQUESTS_PER_SECOND: int = int(os.getenv("RATE_LIMIT_REQUESTS_PER_SECOND", "20"))
RATE_LIMIT_REDIS_KEY_PREFIX: str = os.getenv("RATE_LIMIT_REDIS_KEY_PREFIX", "rate_limit")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
