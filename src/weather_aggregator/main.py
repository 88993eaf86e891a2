"""Main FastAPI application for the weather aggregator service."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI

from weather_aggregator.api.endpoints import router as weather_router
from weather_aggregator.config import (
    CACHE_TIMEZONE, CITIES_FILE, DEBUG, HOST, PORT, PROVIDER_TIMEOUT_SECONDS,
    RATE_LIMIT_REQUESTS_PER_SECOND
)
from weather_aggregator.logging_config import configure_logging
from weather_aggregator.middleware.rate_limit import RateLimitMiddleware
from weather_aggregator.rate_limiter import RateLimiter
from weather_aggregator.weather.cache import ForecastCache
from weather_aggregator.weather.cities import CityResolver
from weather_aggregator.weather.providers.registry import build_providers
from weather_aggregator.weather.service import ForecastEngine

logger = logging.getLogger(__name__)


def build_engine() -> ForecastEngine:
    """Create the forecast engine from environment configuration."""
    resolver = CityResolver.from_file(CITIES_FILE)
    cache = ForecastCache(timezone_str=CACHE_TIMEZONE)
    providers = build_providers(timeout=PROVIDER_TIMEOUT_SECONDS)
    return ForecastEngine(resolver, providers, cache=cache, provider_timeout=PROVIDER_TIMEOUT_SECONDS)


def create_app(
    engine: Optional[ForecastEngine] = None,
    rate_limit: bool = True,
    rate_limiter: Optional[RateLimiter] = None
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        engine: Forecast engine to serve (built from configuration at startup if None)
        rate_limit: Whether to install the rate limiting middleware
        rate_limiter: Limiter for the middleware (Redis backed one if None); closed on shutdown

    Returns:
        Configured FastAPI application instance
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        owns_engine = engine is None
        try:
            app.state.engine = build_engine() if owns_engine else engine
        except Exception as e:
            logger.error(f"Startup error: {e}")
            raise

        logger.info("Starting Weather Aggregator Service")
        try:
            yield
        finally:
            logger.info("Shutting down Weather Aggregator Service")
            if owns_engine:
                await app.state.engine.aclose()
            if app.state.rate_limiter is not None:
                await app.state.rate_limiter.close()

    app = FastAPI(
        title="Weather Aggregator Service",
        description="Averages daily temperature forecasts from OpenWeatherMap and AccuWeather",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.state.rate_limiter = None
    if rate_limit:
        app.state.rate_limiter = rate_limiter or RateLimiter(max_requests=RATE_LIMIT_REQUESTS_PER_SECOND)
        app.add_middleware(RateLimitMiddleware, rate_limiter=app.state.rate_limiter)

    app.include_router(weather_router)

    @app.get("/", tags=["root"])
    async def index() -> dict:
        """Liveness endpoint with pointers to the API."""
        return {
            "message": "Weather Aggregator Service",
            "docs": "/docs",
            "current": "/current?country=US&city=Chicago&day=0",
            "forecast": "/forecast?country=US&city=Chicago",
        }

    return app


def main() -> None:
    """Main entry point for the application."""
    configure_logging()
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "weather_aggregator.main:create_app",
        factory=True,
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level="info" if not DEBUG else "debug"
    )


if __name__ == "__main__":
    main()
