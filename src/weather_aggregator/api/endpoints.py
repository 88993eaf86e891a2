"""API endpoints for the weather aggregator service."""

import logging
from typing import Union

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from weather_aggregator.weather.errors import (
    AllProvidersFailedError, InvalidDayOffsetError, UnknownCityError, WeatherServiceError
)
from weather_aggregator.weather.models import CurrentWeather, ErrorResponse, WeatherForecast
from weather_aggregator.weather.service import ForecastEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["weather"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Day offset out of range"},
    404: {"model": ErrorResponse, "description": "City not found"},
    502: {"model": ErrorResponse, "description": "No weather provider answered"},
}


def get_forecast_engine(request: Request) -> ForecastEngine:
    """Dependency returning the engine created at startup."""
    return request.app.state.engine


def error_response(error: WeatherServiceError) -> JSONResponse:
    """Map an engine error to a JSON error response.

    Messages name the city, day and failure kind but never echo upstream bodies.
    """
    if isinstance(error, InvalidDayOffsetError):
        body = ErrorResponse(code=400, error="can't see further than 5 days", detail=str(error))
    elif isinstance(error, UnknownCityError):
        body = ErrorResponse(code=404, error="City not found", detail=str(error))
    elif isinstance(error, AllProvidersFailedError):
        body = ErrorResponse(
            code=502,
            error="Weather providers are unavailable",
            detail=str(error)
        )
    else:
        body = ErrorResponse(code=500, error="Internal server error", detail=error.kind)

    return JSONResponse(status_code=body.code, content=body.model_dump())


@router.get("/current", response_model=CurrentWeather, responses=ERROR_RESPONSES)
async def get_current_weather(
    country: str = Query(..., min_length=1, description="ISO country code, e.g. US"),
    city: str = Query(..., min_length=1, description="City name, e.g. Chicago"),
    day: int = Query(0, description="Day offset from today, 0 to 4"),
    engine: ForecastEngine = Depends(get_forecast_engine)
) -> Union[CurrentWeather, JSONResponse]:
    """Get the averaged temperature for a city on one day.

    Args:
        country: Country code
        city: City name
        day: Day offset, 0 is today
        engine: Forecast engine

    Returns:
        CurrentWeather, or an ErrorResponse with the matching status code
    """
    try:
        result = await engine.current(country, city, day)
        location = engine.locate(country, city)
    except WeatherServiceError as e:
        logger.warning(f"Current weather request for {country}/{city} day {day} failed: {e}")
        return error_response(e)

    return CurrentWeather(
        country=location.country,
        city=location.city,
        pos=location.as_lat_lon(),
        day=result.day,
        temperature_celsius=result.temperature_celsius,
        sample_count=result.sample_count
    )


@router.get("/forecast", response_model=WeatherForecast, responses=ERROR_RESPONSES)
async def get_forecast(
    country: str = Query(..., min_length=1, description="ISO country code, e.g. RU"),
    city: str = Query(..., min_length=1, description="City name, e.g. Moscow"),
    engine: ForecastEngine = Depends(get_forecast_engine)
) -> Union[WeatherForecast, JSONResponse]:
    """Get the averaged temperatures for a city over the next five days."""
    try:
        location = engine.locate(country, city)
        forecast = await engine.forecast(country, city)
    except WeatherServiceError as e:
        logger.warning(f"Forecast request for {country}/{city} failed: {e}")
        return error_response(e)

    return WeatherForecast(
        country=location.country,
        city=location.city,
        pos=location.as_lat_lon(),
        forecast=forecast
    )


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "weather-aggregator"}
