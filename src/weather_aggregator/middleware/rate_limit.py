"""Rate limiting middleware."""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from weather_aggregator.config import RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS_PER_SECOND
from weather_aggregator.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client rate limiting for the forecast endpoints.

    Returns HTTP 429 with a Retry-After header once a client exceeds the
    configured requests per second.
    """

    # Paths that should bypass rate limiting
    BYPASS_PATHS = {
        "/",
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/favicon.ico",
    }

    def __init__(
        self,
        app,
        calls: int = RATE_LIMIT_REQUESTS_PER_SECOND,
        enabled: bool = RATE_LIMIT_ENABLED,
        rate_limiter: Optional[RateLimiter] = None
    ):
        """Initialize rate limit middleware.

        Args:
            app: ASGI application
            calls: Maximum requests per second per client
            enabled: Whether limits are enforced
            rate_limiter: Limiter to use (creates a Redis backed one if None)
        """
        super().__init__(app)
        self.rate_limiter = rate_limiter or RateLimiter(max_requests=calls)
        self.enabled = enabled
        logger.info(f"Rate limit enabled: {self.enabled}, limit: {self.rate_limiter.max_requests} req/sec")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or request.url.path in self.BYPASS_PATHS:
            return await call_next(request)

        client_host = request.client.host if request.client else "unknown"
        is_allowed, retry_after = await self.rate_limiter.is_allowed(client_host)

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for {client_host} accessing {request.method} {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={
                    "code": 429,
                    "error": "Rate limit exceeded. Please try again later.",
                    "detail": f"retry after {retry_after}s"
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.rate_limiter.max_requests)
        response.headers["X-RateLimit-Window"] = str(self.rate_limiter.window_size)
        return response
