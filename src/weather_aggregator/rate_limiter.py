"""Rate limiting implementation."""

import logging
import time
from typing import Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from weather_aggregator.config import (
    REDIS_URL,
    RATE_LIMIT_REQUESTS_PER_SECOND,
    RATE_LIMIT_REDIS_KEY_PREFIX
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding window rate limiter backed by a Redis sorted set per client.

    Allows requests if Redis is unavailable.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        max_requests: int = RATE_LIMIT_REQUESTS_PER_SECOND,
        key_prefix: str = RATE_LIMIT_REDIS_KEY_PREFIX,
        window_size: float = 1.0
    ):
        """Initialize rate limiter.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            max_requests: Requests allowed per window and client
            key_prefix: Prefix for the Redis keys
            window_size: Window length in seconds
        """
        self.redis_client = redis_client or redis.from_url(REDIS_URL)
        self.max_requests = max_requests
        self.key_prefix = key_prefix
        self.window_size = window_size

    def _key(self, client_id: str) -> str:
        return f"{self.key_prefix}:{client_id}"

    async def is_allowed(self, client_id: str = "global") -> Tuple[bool, int]:
        """Check if a request from a client is allowed under the rate limit.

        Args:
            client_id: Identifier the window is tracked under, usually the client host

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        key = self._key(client_id)
        try:
            current_time = time.time()
            current_timestamp = int(current_time * 1000000)
            window_start = (current_time - self.window_size) * 1000000

            pipe = self.redis_client.pipeline()
            pipe.zadd(key, {str(current_timestamp): current_timestamp})
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.expire(key, max(int(self.window_size * 2), 1))

            _, _, request_count, _ = await pipe.execute()

            if request_count > self.max_requests:
                retry_after = max(int(self.window_size), 1)
                logger.debug(f"Rate limited {client_id}: count={request_count}, max={self.max_requests}")
                return False, retry_after

            return True, 0

        except (RedisError, OSError) as e:
            # Allow request if Redis is down
            logger.error(f"Rate limiter error: {e}")
            return True, 0

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
