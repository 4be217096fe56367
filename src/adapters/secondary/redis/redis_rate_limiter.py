from datetime import datetime, timezone

import redis.asyncio as redis

from src.domain.resilience.value_objects.rate_limit_result import RateLimitResult
from src.ports.secondary.rate_limiter import IRateLimiter


class RedisRateLimiter(IRateLimiter):
    """Fixed-window counter: one Redis key per (key, window) expiring with the window."""

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    async def check_rate_limit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        now = datetime.now(timezone.utc)
        window_start = int(now.timestamp()) // window_seconds * window_seconds
        redis_key = f"rate_limit:{key}:{window_start}"

        current_count = await self._redis.incr(redis_key)

        if current_count == 1:
            await self._redis.expire(redis_key, window_seconds)

        return RateLimitResult(
            allowed=current_count <= limit,
            remaining=max(0, limit - current_count),
            limit=limit,
            reset_at=datetime.fromtimestamp(window_start + window_seconds, tz=timezone.utc),
        )
