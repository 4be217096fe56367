import redis.asyncio as redis

from src.ports.secondary.resolution_lock import IResolutionLock
from src.shared.config import settings


class RedisResolutionLock(IResolutionLock):
    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    def _lock_key(self, key: str) -> str:
        return f"lock:{key}"

    async def acquire(self, key: str, ttl_seconds: int | None = None) -> bool:
        ttl = ttl_seconds if ttl_seconds is not None else settings.LOCK_TTL_SECONDS
        return bool(await self._redis.set(self._lock_key(key), "1", nx=True, ex=ttl))

    async def release(self, key: str) -> None:
        await self._redis.delete(self._lock_key(key))
