from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src.ports.secondary.rate_limiter import IRateLimiter
from src.shared.config import settings
from src.shared.logger import get_logger

logger = get_logger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Limits workflow submissions (POST /) per client IP; each may trigger GitHub calls."""

    def __init__(self, app, rate_limiter: IRateLimiter = None):
        super().__init__(app)
        if rate_limiter is None:
            from src.adapters.secondary.redis.redis_rate_limiter import RedisRateLimiter
            from src.shared.redis_client import redis_client

            rate_limiter = RedisRateLimiter(redis_client)
        self._rate_limiter = rate_limiter

    async def dispatch(self, request: Request, call_next) -> Response:
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        if request.method != "POST" or request.url.path != "/":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        result = await self._rate_limiter.check_rate_limit(
            key=f"workflow_submit:{client_ip}",
            limit=settings.RATE_LIMIT_REQUESTS_PER_MINUTE,
            window_seconds=60,
        )

        if not result.allowed:
            logger.warning("rate_limit_exceeded", client_ip=client_ip)
            return JSONResponse(
                status_code=429,
                content={
                    "detail": f"Rate limit exceeded. Retry after {result.retry_after_seconds} seconds."
                },
                headers=result.headers(),
            )

        response = await call_next(request)
        response.headers.update(result.headers())
        return response
