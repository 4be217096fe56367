from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status
from sqlalchemy import text

from src.domain.resilience.entities.circuit_breaker import CircuitState
from src.shared.config import settings
from src.shared.database import engine
from src.shared.logger import get_logger
from src.shared.redis_client import redis_client

logger = get_logger(__name__)
router = APIRouter(tags=["Health"])

@router.get("/health")
async def health_check(request: Request, response: Response):
    dependencies = {
        "redis": "unknown",
        "postgres": "unknown",
        "github": "unknown",
    }
    healthy = True

    try:
        await redis_client.ping()
        dependencies["redis"] = "healthy"
    except Exception as e:
        logger.error("health_check_failed", dependency="redis", error=str(e))
        dependencies["redis"] = "unhealthy"
        healthy = False

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            dependencies["postgres"] = "healthy"
    except Exception as e:
        logger.error("health_check_failed", dependency="postgres", error=str(e))
        dependencies["postgres"] = "unhealthy"
        healthy = False

    # An open GitHub circuit only blocks new workflows; existing ones are still served.
    circuit = request.app.state.components.github_circuit
    if circuit is not None:
        dependencies["github"] = "unavailable" if circuit.state == CircuitState.OPEN else "healthy"

    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
        "dependencies": dependencies,
        "circuits": [circuit.to_dict()] if circuit is not None else [],
    }
