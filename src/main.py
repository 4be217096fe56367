from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.adapters.primary.api.error_handlers import general_exception_handler, workflow_exception_handler
from src.adapters.primary.api.middleware.rate_limit_middleware import RateLimitMiddleware
from src.adapters.primary.api.routes.health import router as health_router
from src.adapters.primary.api.routes.metrics import router as metrics_router
from src.adapters.primary.api.routes.workflow import router as workflow_router
from src.bootstrap import Components, build_components
from src.domain.workflow.exceptions import WorkflowException
from src.ports.secondary.rate_limiter import IRateLimiter
from src.shared.config import settings
from src.shared.logger import configure_logging, get_logger

# Configure logging early
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Components supplied to create_app() are owned by the caller
    owned = app.state.components is None
    if owned:
        from src.shared.database import create_schema, engine
        from src.shared.redis_client import redis_client

        await create_schema()
        app.state.components = build_components(settings)

    logger.info("application_started", version=settings.APP_VERSION)
    yield

    logger.info("application_shutting_down")
    if owned:
        await app.state.components.aclose()
        await redis_client.close()
        await engine.dispose()
    logger.info("application_shutdown_complete")


def create_app(
    components: Components | None = None,
    rate_limiter: IRateLimiter | None = None,
) -> FastAPI:
    """
    Builds the viewer application.

    Args:
        components: Pre-built use cases. When omitted they are wired from
            settings at startup against Postgres, Redis and GitHub.
        rate_limiter: Limiter for workflow submissions; Redis-backed when omitted.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Resolves CWL workflows hosted on GitHub into viewable, downloadable records.",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.components = components

    app.add_middleware(RateLimitMiddleware, rate_limiter=rate_limiter)

    app.add_exception_handler(WorkflowException, workflow_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(workflow_router)
    app.include_router(health_router)
    app.include_router(metrics_router)
    return app


app = create_app()
