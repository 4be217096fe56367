from dataclasses import dataclass

import httpx

from src.adapters.secondary.github.github_reference_validator import GithubReferenceValidator
from src.adapters.secondary.github.github_workflow_builder import GithubWorkflowBuilder
from src.adapters.secondary.persistence.pg_workflow_repository import PostgresWorkflowRepository
from src.adapters.secondary.redis.redis_resolution_lock import RedisResolutionLock
from src.application.workflow.use_cases.download_bundle import DownloadBundleUseCase
from src.application.workflow.use_cases.get_workflow import GetWorkflowUseCase
from src.application.workflow.use_cases.resolve_workflow import ResolveWorkflowUseCase
from src.domain.resilience.entities.circuit_breaker import CircuitBreaker
from src.shared.config import Settings
from src.shared.metrics import metrics_registry


@dataclass
class Components:
    """The use cases served by the HTTP layer, plus the resources they own."""

    resolve_workflow: ResolveWorkflowUseCase
    get_workflow: GetWorkflowUseCase
    download_bundle: DownloadBundleUseCase
    github_circuit: CircuitBreaker | None = None
    http_client: httpx.AsyncClient | None = None

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()


def build_components(settings: Settings) -> Components:
    """
    Wires the production adapters into the use cases.

    Called once per process at startup; every object built here is shared by
    all requests, so none of them may hold per-request state.
    """
    from src.shared.database import async_session_factory
    from src.shared.redis_client import redis_client

    repository = PostgresWorkflowRepository(async_session_factory)

    github_circuit = None
    if settings.CIRCUIT_BREAKER_ENABLED:
        github_circuit = CircuitBreaker(
            name="github",
            failure_threshold=settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
            reset_timeout_seconds=settings.CIRCUIT_BREAKER_RESET_TIMEOUT_SECONDS,
            half_open_max_calls=settings.CIRCUIT_BREAKER_HALF_OPEN_MAX_CALLS,
        )

    http_client = httpx.AsyncClient(
        timeout=settings.GITHUB_TIMEOUT_SECONDS,
        follow_redirects=True,
        headers={"User-Agent": f"{settings.APP_NAME.replace(' ', '-')}/{settings.APP_VERSION}"},
    )

    builder = GithubWorkflowBuilder(
        http_client=http_client,
        circuit_breaker=github_circuit,
        api_url=settings.GITHUB_API_URL,
        raw_url=settings.GITHUB_RAW_URL,
        token=settings.GITHUB_TOKEN,
        metrics=metrics_registry,
    )

    lock = RedisResolutionLock(redis_client) if settings.RESOLVE_LOCK_ENABLED else None

    return Components(
        resolve_workflow=ResolveWorkflowUseCase(
            validator=GithubReferenceValidator(default_filename=settings.DEFAULT_WORKFLOW_FILENAME),
            workflow_repository=repository,
            builder=builder,
            lock=lock,
            metrics=metrics_registry,
            lock_ttl_seconds=settings.LOCK_TTL_SECONDS,
            lock_wait_seconds=settings.RESOLVE_LOCK_WAIT_SECONDS,
            lock_poll_seconds=settings.RESOLVE_LOCK_POLL_SECONDS,
        ),
        get_workflow=GetWorkflowUseCase(repository),
        download_bundle=DownloadBundleUseCase(
            repository,
            metrics=metrics_registry,
            media_type=settings.BUNDLE_MEDIA_TYPE,
            filename=settings.BUNDLE_FILENAME,
        ),
        github_circuit=github_circuit,
        http_client=http_client,
    )
