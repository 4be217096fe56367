import asyncio
import time

from src.domain.workflow.exceptions import WorkflowBuildError
from src.domain.workflow.value_objects.github_details import GithubDetails
from src.domain.workflow.value_objects.results import GITHUB_URL_FIELD, FieldError, ResolveResult
from src.ports.secondary.metrics import IMetrics
from src.ports.secondary.reference_validator import IReferenceValidator
from src.ports.secondary.resolution_lock import IResolutionLock
from src.ports.secondary.workflow_builder import IWorkflowBuilder
from src.ports.secondary.workflow_repository import IWorkflowRepository
from src.shared.config import settings
from src.shared.logger import bind_context, get_logger, unbind_context

logger = get_logger(__name__)


class ResolveWorkflowUseCase:
    """
    Turns a submitted GitHub location into the id of a stored Workflow.

    Responsibilities:
    1. Validate the submitted location (no I/O on failure).
    2. Return the existing record for a location that was resolved before.
    3. Otherwise build, persist and return a new record, exactly one per location.
    """

    def __init__(
        self,
        validator: IReferenceValidator,
        workflow_repository: IWorkflowRepository,
        builder: IWorkflowBuilder,
        lock: IResolutionLock | None = None,
        metrics: IMetrics | None = None,
        lock_ttl_seconds: int = settings.LOCK_TTL_SECONDS,
        lock_wait_seconds: float = settings.RESOLVE_LOCK_WAIT_SECONDS,
        lock_poll_seconds: float = settings.RESOLVE_LOCK_POLL_SECONDS,
    ):
        self._validator = validator
        self._workflow_repository = workflow_repository
        self._builder = builder
        self._lock = lock
        self._metrics = metrics
        self._lock_ttl_seconds = lock_ttl_seconds
        self._lock_wait_seconds = lock_wait_seconds
        self._lock_poll_seconds = lock_poll_seconds

    async def execute(self, raw_url: str) -> ResolveResult:
        """
        Resolves a submitted location.

        Concurrency Note:
        The find-then-save sequence is not atomic. Two requests for the same
        location may both build it; the repository's uniqueness guarantee makes
        the second save return the first record, so both requests get the same id.
        The optional resolution lock only saves the duplicate build work.

        Returns:
            ResolveResult holding either the workflow id or a field error.
        """
        parsed = self._validator.validate(raw_url)
        if isinstance(parsed, FieldError):
            logger.info("workflow_reference_invalid", code=parsed.code)
            self._record("invalid")
            return ResolveResult.failure(parsed)

        bind_context({"reference": str(parsed)})
        try:
            existing = await self._workflow_repository.find_by_retrieved_from(parsed)
            if existing:
                logger.info("workflow_found", workflow_id=existing.id)
                self._record("existing")
                return ResolveResult.success(existing.id)

            return await self._create(parsed)
        finally:
            unbind_context("reference")

    async def _create(self, details: GithubDetails) -> ResolveResult:
        locked = await self._acquire_lock(details)
        try:
            if locked:
                # Another request may have saved it while this one waited for the lock
                existing = await self._workflow_repository.find_by_retrieved_from(details)
                if existing:
                    logger.info("workflow_found_after_wait", workflow_id=existing.id)
                    self._record("existing")
                    return ResolveResult.success(existing.id)

            try:
                workflow = await self._builder.build(details)
            except WorkflowBuildError as exc:
                logger.warning("workflow_build_failed", reason=exc.reason)
                self._record("build_failed")
                return ResolveResult.failure(
                    FieldError(
                        field=GITHUB_URL_FIELD,
                        code="githubURL.parsingError",
                        message=f"The workflow could not be retrieved: {exc.reason}",
                    )
                )

            saved = await self._workflow_repository.save(workflow)
            created = saved.id == workflow.id
            logger.info("workflow_saved" if created else "workflow_save_lost_race", workflow_id=saved.id)
            self._record("created" if created else "existing")
            return ResolveResult.success(saved.id, created=created)
        finally:
            if locked:
                await self._release_lock(details)

    async def _acquire_lock(self, details: GithubDetails) -> bool:
        if self._lock is None:
            return False

        deadline = time.monotonic() + self._lock_wait_seconds
        while True:
            try:
                acquired = await self._lock.acquire(details.lock_key(), self._lock_ttl_seconds)
            except Exception as e:
                # Lock backend down: proceed unlocked.
                logger.warning("resolve_lock_unavailable", operation="acquire", error=str(e))
                return False
            if acquired:
                return True
            if time.monotonic() >= deadline:
                # Proceed unlocked; the repository still deduplicates.
                logger.warning("resolve_lock_timeout", wait_seconds=self._lock_wait_seconds)
                return False
            await asyncio.sleep(self._lock_poll_seconds)

    async def _release_lock(self, details: GithubDetails) -> None:
        try:
            await self._lock.release(details.lock_key())
        except Exception as e:
            # The key expires after lock_ttl_seconds
            logger.warning("resolve_lock_unavailable", operation="release", error=str(e))

    def _record(self, outcome: str) -> None:
        if self._metrics:
            self._metrics.record_resolution(outcome)
