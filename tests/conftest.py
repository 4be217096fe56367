import asyncio
from unittest.mock import AsyncMock

import pytest

from src.adapters.secondary.github.github_reference_validator import GithubReferenceValidator
from src.application.workflow.use_cases.download_bundle import DownloadBundleUseCase
from src.application.workflow.use_cases.get_workflow import GetWorkflowUseCase
from src.application.workflow.use_cases.resolve_workflow import ResolveWorkflowUseCase
from src.bootstrap import Components
from src.domain.resilience.value_objects.rate_limit_result import RateLimitResult
from src.domain.workflow.entities.workflow import Workflow
from src.domain.workflow.value_objects.github_details import GithubDetails
from src.ports.secondary.workflow_builder import IWorkflowBuilder
from src.ports.secondary.workflow_repository import IWorkflowRepository


class InMemoryWorkflowRepository(IWorkflowRepository):
    """Workflow store enforcing one record per GithubDetails, like the workflows table."""

    def __init__(self):
        self.by_id: dict[str, Workflow] = {}
        self.by_reference: dict[GithubDetails, Workflow] = {}
        self.save_calls = 0

    async def save(self, workflow: Workflow) -> Workflow:
        self.save_calls += 1
        await asyncio.sleep(0)
        existing = self.by_reference.get(workflow.retrieved_from)
        if existing is not None:
            return existing
        self.by_id[workflow.id] = workflow
        self.by_reference[workflow.retrieved_from] = workflow
        return workflow

    async def get_by_id(self, workflow_id: str) -> Workflow | None:
        await asyncio.sleep(0)
        return self.by_id.get(workflow_id)

    async def find_by_retrieved_from(self, details: GithubDetails) -> Workflow | None:
        await asyncio.sleep(0)
        return self.by_reference.get(details)


class StubWorkflowBuilder(IWorkflowBuilder):
    """Builds a bare Workflow for any reference; ids are wf1, wf2, ..."""

    def __init__(self, delay: float = 0):
        self.calls: list[GithubDetails] = []
        self._delay = delay

    async def build(self, details: GithubDetails) -> Workflow:
        self.calls.append(details)
        await asyncio.sleep(self._delay)
        return Workflow(
            retrieved_from=details,
            id=f"wf{len(self.calls)}",
            label=f"{details.repo_name} workflow",
            last_commit="0" * 40,
        )


@pytest.fixture
def workflow_store():
    return InMemoryWorkflowRepository()


@pytest.fixture
def workflow_builder():
    return StubWorkflowBuilder()


@pytest.fixture
def slow_workflow_builder():
    return StubWorkflowBuilder(delay=0.01)


@pytest.fixture
def components(workflow_store, workflow_builder):
    return Components(
        resolve_workflow=ResolveWorkflowUseCase(
            validator=GithubReferenceValidator(),
            workflow_repository=workflow_store,
            builder=workflow_builder,
        ),
        get_workflow=GetWorkflowUseCase(workflow_store),
        download_bundle=DownloadBundleUseCase(workflow_store),
    )


@pytest.fixture
def allow_all_rate_limiter():
    limiter = AsyncMock()
    limiter.check_rate_limit.return_value = RateLimitResult(allowed=True, remaining=29, limit=30)
    return limiter
