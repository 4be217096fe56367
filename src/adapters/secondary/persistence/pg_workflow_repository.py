from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.adapters.secondary.persistence.models import WorkflowModel
from src.domain.workflow.entities.workflow import Workflow
from src.domain.workflow.value_objects.cwl_element import CWLElement, CWLStep
from src.domain.workflow.value_objects.github_details import GithubDetails
from src.ports.secondary.workflow_repository import IWorkflowRepository
from src.shared.logger import get_logger

logger = get_logger(__name__)


class PostgresWorkflowRepository(IWorkflowRepository):
    """
    Workflow store backed by the `workflows` table.

    Opens one session per operation so a single instance can be shared by all
    concurrent requests of the process.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def save(self, workflow: Workflow) -> Workflow:
        async with self._session_factory() as session:
            session.add(self._to_model(workflow))
            try:
                await session.commit()
                return workflow
            except IntegrityError as exc:
                await session.rollback()
                conflict = exc

        # Lost the race on uq_workflows_retrieved_from: the stored record wins.
        existing = await self.find_by_retrieved_from(workflow.retrieved_from)
        if existing is None:
            raise conflict
        logger.info(
            "workflow_save_conflict",
            discarded_id=workflow.id,
            workflow_id=existing.id,
            reference=str(workflow.retrieved_from),
        )
        return existing

    async def get_by_id(self, workflow_id: str) -> Workflow | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(WorkflowModel).where(WorkflowModel.id == workflow_id)
            )
            model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    async def find_by_retrieved_from(self, details: GithubDetails) -> Workflow | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(WorkflowModel).where(
                    WorkflowModel.owner == details.owner,
                    WorkflowModel.repo_name == details.repo_name,
                    WorkflowModel.branch == details.branch,
                    WorkflowModel.path == details.path,
                )
            )
            model = result.scalar_one_or_none()

        return self._to_entity(model) if model else None

    @staticmethod
    def _to_model(workflow: Workflow) -> WorkflowModel:
        details = workflow.retrieved_from
        return WorkflowModel(
            id=workflow.id,
            owner=details.owner,
            repo_name=details.repo_name,
            branch=details.branch,
            path=details.path,
            retrieved_on=workflow.retrieved_on,
            last_commit=workflow.last_commit,
            label=workflow.label,
            doc=workflow.doc,
            inputs={k: v.to_dict() for k, v in workflow.inputs.items()},
            outputs={k: v.to_dict() for k, v in workflow.outputs.items()},
            steps={k: v.to_dict() for k, v in workflow.steps.items()},
            ro_bundle=workflow.ro_bundle,
        )

    @staticmethod
    def _to_entity(model: WorkflowModel) -> Workflow:
        return Workflow(
            id=model.id,
            retrieved_from=GithubDetails(
                owner=model.owner,
                repo_name=model.repo_name,
                branch=model.branch,
                path=model.path,
            ),
            retrieved_on=model.retrieved_on,
            last_commit=model.last_commit,
            label=model.label,
            doc=model.doc,
            inputs={k: CWLElement.from_dict(v) for k, v in (model.inputs or {}).items()},
            outputs={k: CWLElement.from_dict(v) for k, v in (model.outputs or {}).items()},
            steps={k: CWLStep.from_dict(v) for k, v in (model.steps or {}).items()},
            ro_bundle=model.ro_bundle,
        )
