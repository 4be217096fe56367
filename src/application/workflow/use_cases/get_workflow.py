from src.domain.workflow.entities.workflow import Workflow
from src.ports.secondary.workflow_repository import IWorkflowRepository


class GetWorkflowUseCase:
    def __init__(self, workflow_repository: IWorkflowRepository):
        self._workflow_repository = workflow_repository

    async def execute(self, workflow_id: str) -> Workflow | None:
        """Returns the record to render, or None when no workflow has this id."""
        return await self._workflow_repository.get_by_id(workflow_id)
