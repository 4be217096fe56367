from abc import ABC, abstractmethod

from src.domain.workflow.entities.workflow import Workflow
from src.domain.workflow.value_objects.github_details import GithubDetails


class IWorkflowBuilder(ABC):
    @abstractmethod
    async def build(self, details: GithubDetails) -> Workflow:
        """
        Constructs a new, unsaved Workflow from the document at details.

        Raises:
            WorkflowBuildError: the document is unreachable or is not a workflow.
        """
        pass
