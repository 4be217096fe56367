from abc import ABC, abstractmethod

from src.domain.workflow.entities.workflow import Workflow
from src.domain.workflow.value_objects.github_details import GithubDetails


class IWorkflowRepository(ABC):
    """
    Interface for persistence of Workflow records.

    Records are keyed by id and, uniquely, by the GithubDetails they were retrieved from.
    """

    @abstractmethod
    async def save(self, workflow: Workflow) -> Workflow:
        """
        Persists a new workflow record and returns the canonical stored record.

        If a record for the same GithubDetails already exists, nothing is written
        and the existing record is returned instead.
        """
        pass

    @abstractmethod
    async def get_by_id(self, workflow_id: str) -> Workflow | None:
        pass

    @abstractmethod
    async def find_by_retrieved_from(self, details: GithubDetails) -> Workflow | None:
        """Dedup lookup by the natural key."""
        pass
