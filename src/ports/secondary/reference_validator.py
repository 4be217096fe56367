from abc import ABC, abstractmethod

from src.domain.workflow.value_objects.github_details import GithubDetails
from src.domain.workflow.value_objects.results import FieldError


class IReferenceValidator(ABC):
    @abstractmethod
    def validate(self, raw: str) -> GithubDetails | FieldError:
        """Parses a submitted location into GithubDetails, or explains why it cannot."""
        pass
