from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from src.domain.workflow.value_objects.cwl_element import CWLElement, CWLStep
from src.domain.workflow.value_objects.github_details import GithubDetails


@dataclass
class Workflow:
    """
    Root aggregate for a workflow retrieved from GitHub.

    Attributes:
        retrieved_from (GithubDetails): Where the document was read from. Unique per record.
        id (str): Unique identifier (UUID4), used in URLs.
        retrieved_on (datetime): Timestamp when the document was fetched.
        last_commit (str | None): Commit sha the document was read at.
        label (str | None): Human-readable title from the document.
        doc (str | None): Description from the document.
        inputs (dict[str, CWLElement]): Workflow inputs by id.
        outputs (dict[str, CWLElement]): Workflow outputs by id.
        steps (dict[str, CWLStep]): Workflow steps by id.
        ro_bundle (str | None): Path to the packaged Research Object bundle, once produced.
    """

    retrieved_from: GithubDetails
    id: str = field(default_factory=lambda: str(uuid4()))
    retrieved_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_commit: str | None = None
    label: str | None = None
    doc: str | None = None
    inputs: dict[str, CWLElement] = field(default_factory=dict)
    outputs: dict[str, CWLElement] = field(default_factory=dict)
    steps: dict[str, CWLStep] = field(default_factory=dict)
    ro_bundle: str | None = None

    @property
    def has_bundle(self) -> bool:
        return self.ro_bundle is not None
