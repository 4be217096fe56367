from dataclasses import dataclass
from typing import BinaryIO

# Name of the submission form field that field errors attach to
GITHUB_URL_FIELD = "githubURL"


@dataclass(frozen=True)
class FieldError:
    """A user-facing error attached to a single form field."""

    field: str
    code: str
    message: str


@dataclass(frozen=True)
class ResolveResult:
    """
    Outcome of resolving a submitted workflow location.

    Exactly one of workflow_id and error is set. created is True only when this
    request persisted a new record.
    """

    workflow_id: str | None = None
    error: FieldError | None = None
    created: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, workflow_id: str, created: bool = False) -> "ResolveResult":
        return cls(workflow_id=workflow_id, created=created)

    @classmethod
    def failure(cls, error: FieldError) -> "ResolveResult":
        return cls(error=error)


@dataclass(frozen=True)
class BundleDownload:
    """An opened Research Object bundle plus the transport metadata to serve it with."""

    stream: BinaryIO
    media_type: str
    filename: str
    size: int | None = None

    @property
    def content_disposition(self) -> str:
        return f"attachment; filename={self.filename}"
