from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.workflow.entities.workflow import Workflow


class GithubDetailsResponse(BaseModel):
    owner: str
    repo_name: str
    branch: str
    path: str
    url: str


class CWLElementResponse(BaseModel):
    label: str | None = None
    doc: str | None = None
    type: str | None = None
    default: str | None = None


class CWLStepResponse(BaseModel):
    label: str | None = None
    doc: str | None = None
    run: str | None = None
    sources: list[str] = Field(default_factory=list)


class WorkflowResponse(BaseModel):
    id: str
    retrieved_from: GithubDetailsResponse
    retrieved_on: datetime
    last_commit: str | None = None
    label: str | None = None
    doc: str | None = None
    inputs: dict[str, CWLElementResponse]
    outputs: dict[str, CWLElementResponse]
    steps: dict[str, CWLStepResponse]
    bundle_available: bool
    bundle_url: str | None = None

    @classmethod
    def from_entity(cls, workflow: Workflow) -> "WorkflowResponse":
        details = workflow.retrieved_from
        return cls(
            id=workflow.id,
            retrieved_from=GithubDetailsResponse(
                owner=details.owner,
                repo_name=details.repo_name,
                branch=details.branch,
                path=details.path,
                url=details.url,
            ),
            retrieved_on=workflow.retrieved_on,
            last_commit=workflow.last_commit,
            label=workflow.label,
            doc=workflow.doc,
            inputs={k: CWLElementResponse(**v.to_dict()) for k, v in workflow.inputs.items()},
            outputs={k: CWLElementResponse(**v.to_dict()) for k, v in workflow.outputs.items()},
            steps={k: CWLStepResponse(**v.to_dict()) for k, v in workflow.steps.items()},
            bundle_available=workflow.has_bundle,
            bundle_url=f"/workflows/{workflow.id}/download" if workflow.has_bundle else None,
        )


class ErrorResponse(BaseModel):
    detail: str
