from pathlib import Path
from typing import BinaryIO, Iterator

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, StreamingResponse
from fastapi.templating import Jinja2Templates

from src.adapters.primary.api.dependencies import (
    get_download_bundle_use_case,
    get_resolve_workflow_use_case,
    get_workflow_use_case,
)
from src.adapters.primary.api.dto import ErrorResponse, WorkflowResponse
from src.application.workflow.use_cases.download_bundle import DownloadBundleUseCase
from src.application.workflow.use_cases.get_workflow import GetWorkflowUseCase
from src.application.workflow.use_cases.resolve_workflow import ResolveWorkflowUseCase
from src.domain.workflow.value_objects.results import GITHUB_URL_FIELD
from src.shared.config import settings
from src.shared.logger import get_logger

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

API_VERSION = "v1"


def _workflow_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workflow not found")


def _iter_bundle(stream: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


async def index(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "index.html", {"github_url": "", "error": None, "field": GITHUB_URL_FIELD}
    )


async def submit_workflow(
    request: Request,
    github_url: str = Form("", alias=GITHUB_URL_FIELD),
    use_case: ResolveWorkflowUseCase = Depends(get_resolve_workflow_use_case),
):
    """
    Resolves a GitHub location to a workflow and redirects to its page.

    On a validation or retrieval error the form is shown again with the
    error attached to the URL field; nothing is stored in that case.
    """
    result = await use_case.execute(github_url)

    if not result.ok:
        return templates.TemplateResponse(
            request,
            "index.html",
            {"github_url": github_url, "error": result.error, "field": GITHUB_URL_FIELD},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    logger.info("workflow_resolved", workflow_id=result.workflow_id, created=result.created)
    return RedirectResponse(
        url=f"/workflows/{result.workflow_id}", status_code=status.HTTP_303_SEE_OTHER
    )


async def view_workflow(
    request: Request,
    workflow_id: str,
    use_case: GetWorkflowUseCase = Depends(get_workflow_use_case),
) -> HTMLResponse:
    workflow = await use_case.execute(workflow_id)
    if workflow is None:
        raise _workflow_not_found()
    return templates.TemplateResponse(request, "workflow.html", {"workflow": workflow})


async def get_workflow_json(
    workflow_id: str,
    use_case: GetWorkflowUseCase = Depends(get_workflow_use_case),
) -> WorkflowResponse:
    workflow = await use_case.execute(workflow_id)
    if workflow is None:
        raise _workflow_not_found()
    return WorkflowResponse.from_entity(workflow)


async def download_bundle(
    workflow_id: str,
    use_case: DownloadBundleUseCase = Depends(get_download_bundle_use_case),
) -> StreamingResponse:
    """
    Streams the Research Object bundle of a workflow.

    An unknown workflow and a workflow whose bundle is not produced yet both
    answer 404. A bundle that is recorded but unreadable answers 500.
    """
    bundle = await use_case.execute(workflow_id)
    if bundle is None:
        raise _workflow_not_found()

    headers = {"Content-Disposition": bundle.content_disposition}
    if bundle.size is not None:
        headers["Content-Length"] = str(bundle.size)

    return StreamingResponse(
        _iter_bundle(bundle.stream, settings.BUNDLE_CHUNK_SIZE),
        media_type=bundle.media_type,
        headers=headers,
    )


# (method, path, handler, route options)
ROUTES = [
    ("GET", "/", index, {"response_class": HTMLResponse, "include_in_schema": False}),
    (
        "POST",
        "/",
        submit_workflow,
        {"response_class": HTMLResponse, "summary": "Resolve a workflow from a GitHub URL"},
    ),
    (
        "GET",
        "/workflows/{workflow_id}",
        view_workflow,
        {
            "response_class": HTMLResponse,
            "responses": {404: {"model": ErrorResponse}},
            "summary": "Workflow page",
        },
    ),
    (
        "GET",
        "/workflows/{workflow_id}/download",
        download_bundle,
        {
            "response_class": StreamingResponse,
            "responses": {404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
            "summary": "Download the Research Object bundle",
        },
    ),
    (
        "GET",
        f"/api/{API_VERSION}/workflows/{{workflow_id}}",
        get_workflow_json,
        {
            "response_model": WorkflowResponse,
            "responses": {404: {"model": ErrorResponse}},
            "summary": "Workflow record as JSON",
        },
    ),
]

router = APIRouter(tags=["Workflow"])

for method, path, endpoint, options in ROUTES:
    router.add_api_route(path, endpoint, methods=[method], **options)
