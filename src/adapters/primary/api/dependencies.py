from fastapi import Request

from src.application.workflow.use_cases.download_bundle import DownloadBundleUseCase
from src.application.workflow.use_cases.get_workflow import GetWorkflowUseCase
from src.application.workflow.use_cases.resolve_workflow import ResolveWorkflowUseCase
from src.bootstrap import Components


def get_components(request: Request) -> Components:
    return request.app.state.components


def get_resolve_workflow_use_case(request: Request) -> ResolveWorkflowUseCase:
    return get_components(request).resolve_workflow


def get_workflow_use_case(request: Request) -> GetWorkflowUseCase:
    return get_components(request).get_workflow


def get_download_bundle_use_case(request: Request) -> DownloadBundleUseCase:
    return get_components(request).download_bundle
