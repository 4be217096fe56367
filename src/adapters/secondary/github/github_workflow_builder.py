import time
from typing import Any

import httpx
import yaml

from src.domain.resilience.entities.circuit_breaker import CircuitBreaker
from src.domain.workflow.entities.workflow import Workflow
from src.domain.workflow.exceptions import WorkflowBuildError
from src.domain.workflow.value_objects.cwl_element import CWLElement, CWLStep
from src.domain.workflow.value_objects.github_details import GithubDetails
from src.ports.secondary.metrics import IMetrics
from src.ports.secondary.workflow_builder import IWorkflowBuilder
from src.shared.logger import get_logger

logger = get_logger(__name__)


class GithubWorkflowBuilder(IWorkflowBuilder):
    """
    Builds Workflow records from CWL documents hosted on GitHub.

    The branch is pinned to a commit through the REST API first, so the record
    describes exactly one revision of the document.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        circuit_breaker: CircuitBreaker | None = None,
        api_url: str = "https://api.github.com",
        raw_url: str = "https://raw.githubusercontent.com",
        token: str = "",
        metrics: IMetrics | None = None,
    ):
        self._http = http_client
        self._circuit_breaker = circuit_breaker
        self._api_url = api_url.rstrip("/")
        self._raw_url = raw_url.rstrip("/")
        self._token = token
        self._metrics = metrics

    async def build(self, details: GithubDetails) -> Workflow:
        started = time.monotonic()
        status = "failed"
        try:
            commit, text = await self._fetch(details)
            document = self._parse(details, text)
            scope = str(document.get("id", "")).split("#")[-1]
            workflow = Workflow(
                retrieved_from=details,
                last_commit=commit,
                label=_text(document.get("label")),
                doc=_text(document.get("doc")),
                inputs={k: _element(v) for k, v in _entries(document.get("inputs"))},
                outputs={k: _element(v) for k, v in _entries(document.get("outputs"))},
                steps={k: _step(v, scope) for k, v in _entries(document.get("steps"))},
            )
            status = "success"
            logger.info(
                "workflow_built",
                reference=str(details),
                commit=commit,
                steps=len(workflow.steps),
            )
            return workflow
        finally:
            if self._metrics:
                self._metrics.record_build_duration(status, time.monotonic() - started)

    async def _fetch(self, details: GithubDetails) -> tuple[str, str]:
        if self._circuit_breaker and not self._circuit_breaker.can_execute():
            logger.warning("github_circuit_open", reference=str(details))
            raise WorkflowBuildError(
                str(details),
                "GitHub is currently unavailable, please try again in "
                f"{self._circuit_breaker.seconds_until_retry()} seconds",
            )

        try:
            commit = await self._latest_commit(details)
            response = await self._http.get(details.raw_url(self._raw_url, commit))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            code = exc.response.status_code
            # 4xx means GitHub is up and the reference is wrong
            self._record_call(success=code < 500)
            logger.warning("github_request_failed", url=str(exc.request.url), status_code=code)
            if code == 404:
                raise WorkflowBuildError(str(details), "the file or branch does not exist on GitHub")
            raise WorkflowBuildError(str(details), f"GitHub responded with HTTP {code}")
        except httpx.RequestError as exc:
            self._record_call(success=False)
            logger.warning("github_unreachable", reference=str(details), error=str(exc))
            raise WorkflowBuildError(str(details), "GitHub could not be reached")

        self._record_call(success=True)
        return commit, response.text

    def _record_call(self, success: bool) -> None:
        if self._circuit_breaker is None:
            return
        if success:
            self._circuit_breaker.record_success()
        else:
            self._circuit_breaker.record_failure()

    async def _latest_commit(self, details: GithubDetails) -> str:
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        response = await self._http.get(
            f"{self._api_url}/repos/{details.repository}/commits/{details.branch}",
            headers=headers,
        )
        response.raise_for_status()
        try:
            return response.json()["sha"]
        except (ValueError, KeyError):
            raise WorkflowBuildError(str(details), "GitHub did not report a commit for the branch")

    @staticmethod
    def _parse(details: GithubDetails, text: str) -> dict:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise WorkflowBuildError(str(details), f"the file is not valid YAML or JSON ({exc})")

        if isinstance(document, dict) and "$graph" in document:
            document = _main_from_graph(document["$graph"])

        if not isinstance(document, dict) or document.get("class") != "Workflow":
            raise WorkflowBuildError(str(details), "the file is not a CWL workflow")
        return document


def _main_from_graph(graph: Any) -> dict | None:
    """Picks the entry point of a packed document."""
    if not isinstance(graph, list):
        return None
    workflows = [item for item in graph if isinstance(item, dict) and item.get("class") == "Workflow"]
    for item in workflows:
        if _strip_id(item.get("id", "")) == "main":
            return item
    return workflows[0] if workflows else None


def _strip_id(value: str) -> str:
    return value.split("#")[-1].split("/")[-1]


def _entries(value: Any) -> list[tuple[str, dict]]:
    """Normalises the map and list forms CWL allows for inputs, outputs and steps."""
    if isinstance(value, dict):
        return [(str(k), v if isinstance(v, dict) else {"type": v}) for k, v in value.items()]
    if isinstance(value, list):
        return [
            (_strip_id(str(item["id"])), item)
            for item in value
            if isinstance(item, dict) and item.get("id")
        ]
    return []


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, list):
        return "\n".join(str(v) for v in value)
    return str(value)


def _type_name(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        names = [_type_name(v) for v in value]
        return " | ".join(n for n in names if n)
    if isinstance(value, dict):
        if value.get("type") == "array":
            return f"{_type_name(value.get('items'))}[]"
        return _type_name(value.get("type"))
    return str(value)


def _default(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, dict):
        return value.get("location") or value.get("path") or str(value)
    return str(value)


def _element(data: dict) -> CWLElement:
    return CWLElement(
        label=_text(data.get("label")),
        doc=_text(data.get("doc")),
        type=_type_name(data.get("type")),
        default=_default(data.get("default")),
    )


def _source_id(value: str, scope: str) -> str:
    """`#main/count/lines` in a packed document is `count/lines`."""
    value = value.split("#")[-1]
    if scope and value.startswith(scope + "/"):
        return value[len(scope) + 1 :]
    return value


def _sources(step_inputs: Any, scope: str = "") -> tuple[str, ...]:
    if isinstance(step_inputs, dict):
        values = list(step_inputs.values())
    elif isinstance(step_inputs, list):
        values = step_inputs
    else:
        return ()

    sources: list[str] = []
    for value in values:
        source = value.get("source") if isinstance(value, dict) else value
        for item in source if isinstance(source, list) else [source]:
            if isinstance(item, str):
                sources.append(_source_id(item, scope))
    return tuple(sources)


def _step(data: dict, scope: str = "") -> CWLStep:
    run = data.get("run")
    if isinstance(run, dict):
        run = f"inline {run.get('class', 'process')}"
    return CWLStep(
        label=_text(data.get("label")),
        doc=_text(data.get("doc")),
        run=run,
        sources=_sources(data.get("in"), scope),
    )
