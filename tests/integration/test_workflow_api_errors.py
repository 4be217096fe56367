"""
Integration tests for the viewer pages backed by the real GitHub builder.

GitHub is replaced by an httpx MockTransport; everything else between the
form post and the rendered page is the production code path.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from src.adapters.secondary.github.github_reference_validator import GithubReferenceValidator
from src.adapters.secondary.github.github_workflow_builder import GithubWorkflowBuilder
from src.application.workflow.use_cases.download_bundle import DownloadBundleUseCase
from src.application.workflow.use_cases.get_workflow import GetWorkflowUseCase
from src.application.workflow.use_cases.resolve_workflow import ResolveWorkflowUseCase
from src.bootstrap import Components
from src.domain.resilience.entities.circuit_breaker import CircuitBreaker, CircuitState
from src.main import create_app

SHA = "3" * 40

HELLO = """
cwlVersion: v1.0
class: Workflow
label: Hello world
inputs:
  message: string
outputs:
  greeting:
    type: File
    outputSource: echo/out
steps:
  echo:
    run: echo.cwl
    in:
      text: message
    out: [out]
"""


class FakeGithub:
    def __init__(self):
        self.status = 200
        self.requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        if self.status != 200:
            return httpx.Response(self.status)
        if request.url.host == "api.github.com":
            return httpx.Response(200, json={"sha": SHA})
        if request.url.path.endswith("/hello.cwl"):
            return httpx.Response(200, text=HELLO)
        return httpx.Response(404)


@pytest.fixture
def github():
    return FakeGithub()


@pytest.fixture
def circuit():
    return CircuitBreaker(name="github", failure_threshold=2, reset_timeout_seconds=60)


@pytest.fixture
def client(github, circuit, workflow_store, allow_all_rate_limiter):
    builder = GithubWorkflowBuilder(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(github)),
        circuit_breaker=circuit,
    )
    components = Components(
        resolve_workflow=ResolveWorkflowUseCase(
            validator=GithubReferenceValidator(),
            workflow_repository=workflow_store,
            builder=builder,
        ),
        get_workflow=GetWorkflowUseCase(workflow_store),
        download_bundle=DownloadBundleUseCase(workflow_store),
        github_circuit=circuit,
    )
    with TestClient(create_app(components=components, rate_limiter=allow_all_rate_limiter)) as c:
        yield c


def submit(client, url):
    return client.post("/", data={"githubURL": url}, follow_redirects=False)


def test_resolved_workflow_is_rendered(client):
    response = submit(client, "https://github.com/org/demo/blob/main/hello.cwl")
    assert response.status_code == 303

    page = client.get(response.headers["location"])

    assert page.status_code == 200
    assert "Hello world" in page.text
    assert "echo.cwl" in page.text
    assert SHA[:7] in page.text


def test_missing_file_redisplays_form(client, workflow_store):
    response = submit(client, "https://github.com/org/demo/blob/main/absent.cwl")

    assert response.status_code == 400
    assert 'data-code="githubURL.parsingError"' in response.text
    assert "does not exist" in response.text
    assert workflow_store.by_id == {}


def test_github_outage_trips_circuit(client, github, circuit):
    github.status = 502

    for _ in range(2):
        assert submit(client, "gh:org/demo/hello.cwl@main").status_code == 400

    requests_before = github.requests
    response = submit(client, "gh:org/demo/hello.cwl@main")

    assert response.status_code == 400
    assert "currently unavailable" in response.text
    assert github.requests == requests_before
    assert circuit.state == CircuitState.OPEN
