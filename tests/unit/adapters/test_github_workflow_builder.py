import httpx
import pytest

from src.adapters.secondary.github.github_workflow_builder import GithubWorkflowBuilder
from src.domain.resilience.entities.circuit_breaker import CircuitBreaker, CircuitState
from src.domain.workflow.exceptions import WorkflowBuildError
from src.domain.workflow.value_objects.github_details import GithubDetails

SHA = "a" * 40
DETAILS = GithubDetails(owner="org", repo_name="repo", branch="main", path="workflows/count.cwl")

COUNT_LINES = """
cwlVersion: v1.0
class: Workflow
label: Count lines
doc: Counts the lines of every file in a directory
inputs:
  files:
    type: File[]
    label: Files to count
  min_lines:
    type: int
    default: 10
outputs:
  - id: '#report'
    type: File
    outputSource: summarise/report
steps:
  count:
    run: wc-tool.cwl
    in:
      file: files
    out: [lines]
  summarise:
    run:
      class: ExpressionTool
    in:
      lines: count/lines
      threshold:
        source: min_lines
    out: [report]
"""


def make_builder(handler, circuit=None, token=""):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GithubWorkflowBuilder(
        http_client=client,
        circuit_breaker=circuit,
        api_url="https://api.github.test",
        raw_url="https://raw.github.test",
        token=token,
    )


def github(document=COUNT_LINES, commit_status=200, raw_status=200, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.host == "api.github.test":
            assert request.url.path == "/repos/org/repo/commits/main"
            return httpx.Response(commit_status, json={"sha": SHA})
        assert request.url.path == f"/org/repo/{SHA}/workflows/count.cwl"
        return httpx.Response(raw_status, text=document)

    return handler


@pytest.mark.asyncio
async def test_builds_workflow_pinned_to_commit():
    seen = []
    workflow = await make_builder(github(seen=seen), token="secret").build(DETAILS)

    assert workflow.retrieved_from == DETAILS
    assert workflow.last_commit == SHA
    assert workflow.label == "Count lines"
    assert workflow.doc.startswith("Counts the lines")
    assert workflow.ro_bundle is None
    assert seen[0].headers["Authorization"] == "Bearer secret"

    assert workflow.inputs["files"].type == "File[]"
    assert workflow.inputs["files"].label == "Files to count"
    assert workflow.inputs["min_lines"].default == "10"
    assert workflow.outputs["report"].type == "File"

    assert workflow.steps["count"].run == "wc-tool.cwl"
    assert workflow.steps["count"].sources == ("files",)
    assert workflow.steps["summarise"].run == "inline ExpressionTool"
    assert workflow.steps["summarise"].sources == ("count/lines", "min_lines")


@pytest.mark.asyncio
async def test_packed_document_uses_main_workflow():
    packed = (
        '{"cwlVersion": "v1.0", "$graph": ['
        '{"class": "CommandLineTool", "id": "#wc"}, '
        '{"class": "Workflow", "id": "#main", "label": "Packed", '
        '"inputs": [{"id": "#main/message", "type": "string"}], "outputs": [], '
        '"steps": ['
        '{"id": "#main/echo", "run": "#wc", "in": [{"id": "#main/echo/text", "source": "#main/message"}]}, '
        '{"id": "#main/tally", "run": "#wc", "in": [{"id": "#main/tally/text", "source": ["#main/echo/out"]}]}'
        "]}"
        "]}"
    )
    workflow = await make_builder(github(document=packed)).build(DETAILS)

    assert workflow.label == "Packed"
    assert list(workflow.inputs) == ["message"]
    assert list(workflow.steps) == ["echo", "tally"]
    assert workflow.steps["echo"].sources == ("message",)
    assert workflow.steps["tally"].sources == ("echo/out",)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "document, reason",
    [
        ("class: CommandLineTool\nbaseCommand: wc", "not a CWL workflow"),
        ("- just\n- a list", "not a CWL workflow"),
        ("class: Workflow\ninputs: [unclosed", "not valid YAML"),
    ],
)
async def test_unsupported_documents_fail(document, reason):
    with pytest.raises(WorkflowBuildError) as exc_info:
        await make_builder(github(document=document)).build(DETAILS)

    assert reason in exc_info.value.reason


@pytest.mark.asyncio
async def test_missing_branch_fails_without_tripping_circuit():
    circuit = CircuitBreaker(name="github", failure_threshold=1)

    with pytest.raises(WorkflowBuildError) as exc_info:
        await make_builder(github(commit_status=404), circuit=circuit).build(DETAILS)

    assert "does not exist" in exc_info.value.reason
    assert circuit.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_github_outage_opens_circuit_and_fails_fast():
    calls = []
    circuit = CircuitBreaker(name="github", failure_threshold=2, reset_timeout_seconds=60)
    builder = make_builder(github(raw_status=503, seen=calls), circuit=circuit)

    for _ in range(2):
        with pytest.raises(WorkflowBuildError):
            await builder.build(DETAILS)
    assert circuit.state == CircuitState.OPEN

    calls.clear()
    with pytest.raises(WorkflowBuildError) as exc_info:
        await builder.build(DETAILS)

    assert "unavailable" in exc_info.value.reason
    assert calls == []


@pytest.mark.asyncio
async def test_unreachable_github_is_a_build_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(WorkflowBuildError) as exc_info:
        await make_builder(handler).build(DETAILS)

    assert "could not be reached" in exc_info.value.reason
