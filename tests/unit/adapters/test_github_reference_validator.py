import pytest

from src.adapters.secondary.github.github_reference_validator import GithubReferenceValidator
from src.domain.workflow.value_objects.github_details import GithubDetails
from src.domain.workflow.value_objects.results import FieldError


@pytest.fixture
def validator():
    return GithubReferenceValidator(default_filename="main.cwl")


@pytest.mark.parametrize(
    "raw, expected",
    [
        (
            "https://github.com/common-workflow-language/workflows/blob/master/workflows/lobSTR/lobSTR-workflow.cwl",
            GithubDetails(
                "common-workflow-language", "workflows", "master", "workflows/lobSTR/lobSTR-workflow.cwl"
            ),
        ),
        (
            "https://github.com/org/repo/tree/dev/wf.cwl",
            GithubDetails("org", "repo", "dev", "wf.cwl"),
        ),
        (
            "  https://github.com/org/repo/blob/main/pipelines/align.yml  ",
            GithubDetails("org", "repo", "main", "pipelines/align.yml"),
        ),
        (
            "https://raw.githubusercontent.com/org/repo/4f1c2e9/packed.json",
            GithubDetails("org", "repo", "4f1c2e9", "packed.json"),
        ),
        ("gh:org/repo@main", GithubDetails("org", "repo", "main", "main.cwl")),
        ("gh:org/repo/tools/count.cwl@v1.2", GithubDetails("org", "repo", "v1.2", "tools/count.cwl")),
    ],
)
def test_accepted_locations(validator, raw, expected):
    assert validator.validate(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_empty_input(validator, raw):
    result = validator.validate(raw)

    assert isinstance(result, FieldError)
    assert result.field == "githubURL"
    assert result.code == "githubURL.emptyOrWhitespace"


@pytest.mark.parametrize(
    "raw",
    [
        "not-a-url",
        "https://gitlab.com/org/repo/blob/main/wf.cwl",
        "https://github.com/org/repo",
        "https://github.com/org/repo/blob/main/README.md",
        "gh:org@main",
        "gh:org/repo",
    ],
)
def test_rejected_locations(validator, raw):
    result = validator.validate(raw)

    assert isinstance(result, FieldError)
    assert result.code == "githubURL.invalid"
    assert result.message
