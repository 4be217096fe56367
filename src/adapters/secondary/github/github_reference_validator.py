import re

from src.domain.workflow.value_objects.github_details import GithubDetails
from src.domain.workflow.value_objects.results import GITHUB_URL_FIELD, FieldError
from src.ports.secondary.reference_validator import IReferenceValidator

_NAME = r"[A-Za-z0-9_.-]+"
_WORKFLOW_PATH = r"[^\s?#]+?\.(?:cwl|ya?ml|json)"

# https://github.com/owner/repo/blob/branch/path/to/workflow.cwl (or /tree/)
GITHUB_URL_RE = re.compile(
    rf"^https?://(?:www\.)?github\.com/(?P<owner>{_NAME})/(?P<repo>{_NAME})"
    rf"/(?:blob|tree)/(?P<branch>[^/\s]+)/(?P<path>{_WORKFLOW_PATH})/?$"
)

# https://raw.githubusercontent.com/owner/repo/branch/path/to/workflow.cwl
GITHUB_RAW_URL_RE = re.compile(
    rf"^https?://raw\.githubusercontent\.com/(?P<owner>{_NAME})/(?P<repo>{_NAME})"
    rf"/(?P<branch>[^/\s]+)/(?P<path>{_WORKFLOW_PATH})$"
)

# gh:owner/repo/path/to/workflow.cwl@branch, or gh:owner/repo@branch
SHORTHAND_RE = re.compile(
    rf"^gh:(?P<owner>{_NAME})/(?P<repo>{_NAME})"
    rf"(?:/(?P<path>{_WORKFLOW_PATH}))?@(?P<branch>[^@\s]+)$"
)

MESSAGES = {
    "githubURL.emptyOrWhitespace": "You must specify a GitHub URL",
    "githubURL.invalid": (
        "Must be a GitHub link to a workflow file, e.g. "
        "https://github.com/owner/repo/blob/main/workflow.cwl"
    ),
}


class GithubReferenceValidator(IReferenceValidator):
    """Recognises the GitHub locations a workflow can be submitted from. No network access."""

    def __init__(self, default_filename: str = "main.cwl"):
        self._default_filename = default_filename

    def validate(self, raw: str) -> GithubDetails | FieldError:
        value = (raw or "").strip()
        if not value:
            return self._error("githubURL.emptyOrWhitespace")

        for pattern in (GITHUB_URL_RE, GITHUB_RAW_URL_RE, SHORTHAND_RE):
            match = pattern.match(value)
            if match:
                return GithubDetails(
                    owner=match.group("owner"),
                    repo_name=match.group("repo"),
                    branch=match.group("branch"),
                    path=(match.group("path") or self._default_filename).lstrip("/"),
                )

        return self._error("githubURL.invalid")

    @staticmethod
    def _error(code: str) -> FieldError:
        return FieldError(field=GITHUB_URL_FIELD, code=code, message=MESSAGES[code])
