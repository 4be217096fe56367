from dataclasses import dataclass


@dataclass(frozen=True)
class GithubDetails:
    """
    Coordinates of a workflow document hosted on GitHub.

    This is the natural key of a Workflow record: two submissions that parse to
    equal GithubDetails resolve to the same record.

    Attributes:
        owner (str): Repository owner (user or organisation).
        repo_name (str): Repository name.
        branch (str): Branch name or commit sha the document is read from.
        path (str): Repository-relative path of the workflow file, without leading slash.
    """

    owner: str
    repo_name: str
    branch: str
    path: str

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo_name}"

    @property
    def url(self) -> str:
        """Canonical github.com location of the document."""
        return f"https://github.com/{self.repository}/blob/{self.branch}/{self.path}"

    def raw_url(self, base_url: str, ref: str | None = None) -> str:
        return f"{base_url.rstrip('/')}/{self.repository}/{ref or self.branch}/{self.path}"

    def lock_key(self) -> str:
        return f"resolve:{self.owner}/{self.repo_name}@{self.branch}:{self.path}"

    def __str__(self) -> str:
        return f"{self.repository}@{self.branch}:{self.path}"
