"""GitHub integrations: REST API, runner file commands and artifacts."""

from gitleaks_ci.github.artifacts import ArtifactClient
from gitleaks_ci.github.client import GitHubClient
from gitleaks_ci.github.workflow import RunnerEnvironment

__all__ = ["ArtifactClient", "GitHubClient", "RunnerEnvironment"]
