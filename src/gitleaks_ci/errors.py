"""Exception hierarchy for gitleaks-ci.

Fatal errors (configuration, acquisition) propagate to the CLI and
end the run. Advisory failures (cache, artifact upload, a single review
comment) are reported through :class:`gitleaks_ci.outcome.Attempt` instead.
"""

from __future__ import annotations


class GitleaksCIError(Exception):
    """Base exception for gitleaks-ci."""

    pass


class ConfigurationError(GitleaksCIError):
    """Unsupported trigger, unreadable event payload or missing credential."""

    pass


class AcquisitionError(GitleaksCIError):
    """Failed to download or extract the gitleaks binary."""

    pass


class UnsupportedArchiveFormat(AcquisitionError):
    """Release archive is neither .zip nor .tar.gz."""

    pass


class CacheError(GitleaksCIError):
    """Tool cache restore or save failed."""

    pass


class ReportParseError(GitleaksCIError):
    """SARIF report is missing or malformed."""

    pass


class GitHubAPIError(GitleaksCIError):
    """GitHub REST API request failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CommentPostError(GitHubAPIError):
    """A single review comment could not be created."""

    pass


class ArtifactUploadError(GitleaksCIError):
    """Uploading the SARIF report as a workflow artifact failed."""

    pass
