"""Work out which commits a trigger should scan."""

from __future__ import annotations

import logging
from typing import Any

from gitleaks_ci.errors import ConfigurationError
from gitleaks_ci.events import EventPayload
from gitleaks_ci.github.client import GitHubClient
from gitleaks_ci.scanner.models import ScanRange

logger = logging.getLogger(__name__)


def resolve_push_range(payload: EventPayload, base_ref: str | None = None) -> ScanRange | None:
    """
    Range covering the pushed commits.

    Parameters:
        payload: Push event payload.
        base_ref: Optional override for the first commit.

    Returns:
        ScanRange, or None when the push carries no commits (nothing to scan).
    """
    if not payload.commits:
        logger.info("No commits to scan")
        return None

    if base_ref:
        logger.info("Overriding baseRef for scan with %s.", base_ref)

    return ScanRange(
        base_ref=base_ref or payload.commits[0].id,
        head_ref=payload.commits[-1].id,
    )


def range_from_commits(
    commits: list[dict[str, Any]], base_ref: str | None = None
) -> ScanRange | None:
    """Range from the first to the last commit of a pull request commit listing."""
    if not commits:
        logger.info("Pull request has no commits to scan")
        return None

    if base_ref:
        logger.info("Using base ref override: %s", base_ref)

    return ScanRange(base_ref=base_ref or commits[0]["sha"], head_ref=commits[-1]["sha"])


def resolve_pull_request_range(
    payload: EventPayload, client: GitHubClient, base_ref: str | None = None
) -> ScanRange | None:
    """
    Range for a pull request.

    The payload's base/head SHAs are preferred since they come from GitHub's
    merge-base computation. A base override forces a commit listing to find
    the head; without payload data the listing is used for both ends.
    """
    owner, repo = payload.owner_and_repo
    if payload.number is None:
        raise ConfigurationError("Pull request event payload has no number")

    if base_ref:
        commits = client.list_pull_request_commits(owner, repo, payload.number)
        return range_from_commits(commits, base_ref)

    if payload.pull_request is not None:
        base_sha = payload.pull_request.base.sha
        head_sha = payload.pull_request.head.sha
        logger.info("Scanning PR from %s to %s", base_sha[:7], head_sha[:7])
        return ScanRange(base_ref=base_sha, head_ref=head_sha)

    commits = client.list_pull_request_commits(owner, repo, payload.number)
    return range_from_commits(commits)
