"""Resolve the gitleaks version to install."""

from __future__ import annotations

import logging

from gitleaks_ci.config import LATEST_VERSION
from gitleaks_ci.github.client import GitHubClient
from gitleaks_ci.scanner.installer import GITLEAKS_OWNER, GITLEAKS_REPO

logger = logging.getLogger(__name__)


def latest_version(client: GitHubClient) -> str:
    """Return the tag of the newest gitleaks release without its "v" prefix."""
    release = client.get_latest_release(GITLEAKS_OWNER, GITLEAKS_REPO)
    return str(release["tag_name"]).removeprefix("v")


def resolve_version(requested: str, client: GitHubClient) -> str:
    """Turn the configured version into a concrete one, looking up "latest" if asked."""
    if requested.strip().lower() == LATEST_VERSION:
        logger.info("Resolving latest gitleaks version...")
        return latest_version(client)
    return requested
