"""Trigger types and the GitHub event payload subset gitleaks-ci consumes."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gitleaks_ci.config import ActionSettings
from gitleaks_ci.errors import ConfigurationError

logger = logging.getLogger(__name__)


class TriggerType(str, Enum):
    """Supported workflow triggers."""

    PUSH = "push"
    PULL_REQUEST = "pull_request"
    WORKFLOW_DISPATCH = "workflow_dispatch"
    SCHEDULE = "schedule"

    @classmethod
    def parse(cls, event_name: str) -> TriggerType:
        """Map a GitHub event name onto a trigger type.

        Raises:
            ConfigurationError: If the event is not supported.
        """
        try:
            return cls(event_name)
        except ValueError as e:
            raise ConfigurationError(
                f"The [{event_name}] event is not yet supported"
            ) from e


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Owner(_Payload):
    login: str = ""


class Repository(_Payload):
    html_url: str = ""
    full_name: str = ""
    name: str = ""
    owner: Owner = Field(default_factory=Owner)


class Commit(_Payload):
    id: str


class CommitRef(_Payload):
    sha: str


class PullRequest(_Payload):
    base: CommitRef
    head: CommitRef


class EventPayload(_Payload):
    """Fields of ``$GITHUB_EVENT_PATH`` used by the scan."""

    repository: Repository = Field(default_factory=Repository)
    commits: list[Commit] = Field(default_factory=list)
    number: int | None = None
    pull_request: PullRequest | None = None

    @property
    def owner_and_repo(self) -> tuple[str, str]:
        owner, _, repo = self.repository.full_name.partition("/")
        return owner, repo


def load_event(path: Path | None) -> EventPayload:
    """Read and validate the event payload file.

    Raises:
        ConfigurationError: If the file is missing or not a valid payload.
    """
    if path is None:
        raise ConfigurationError("GITHUB_EVENT_PATH is not set")
    try:
        return EventPayload.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigurationError(f"Failed to load event data from {path}: {e}") from e


def normalize_schedule_event(
    payload: EventPayload, trigger: TriggerType, settings: ActionSettings
) -> EventPayload:
    """Fill in repository identity, which schedule payloads do not carry."""
    if trigger is not TriggerType.SCHEDULE:
        return payload

    owner = settings.repository_owner
    full_name = settings.repository
    name = full_name.removeprefix(f"{owner}/")
    repository = Repository(
        html_url=f"{settings.server_url.rstrip('/')}/{full_name}",
        full_name=full_name,
        name=name,
        owner=Owner(login=owner),
    )
    logger.debug("Synthesized repository identity for schedule event: %s", full_name)
    return payload.model_copy(update={"repository": repository})
