"""Runtime configuration for gitleaks-ci.

All settings are read once from the process environment (the GitHub Actions
runner exports inputs and context as environment variables) into a frozen
:class:`ActionSettings` instance that is passed explicitly to every component.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GITLEAKS_VERSION = "8.24.3"
LATEST_VERSION = "latest"
DEFAULT_SCAN_TIMEOUT = 60 * 60

# Values that switch a toggle off; anything else keeps the default.
_FALSY_TOGGLES = ("false", "0")


class ActionSettings(BaseSettings):
    """Configuration of a single gitleaks-ci run.

    Attributes:
        version: gitleaks version to install, or "latest".
        config_path: Optional custom gitleaks configuration file.
        enable_comments: Post review comments on pull requests.
        enable_summary: Write the job summary.
        enable_upload_artifact: Upload the SARIF report as an artifact.
        notify_user_list: Mentions appended to every review comment.
        base_ref: Explicit base commit overriding the computed one.
        scan_timeout: Seconds to wait for gitleaks before giving up.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_ignore_empty=True,
        extra="ignore",
    )

    # Action inputs
    version: str = Field(DEFAULT_GITLEAKS_VERSION, validation_alias="GITLEAKS_VERSION")
    config_path: Path | None = Field(None, validation_alias="GITLEAKS_CONFIG")
    enable_comments: bool = Field(True, validation_alias="GITLEAKS_ENABLE_COMMENTS")
    enable_summary: bool = Field(True, validation_alias="GITLEAKS_ENABLE_SUMMARY")
    enable_upload_artifact: bool = Field(
        True, validation_alias="GITLEAKS_ENABLE_UPLOAD_ARTIFACT"
    )
    notify_user_list: str | None = Field(None, validation_alias="GITLEAKS_NOTIFY_USER_LIST")
    base_ref: str | None = Field(None, validation_alias="BASE_REF")
    scan_timeout: int = Field(
        DEFAULT_SCAN_TIMEOUT, gt=0, validation_alias="GITLEAKS_SCAN_TIMEOUT"
    )

    # GitHub context
    github_token: SecretStr | None = Field(None, validation_alias="GITHUB_TOKEN")
    event_name: str = Field("", validation_alias="GITHUB_EVENT_NAME")
    event_path: Path | None = Field(None, validation_alias="GITHUB_EVENT_PATH")
    repository: str = Field("", validation_alias="GITHUB_REPOSITORY")
    repository_owner: str = Field("", validation_alias="GITHUB_REPOSITORY_OWNER")
    api_url: str = Field("https://api.github.com", validation_alias="GITHUB_API_URL")
    server_url: str = Field("https://github.com", validation_alias="GITHUB_SERVER_URL")
    github_actions: bool = Field(False, validation_alias="GITHUB_ACTIONS")

    # Runner files and directories
    workspace: Path = Field(default_factory=Path.cwd, validation_alias="GITHUB_WORKSPACE")
    step_summary_path: Path | None = Field(None, validation_alias="GITHUB_STEP_SUMMARY")
    output_path: Path | None = Field(None, validation_alias="GITHUB_OUTPUT")
    path_file: Path | None = Field(None, validation_alias="GITHUB_PATH")
    runner_temp: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()), validation_alias="RUNNER_TEMP"
    )
    tool_cache_dir: Path | None = Field(None, validation_alias="RUNNER_TOOL_CACHE")

    # Artifact service
    runtime_token: SecretStr | None = Field(None, validation_alias="ACTIONS_RUNTIME_TOKEN")
    results_url: str | None = Field(None, validation_alias="ACTIONS_RESULTS_URL")

    @field_validator(
        "enable_comments", "enable_summary", "enable_upload_artifact", mode="before"
    )
    @classmethod
    def _parse_toggle(cls, value: Any) -> Any:
        """Only "false" and "0" disable a toggle."""
        if isinstance(value, str):
            return value.strip().lower() not in _FALSY_TOGGLES
        return value

    @property
    def token(self) -> str | None:
        """Plain GitHub token, if configured."""
        return self.github_token.get_secret_value() if self.github_token else None

    @property
    def wants_latest(self) -> bool:
        return self.version.strip().lower() == LATEST_VERSION


def load_settings(**overrides: Any) -> ActionSettings:
    """Build the settings for this run from the environment.

    Only the variable names given as aliases are read; ``overrides`` use the
    same names (e.g. ``GITLEAKS_VERSION``).
    """
    return ActionSettings(**overrides)
