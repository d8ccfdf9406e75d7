"""Run controller: sequences install, scan and reporting for one workflow run."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import assert_never

from rich.console import Console

from gitleaks_ci.config import ActionSettings
from gitleaks_ci.errors import ConfigurationError
from gitleaks_ci.events import EventPayload, TriggerType, load_event, normalize_schedule_event
from gitleaks_ci.github.artifacts import ArtifactClient
from gitleaks_ci.github.client import GitHubClient
from gitleaks_ci.github.workflow import RunnerEnvironment
from gitleaks_ci.report.comments import CommentPoster, post_review_comments
from gitleaks_ci.report.summary import write_summary
from gitleaks_ci.scanner.cache import ToolCache
from gitleaks_ci.scanner.gitleaks import GitleaksScanner
from gitleaks_ci.scanner.installer import GitleaksInstaller
from gitleaks_ci.scanner.models import RunOutcome, ScanRange, ScanRequest, ScanResult
from gitleaks_ci.scanner.scan_range import resolve_pull_request_range, resolve_push_range
from gitleaks_ci.scanner.version import resolve_version

logger = logging.getLogger(__name__)

EXIT_STATUS_SUCCESS = 0
EXIT_STATUS_LEAKS_DETECTED = 1
SIGNAL_EXIT_BASE = 128


class RunState(Enum):
    INITIALIZING = "initializing"
    SCANNING = "scanning"
    REPORTING = "reporting"
    TERMINAL = "terminal"


def exit_status_for(result: ScanResult) -> int:
    """
    Process exit status: 0 clean, 1 leaks, otherwise the raw gitleaks code.

    A gitleaks killed by signal N (negative return code) maps to 128 + N, as
    a shell reports it.
    """
    outcome = result.outcome
    if outcome is RunOutcome.CLEAN:
        logger.info("✅ No leaks detected")
        return EXIT_STATUS_SUCCESS
    if outcome is RunOutcome.LEAKS_FOUND:
        logger.warning("🛑 Leaks detected, see job summary for details")
        return EXIT_STATUS_LEAKS_DETECTED
    logger.error("ERROR: Unexpected exit code [%d]", result.exit_code)
    if result.exit_code < 0:
        return SIGNAL_EXIT_BASE - result.exit_code
    return result.exit_code


class ActionRunner:
    """Drives one gitleaks-ci run through its states.

    Example:
        runner = ActionRunner(load_settings(), client=GitHubClient(token))
        sys.exit(runner.run())
    """

    def __init__(
        self,
        settings: ActionSettings,
        client: GitHubClient,
        runner_env: RunnerEnvironment | None = None,
        artifacts: ArtifactClient | None = None,
        scanner: GitleaksScanner | None = None,
        console: Console | None = None,
    ) -> None:
        self.settings = settings
        self.client = client
        self.runner_env = runner_env or RunnerEnvironment.from_settings(settings)
        self.scanner = scanner or GitleaksScanner.from_settings(
            settings, self.runner_env, artifacts
        )
        self.console = console
        self.state = RunState.INITIALIZING

    def _transition(self, state: RunState) -> None:
        logger.debug("Run state: %s -> %s", self.state.value, state.value)
        self.state = state

    def install_engine(self, version: str) -> Path:
        """Install gitleaks and return the path of its binary."""
        installer = GitleaksInstaller(
            version=version,
            install_root=self.settings.runner_temp,
            cache=ToolCache(self.settings.tool_cache_dir),
            runner=self.runner_env,
        )
        installer.install()
        return installer.binary_path

    def resolve_range(self, trigger: TriggerType, payload: EventPayload) -> ScanRange | None:
        """Commits to scan for ``trigger``; None means there is nothing to scan."""
        if trigger is TriggerType.PUSH:
            return resolve_push_range(payload, self.settings.base_ref)
        elif trigger is TriggerType.PULL_REQUEST:
            return resolve_pull_request_range(payload, self.client, self.settings.base_ref)
        elif trigger is TriggerType.WORKFLOW_DISPATCH or trigger is TriggerType.SCHEDULE:
            return ScanRange()
        else:
            assert_never(trigger)

    def post_comments(self, payload: EventPayload, result: ScanResult) -> None:
        if not self.settings.enable_comments:
            logger.debug("Review comments disabled")
            return
        if result.outcome is not RunOutcome.LEAKS_FOUND or payload.number is None:
            return

        owner, repo = payload.owner_and_repo
        poster = CommentPoster(
            self.client, owner, repo, payload.number, self.settings.notify_user_list
        )
        post_review_comments(poster, result.report_path)

    def run(self) -> int:
        """
        Execute the run and return the process exit status.

        Raises:
            ConfigurationError: For an unsupported trigger, bad payload or missing token.
            AcquisitionError: If gitleaks cannot be installed.
        """
        self._transition(RunState.INITIALIZING)
        settings = self.settings

        trigger = TriggerType.parse(settings.event_name)
        logger.info("Event type: %s", trigger.value)
        logger.debug(
            "GitHub Actions Summary enabled"
            if settings.enable_summary
            else "Disabling GitHub Actions Summary."
        )
        logger.debug(
            "Artifact upload enabled"
            if settings.enable_upload_artifact
            else "Disabling uploading of results.sarif artifact."
        )

        payload = normalize_schedule_event(load_event(settings.event_path), trigger, settings)

        if trigger is TriggerType.PULL_REQUEST and not settings.token:
            raise ConfigurationError(
                "🛑 GITHUB_TOKEN is required for pull request scanning. "
                "Use the automatically created token as shown in the README."
            )

        version = resolve_version(settings.version, self.client)
        logger.info("Gitleaks version: %s", version)
        binary_path = self.install_engine(version)

        self._transition(RunState.SCANNING)
        scan_range = self.resolve_range(trigger, payload)
        if scan_range is None:
            self._transition(RunState.TERMINAL)
            return EXIT_STATUS_SUCCESS

        result = self.scanner.scan(ScanRequest(trigger, scan_range, binary_path))

        self._transition(RunState.REPORTING)
        if trigger is TriggerType.PULL_REQUEST:
            self.post_comments(payload, result)

        if settings.enable_summary:
            write_summary(result, payload.repository.html_url, self.runner_env, self.console)
        else:
            logger.debug("Summary generation disabled")

        self._transition(RunState.TERMINAL)
        return exit_status_for(result)


def main(settings: ActionSettings, console: Console | None = None) -> int:
    """Build the clients for ``settings``, run the action and release the clients."""
    client = GitHubClient(settings.token, settings.api_url)
    artifacts = None
    if settings.enable_upload_artifact:
        artifacts = ArtifactClient(
            settings.runtime_token.get_secret_value() if settings.runtime_token else None,
            settings.results_url,
        )
    try:
        return ActionRunner(settings, client=client, artifacts=artifacts, console=console).run()
    finally:
        client.close()
        if artifacts is not None:
            artifacts.close()
