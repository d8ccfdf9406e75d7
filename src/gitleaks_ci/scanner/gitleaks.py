"""Run gitleaks against the checked-out repository.

The scanner builds a fixed gitleaks command line, runs it with the exit code
captured (2 means leaks, not a failure), records the exit code as a step
output and optionally uploads the SARIF report as a workflow artifact.
"""

from __future__ import annotations

import logging
import shlex
import subprocess  # nosec B404
from pathlib import Path

from gitleaks_ci.config import ActionSettings
from gitleaks_ci.github.artifacts import ArtifactClient
from gitleaks_ci.github.workflow import RunnerEnvironment
from gitleaks_ci.outcome import Attempt, attempt
from gitleaks_ci.scanner.models import (
    EXIT_CODE_ERROR,
    EXIT_CODE_LEAKS_DETECTED,
    RANGED_TRIGGERS,
    EngineInvocation,
    ScanRequest,
    ScanResult,
)

logger = logging.getLogger(__name__)

SCAN_COMMAND = "detect"
REPORT_FORMAT = "sarif"
REPORT_FILE = "results.sarif"
ARTIFACT_NAME = "gitleaks-results.sarif"
LOG_LEVEL = "debug"


def build_scan_args(request: ScanRequest, config_path: Path | None = None) -> list[str]:
    """gitleaks arguments for ``request``; --log-opts only for push and pull requests."""
    args = [
        SCAN_COMMAND,
        "--redact",
        "-v",
        f"--exit-code={EXIT_CODE_LEAKS_DETECTED}",
        f"--report-format={REPORT_FORMAT}",
        f"--report-path={REPORT_FILE}",
        f"--log-level={LOG_LEVEL}",
    ]

    if config_path is not None:
        args.append(f"--config={config_path}")

    if request.trigger in RANGED_TRIGGERS:
        log_opts = request.scan_range.log_opts()
        if log_opts:
            args.append(f"--log-opts={log_opts}")

    return args


class GitleaksScanner:
    """Executes gitleaks for a :class:`ScanRequest`.

    Example:
        scanner = GitleaksScanner.from_settings(settings, runner, artifacts)
        result = scanner.scan(request)
        print(result.outcome)
    """

    def __init__(
        self,
        workspace: Path,
        runner: RunnerEnvironment | None = None,
        artifacts: ArtifactClient | None = None,
        upload_artifact: bool = False,
        config_path: Path | None = None,
        timeout: int = 3600,
    ) -> None:
        self.workspace = workspace
        self.runner = runner or RunnerEnvironment()
        self.artifacts = artifacts
        self.upload_artifact = upload_artifact
        self.config_path = config_path
        self.timeout = timeout

    @classmethod
    def from_settings(
        cls,
        settings: ActionSettings,
        runner: RunnerEnvironment,
        artifacts: ArtifactClient | None = None,
    ) -> GitleaksScanner:
        return cls(
            workspace=settings.workspace,
            runner=runner,
            artifacts=artifacts,
            upload_artifact=settings.enable_upload_artifact,
            config_path=settings.config_path,
            timeout=settings.scan_timeout,
        )

    @property
    def report_path(self) -> Path:
        return self.workspace / REPORT_FILE

    def build_invocation(self, request: ScanRequest) -> EngineInvocation:
        return EngineInvocation(
            binary=request.binary_path,
            args=tuple(build_scan_args(request, self.config_path)),
            report_path=self.report_path,
            cwd=self.workspace,
            timeout=self.timeout,
        )

    def scan(self, request: ScanRequest) -> ScanResult:
        """
        Run gitleaks and return its exit code.

        A non-zero exit code is not an error here: 2 signals leaks and every
        other value is classified by the caller. A run that exceeds the
        timeout is killed and reported as an execution error (exit code 1),
        so reporting still happens.
        """
        invocation = self.build_invocation(request)
        logger.info("Executing: gitleaks %s", shlex.join(invocation.args))

        try:
            completed = subprocess.run(  # nosec B603
                invocation.command,
                cwd=invocation.cwd,
                timeout=invocation.timeout,
                check=False,
            )
            exit_code = completed.returncode
        except subprocess.TimeoutExpired:
            logger.error("gitleaks did not finish within %d seconds", invocation.timeout)
            exit_code = EXIT_CODE_ERROR

        self.runner.set_output("exit-code", exit_code)

        if self.upload_artifact:
            self.upload_report(invocation.report_path).log(logger)

        return ScanResult(exit_code=exit_code, report_path=invocation.report_path)

    def upload_report(self, report_path: Path) -> Attempt:
        """Upload the SARIF report as the ``gitleaks-results.sarif`` artifact."""
        if not report_path.is_file():
            return Attempt.failed("Artifact upload", f"{report_path} does not exist")
        if self.artifacts is None:
            return Attempt.failed("Artifact upload", "artifact service is not configured")
        return attempt(
            "Artifact upload",
            self.artifacts.upload_artifact,
            ARTIFACT_NAME,
            [report_path],
            self.workspace,
        )
