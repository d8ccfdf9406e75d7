"""Runner file commands: step outputs, PATH additions and the job summary."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from gitleaks_ci.config import ActionSettings

logger = logging.getLogger(__name__)


class RunnerEnvironment:
    """Writes to the files the Actions runner exposes for a step.

    Any file that is not configured (e.g. when running outside Actions) is
    skipped with a debug message.
    """

    def __init__(
        self,
        output_path: Path | None = None,
        path_file: Path | None = None,
        summary_path: Path | None = None,
    ) -> None:
        self.output_path = output_path
        self.path_file = path_file
        self.summary_path = summary_path

    @classmethod
    def from_settings(cls, settings: ActionSettings) -> RunnerEnvironment:
        return cls(
            output_path=settings.output_path,
            path_file=settings.path_file,
            summary_path=settings.step_summary_path,
        )

    @staticmethod
    def _append(path: Path, text: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(text)

    def set_output(self, name: str, value: object) -> None:
        """Record a step output."""
        if self.output_path is None:
            logger.debug("GITHUB_OUTPUT not set, skipping output %s=%s", name, value)
            return
        self._append(self.output_path, f"{name}={value}\n")

    def add_path(self, directory: Path) -> None:
        """Make ``directory`` available on PATH for this and later steps."""
        os.environ["PATH"] = f"{directory}{os.pathsep}{os.environ.get('PATH', '')}"
        if self.path_file is None:
            logger.debug("GITHUB_PATH not set, %s added to this process only", directory)
            return
        self._append(self.path_file, f"{directory}\n")

    def append_summary(self, markup: str) -> bool:
        """Append HTML/markdown to the job summary.

        Returns:
            True if the summary file was written.
        """
        if self.summary_path is None:
            logger.debug("GITHUB_STEP_SUMMARY not set, summary not written")
            return False
        self._append(self.summary_path, markup)
        return True
