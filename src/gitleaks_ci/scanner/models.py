"""Data types shared by the scan pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gitleaks_ci.events import TriggerType

EXIT_CODE_CLEAN = 0
EXIT_CODE_ERROR = 1
EXIT_CODE_LEAKS_DETECTED = 2

# Triggers whose scan is limited to a commit range via --log-opts.
RANGED_TRIGGERS = frozenset({TriggerType.PUSH, TriggerType.PULL_REQUEST})


class RunOutcome(Enum):
    """Classification of a gitleaks exit code."""

    CLEAN = "clean"
    LEAKS_FOUND = "leaks_found"
    EXECUTION_ERROR = "execution_error"


def classify_exit_code(exit_code: int) -> RunOutcome:
    """Map a gitleaks exit code onto a :class:`RunOutcome`.

    Only 0 and 2 are meaningful; every other code is an execution error.
    """
    if exit_code == EXIT_CODE_CLEAN:
        return RunOutcome.CLEAN
    if exit_code == EXIT_CODE_LEAKS_DETECTED:
        return RunOutcome.LEAKS_FOUND
    return RunOutcome.EXECUTION_ERROR


@dataclass(frozen=True)
class ScanRange:
    """Commits to scan; both refs unset means the whole history."""

    base_ref: str | None = None
    head_ref: str | None = None

    def __post_init__(self) -> None:
        if (self.base_ref is None) != (self.head_ref is None):
            raise ValueError("base_ref and head_ref must be set together")

    @property
    def is_full_history(self) -> bool:
        return self.base_ref is None

    @property
    def is_single_commit(self) -> bool:
        return not self.is_full_history and self.base_ref == self.head_ref

    def log_opts(self) -> str | None:
        """git log options limiting the scan to this range."""
        if self.is_full_history:
            return None
        if self.is_single_commit:
            return "-1"
        return f"--no-merges --first-parent {self.base_ref}^..{self.head_ref}"


@dataclass(frozen=True)
class ScanRequest:
    trigger: TriggerType
    scan_range: ScanRange
    binary_path: Path


@dataclass(frozen=True)
class EngineInvocation:
    """A fully built gitleaks command line."""

    binary: Path
    args: tuple[str, ...]
    report_path: Path
    cwd: Path
    timeout: int

    @property
    def command(self) -> list[str]:
        return [str(self.binary), *self.args]


@dataclass(frozen=True)
class ScanResult:
    exit_code: int
    report_path: Path

    @property
    def outcome(self) -> RunOutcome:
        return classify_exit_code(self.exit_code)
