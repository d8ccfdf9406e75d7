"""Scan pipeline: engine installation, commit ranges and execution.

- GitleaksInstaller: downloads/caches the gitleaks binary
- resolve_version: turns "latest" into a concrete release
- resolve_push_range / resolve_pull_request_range: commit ranges per trigger
- GitleaksScanner: runs gitleaks and uploads the SARIF report
"""

from gitleaks_ci.scanner.cache import ToolCache
from gitleaks_ci.scanner.gitleaks import GitleaksScanner, build_scan_args
from gitleaks_ci.scanner.installer import GitleaksInstaller
from gitleaks_ci.scanner.models import (
    RunOutcome,
    ScanRange,
    ScanRequest,
    ScanResult,
    classify_exit_code,
)
from gitleaks_ci.scanner.scan_range import resolve_pull_request_range, resolve_push_range
from gitleaks_ci.scanner.version import latest_version, resolve_version

__all__ = [
    "GitleaksInstaller",
    "GitleaksScanner",
    "RunOutcome",
    "ScanRange",
    "ScanRequest",
    "ScanResult",
    "ToolCache",
    "build_scan_args",
    "classify_exit_code",
    "latest_version",
    "resolve_pull_request_range",
    "resolve_push_range",
    "resolve_version",
]
