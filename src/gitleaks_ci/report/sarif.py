"""Parse the gitleaks SARIF report into findings."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gitleaks_ci.errors import ReportParseError


@dataclass(frozen=True)
class Finding:
    """A single secret reported by gitleaks."""

    rule_id: str
    commit_sha: str
    file_path: str
    start_line: int
    author: str = ""
    email: str = ""
    date: str = ""

    @property
    def fingerprint(self) -> str:
        """Identity used by ``.gitleaksignore``: ``commit:file:rule:line``."""
        return f"{self.commit_sha}:{self.file_path}:{self.rule_id}:{self.start_line}"

    @property
    def short_sha(self) -> str:
        return self.commit_sha[:7]


def parse_result(result: dict[str, Any]) -> Finding:
    """Convert one SARIF ``results[]`` entry into a :class:`Finding`.

    Raises:
        ReportParseError: If a required field is missing.
    """
    try:
        fingerprints = result["partialFingerprints"]
        location = result["locations"][0]["physicalLocation"]
        return Finding(
            rule_id=str(result["ruleId"]),
            commit_sha=str(fingerprints["commitSha"]),
            file_path=str(location["artifactLocation"]["uri"]),
            start_line=int(location["region"]["startLine"]),
            author=str(fingerprints.get("author", "")),
            email=str(fingerprints.get("email", "")),
            date=str(fingerprints.get("date", "")),
        )
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ReportParseError(f"Malformed SARIF result: {e!r}") from e


def parse_report(path: Path) -> list[Finding]:
    """
    Read findings from a SARIF file.

    A report without ``runs[0].results`` has no findings.

    Raises:
        ReportParseError: If the file is missing, is not JSON or holds a
            malformed result.
    """
    if not path.is_file():
        raise ReportParseError(f"SARIF file not found at {path}")

    try:
        sarif = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ReportParseError(f"Error parsing SARIF file: {e}") from e

    try:
        results = sarif["runs"][0]["results"]
    except (KeyError, IndexError, TypeError):
        return []
    if results is None:
        return []
    if not isinstance(results, list):
        raise ReportParseError("SARIF runs[0].results is not a list")

    return [parse_result(result) for result in results]
