"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import pytest

from gitleaks_ci.config import ActionSettings
from gitleaks_ci.errors import CommentPostError

_ENV_PREFIXES = ("GITHUB_", "GITLEAKS_", "RUNNER_", "ACTIONS_")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Hide the real runner environment so settings only see what a test sets."""
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES) or key == "BASE_REF":
            monkeypatch.delenv(key)
    # add_path mutates PATH; monkeypatch restores it afterwards.
    monkeypatch.setenv("PATH", os.environ.get("PATH", ""))


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog keeps working across tests."""
    yield
    logger = logging.getLogger("gitleaks_ci")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def sarif_result(
    rule_id: str = "aws-key",
    commit_sha: str = "bbb2222",
    uri: str = "config.yml",
    start_line: int = 12,
    author: str = "Jane Doe",
    email: str = "jane@example.com",
    date: str = "2024-05-01T10:00:00Z",
) -> dict[str, Any]:
    """One entry of a gitleaks SARIF ``results`` array."""
    return {
        "ruleId": rule_id,
        "partialFingerprints": {
            "commitSha": commit_sha,
            "author": author,
            "email": email,
            "date": date,
        },
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": uri},
                    "region": {"startLine": start_line},
                }
            }
        ],
    }


@pytest.fixture
def make_result():
    """Factory for SARIF result entries."""
    return sarif_result


@pytest.fixture
def write_sarif(tmp_path):
    """Factory writing a SARIF report with the given results."""

    def _write(results: list[dict[str, Any]] | None, path: Path | None = None) -> Path:
        target = path or tmp_path / "results.sarif"
        run: dict[str, Any] = {"tool": {"driver": {"name": "gitleaks"}}}
        if results is not None:
            run["results"] = results
        target.write_text(json.dumps({"version": "2.1.0", "runs": [run]}))
        return target

    return _write


@pytest.fixture
def event_file(tmp_path):
    """Factory writing an event payload and returning its path."""

    def _write(payload: dict[str, Any]) -> Path:
        path = tmp_path / "event.json"
        path.write_text(json.dumps(payload))
        return path

    return _write


@pytest.fixture
def make_settings(tmp_path):
    """Factory for ActionSettings rooted in the test's temporary directory."""

    def _make(**overrides: Any) -> ActionSettings:
        workspace = tmp_path / "workspace"
        workspace.mkdir(exist_ok=True)
        values: dict[str, Any] = {
            "workspace": workspace,
            "runner_temp": tmp_path / "runner-temp",
            "step_summary_path": tmp_path / "summary.md",
            "output_path": tmp_path / "output.txt",
            "path_file": tmp_path / "path.txt",
            "github_token": "ghs_test",
            "repository": "octo/repo",
            "repository_owner": "octo",
            "enable_upload_artifact": False,
        }
        values.update(overrides)
        # Settings are only populated by their environment names.
        fields = ActionSettings.model_fields
        return ActionSettings(**{fields[name].validation_alias: v for name, v in values.items()})

    return _make


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient."""

    def __init__(self) -> None:
        self.latest_tag = "v8.30.0"
        self.commits: list[dict[str, Any]] = []
        self.comments: list[dict[str, Any]] = []
        self.posted: list[dict[str, Any]] = []
        self.fail_paths: set[str] = set()
        self.calls: list[tuple[Any, ...]] = []

    def get_latest_release(self, owner: str, repo: str) -> dict[str, Any]:
        self.calls.append(("get_latest_release", owner, repo))
        return {"tag_name": self.latest_tag}

    def list_pull_request_commits(self, owner: str, repo: str, pull_number: int):
        self.calls.append(("list_pull_request_commits", owner, repo, pull_number))
        return list(self.commits)

    def list_review_comments(self, owner: str, repo: str, pull_number: int):
        self.calls.append(("list_review_comments", owner, repo, pull_number))
        return list(self.comments)

    def create_review_comment(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        *,
        body: str,
        commit_id: str,
        path: str,
        line: int,
        side: str = "RIGHT",
    ) -> dict[str, Any]:
        if path in self.fail_paths:
            raise CommentPostError("Validation Failed: line must be part of the diff", 422)
        comment = {
            "body": body,
            "commit_id": commit_id,
            "path": path,
            "line": line,
            "original_line": line,
            "side": side,
        }
        self.comments.append(comment)
        self.posted.append(comment)
        return comment

    def close(self) -> None:
        pass


@pytest.fixture
def fake_github() -> FakeGitHubClient:
    return FakeGitHubClient()
