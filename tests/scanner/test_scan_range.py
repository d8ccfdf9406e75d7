"""Tests for scan range resolution."""

from __future__ import annotations

import pytest

from gitleaks_ci.errors import ConfigurationError
from gitleaks_ci.events import EventPayload
from gitleaks_ci.scanner.models import ScanRange
from gitleaks_ci.scanner.scan_range import (
    range_from_commits,
    resolve_pull_request_range,
    resolve_push_range,
)

REPOSITORY = {"full_name": "octo/repo", "name": "repo", "owner": {"login": "octo"}}


def _push(*commit_ids: str) -> EventPayload:
    return EventPayload.model_validate(
        {"repository": REPOSITORY, "commits": [{"id": c} for c in commit_ids]}
    )


def _pull_request(base: str | None = "aaa1111", head: str | None = "bbb2222") -> EventPayload:
    data = {"repository": REPOSITORY, "number": 7}
    if base and head:
        data["pull_request"] = {"base": {"sha": base}, "head": {"sha": head}}
    return EventPayload.model_validate(data)


class TestScanRange:
    def test_full_history(self):
        scan_range = ScanRange()
        assert scan_range.is_full_history
        assert scan_range.log_opts() is None

    def test_single_commit(self):
        assert ScanRange("abc", "abc").log_opts() == "-1"

    def test_commit_range(self):
        assert ScanRange("aaa1111", "bbb2222").log_opts() == (
            "--no-merges --first-parent aaa1111^..bbb2222"
        )

    def test_refs_are_set_together(self):
        with pytest.raises(ValueError):
            ScanRange(base_ref="aaa1111")


class TestPushRange:
    def test_first_to_last_commit(self):
        assert resolve_push_range(_push("c1", "c2", "c3")) == ScanRange("c1", "c3")

    def test_single_commit_push(self):
        scan_range = resolve_push_range(_push("c1"))
        assert scan_range is not None
        assert scan_range.log_opts() == "-1"

    def test_base_ref_override(self, caplog):
        with caplog.at_level("INFO"):
            scan_range = resolve_push_range(_push("c1", "c2"), base_ref="main")

        assert scan_range == ScanRange("main", "c2")
        assert "Overriding baseRef for scan with main." in caplog.text

    def test_empty_push_scans_nothing(self):
        assert resolve_push_range(_push()) is None


class TestPullRequestRange:
    def test_prefers_payload_shas(self, fake_github):
        scan_range = resolve_pull_request_range(_pull_request(), fake_github)

        assert scan_range == ScanRange("aaa1111", "bbb2222")
        assert fake_github.calls == []

    def test_falls_back_to_commit_listing(self, fake_github):
        fake_github.commits = [{"sha": "c1"}, {"sha": "c2"}, {"sha": "c3"}]

        scan_range = resolve_pull_request_range(_pull_request(None, None), fake_github)

        assert scan_range == ScanRange("c1", "c3")
        assert fake_github.calls == [("list_pull_request_commits", "octo", "repo", 7)]

    def test_base_ref_override_lists_commits(self, fake_github):
        fake_github.commits = [{"sha": "c1"}, {"sha": "c2"}]

        scan_range = resolve_pull_request_range(_pull_request(), fake_github, base_ref="main")

        assert scan_range == ScanRange("main", "c2")

    def test_pull_request_without_commits(self, fake_github):
        assert resolve_pull_request_range(_pull_request(None, None), fake_github) is None

    def test_missing_number(self, fake_github):
        payload = EventPayload.model_validate({"repository": REPOSITORY})
        with pytest.raises(ConfigurationError, match="no number"):
            resolve_pull_request_range(payload, fake_github)


def test_range_from_commits_empty():
    assert range_from_commits([]) is None
