"""Tests for best-effort attempts and logging setup."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from gitleaks_ci.errors import (
    AcquisitionError,
    CommentPostError,
    GitHubAPIError,
    GitleaksCIError,
    UnsupportedArchiveFormat,
)
from gitleaks_ci.log import WorkflowCommandFormatter, escape_command_data, setup_logging
from gitleaks_ci.outcome import Attempt, attempt


class TestAttempt:
    """Tests for the Attempt result type."""

    def test_success_carries_value(self):
        result = attempt("Add", lambda a, b: a + b, 1, 2)
        assert result.ok is True
        assert result.value == 3
        assert result.error is None

    def test_exception_becomes_failed_attempt(self):
        def boom():
            raise OSError("disk full")

        result = attempt("Cache save", boom)

        assert result.ok is False
        assert result.error == "disk full"

    def test_log_warns_only_on_failure(self, caplog):
        logger = logging.getLogger("test.attempt")
        with caplog.at_level(logging.WARNING, logger="test.attempt"):
            Attempt.succeeded("Cache save").log(logger)
            Attempt.failed("Cache save", "disk full").log(logger)

        assert [r.getMessage() for r in caplog.records] == ["Cache save failed: disk full"]


class TestExceptions:
    def test_hierarchy(self):
        assert issubclass(UnsupportedArchiveFormat, AcquisitionError)
        assert issubclass(AcquisitionError, GitleaksCIError)
        assert issubclass(CommentPostError, GitHubAPIError)

    def test_api_error_keeps_status(self):
        error = CommentPostError("Validation Failed", status_code=422)
        assert str(error) == "Validation Failed"
        assert error.status_code == 422


class TestWorkflowCommandFormatter:
    """Records are rendered as GitHub workflow commands."""

    def _format(self, level: int, message: str) -> str:
        record = logging.LogRecord("gitleaks_ci", level, __file__, 1, message, None, None)
        return WorkflowCommandFormatter("%(message)s").format(record)

    def test_level_prefixes(self):
        assert self._format(logging.DEBUG, "dbg") == "::debug::dbg"
        assert self._format(logging.INFO, "info") == "info"
        assert self._format(logging.WARNING, "warn") == "::warning::warn"
        assert self._format(logging.ERROR, "err") == "::error::err"

    def test_multiline_messages_are_escaped(self):
        assert self._format(logging.WARNING, "a\nb 100%") == "::warning::a%0Ab 100%25"

    def test_escape_command_data(self):
        assert escape_command_data("x\r\ny") == "x%0D%0Ay"


class TestSetupLogging:
    def test_github_actions_mode(self):
        setup_logging(github_actions=True)
        logger = logging.getLogger("gitleaks_ci")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, WorkflowCommandFormatter)

    def test_local_mode_uses_rich(self):
        setup_logging(github_actions=False)
        logger = logging.getLogger("gitleaks_ci")
        assert logger.level == logging.INFO
        assert isinstance(logger.handlers[0], RichHandler)

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging(github_actions=True)
        setup_logging(github_actions=True)
        assert len(logging.getLogger("gitleaks_ci").handlers) == 1
