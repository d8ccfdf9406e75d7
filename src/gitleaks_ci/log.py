"""Logging helpers for gitleaks-ci.

Inside GitHub Actions, records are written to stdout as workflow commands so
warnings and errors are annotated on the run and debug lines only show up
when step debugging is enabled. Locally, rich renders the log.
"""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

console = Console()

_COMMAND_PREFIXES = {
    logging.DEBUG: "::debug::",
    logging.WARNING: "::warning::",
    logging.ERROR: "::error::",
    logging.CRITICAL: "::error::",
}


def escape_command_data(message: str) -> str:
    """Escape a message so it survives as workflow command data."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandFormatter(logging.Formatter):
    """Format records as GitHub Actions workflow commands."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        prefix = _COMMAND_PREFIXES.get(record.levelno)
        if prefix is None:
            return message
        return f"{prefix}{escape_command_data(message)}"


def setup_logging(github_actions: bool = False, debug: bool = False) -> None:
    """Configure the ``gitleaks_ci`` logger for CI or local use."""
    logger = logging.getLogger("gitleaks_ci")
    logger.handlers.clear()
    logger.propagate = False

    if github_actions:
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(WorkflowCommandFormatter("%(message)s"))
        # The runner hides ::debug:: lines unless step debugging is on.
        logger.setLevel(logging.DEBUG)
    else:
        handler = RichHandler(console=console, show_path=False, markup=False)
        logger.setLevel(logging.DEBUG if debug else logging.INFO)

    logger.addHandler(handler)


__all__ = ["WorkflowCommandFormatter", "console", "escape_command_data", "setup_logging"]
