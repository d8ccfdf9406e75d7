"""Result type for best-effort side calls.

Cache restore/save, artifact upload and individual review comments must never
fail the run. Instead of raising, they return an :class:`Attempt` which the
caller logs and otherwise ignores.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Attempt:
    """Outcome of an advisory operation.

    Attributes:
        action: Short description of what was attempted (used in log lines).
        ok: Whether the operation succeeded.
        error: Error message when ``ok`` is False.
        value: Optional value produced by the operation.
    """

    action: str
    ok: bool
    error: str | None = None
    value: Any = None

    @classmethod
    def succeeded(cls, action: str, value: Any = None) -> Attempt:
        return cls(action=action, ok=True, value=value)

    @classmethod
    def failed(cls, action: str, error: BaseException | str) -> Attempt:
        return cls(action=action, ok=False, error=str(error))

    def log(self, logger: logging.Logger) -> None:
        """Log a warning if the attempt failed."""
        if not self.ok:
            logger.warning("%s failed: %s", self.action, self.error)


def attempt(action: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Attempt:
    """Run ``func`` and capture any exception as a failed :class:`Attempt`."""
    try:
        return Attempt.succeeded(action, func(*args, **kwargs))
    except Exception as e:
        return Attempt.failed(action, e)
