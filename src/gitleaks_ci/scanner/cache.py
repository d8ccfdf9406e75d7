"""Directory-backed cache for installed gitleaks binaries.

Entries live under ``<root>/gitleaks-ci/<key>`` where root is usually the
runner's tool cache. The cache is an optimization only: every operation
returns an :class:`~gitleaks_ci.outcome.Attempt` and never raises.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path

from gitleaks_ci.errors import CacheError
from gitleaks_ci.outcome import Attempt, attempt

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "gitleaks-ci"


class ToolCache:
    """Restore/save directories keyed by version, platform and architecture."""

    def __init__(self, root: Path | None) -> None:
        self.root = root / CACHE_NAMESPACE if root else None

    @property
    def enabled(self) -> bool:
        return self.root is not None

    def entry_path(self, key: str) -> Path:
        if self.root is None:
            raise CacheError("Tool cache is not configured")
        return self.root / key

    def restore(self, target: Path, key: str) -> Attempt:
        """Copy a cached entry into ``target``.

        Returns:
            Attempt whose ``value`` is True on a cache hit.
        """
        if not self.enabled:
            return Attempt.succeeded("Cache restore", False)
        return attempt("Cache restore", self._restore, target, key)

    def _restore(self, target: Path, key: str) -> bool:
        entry = self.entry_path(key)
        if not entry.is_dir():
            logger.debug("Cache miss for %s", key)
            return False
        try:
            shutil.copytree(entry, target, dirs_exist_ok=True)
        except OSError as e:
            raise CacheError(f"could not copy {entry} to {target}: {e}") from e
        return True

    def save(self, source: Path, key: str) -> Attempt:
        """Store ``source`` under ``key`` unless an entry already exists."""
        if not self.enabled:
            return Attempt.succeeded("Cache save", False)
        return attempt("Cache save", self._save, source, key)

    def _save(self, source: Path, key: str) -> bool:
        entry = self.entry_path(key)
        if entry.exists():
            return False

        # Copy next to the entry and rename, so readers never see a partial entry.
        staging = entry.with_name(f".{key}.{uuid.uuid4().hex}")
        try:
            entry.parent.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source, staging)
            os.replace(staging, entry)
        except OSError as e:
            shutil.rmtree(staging, ignore_errors=True)
            if entry.is_dir():
                # Another run saved the same key first.
                return False
            raise CacheError(f"could not save {source} as {key}: {e}") from e
        return True
