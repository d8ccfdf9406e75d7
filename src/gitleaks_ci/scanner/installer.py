"""gitleaks binary installation with tool-cache support.

This module provides:
- Release URL construction per platform and architecture
- Cache restore/save keyed by version, platform and architecture
- Archive download and safe extraction (.tar.gz and .zip)
- Exposing the install directory on PATH
"""

from __future__ import annotations

import logging
import platform
import stat
import sys
import tarfile
import tempfile
import urllib.request
import zipfile
from pathlib import Path
from typing import ClassVar

from gitleaks_ci.config import LATEST_VERSION
from gitleaks_ci.errors import AcquisitionError, UnsupportedArchiveFormat
from gitleaks_ci.github.workflow import RunnerEnvironment
from gitleaks_ci.scanner.cache import ToolCache

logger = logging.getLogger(__name__)

GITLEAKS_OWNER = "zricethezav"
GITLEAKS_REPO = "gitleaks"
RELEASE_BASE_URL = f"https://github.com/{GITLEAKS_OWNER}/{GITLEAKS_REPO}/releases/download"

# Platform names as used in release asset names.
PLATFORM_ALIASES: dict[str, str] = {"win32": "windows"}


def get_platform_info() -> tuple[str, str]:
    """
    Return the current platform and architecture in release-asset terms.

    Returns:
        tuple: (platform, arch) where platform is ``sys.platform`` (e.g. "linux",
        "darwin", "win32") and arch is one of gitleaks' architecture names
        (e.g. "x64", "arm64") or the lowercased machine string.
    """
    machine = platform.machine().lower()
    arch = GitleaksInstaller.ARCH_MAP.get(machine, machine)
    return sys.platform, arch


def normalize_platform(platform_name: str) -> str:
    return PLATFORM_ALIASES.get(platform_name, platform_name)


def build_release_url(version: str, platform_name: str, arch: str) -> str:
    """Release archive URL; Windows builds ship as .zip, everything else as .tar.gz."""
    os_name = normalize_platform(platform_name)
    ext = "zip" if os_name == "windows" else "tar.gz"
    filename = f"{GITLEAKS_REPO}_{version}_{os_name}_{arch}.{ext}"
    return f"{RELEASE_BASE_URL}/v{version}/{filename}"


def build_cache_key(version: str, platform_name: str, arch: str) -> str:
    return f"gitleaks-cache-{version}-{platform_name}-{arch}"


def get_install_path(version: str, root: Path) -> Path:
    return root / f"gitleaks-{version}"


class GitleaksInstaller:
    """Installer for the gitleaks binary."""

    ARCH_MAP: ClassVar[dict[str, str]] = {
        "x86_64": "x64",
        "amd64": "x64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "armv7l": "armv7",
        "armv6l": "armv6",
        "i386": "x32",
        "i686": "x32",
    }

    def __init__(
        self,
        version: str,
        install_root: Path,
        cache: ToolCache | None = None,
        runner: RunnerEnvironment | None = None,
    ) -> None:
        """
        Initialize a GitleaksInstaller.

        Parameters:
            version: Concrete gitleaks version (e.g. "8.24.3"); "latest" must be resolved first.
            install_root: Directory under which ``gitleaks-<version>`` is created.
            cache: Tool cache consulted before downloading.
            runner: Runner environment used to expose the install directory on PATH.
        """
        if version.strip().lower() == LATEST_VERSION:
            raise ValueError("GitleaksInstaller needs a concrete version, resolve 'latest' first")
        self.version = version.removeprefix("v")
        self.install_root = install_root
        self.cache = cache or ToolCache(None)
        self.runner = runner or RunnerEnvironment()

    @property
    def install_path(self) -> Path:
        return get_install_path(self.version, self.install_root)

    @property
    def binary_path(self) -> Path:
        binary_name = "gitleaks.exe" if sys.platform == "win32" else "gitleaks"
        return self.install_path / binary_name

    def install(self) -> Path:
        """
        Make gitleaks available and return its install directory.

        The binary is taken from a previous install in the same job, then from
        the tool cache, and downloaded only when both miss.

        Returns:
            Path: The install directory, also added to PATH.

        Raises:
            AcquisitionError: If the download or extraction fails.
        """
        platform_name, arch = get_platform_info()
        install_path = self.install_path
        cache_key = build_cache_key(self.version, platform_name, arch)

        logger.info("Installing gitleaks %s to %s", self.version, install_path)

        if self.binary_path.is_file():
            logger.info("gitleaks %s already installed", self.version)
        else:
            restored = self.cache.restore(install_path, cache_key)
            restored.log(logger)
            if restored.ok and restored.value and self.binary_path.is_file():
                logger.info("gitleaks restored from cache")
            else:
                url = build_release_url(self.version, platform_name, arch)
                self.download_and_extract(url, install_path)
                self.cache.save(install_path, cache_key).log(logger)

        self.runner.add_path(install_path)
        return install_path

    def download_and_extract(self, url: str, target_dir: Path) -> None:
        """Download the release archive at ``url`` and extract it into ``target_dir``.

        Raises:
            AcquisitionError: If download or extraction fails.
            UnsupportedArchiveFormat: If the URL is neither .zip nor .tar.gz.
        """
        logger.info("Downloading gitleaks from %s", url)
        self.install_root.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(dir=self.install_root) as tmp_dir:
            archive_path = Path(tmp_dir) / url.split("/")[-1]

            try:
                urllib.request.urlretrieve(url, archive_path)  # nosec B310
            except Exception as e:
                logger.error("Failed to download from %s: %s", url, e)
                raise AcquisitionError(f"Download failed: {e}") from e

            target_dir.mkdir(parents=True, exist_ok=True)
            if url.endswith(".zip"):
                self._extract_zip(archive_path, target_dir)
            elif url.endswith(".tar.gz"):
                self._extract_tar_gz(archive_path, target_dir)
            else:
                raise UnsupportedArchiveFormat(f"Unsupported archive format: {url}")

        binary = self.binary_path
        if not binary.is_file():
            raise AcquisitionError(f"Binary '{binary.name}' not found in archive")
        if sys.platform != "win32":
            binary.chmod(binary.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    def _extract_tar_gz(self, archive_path: Path, target_dir: Path) -> None:
        """Extract a .tar.gz archive, rejecting members that escape ``target_dir``."""
        try:
            with tarfile.open(archive_path, "r:gz") as tar:
                for member in tar.getmembers():
                    member_path = target_dir / member.name
                    if not member_path.resolve().is_relative_to(target_dir.resolve()):
                        raise AcquisitionError(f"Unsafe path in archive: {member.name}")
                tar.extractall(target_dir, filter="data")  # nosec B202
        except (tarfile.TarError, OSError) as e:
            raise AcquisitionError(f"Extraction failed: {e}") from e

    def _extract_zip(self, archive_path: Path, target_dir: Path) -> None:
        """Extract a .zip archive, rejecting members that escape ``target_dir``."""
        try:
            with zipfile.ZipFile(archive_path, "r") as zip_ref:
                for name in zip_ref.namelist():
                    member_path = target_dir / name
                    if not member_path.resolve().is_relative_to(target_dir.resolve()):
                        raise AcquisitionError(f"Unsafe path in archive: {name}")
                zip_ref.extractall(target_dir)  # nosec B202
        except (zipfile.BadZipFile, OSError) as e:
            raise AcquisitionError(f"Extraction failed: {e}") from e
