"""
Core orchestration module for Gate Installer.

Runs the install procedure: disk space check, platform detection, version
resolution, download, checksum verification and placement of the binary.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

import psutil

from gate_installer.checksum import verify_checksum
from gate_installer.config import Config
from gate_installer.errors import DownloadError, InstallationError, InsufficientSpace
from gate_installer.host import Platform, describe_host, detect_platform
from gate_installer.release import ReleaseClient, build_release
from gate_installer.shell import is_on_path, update_session_path

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"v?(\d+\.\d+\.\d+[0-9A-Za-z.+-]*)")


@dataclass
class InstallResult:
    """Outcome of a successful install run."""

    path: Path
    version: str
    platform: Platform
    previous_version: str | None = None
    checksum_verified: bool = True
    on_path: bool = True

    @property
    def updated(self) -> bool:
        return self.previous_version is not None


def free_space_mb(path: str | Path) -> int:
    """Free disk space in megabytes on the filesystem holding path."""
    return int(psutil.disk_usage(str(path)).free // (1024 * 1024))


def installed_version(binary: str | Path, timeout: int = 10) -> str:
    """
    Query the version of an installed binary.

    Best effort: any failure yields "unknown".
    """
    try:
        result = subprocess.run(
            [str(binary), "version"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.debug(f"Version query timed out: {binary}")
        return "unknown"
    except OSError as e:
        logger.debug(f"Version query failed for {binary}: {e}")
        return "unknown"

    if result.returncode != 0:
        return "unknown"

    output = result.stdout.strip()
    match = VERSION_PATTERN.search(output)
    if match:
        return match.group(1)
    return output.splitlines()[0] if output else "unknown"


class Installer:
    """
    Installs the latest release binary for the host platform.

    All steps are sequential and fail fast: any InstallerError aborts the run.
    """

    def __init__(self, config: Config | None = None, client: ReleaseClient | None = None):
        self.config = config or Config()
        self.client = client or ReleaseClient(self.config)

    def check_disk_space(self, path: str | Path) -> int:
        """
        Ensure the filesystem holding path has enough free space.

        Returns:
            Free space in megabytes.

        Raises:
            InsufficientSpace: If free space is below the configured minimum.
        """
        free_mb = free_space_mb(path)
        if free_mb < self.config.min_free_mb:
            raise InsufficientSpace(str(path), free_mb, self.config.min_free_mb)
        logger.debug(f"{free_mb}MB free at {path}")
        return free_mb

    def install(self) -> InstallResult:
        """
        Run the full install.

        Returns:
            InstallResult describing the installed binary.

        Raises:
            InstallerError: On any failed step.
        """
        install_dir = Path(self.config.install_dir).expanduser()
        temp_dir = Path(self.config.temp_dir).expanduser()
        target = self.config.install_path

        for directory in (install_dir, temp_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise InstallationError(f"Cannot create directory {directory}: {e}") from e

        self.check_disk_space(install_dir)

        platform = detect_platform()
        logger.info(f"Detected platform: {describe_host(platform)}")

        version = self.client.resolve_latest_version()
        logger.info(f"Latest version: {version}")

        previous_version = None
        if target.exists():
            previous_version = installed_version(target)
            logger.info(f"Updating {self.config.binary} from {previous_version} to {version}")

        release = build_release(self.config, version, platform)
        binary_tmp = temp_dir / release.binary_name
        manifest_tmp = temp_dir / self.config.checksum_file

        try:
            logger.info(f"Downloading {release.binary_name}")
            self.client.download(release.download_url, binary_tmp)
            self.client.download(release.checksum_manifest_url, manifest_tmp)
        except DownloadError:
            binary_tmp.unlink(missing_ok=True)
            manifest_tmp.unlink(missing_ok=True)
            raise

        verified = verify_checksum(binary_tmp, manifest_tmp, self.config.hash_algorithm)

        self._place(binary_tmp, target)
        logger.info(f"Installed {self.config.binary} {version} to {target}")

        on_path = is_on_path(install_dir)
        update_session_path(install_dir)

        return InstallResult(
            path=target,
            version=version,
            platform=platform,
            previous_version=previous_version,
            checksum_verified=verified,
            on_path=on_path,
        )

    def _place(self, source: Path, target: Path) -> None:
        """
        Move a verified binary into place, replacing any previous install atomically.

        Raises:
            InstallationError: If the binary cannot be moved into place. The
                downloaded file is removed and any previous install is kept.
        """
        staging = target.with_name(f".{target.name}.new")
        try:
            shutil.move(str(source), str(staging))
            staging.chmod(0o755)
            os.replace(staging, target)
        except OSError as e:
            source.unlink(missing_ok=True)
            staging.unlink(missing_ok=True)
            raise InstallationError(f"Cannot install {target}: {e}") from e


def run_install(config: Config | None = None) -> InstallResult:
    """Convenience function to run an install with the given configuration."""
    return Installer(config).install()
