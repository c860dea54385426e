"""
Release metadata and artifact downloads.

Resolves the latest published release and fetches its assets over HTTPS.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import requests

from gate_installer.errors import DownloadError, VersionResolutionError

if TYPE_CHECKING:
    from gate_installer.config import Config
    from gate_installer.host import Platform

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class Release:
    """A specific downloadable build for one platform."""

    version: str
    binary_name: str
    download_url: str
    checksum_manifest_url: str


def strip_version_prefix(tag: str) -> str:
    """Strip a leading 'v' from a release tag (v1.2.3 -> 1.2.3)."""
    tag = tag.strip()
    if tag[:1] in ("v", "V"):
        return tag[1:]
    return tag


def build_release(config: Config, version: str, platform: Platform) -> Release:
    """Build the release descriptor for a version and platform."""
    binary_name = f"{config.binary}_{version}_{platform.os}_{platform.arch}"
    base_url = config.download_base_url(version)
    return Release(
        version=version,
        binary_name=binary_name,
        download_url=f"{base_url}/{binary_name}",
        checksum_manifest_url=f"{base_url}/{config.checksum_file}",
    )


class ReleaseClient:
    """
    HTTP client for the release source.

    Handles:
    - Latest release lookup through the release metadata API
    - Streaming downloads of release assets
    """

    def __init__(self, config: Config):
        self.config = config
        self.session = requests.Session()

        self.session.headers.update(
            {
                "User-Agent": f"gate-installer/{self._get_version()}",
            }
        )

    def resolve_latest_version(self) -> str:
        """
        Resolve the version of the latest published release.

        Returns:
            The version without its leading 'v'.

        Raises:
            VersionResolutionError: If the metadata cannot be fetched or
                carries no tag.
        """
        url = self.config.release_api_url
        logger.debug(f"Fetching release metadata from {url}")

        try:
            response = self.session.get(
                url,
                headers={"Accept": "application/vnd.github+json"},
                timeout=self.config.request_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise VersionResolutionError(f"Failed to fetch release metadata: {e}") from e
        except ValueError as e:
            raise VersionResolutionError(f"Release metadata is not valid JSON: {e}") from e

        tag = data.get("tag_name") if isinstance(data, dict) else None
        if not isinstance(tag, str) or not tag.strip():
            raise VersionResolutionError("Failed to determine latest version: no tag_name in release")

        version = strip_version_prefix(tag)
        if not version:
            raise VersionResolutionError(f"Failed to determine latest version from tag {tag!r}")

        logger.debug(f"Latest release tag {tag} -> version {version}")
        return version

    def download(self, url: str, destination: str | Path) -> Path:
        """
        Download a resource to a local path.

        Raises:
            DownloadError: If the transfer fails. Partial files are removed.
        """
        destination = Path(destination)
        logger.debug(f"Downloading {url} -> {destination}")

        try:
            with self.session.get(url, stream=True, timeout=self.config.request_timeout) as response:
                response.raise_for_status()
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.exceptions.RequestException as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {url}: {e}") from e
        except OSError as e:
            destination.unlink(missing_ok=True)
            raise DownloadError(f"Failed to write {destination}: {e}") from e

        return destination

    def _get_version(self) -> str:
        """Get gate-installer version."""
        try:
            from gate_installer import __version__

            return __version__
        except ImportError:
            return "unknown"
