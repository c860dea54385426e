"""
Checksum manifest parsing and verification.

Manifests use the coreutils format: one "<hex digest> <filename>" pair per line.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from gate_installer.errors import ChecksumMismatch

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def parse_manifest(text: str) -> dict[str, str]:
    """
    Parse checksum manifest text into a filename -> digest mapping.

    Blank lines and comments are skipped. A leading '*' on the filename
    (binary mode marker) is dropped. Digests are normalized to lowercase,
    the form hexdigest() produces.
    """
    records: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(None, 1)
        if len(parts) != 2:
            logger.debug(f"Skipping malformed manifest line: {line!r}")
            continue
        digest, filename = parts
        records[filename.strip().lstrip("*")] = digest.lower()
    return records


def file_digest(path: str | Path, algorithm: str = "sha256") -> str:
    """
    Compute the hex digest of a file.

    Raises:
        ValueError: If the hashing algorithm is not available.
    """
    hasher = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def verify_checksum(
    file: str | Path,
    manifest: str | Path,
    algorithm: str = "sha256",
) -> bool:
    """
    Verify a downloaded file against its checksum manifest.

    The manifest is always removed afterwards. On mismatch the downloaded
    file is removed as well.

    Args:
        file: Path to the downloaded file.
        manifest: Path to the checksum manifest.
        algorithm: hashlib algorithm name.

    Returns:
        True if the digest matched, False if verification was skipped
        because the algorithm is unavailable.

    Raises:
        ChecksumMismatch: If the digests differ or the manifest has no entry.
    """
    file = Path(file)
    manifest = Path(manifest)

    # Undecodable bytes leave no usable entry, which fails as a mismatch
    expected = parse_manifest(manifest.read_text(errors="replace")).get(file.name, "")

    try:
        actual = file_digest(file, algorithm)
    except ValueError:
        logger.warning(f"Hash algorithm '{algorithm}' unavailable, skipping checksum verification")
        manifest.unlink(missing_ok=True)
        return False

    if actual != expected:
        file.unlink(missing_ok=True)
        manifest.unlink(missing_ok=True)
        raise ChecksumMismatch(file.name, expected, actual)

    manifest.unlink(missing_ok=True)
    logger.debug(f"Checksum verified for {file.name}: {actual}")
    return True
