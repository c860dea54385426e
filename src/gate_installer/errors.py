"""
Installer error types.

Every error is fatal for an install run; the CLI maps them to exit codes.
"""

from __future__ import annotations


class InstallerError(Exception):
    """Base class for all errors that abort an install run."""

    exit_code: int = 1


class UnsupportedPlatform(InstallerError):
    """Raised when the host OS or architecture has no release build."""

    pass


class VersionResolutionError(InstallerError):
    """Raised when the latest release tag cannot be determined."""

    pass


class DownloadError(InstallerError):
    """Raised when a release artifact cannot be fetched."""

    pass


class ChecksumMismatch(InstallerError):
    """Raised when a downloaded file does not match its manifest digest."""

    def __init__(self, filename: str, expected: str, actual: str):
        self.filename = filename
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {filename}: "
            f"expected {expected or '<missing>'}, got {actual}"
        )


class InsufficientSpace(InstallerError):
    """Raised when the install location has too little free disk space."""

    def __init__(self, path: str, free_mb: int, required_mb: int):
        self.path = path
        self.free_mb = free_mb
        self.required_mb = required_mb
        super().__init__(
            f"Insufficient disk space at {path}: {free_mb}MB free, {required_mb}MB required"
        )


class InstallationError(InstallerError):
    """Raised when the install or temp directory cannot be prepared or written."""

    pass
