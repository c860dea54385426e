"""
Host platform detection.

Maps the kernel name and machine type reported by the OS to the
os/arch pair used in release artifact names.
"""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass

import distro

from gate_installer.errors import UnsupportedPlatform

logger = logging.getLogger(__name__)

OS_MAP = {
    "linux": "linux",
    "darwin": "darwin",
}

ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i486": "386",
    "i586": "386",
    "i686": "386",
    "x86": "386",
}


@dataclass(frozen=True)
class Platform:
    """Normalized os/arch pair of the host."""

    os: str
    arch: str

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


def detect_platform(system: str | None = None, machine: str | None = None) -> Platform:
    """
    Detect the host platform.

    Args:
        system: Raw kernel name (defaults to platform.system()).
        machine: Raw machine type (defaults to platform.machine()).

    Returns:
        The normalized Platform.

    Raises:
        UnsupportedPlatform: If the OS or architecture has no release build.
    """
    raw_system = system if system is not None else platform.system()
    raw_machine = machine if machine is not None else platform.machine()

    os_name = OS_MAP.get(raw_system.strip().lower())
    if os_name is None:
        raise UnsupportedPlatform(f"Unsupported OS: {raw_system or 'unknown'}")

    arch = ARCH_MAP.get(raw_machine.strip().lower())
    if arch is None:
        raise UnsupportedPlatform(f"Unsupported architecture: {raw_machine or 'unknown'}")

    detected = Platform(os=os_name, arch=arch)
    logger.debug(f"Detected platform {detected} (system={raw_system}, machine={raw_machine})")
    return detected


def describe_host(detected: Platform) -> str:
    """Human readable host description, including the Linux distribution when known."""
    if detected.os == "linux":
        name = distro.name(pretty=True)
        if name:
            return f"{name} ({detected})"
    elif detected.os == "darwin":
        release = platform.mac_ver()[0]
        if release:
            return f"macOS {release} ({detected})"
    return str(detected)
