"""
Unit tests for host platform detection.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from gate_installer.errors import InstallerError, UnsupportedPlatform
from gate_installer.host import Platform, describe_host, detect_platform


class TestDetectPlatform:
    """Test mapping of kernel/machine names to release platforms."""

    @pytest.mark.parametrize(
        "system,machine,expected",
        [
            ("Linux", "x86_64", Platform("linux", "amd64")),
            ("Linux", "amd64", Platform("linux", "amd64")),
            ("Linux", "aarch64", Platform("linux", "arm64")),
            ("Linux", "arm64", Platform("linux", "arm64")),
            ("Linux", "i386", Platform("linux", "386")),
            ("Linux", "i686", Platform("linux", "386")),
            ("Darwin", "x86_64", Platform("darwin", "amd64")),
            ("Darwin", "arm64", Platform("darwin", "arm64")),
        ],
    )
    def test_supported_pairs(self, system, machine, expected):
        assert detect_platform(system, machine) == expected

    @pytest.mark.parametrize(
        "system,machine",
        [
            ("Windows", "AMD64"),
            ("FreeBSD", "amd64"),
            ("", "x86_64"),
            ("Linux", "armv7l"),
            ("Linux", "riscv64"),
            ("Darwin", "ppc"),
        ],
    )
    def test_unsupported_pairs(self, system, machine):
        with pytest.raises(UnsupportedPlatform):
            detect_platform(system, machine)

    def test_unsupported_platform_is_installer_error(self):
        with pytest.raises(InstallerError) as exc_info:
            detect_platform("SunOS", "sparc")
        assert exc_info.value.exit_code == 1
        assert "SunOS" in str(exc_info.value)

    def test_case_insensitive(self):
        assert detect_platform("LINUX", "X86_64") == Platform("linux", "amd64")

    @patch("gate_installer.host.platform.machine", return_value="aarch64")
    @patch("gate_installer.host.platform.system", return_value="Linux")
    def test_defaults_to_running_host(self, mock_system, mock_machine):
        assert detect_platform() == Platform("linux", "arm64")
        mock_system.assert_called_once()
        mock_machine.assert_called_once()

    def test_str(self):
        assert str(Platform("linux", "amd64")) == "linux/amd64"


class TestDescribeHost:
    """Test human readable host description."""

    @patch("gate_installer.host.distro.name", return_value="Fedora Linux 39 (Workstation Edition)")
    def test_linux_includes_distribution(self, mock_name):
        description = describe_host(Platform("linux", "amd64"))
        assert description == "Fedora Linux 39 (Workstation Edition) (linux/amd64)"

    @patch("gate_installer.host.distro.name", return_value="")
    def test_linux_without_distribution(self, mock_name):
        assert describe_host(Platform("linux", "386")) == "linux/386"

    @patch("gate_installer.host.platform.mac_ver", return_value=("14.1", ("", "", ""), "arm64"))
    def test_darwin(self, mock_mac_ver):
        assert describe_host(Platform("darwin", "arm64")) == "macOS 14.1 (darwin/arm64)"
