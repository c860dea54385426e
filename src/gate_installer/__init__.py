"""
Gate Installer - Fetch and install prebuilt Gate release binaries.

Detects the host platform, resolves the latest published release,
verifies the download against the release checksum manifest and places
the executable on the user's PATH.
"""

__version__ = "0.3.0"
__author__ = "Minekube"

__all__ = ["__version__"]
