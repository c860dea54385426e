"""
Configuration management for Gate Installer.

Supports configuration via YAML files, environment variables, and programmatic access.
A resolved Config is immutable and passed explicitly to the installer.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATHS = [
    Path.home() / ".config" / "gate-installer" / "config.yaml",
    Path("gate-installer.yaml"),
]

DEFAULT_INSTALL_DIR = str(Path.home() / ".local" / "bin")
DEFAULT_TEMP_DIR = str(Path(tempfile.gettempdir()) / "gate-install")

# Sections used when writing a config file
_SECTIONS = {
    "release": (
        "repo_owner",
        "repo_name",
        "binary",
        "checksum_file",
        "api_base",
        "download_host",
        "request_timeout",
    ),
    "install": ("install_dir", "temp_dir", "min_free_mb", "hash_algorithm"),
    "output": ("log_level", "no_color"),
}


class ConfigError(ValueError):
    """Raised when configuration values cannot be parsed."""

    pass


@dataclass(frozen=True)
class Config:
    """
    Configuration container for Gate Installer.

    Priority (highest to lowest):
    1. Environment variables (prefixed with GATE_)
    2. Config file values
    3. Default values
    """

    # Release source
    repo_owner: str = "minekube"
    repo_name: str = "gate"
    binary: str = "gate"
    checksum_file: str = "checksums.txt"
    api_base: str = "https://api.github.com"
    download_host: str = "https://github.com"
    request_timeout: int | None = None

    # Install target
    install_dir: str = DEFAULT_INSTALL_DIR
    temp_dir: str = DEFAULT_TEMP_DIR
    min_free_mb: int = 50
    hash_algorithm: str = "sha256"

    # Output
    log_level: str = "INFO"
    no_color: bool = False

    @property
    def install_path(self) -> Path:
        """Final location of the installed executable."""
        return Path(self.install_dir).expanduser() / self.binary

    @property
    def release_api_url(self) -> str:
        """Release metadata endpoint for the latest published release."""
        return (
            f"{self.api_base.rstrip('/')}/repos/{self.repo_owner}/{self.repo_name}/releases/latest"
        )

    def download_base_url(self, version: str) -> str:
        """Base URL for the assets of a given release version."""
        return (
            f"{self.download_host.rstrip('/')}/{self.repo_owner}/{self.repo_name}"
            f"/releases/download/v{version}"
        )

    @property
    def color(self) -> bool:
        return not self.no_color

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create config from a dictionary."""
        # Flatten nested structure if present
        flat = {}
        for key, value in data.items():
            if isinstance(value, dict):
                for subkey, subvalue in value.items():
                    flat[subkey] = subvalue
            else:
                flat[key] = value

        # Filter to only known fields
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in flat.items() if k in known_fields}

        return cls(**filtered)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """
        Load configuration with full resolution order.

        Args:
            config_path: Explicit path to config file. If None, searches
                        default locations.

        Returns:
            Fully resolved Config instance.
        """
        base_config: dict[str, Any] = {}

        # Find and load config file
        candidates = [Path(config_path)] if config_path else DEFAULT_CONFIG_PATHS
        for path in candidates:
            if path.exists():
                try:
                    with open(path) as f:
                        base_config = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigError(f"Invalid YAML in {path}: {e}") from e
                break

        config = cls.from_dict(base_config) if base_config else cls()

        return config.with_env_overrides()

    def with_env_overrides(self, environ: dict[str, str] | None = None) -> Config:
        """Return a copy with environment variable overrides applied."""
        env = os.environ if environ is None else environ
        env_mappings = {
            "GATE_INSTALL_DIR": "install_dir",
            "GATE_TEMP_DIR": "temp_dir",
            "GATE_REPO_OWNER": "repo_owner",
            "GATE_REPO_NAME": "repo_name",
            "GATE_MIN_FREE_MB": "min_free_mb",
            "GATE_LOG_LEVEL": "log_level",
        }

        changes: dict[str, Any] = {}
        for env_var, attr in env_mappings.items():
            value = env.get(env_var)
            if value is None or value == "":
                continue
            # Type coercion
            current = getattr(self, attr)
            if isinstance(current, bool):
                changes[attr] = value.lower() in ("true", "1", "yes")
            elif isinstance(current, int):
                try:
                    changes[attr] = int(value)
                except ValueError as e:
                    raise ConfigError(f"{env_var} must be an integer, got {value!r}") from e
            else:
                changes[attr] = value

        # https://no-color.org: any non-empty value disables color
        if env.get("NO_COLOR"):
            changes["no_color"] = True

        return replace(self, **changes) if changes else self

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a sectioned dictionary."""
        return {
            section: {name: getattr(self, name) for name in names}
            for section, names in _SECTIONS.items()
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
