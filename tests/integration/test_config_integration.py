"""
Integration tests for configuration resolution.

Tests default config file discovery combined with environment overrides.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
import yaml

from gate_installer import config as config_module
from gate_installer.config import Config


@pytest.mark.integration
class TestConfigResolution:
    """Test the full resolution order: defaults, file, environment."""

    def test_first_existing_default_path_wins(self, tmp_path):
        first = tmp_path / "first.yaml"
        second = tmp_path / "second.yaml"
        second.write_text(yaml.safe_dump({"release": {"repo_owner": "second"}}))

        with patch.object(config_module, "DEFAULT_CONFIG_PATHS", [first, second]):
            with patch.dict("os.environ", {}, clear=True):
                assert Config.load().repo_owner == "second"

            first.write_text(yaml.safe_dump({"release": {"repo_owner": "first"}}))
            with patch.dict("os.environ", {}, clear=True):
                assert Config.load().repo_owner == "first"

    def test_env_beats_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        Config(install_dir="/from/file", min_free_mb=70).save(path)

        with patch.object(config_module, "DEFAULT_CONFIG_PATHS", [path]):
            with patch.dict("os.environ", {"GATE_MIN_FREE_MB": "90"}, clear=True):
                config = Config.load()

        assert config.install_dir == "/from/file"
        assert config.min_free_mb == 90

    def test_no_config_files(self, tmp_path):
        with patch.object(config_module, "DEFAULT_CONFIG_PATHS", [tmp_path / "none.yaml"]):
            with patch.dict("os.environ", {}, clear=True):
                assert Config.load() == Config()
