"""
Pytest fixtures and configuration for Gate Installer tests.

Provides reusable fixtures for configurations, release payloads, and a local
HTTP server that mimics the release API and download host.
"""

from __future__ import annotations

import hashlib
import json
from http.server import BaseHTTPRequestHandler, HTTPServer
from threading import Thread
from unittest.mock import MagicMock

import pytest

from gate_installer.config import Config

FAKE_BINARY = b"#!/bin/sh\necho 'gate version v1.2.3'\n"


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def make_manifest(entries: dict[str, bytes]) -> str:
    """Build a checksum manifest for the given filename -> content pairs."""
    return "".join(f"{sha256_hex(data)}  {name}\n" for name, data in entries.items())


# Artifact Fixtures
@pytest.fixture
def fake_binary():
    """Content served as the release binary."""
    return FAKE_BINARY


@pytest.fixture
def manifest_text():
    """Factory building checksum manifest text from filename -> content pairs."""
    return make_manifest


# Configuration Fixtures
@pytest.fixture
def install_config(tmp_path):
    """Config that installs into a temporary directory."""
    return Config(
        install_dir=str(tmp_path / "bin"),
        temp_dir=str(tmp_path / "tmp"),
        api_base="https://api.example.test",
        download_host="https://dl.example.test",
    )


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file."""
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(
        """
release:
  repo_owner: example
  repo_name: gate-fork
install:
  install_dir: /opt/gate/bin
  min_free_mb: 100
output:
  log_level: DEBUG
"""
    )
    return config_file


# Release API Fixtures
@pytest.fixture
def release_payload():
    """Release metadata as returned by the GitHub releases API."""
    return {
        "tag_name": "v1.2.3",
        "name": "v1.2.3",
        "draft": False,
        "prerelease": False,
        "assets": [
            {"name": "gate_1.2.3_linux_amd64"},
            {"name": "gate_1.2.3_darwin_arm64"},
            {"name": "checksums.txt"},
        ],
    }


@pytest.fixture
def mock_json_response():
    """Factory for successful mocked requests responses with a JSON body."""

    def make(data):
        response = MagicMock()
        response.status_code = 200
        response.ok = True
        response.json.return_value = data
        response.raise_for_status.return_value = None
        return response

    return make


# HTTP Server Fixtures
class ReleaseServerHandler(BaseHTTPRequestHandler):
    """Serves release metadata and assets from the server's `routes` table."""

    def do_GET(self):
        self.server.requests.append(self.path)
        route = self.server.routes.get(self.path)
        if route is None:
            self.send_response(404)
            self.end_headers()
            return

        status, body = route
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        """Suppress server log messages."""
        pass


@pytest.fixture
def release_server():
    """Local release host serving v1.2.3 of gate for linux/amd64."""
    server = HTTPServer(("localhost", 0), ReleaseServerHandler)
    server.requests = []
    binary_name = "gate_1.2.3_linux_amd64"
    server.routes = {
        "/repos/minekube/gate/releases/latest": (
            200,
            json.dumps({"tag_name": "v1.2.3"}).encode(),
        ),
        f"/minekube/gate/releases/download/v1.2.3/{binary_name}": (200, FAKE_BINARY),
        "/minekube/gate/releases/download/v1.2.3/checksums.txt": (
            200,
            make_manifest({binary_name: FAKE_BINARY}).encode(),
        ),
    }
    thread = Thread(target=server.serve_forever, daemon=True)
    thread.start()

    server.base_url = f"http://localhost:{server.server_address[1]}"
    yield server

    server.shutdown()
    server.server_close()


# Pytest Configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "cli: marks command-line interface tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "e2e: marks tests as end-to-end tests")
