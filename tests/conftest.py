"""Shared pytest fixtures for bw_secrets_operator tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from bw_secrets_operator.cli.main import app

ENV_PREFIXES = ("BW_",)
ENV_NAMES = ("WATCH_NAMESPACE",)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary operator config file."""
    config_path = tmp_path / "operator.yaml"
    config_path.write_text(
        """
refresh_interval: 600
bitwarden:
  api_url: https://vault.example.com/api
  identity_api_url: https://vault.example.com/identity
  state_path: /tmp/bw-state
kubernetes:
  namespace: team-a
  timeout: 10
"""
    )
    return config_path


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables for each test."""
    # Clear operator settings inherited from the calling shell
    for key in list(os.environ.keys()):
        if key.startswith(ENV_PREFIXES) or key in ENV_NAMES:
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_root_logger() -> Generator[None]:
    """Remove handlers added by configure_logging during a test."""
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    yield
    root.handlers = original_handlers


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app
