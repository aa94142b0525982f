"""Pytest configuration and shared fixtures."""

import io
import os

import pytest
from rich.console import Console

from cfn_runner.config import Config
from cfn_runner.output import StatusOutput


# Set AWS region for all tests to avoid NoRegionError
@pytest.fixture(autouse=True, scope="session")
def set_aws_region():
    """Set AWS region for all tests."""
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
    os.environ["AWS_REGION"] = "us-east-1"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config directory at a temp dir so tests never touch ~/.cfnrunner."""
    config_dir = tmp_path / ".cfnrunner"
    monkeypatch.setattr(Config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(Config, "CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr(Config, "PROFILES_DIR", config_dir / "profiles")
    return config_dir


@pytest.fixture
def console_buffer():
    """StringIO that receives plain (uncolored) console output."""
    return io.StringIO()


@pytest.fixture
def output(console_buffer):
    """StatusOutput writing to console_buffer."""
    return StatusOutput(Console(file=console_buffer, force_terminal=False, width=240, highlight=False))
