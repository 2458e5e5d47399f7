"""Shared fixtures: every test runs against a throwaway liftlog home."""

import tempfile
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def liftlog_home(monkeypatch):
    """Point $LIFTLOG_HOME at an empty temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setenv("LIFTLOG_HOME", tmpdir)
        yield Path(tmpdir)


@pytest.fixture
def temp_data_dir():
    """Create a temporary directory for data files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
