"""Pytest configuration and fixtures for fx-runner tests."""

import os
import stat
import sys
from pathlib import Path

import pytest

from fx_runner import lifecycle

DUMMY_BINARY = Path(__file__).parent / "utils" / "dummybinary.py"


def _write_script(path: Path, body: str) -> str:
    path.write_text(f"#!/bin/sh\n{body}\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def fake_binary(tmp_path):
    """Executable that echoes the arguments it received as JSON."""
    return _write_script(
        tmp_path / "firefox",
        f'exec "{sys.executable}" "{DUMMY_BINARY}" "$@"',
    )


@pytest.fixture
def sleeping_binary(tmp_path):
    """Executable that runs until it is signalled."""
    return _write_script(
        tmp_path / "sleepy-firefox",
        f'exec "{sys.executable}" -c "import time; time.sleep(60)"',
    )


@pytest.fixture
def clean_registry():
    """Leave the exit registry empty for the next test."""
    yield
    for child in lifecycle.active():
        child.kill()
        lifecycle.unregister(child)


@pytest.fixture
def no_binary_env(monkeypatch):
    """Run without fx-runner configuration from the environment."""
    monkeypatch.delenv("FX_RUNNER_BINARY", raising=False)
    monkeypatch.delenv("FX_RUNNER_LISTEN", raising=False)
    return os.environ
