"""Pytest configuration and fixtures for claude-mergetool tests."""

import stat
import tempfile
from pathlib import Path

import pytest

from claude_mergetool.core.log import ConsoleSink, setup_logger


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure logging for console-only mode during tests.

    This enables debug output during test runs without requiring
    authentication or sending logs to logfire.dev.
    """
    test_log_root = Path(tempfile.gettempdir()) / "claude-mergetool-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's own configuration and state out of tests.

    Runs every test from an empty directory, points the user config
    at a file that does not exist, and sends run logs to tmp_path.
    """
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    user_config = tmp_path / "user-config" / "config.yaml"
    for target in (
        "claude_mergetool.core.yaml_settings.user_config_path",
        "claude_mergetool.command.generate_config.user_config_path",
    ):
        monkeypatch.setattr(target, lambda: user_config)
    monkeypatch.setenv(
        "CLAUDE_MERGETOOL_CONFIG__LOG_ROOT", str(tmp_path / "state")
    )


@pytest.fixture
def make_script(tmp_path):
    """Factory writing executable POSIX shell scripts into tmp_path.

    Used as a stand-in for the resolver CLI.
    """
    def _make(body: str, name: str = "fake-claude") -> Path:
        script = tmp_path / "bin" / name
        script.parent.mkdir(exist_ok=True)
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP)
        return script

    return _make


@pytest.fixture
def conflict_files(tmp_path):
    """base.txt, left.txt and right.txt with a small textual conflict."""
    files = tmp_path / "conflict"
    files.mkdir()
    base = files / "base.txt"
    left = files / "left.txt"
    right = files / "right.txt"
    base.write_text("greeting = 'hello'\n")
    left.write_text("greeting = 'hello there'\n")
    right.write_text("greeting = 'hi'\n")
    return base, left, right
