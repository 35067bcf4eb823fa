"""Tests for the failure taxonomy and RunOutcome."""

from pathlib import Path

import pytest

from claude_mergetool.core.errors import (
    AmbiguousMode,
    ExitCode,
    InputNotFound,
    InputReadError,
    ResolverFailed,
    ResolverLaunchFailed,
    ResolverNoOutput,
)
from claude_mergetool.core.result import RunOutcome

ALL_ERRORS = [
    InputNotFound("base", Path("/nope/base.txt")),
    InputReadError("left", Path("/x/left.txt"), PermissionError("denied")),
    AmbiguousMode(),
    ResolverLaunchFailed("claude", "not found on PATH"),
    ResolverFailed(1),
    ResolverNoOutput(Path("/x/out.txt"), "file does not exist"),
]


def test_every_failure_has_a_distinct_nonzero_exit_code():
    codes = [error.exit_code for error in ALL_ERRORS]

    assert all(code != ExitCode.RESOLVED for code in codes)
    assert len(set(codes)) == len(codes)


@pytest.mark.parametrize("error", ALL_ERRORS, ids=lambda e: e.reason)
def test_failed_outcome_carries_stage_and_code(error):
    outcome = RunOutcome.failed(error)

    assert not outcome.resolved
    assert outcome.exit_code == error.exit_code
    assert outcome.stage == error.stage
    assert outcome.describe() == f"error: [{error.stage}] {error}"


def test_success_outcome():
    outcome = RunOutcome.success(Path("/repo/file.txt"))

    assert outcome.resolved
    assert outcome.exit_code == 0
    assert "/repo/file.txt" in outcome.describe()


def test_resolver_failed_keeps_returncode():
    error = ResolverFailed(42)

    assert error.returncode == 42
    assert str(error) == "resolver exited with code 42"
    assert error.stage == "resolver"


def test_input_not_found_names_role_and_path():
    error = InputNotFound("right", Path("/tmp/right.txt"))

    assert str(error) == "right file not found: /tmp/right.txt"
    assert error.exit_code == ExitCode.INPUT_NOT_FOUND
