"""Failure taxonomy for a merge invocation.

Every failure is fatal to the current run. Each class carries the
pipeline stage it belongs to and the process exit code it maps to,
so the exit status is a pure function of the error class.
"""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path


class ExitCode(IntEnum):
    """Process exit statuses. Zero is the only success value."""

    RESOLVED = 0
    RESOLVER_FAILED = 1
    AMBIGUOUS_MODE = 2
    INPUT_NOT_FOUND = 3
    INPUT_READ_ERROR = 4
    RESOLVER_LAUNCH_FAILED = 5
    RESOLVER_NO_OUTPUT = 6
    SETUP_FAILED = 7


class MergeToolError(Exception):
    """Base class for all merge pipeline failures."""

    stage: str = "internal"
    exit_code: ExitCode = ExitCode.RESOLVER_FAILED

    @property
    def reason(self) -> str:
        """Short machine-friendly name of the failure class."""
        return type(self).__name__


class InputNotFound(MergeToolError):
    """A base/left/right path does not reference an existing file."""

    stage = "input"
    exit_code = ExitCode.INPUT_NOT_FOUND

    def __init__(self, role: str, path: Path):
        self.role = role
        self.path = path
        super().__init__(f"{role} file not found: {path}")


class InputReadError(MergeToolError):
    """An input file exists but could not be read."""

    stage = "input"
    exit_code = ExitCode.INPUT_READ_ERROR

    def __init__(self, role: str, path: Path, cause: OSError):
        self.role = role
        self.path = path
        super().__init__(f"failed to read {role} file {path}: {cause}")


class AmbiguousMode(MergeToolError):
    """Neither --git-merge-driver nor -o <path> was given."""

    stage = "mode"
    exit_code = ExitCode.AMBIGUOUS_MODE

    def __init__(self):
        super().__init__(
            "either --git-merge-driver or -o <path> is required"
        )


class ResolverLaunchFailed(MergeToolError):
    """The resolver process could not be started at all."""

    stage = "launch"
    exit_code = ExitCode.RESOLVER_LAUNCH_FAILED

    def __init__(self, program: str, detail: str):
        self.program = program
        super().__init__(f"failed to launch `{program}`: {detail}")


class ResolverFailed(MergeToolError):
    """The resolver ran and exited non-zero."""

    stage = "resolver"
    exit_code = ExitCode.RESOLVER_FAILED

    def __init__(self, returncode: int):
        self.returncode = returncode
        super().__init__(f"resolver exited with code {returncode}")


class ResolverNoOutput(MergeToolError):
    """The resolver exited 0 but left the destination untouched."""

    stage = "resolver"
    exit_code = ExitCode.RESOLVER_NO_OUTPUT

    def __init__(self, destination: Path, detail: str):
        self.destination = destination
        super().__init__(f"no usable output at {destination}: {detail}")


class SetupFailed(MergeToolError):
    """install or generate-config could not finish."""

    stage = "setup"
    exit_code = ExitCode.SETUP_FAILED


__all__ = [
    "ExitCode",
    "MergeToolError",
    "InputNotFound",
    "InputReadError",
    "AmbiguousMode",
    "ResolverLaunchFailed",
    "ResolverFailed",
    "ResolverNoOutput",
    "SetupFailed",
]
