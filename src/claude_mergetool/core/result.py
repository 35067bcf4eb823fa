"""Terminal result of one merge invocation."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from claude_mergetool.core.errors import ExitCode, MergeToolError


class RunOutcome(BaseModel):
    """Exactly one of these is produced per invocation.

    Either the resolver exited 0 and the destination was handed to
    it (resolved), or some stage failed. The process exit code is
    derived from this object and nothing else.
    """

    model_config = ConfigDict(frozen=True)

    resolved: bool
    destination: Path | None = None
    stage: str | None = None
    reason: str | None = None
    message: str | None = None
    exit_code: ExitCode = ExitCode.RESOLVED

    @classmethod
    def success(cls, destination: Path) -> RunOutcome:
        return cls(resolved=True, destination=destination)

    @classmethod
    def failed(cls, error: MergeToolError) -> RunOutcome:
        return cls(
            resolved=False,
            stage=error.stage,
            reason=error.reason,
            message=str(error),
            exit_code=error.exit_code,
        )

    def describe(self) -> str:
        """Human-readable one-line diagnostic."""
        if self.resolved:
            return f"Resolved conflict written to {self.destination}"
        return f"error: [{self.stage}] {self.message}"
