"""Output mode: where the resolved file goes.

git merge drivers expect the result in the ``left`` (%A) file; jj and
``git mergetool`` pass an explicit output path. Mode is decided once
from the command line and never changes afterwards.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from claude_mergetool.core.errors import AmbiguousMode


class GitDriver(BaseModel):
    """Write the result over the left file."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["git"] = "git"

    def destination(self, left: Path) -> Path:
        return left


class JjOutput(BaseModel):
    """Write the result to an explicitly supplied path."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["output"] = "output"
    output: Path

    def destination(self, left: Path) -> Path:  # noqa: ARG002
        return self.output


Mode = Annotated[GitDriver | JjOutput, Field(discriminator="kind")]


def select_mode(git_merge_driver: bool, output: Path | None) -> Mode:
    """Pick the mode from the two mode flags.

    An explicit output path always wins; the git driver flag only
    supplies a default destination when no path is given.

    Raises:
        AmbiguousMode: If neither flag was given
    """
    if output is not None:
        return JjOutput(output=output.absolute())
    if git_merge_driver:
        return GitDriver()
    raise AmbiguousMode()
