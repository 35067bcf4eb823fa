"""Merge command - resolve one conflicted file."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PositiveInt
from pydantic_graph import End
from pydantic_settings import CliPositionalArg

from claude_mergetool.conflict.context import UNKNOWN_FILE, ConflictLabels
from claude_mergetool.core.errors import MergeToolError
from claude_mergetool.core.log import logger
from claude_mergetool.core.result import RunOutcome

if TYPE_CHECKING:
    from claude_mergetool.core.config import State


class MergeCommand(BaseModel):
    """Resolve a merge conflict using Claude.

    Accepts both invocation shapes:
      git merge driver:  merge --git BASE LEFT RIGHT  (result replaces LEFT)
      jj / mergetool:    merge $base $left $right -o $output -p $path

    When both --git and -o are given, -o wins.
    Exits 0 when the resolver reports success, non-zero otherwise.
    """

    model_config = ConfigDict(populate_by_name=True)

    base: CliPositionalArg[Path] = Field(
        description="Base version (common ancestor)"
    )
    left: CliPositionalArg[Path] = Field(
        description="Left version (ours / current branch)"
    )
    right: CliPositionalArg[Path] = Field(
        description="Right version (theirs / incoming)"
    )
    git_merge_driver: bool = Field(
        default=False,
        validation_alias=AliasChoices("git-merge-driver", "git"),
        description="Git merge driver mode (writes result to LEFT)",
    )
    output: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("o", "output"),
        description="Output file path (jj mode)",
    )
    ancestor_label: str | None = Field(
        default=None,
        alias="s",
        description="Base conflict label",
    )
    left_label: str = Field(
        default="ours",
        alias="x",
        description="Left/ours conflict label",
    )
    right_label: str = Field(
        default="theirs",
        alias="y",
        description="Right/theirs conflict label",
    )
    filepath: str = Field(
        default=UNKNOWN_FILE,
        alias="p",
        description="Original file path, shown in the prompt only",
    )
    marker_size: PositiveInt | None = Field(
        default=None,
        alias="l",
        description="Conflict marker size",
    )

    def labels(self) -> ConflictLabels:
        return ConflictLabels(
            base=self.ancestor_label,
            left=self.left_label,
            right=self.right_label,
        )

    async def run_workflow(self, state: State) -> int:
        """Run the merge pipeline once.

        Args:
            state: State instance with config loaded

        Returns:
            Exit code derived from the run outcome (0=resolved)
        """
        from claude_mergetool.workflow.graph import create_workflow
        from claude_mergetool.workflow.nodes.resolve_mode import ResolveMode

        workflow = create_workflow()
        start = ResolveMode(
            base=self.base,
            left=self.left,
            right=self.right,
            git_merge_driver=self.git_merge_driver,
            output=self.output,
            labels=self.labels(),
            display_path=self.filepath,
            marker_size=self.marker_size,
        )

        outcome = None
        try:
            async with workflow.iter(start, state=state) as run:
                async for node in run:
                    if isinstance(node, End):
                        outcome = node.data
        except MergeToolError as e:
            outcome = RunOutcome.failed(e)

        if outcome is None:
            # Every path through the graph ends in End or an error
            raise RuntimeError("merge workflow ended without an outcome")

        state.runtime.merge.outcome = outcome
        report(outcome)
        return int(outcome.exit_code)


def report(outcome: RunOutcome) -> None:
    """Write the final diagnostic for a failed run to stderr."""
    if outcome.resolved:
        logger.debug(outcome.describe())
        return
    logger.debug(
        "Merge failed",
        stage=outcome.stage,
        reason=outcome.reason,
        exit_code=int(outcome.exit_code),
    )
    print(outcome.describe(), file=sys.stderr)
