"""ResolveMode node - validate arguments and pick the output mode."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic_graph import BaseNode, GraphRunContext

from claude_mergetool.conflict.context import ConflictLabels
from claude_mergetool.conflict.request import resolve_request
from claude_mergetool.core.config import State
from claude_mergetool.core.log import logger


@dataclass
class ResolveMode(BaseNode[State]):
    """Entry node holding the raw merge arguments."""

    base: Path
    left: Path
    right: Path
    git_merge_driver: bool = False
    output: Path | None = None
    labels: ConflictLabels = field(default_factory=ConflictLabels)
    display_path: str | None = None
    marker_size: int | None = None

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "BuildContext":
        """Decide the mode and check the inputs exist.

        Returns:
            BuildContext: Loads the validated inputs
        """
        ctx.state.runtime.merge.stage = "mode"

        with logger.span("Resolve mode"):
            request = resolve_request(
                base=self.base,
                left=self.left,
                right=self.right,
                git_merge_driver=self.git_merge_driver,
                output=self.output,
                labels=self.labels,
                display_path=self.display_path,
                marker_size=self.marker_size,
            )

        from claude_mergetool.workflow.nodes.build_context import (
            BuildContext,
        )
        return BuildContext(request)
