"""BuildContext node - read the three versions of the file."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from claude_mergetool.conflict.context import build_context
from claude_mergetool.conflict.request import MergeRequest
from claude_mergetool.core.config import State
from claude_mergetool.core.log import logger


@dataclass
class BuildContext(BaseNode[State]):
    """Load base, left and right into an immutable context."""

    request: MergeRequest

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "ComposePrompt":
        ctx.state.runtime.merge.stage = "input"

        with logger.span("Build conflict context"):
            context = build_context(self.request)

        from claude_mergetool.workflow.nodes.compose_prompt import (
            ComposePrompt,
        )
        return ComposePrompt(context)
