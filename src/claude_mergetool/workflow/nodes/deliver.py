"""Deliver node - turn the resolver's exit status into an outcome."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from claude_mergetool.conflict.context import ConflictContext
from claude_mergetool.core.config import State
from claude_mergetool.core.errors import ResolverFailed, ResolverNoOutput
from claude_mergetool.core.log import logger
from claude_mergetool.core.result import RunOutcome


@dataclass
class Deliver(BaseNode[State, None, RunOutcome]):
    """Accept or reject what the resolver left behind.

    Exit status 0 is trusted as attempted completion. With
    ``verify`` set, the destination must also exist and differ from
    ``before``, the bytes it held when the resolver started.
    """

    context: ConflictContext
    returncode: int
    verify: bool = False
    before: bytes | None = None

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> End[RunOutcome]:
        destination = self.context.destination

        if self.returncode != 0:
            raise ResolverFailed(self.returncode)

        if self.verify:
            with logger.span("Verify output", destination=str(destination)):
                if not destination.is_file():
                    raise ResolverNoOutput(destination, "file does not exist")
                if destination.read_bytes() == self.before:
                    raise ResolverNoOutput(
                        destination, "file was not changed"
                    )

        ctx.state.runtime.merge.stage = "done"
        logger.info("Resolver finished", destination=str(destination))
        return End(RunOutcome.success(destination))
