"""RunResolver node - launch the resolver and relay its output."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic_graph import BaseNode, GraphRunContext
from rich.markup import escape

from claude_mergetool.conflict.context import UNKNOWN_FILE, ConflictContext
from claude_mergetool.conflict.prompt import ResolverPrompt
from claude_mergetool.core.config import State
from claude_mergetool.core.log import logger
from claude_mergetool.core.logdir import EventLog
from claude_mergetool.model.relay import EventRelay
from claude_mergetool.model.resolver import ClaudeResolver


def snapshot(path: Path) -> bytes | None:
    """Current bytes at path, or None when there is nothing to read."""
    try:
        return path.read_bytes()
    except OSError:
        return None


@dataclass
class RunResolver(BaseNode[State]):
    """Run the resolver once, blocking until it exits."""

    context: ConflictContext
    prompt: ResolverPrompt

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "Deliver":
        """Launch the resolver with live output on stderr.

        No retries: whatever the resolver returns is final.

        Returns:
            Deliver: Maps the exit status to an outcome
        """
        ctx.state.runtime.merge.stage = "launch"
        config = ctx.state.config
        context = self.context

        verify = config.resolver.verify_output
        before = snapshot(context.destination) if verify else None

        display_path = (
            context.display_path
            if context.display_path != UNKNOWN_FILE else None
        )

        with EventLog(
            config.log_root, display_path, enabled=config.event_log
        ) as event_log:
            relay = EventRelay(event_log=event_log)
            if display_path:
                relay.console.print(
                    "Resolving merge conflict in "
                    f"[underline]{escape(display_path)}[/underline]",
                    style="bold green",
                )

            resolver = ClaudeResolver(config.resolver, relay)
            with logger.span(
                "Run resolver", destination=str(context.destination)
            ):
                try:
                    returncode = resolver.invoke(
                        self.prompt,
                        workdir=Path.cwd(),
                        access=[
                            context.base.path,
                            context.left.path,
                            context.right.path,
                            context.destination,
                        ],
                    )
                finally:
                    relay.close()

        ctx.state.runtime.merge.stage = "resolver"

        from claude_mergetool.workflow.nodes.deliver import Deliver
        return Deliver(
            context, returncode, verify=verify, before=before
        )
