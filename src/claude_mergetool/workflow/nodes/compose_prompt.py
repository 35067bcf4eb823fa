"""ComposePrompt node - render the resolver prompts."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from claude_mergetool.conflict.context import ConflictContext
from claude_mergetool.conflict.prompt import PromptComposer
from claude_mergetool.core.config import State
from claude_mergetool.core.log import logger


@dataclass
class ComposePrompt(BaseNode[State]):
    """Render system and user prompts from configured templates."""

    context: ConflictContext

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "RunResolver":
        ctx.state.runtime.merge.stage = "prompt"
        config = ctx.state.config

        composer = PromptComposer(
            system_template=config.prompts.system,
            user_template=config.prompts.user,
            extra_system_prompt=config.resolver.extra_system_prompt,
        )
        with logger.span("Compose prompt"):
            prompt = composer.compose(self.context)
            logger.trace("System prompt", prompt=prompt.system)
            logger.trace("User prompt", prompt=prompt.user)

        from claude_mergetool.workflow.nodes.run_resolver import RunResolver
        return RunResolver(self.context, prompt)
