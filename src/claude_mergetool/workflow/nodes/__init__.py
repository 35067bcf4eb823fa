"""Workflow nodes for the merge pipeline."""

from claude_mergetool.workflow.nodes.build_context import BuildContext
from claude_mergetool.workflow.nodes.compose_prompt import ComposePrompt
from claude_mergetool.workflow.nodes.deliver import Deliver
from claude_mergetool.workflow.nodes.resolve_mode import ResolveMode
from claude_mergetool.workflow.nodes.run_resolver import RunResolver

__all__ = [
    "ResolveMode",
    "BuildContext",
    "ComposePrompt",
    "RunResolver",
    "Deliver",
]
