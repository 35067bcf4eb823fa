"""Conflict inputs: mode, request validation, context and prompts."""

from claude_mergetool.conflict.context import (
    ConflictContext,
    ConflictLabels,
    ConflictSide,
    build_context,
)
from claude_mergetool.conflict.mode import GitDriver, JjOutput, Mode, select_mode
from claude_mergetool.conflict.prompt import PromptComposer, ResolverPrompt
from claude_mergetool.conflict.request import MergeRequest, resolve_request

__all__ = [
    "ConflictContext",
    "ConflictLabels",
    "ConflictSide",
    "GitDriver",
    "JjOutput",
    "MergeRequest",
    "Mode",
    "PromptComposer",
    "ResolverPrompt",
    "build_context",
    "resolve_request",
    "select_mode",
]
