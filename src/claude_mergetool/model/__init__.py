"""External resolver: launch, event models and live relay."""

from claude_mergetool.model.relay import EventRelay
from claude_mergetool.model.resolver import (
    ClaudeResolver,
    Resolver,
    ResolverInvocation,
)

__all__ = [
    "ClaudeResolver",
    "EventRelay",
    "Resolver",
    "ResolverInvocation",
]
