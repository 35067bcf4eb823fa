"""Models for the resolver's ``stream-json`` output.

Only the events we display are modelled: ``assistant`` messages and
the final ``result``. Anything else fails validation and is skipped
by the relay.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)
from pydantic.alias_generators import to_camel


class TextBlock(BaseModel):
    type: Literal["text"]
    text: str


class ToolInput(BaseModel):
    """Tool arguments; only the file path is ever shown."""

    file_path: str | None = None


class ToolUseBlock(BaseModel):
    type: Literal["tool_use"]
    name: str
    input: ToolInput = Field(default_factory=ToolInput)


class OtherBlock(BaseModel):
    """Thinking, images and whatever else a message may carry."""

    type: str


ContentBlock = Annotated[
    TextBlock | ToolUseBlock | OtherBlock,
    Field(union_mode="left_to_right"),
]


class AssistantMessage(BaseModel):
    content: list[ContentBlock] = Field(default_factory=list)


class AssistantEvent(BaseModel):
    type: Literal["assistant"]
    message: AssistantMessage


class Usage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_input_tokens: int = 0
    cache_creation_input_tokens: int = 0


class ModelUsage(BaseModel):
    """Per-model token counts. The resolver spells these in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_input_tokens: int = 0
    cache_creation_input_tokens: int = 0
    web_search_requests: int = 0
    cost_usd: float = Field(default=0.0, alias="costUSD")
    context_window: int | None = None
    max_output_tokens: int | None = None

    def describe(self) -> str:
        return (
            f"{tokens(self.input_tokens)} input, "
            f"{tokens(self.output_tokens)} output, "
            f"{tokens(self.cache_read_input_tokens)} cache read, "
            f"{tokens(self.cache_creation_input_tokens)} cache write "
            f"({dollars(self.cost_usd)})"
        )


class ResultEvent(BaseModel):
    """Last event of a run."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["result"]
    subtype: str
    is_error: bool = False
    duration_ms: int = 0
    duration_api_ms: int = 0
    num_turns: int = 0
    result: str | None = None
    total_cost_usd: float = 0.0
    usage: Usage = Field(default_factory=Usage)
    model_usage: dict[str, ModelUsage] = Field(
        default_factory=dict, alias="modelUsage"
    )

    @property
    def succeeded(self) -> bool:
        return self.subtype == "success"

    def summary(self) -> str:
        return (
            f"Finished in {human_time(self.duration_ms)} "
            f"({human_time(self.duration_api_ms)} API time). "
            f"Total cost: {dollars(self.total_cost_usd)}"
        )

    def usage_lines(self) -> list[str]:
        if not self.model_usage:
            return []
        return ["Usage by model:"] + [
            f"    {name}: {usage.describe()}"
            for name, usage in self.model_usage.items()
        ]


ResolverEvent = Annotated[
    AssistantEvent | ResultEvent, Field(discriminator="type")
]

_event_adapter = TypeAdapter(ResolverEvent)


def parse_event(line: str) -> AssistantEvent | ResultEvent | None:
    """Parse one JSON line, or None for anything we don't display."""
    try:
        return _event_adapter.validate_json(line)
    except ValidationError:
        return None


def human_time(millis: int) -> str:
    """Format a duration: ``123ms``, ``1.50s`` or ``2m 5s 300ms``."""
    if millis < 1000:
        return f"{millis}ms"
    if millis < 60_000:
        return f"{millis / 1000:.2f}s"

    parts = []
    remaining = millis
    for unit, size in (
        ("d", 86_400_000),
        ("h", 3_600_000),
        ("m", 60_000),
        ("s", 1000),
        ("ms", 1),
    ):
        count, remaining = divmod(remaining, size)
        if count:
            parts.append(f"{count}{unit}")
    return " ".join(parts)


def tokens(count: int) -> str:
    if count < 1_000:
        return str(count)
    if count < 1_000_000:
        return f"{count / 1_000:.1f}k"
    return f"{count / 1_000_000:.3f}m"


def dollars(amount: float) -> str:
    if amount < 1_000:
        return f"${amount:.4f}"
    return f"${amount / 1_000:.1f}k"
