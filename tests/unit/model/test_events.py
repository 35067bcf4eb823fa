"""Tests for stream-json event models and formatting helpers."""

import json

import pytest

from claude_mergetool.model.events import (
    AssistantEvent,
    OtherBlock,
    ResultEvent,
    TextBlock,
    ToolUseBlock,
    dollars,
    human_time,
    parse_event,
    tokens,
)

RESULT_LINE = json.dumps({
    "type": "result",
    "subtype": "success",
    "is_error": False,
    "duration_ms": 12340,
    "duration_api_ms": 11000,
    "num_turns": 4,
    "result": "Resolved.",
    "total_cost_usd": 0.0423,
    "usage": {"input_tokens": 1200, "output_tokens": 350},
    "modelUsage": {
        "claude-opus": {
            "inputTokens": 1200,
            "outputTokens": 350,
            "cacheReadInputTokens": 45000,
            "cacheCreationInputTokens": 0,
            "webSearchRequests": 0,
            "costUSD": 0.0423,
        }
    },
})


@pytest.mark.parametrize(("millis", "expected"), [
    (0, "0ms"),
    (123, "123ms"),
    (1500, "1.50s"),
    (59_999, "60.00s"),
    (60_000, "1m"),
    (125_000, "2m 5s"),
    (125_300, "2m 5s 300ms"),
    (3_600_000, "1h"),
])
def test_human_time(millis, expected):
    assert human_time(millis) == expected


@pytest.mark.parametrize(("count", "expected"), [
    (0, "0"),
    (999, "999"),
    (1500, "1.5k"),
    (1_234_567, "1.235m"),
])
def test_tokens(count, expected):
    assert tokens(count) == expected


@pytest.mark.parametrize(("amount", "expected"), [
    (0.0, "$0.0000"),
    (0.0123, "$0.0123"),
    (12.5, "$12.5000"),
    (1500, "$1.5k"),
])
def test_dollars(amount, expected):
    assert dollars(amount) == expected


def test_parse_result():
    event = parse_event(RESULT_LINE)

    assert isinstance(event, ResultEvent)
    assert event.succeeded
    assert event.num_turns == 4
    assert event.model_usage["claude-opus"].cache_read_input_tokens == 45000
    assert event.model_usage["claude-opus"].cost_usd == pytest.approx(0.0423)


def test_result_summary():
    event = parse_event(RESULT_LINE)

    assert event.summary() == (
        "Finished in 12.34s (11.00s API time). Total cost: $0.0423"
    )
    assert event.usage_lines() == [
        "Usage by model:",
        "    claude-opus: 1.2k input, 350 output, 45.0k cache read, "
        "0 cache write ($0.0423)",
    ]


def test_result_without_model_usage():
    event = parse_event('{"type":"result","subtype":"error_max_turns"}')

    assert isinstance(event, ResultEvent)
    assert not event.succeeded
    assert event.usage_lines() == []


def test_parse_assistant_blocks():
    line = json.dumps({
        "type": "assistant",
        "message": {
            "id": "msg_1",
            "content": [
                {"type": "text", "text": "Looking at the files."},
                {
                    "type": "tool_use",
                    "id": "tool_1",
                    "name": "Read",
                    "input": {"file_path": "/tmp/base.txt"},
                },
                {"type": "thinking", "thinking": "hmm"},
            ],
        },
    })

    event = parse_event(line)

    assert isinstance(event, AssistantEvent)
    text, tool, other = event.message.content
    assert isinstance(text, TextBlock)
    assert isinstance(tool, ToolUseBlock)
    assert tool.input.file_path == "/tmp/base.txt"
    assert isinstance(other, OtherBlock)


def test_tool_without_file_path():
    line = json.dumps({
        "type": "assistant",
        "message": {
            "content": [
                {"type": "tool_use", "name": "Bash", "input": {"command": "ls"}}
            ]
        },
    })

    (tool,) = parse_event(line).message.content

    assert tool.name == "Bash"
    assert tool.input.file_path is None


@pytest.mark.parametrize("line", [
    '{"type":"system","subtype":"init"}',
    '{"type":"user","message":{}}',
    'not json at all',
    '[1, 2, 3]',
])
def test_unknown_lines_are_skipped(line):
    assert parse_event(line) is None
