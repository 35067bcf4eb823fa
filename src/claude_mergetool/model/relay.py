"""Live relay of resolver output to the terminal.

EventRelay is handed to invoke as the child's stdout stream. invoke
writes arbitrary chunks from its reader thread; the relay reassembles
them into lines and renders each event on stderr as soon as its line
is complete. Nothing here affects whether the merge succeeds.
"""

from __future__ import annotations

import os
import tempfile
from io import TextIOBase

from rich.console import Console
from rich.markdown import Markdown

from claude_mergetool.core.log import logger
from claude_mergetool.core.logdir import EventLog
from claude_mergetool.model.events import (
    AssistantEvent,
    ResultEvent,
    TextBlock,
    ToolUseBlock,
    parse_event,
)

TMPDIR_PLACEHOLDER = "$TMPDIR"

# Tools whose file argument is worth showing
FILE_TOOLS = frozenset({"Read", "Write", "Edit"})


def temp_dir_prefixes() -> list[str]:
    """System temp directory as given and as resolved, longest first.

    On macOS the two differ (/var/... vs /private/var/...) and the
    resolver may print either.
    """
    raw = tempfile.gettempdir()
    prefixes = {os.path.realpath(raw), raw}
    return sorted(prefixes, key=len, reverse=True)


class EventRelay(TextIOBase):
    """Text stream that turns stream-json lines into terminal output.

    Args:
        console: Where rendered output goes; stderr by default
        event_log: Receives every raw line, and result lines again
            as summaries
        temp_dirs: Prefixes shown as $TMPDIR
    """

    def __init__(
        self,
        console: Console | None = None,
        event_log: EventLog | None = None,
        temp_dirs: list[str] | None = None,
    ):
        super().__init__()
        self.console = console or Console(stderr=True, highlight=False)
        self.event_log = event_log
        self.temp_dirs = (
            temp_dirs if temp_dirs is not None else temp_dir_prefixes()
        )
        self.result: ResultEvent | None = None
        self._buffer: list[str] = []
        self._has_output = False

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        """Accept a chunk, handling every line it completes.

        A trailing partial line stays buffered until its newline
        arrives or the relay is closed.
        """
        if not text:
            return 0

        self._buffer.append(text)
        if '\n' in text:
            lines = ''.join(self._buffer).split('\n')
            self._buffer = [lines[-1]] if lines[-1] else []
            for line in lines[:-1]:
                self.handle_line(line)

        return len(text)

    def flush(self):
        # Partial lines are kept: invoke flushes after every chunk
        self.console.file.flush()

    def close(self):
        if not self.closed and self._buffer:
            remainder = ''.join(self._buffer)
            self._buffer = []
            self.handle_line(remainder)
        super().close()

    def handle_line(self, line: str) -> None:
        line = line.rstrip('\r')
        if not line.strip():
            return

        if self.event_log:
            self.event_log.log_event(line)

        event = parse_event(line)
        if event is None:
            logger.debug("Skipping resolver event", event=line)
            return

        if isinstance(event, ResultEvent):
            self.result = event
            if self.event_log:
                self.event_log.log_summary(line)
            self.render_result(event)
        elif isinstance(event, AssistantEvent):
            self.render_assistant(event)

    def redact(self, text: str) -> str:
        """Show temp directory paths as $TMPDIR."""
        for prefix in self.temp_dirs:
            text = text.replace(prefix, TMPDIR_PLACEHOLDER)
        return text

    def render_assistant(self, event: AssistantEvent) -> None:
        for block in event.message.content:
            if isinstance(block, TextBlock):
                text = block.text
                if not self._has_output:
                    text = text.lstrip('\n')
                if text:
                    self.console.print(Markdown(self.redact(text)))
                    self._has_output = True
            elif isinstance(block, ToolUseBlock):
                if block.name in FILE_TOOLS:
                    path = block.input.file_path or "?"
                    self.console.print(
                        self.redact(f"> {block.name} {path}"),
                        style="dim",
                        markup=False,
                    )
                else:
                    self.console.print(f"> {block.name}", markup=False)
                self._has_output = True

    def render_result(self, event: ResultEvent) -> None:
        if not event.succeeded:
            logger.warn("Resolver stopped early", subtype=event.subtype)
            self.console.print(
                f"Resolver stopped: {event.subtype}",
                style="bold yellow",
                markup=False,
            )
            self._has_output = True
            return

        self.console.print(
            self.redact(event.summary()), style="bold green", markup=False
        )
        for line in event.usage_lines():
            self.console.print(self.redact(line), style="dim", markup=False)
        self._has_output = True
