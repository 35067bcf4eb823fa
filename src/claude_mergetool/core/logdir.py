"""Per-run resolver event logs."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import IO

from claude_mergetool.core.log import logger

SUMMARY_FILE = "summary.jsonl"


def sanitize_filepath(path: str) -> str:
    """Make a display path usable as part of a file name."""
    for char in ('/', '\\', ' '):
        path = path.replace(char, '_')
    return path


class EventLog:
    """Raw resolver events for one run, plus a shared summary file.

    Layout under ``<log_root>/logs``:
        <timestamp>_<file>.jsonl  every event line of this run
        summary.jsonl             result lines of all runs, appended

    Logging here is best effort. Any I/O failure is reported as a
    warning and disables the affected file; it never fails a merge.
    """

    def __init__(
        self,
        log_root: Path,
        display_path: str | None = None,
        enabled: bool = True,
    ):
        """Create the log directory and open this run's event file.

        Args:
            log_root: Root directory for log files
            display_path: File being merged, used in the file name
            enabled: When False, nothing is ever written
        """
        self.event_path: Path | None = None
        self.summary_path: Path | None = None
        self._event_file: IO[str] | None = None

        if not enabled:
            return

        log_dir = Path(log_root) / "logs"
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warn(
                f"Failed to create log directory {log_dir}: {e}"
            )
            return

        self.summary_path = log_dir / SUMMARY_FILE

        timestamp = datetime.now().strftime('%Y-%m-%dT%H-%M-%S')
        name = sanitize_filepath(display_path) if display_path else "unknown"
        self.event_path = log_dir / f"{timestamp}_{name}.jsonl"
        try:
            self._event_file = open(  # noqa: SIM115
                self.event_path, "w", buffering=1, encoding="utf-8"
            )
        except OSError as e:
            logger.warn(f"Failed to create event log {self.event_path}: {e}")
            self.event_path = None
            return

        logger.debug("Recording resolver events", path=str(self.event_path))

    def log_event(self, line: str) -> None:
        """Append one raw event line to this run's file."""
        if self._event_file is None:
            return
        try:
            self._event_file.write(line + "\n")
        except OSError as e:
            logger.warn(f"Event log write failed, disabling: {e}")
            self.close()

    def log_summary(self, line: str) -> None:
        """Append one result line to the shared summary file."""
        if self.summary_path is None:
            return
        try:
            with open(self.summary_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.warn(f"Summary log write failed: {e}")

    def close(self) -> None:
        if self._event_file is not None:
            try:
                self._event_file.close()
            except OSError as e:
                logger.warn(f"Failed to close event log: {e}")
            self._event_file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
