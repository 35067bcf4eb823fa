"""generate-config command - write the commented default config."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from claude_mergetool.core.errors import SetupFailed
from claude_mergetool.core.log import logger
from claude_mergetool.core.yaml_settings import DEFAULTS_FILE, user_config_path

if TYPE_CHECKING:
    from claude_mergetool.core.config import State


def write_config(path: Path, force: bool = False) -> Path:
    """Copy the default configuration template to ``path``.

    Raises:
        SetupFailed: If the file exists and force is False, or on
            any I/O error
    """
    if path.exists() and not force:
        raise SetupFailed(
            f"config file already exists at {path}\n"
            "Use --force to overwrite."
        )

    try:
        template = DEFAULTS_FILE.read_text(encoding="utf-8")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(template, encoding="utf-8")
    except OSError as e:
        raise SetupFailed(f"failed to write config file {path}: {e}") from e

    logger.debug("Wrote configuration template", path=str(path))
    return path


class GenerateConfigCommand(BaseModel):
    """Write the default configuration file, with comments.

    The file goes to the user configuration directory unless
    --output is given.
    """

    output: Path | None = Field(
        default=None,
        description="Write to this path instead of the default location",
    )
    force: bool = Field(
        default=False,
        description="Overwrite an existing config file",
    )

    async def run_workflow(self, state: State) -> int:
        """Write the template.

        Returns:
            Exit code (0=success)
        """
        path = self.output or user_config_path()
        try:
            write_config(path, force=self.force)
        except SetupFailed as e:
            print(f"error: {e}", file=sys.stderr)
            return int(e.exit_code)

        print(f"Wrote default config to {path}", file=sys.stderr)
        return 0
