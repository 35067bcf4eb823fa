#!/usr/bin/env python3
"""claude-mergetool CLI - AI-powered merge conflict resolution."""

import asyncio
import contextlib

from pydantic import Field
from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from claude_mergetool.command.generate_config import GenerateConfigCommand
from claude_mergetool.command.install import InstallCommand
from claude_mergetool.command.merge import MergeCommand
from claude_mergetool.core.config import State
from claude_mergetool.core.log import logger


class CliState(State):
    """AI-powered merge conflict resolution.

    claude-mergetool is called by git or jj for one conflicted file
    at a time. It hands the base, left and right versions to the
    `claude` CLI, streams its progress to stderr, and exits 0 once
    the resolved file has been written.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.resolver.permission_mode value)
    2. --include FILE, ./claude-mergetool.yaml, user config.yaml,
       built-in defaults
    3. .env file in the current directory
    4. Environment variables
       (CLAUDE_MERGETOOL_CONFIG__RESOLVER__PROGRAM=value)
    """

    merge: CliSubCommand[MergeCommand]
    install: CliSubCommand[InstallCommand]
    generate_config: CliSubCommand[GenerateConfigCommand] = Field(
        alias="generate-config"
    )

    def cli_cmd(self):
        """Dispatch to active subcommand, or show help if none
        provided."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            # argparse exits 0 after printing help
            with contextlib.suppress(SystemExit):
                CliApp.run(CliState, cli_args=['--help'])
            raise SystemExit(1)

        # Logger as context manager so sinks are closed on exit
        with logger:
            exit_code = asyncio.run(subcommand.run_workflow(self))
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
