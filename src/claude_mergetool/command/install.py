"""Install command - register claude-mergetool with git and jj."""

from __future__ import annotations

import sys
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic_settings import CliPositionalArg

from claude_mergetool.core.errors import SetupFailed
from claude_mergetool.core.log import logger
from claude_mergetool.core.runner import Runner, quote_command

if TYPE_CHECKING:
    from claude_mergetool.core.config import State


class InstallProgram(str, Enum):
    """Version control programs we can configure."""

    git = "git"
    jj = "jj"


# Scope flag passed to `config set`
SCOPES = {
    InstallProgram.git: "--global",
    InstallProgram.jj: "--user",
}

SETTINGS = {
    InstallProgram.git: (
        (
            "mergetool.claude.cmd",
            'claude-mergetool merge "$BASE" "$LOCAL" "$REMOTE" -o "$MERGED"',
        ),
        ("mergetool.claude.trustExitCode", "true"),
    ),
    InstallProgram.jj: (
        ("merge-tools.claude.program", "claude-mergetool"),
        (
            "merge-tools.claude.merge-args",
            '["merge", "$base", "$left", "$right", '
            '"-o", "$output", "-p", "$path"]',
        ),
    ),
}


def is_available(program: InstallProgram, runner: Runner) -> bool:
    """True if ``<program> --version`` runs successfully."""
    result = runner.execute(
        quote_command([program.value, "--version"]),
        check=False,
        timeout=30,
    )
    return result.ok


def default_programs(runner: Runner) -> list[InstallProgram]:
    return [
        program for program in InstallProgram
        if is_available(program, runner)
    ]


def config_set(
    program: InstallProgram, name: str, value: str, runner: Runner
) -> None:
    """Run one ``config set`` command.

    Raises:
        SetupFailed: If the command exits non-zero
    """
    command = quote_command(
        [program.value, "config", "set", SCOPES[program], name, value]
    )
    logger.info(f"$ {command}")

    result = runner.execute(command, check=False)
    if result.stdout.strip():
        logger.info(result.stdout.strip())
    if not result.ok:
        detail = result.stderr.strip() or f"exit code {result.exited}"
        raise SetupFailed(
            f"Failed to configure `claude-mergetool` for `{program.value}`:"
            f" {detail}"
        )


def install(program: InstallProgram, runner: Runner) -> None:
    """Write every setting ``program`` needs to use us as a merge tool."""
    logger.info(f"Configuring `claude-mergetool` for {program.value}")
    for name, value in SETTINGS[program]:
        config_set(program, name, value, runner)


class InstallCommand(BaseModel):
    """Install claude-mergetool as a merge tool for git or jj.

    With no programs given, configures every one of git and jj that
    is available on PATH.
    """

    programs: CliPositionalArg[list[InstallProgram]] = Field(
        default_factory=list,
        description="Programs to configure (git, jj)",
    )

    async def run_workflow(
        self, state: State, runner: Runner | None = None
    ) -> int:
        """Configure each requested program.

        Returns:
            Exit code (0=success)
        """
        runner = runner or Runner()

        try:
            programs = list(self.programs) or default_programs(runner)
            if not programs:
                raise SetupFailed("Neither `git` nor `jj` is available")

            logger.debug(
                "Determined programs to configure",
                programs=[p.value for p in programs],
            )
            for program in programs:
                install(program, runner)
        except SetupFailed as e:
            print(f"error: {e}", file=sys.stderr)
            return int(e.exit_code)

        return 0
