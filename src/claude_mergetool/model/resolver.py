"""External resolver process.

The resolver is a black box behind the ``Resolver`` protocol: it gets
a prompt and a working directory and reports an exit status. The
concrete ClaudeResolver launches the ``claude`` CLI non-interactively
with edit permissions for the directories holding the conflict files.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import IO, Protocol

from pydantic import BaseModel, ConfigDict, Field

from claude_mergetool.conflict.prompt import ResolverPrompt
from claude_mergetool.core.config import ResolverConfig
from claude_mergetool.core.errors import ResolverLaunchFailed
from claude_mergetool.core.log import logger
from claude_mergetool.core.runner import Runner, quote_command

# Shell statuses for "found but not executable" and "not found"
SHELL_CANNOT_EXECUTE = 126
SHELL_NOT_FOUND = 127


class Resolver(Protocol):
    """Anything that can resolve a conflict from a prompt."""

    def invoke(
        self,
        prompt: ResolverPrompt,
        workdir: Path,
        access: Iterable[Path] = (),
    ) -> int:
        """Run to completion and return the exit status.

        Raises:
            ResolverLaunchFailed: If the resolver could not be started
        """
        ...


def access_dirs(paths: Iterable[Path]) -> list[Path]:
    """Unique, sorted parent directories of the given files."""
    parents = {
        path.parent for path in paths
        if str(path.parent) not in ("", ".")
    }
    return sorted(parents)


class ResolverInvocation(BaseModel):
    """One fully specified resolver command line."""

    model_config = ConfigDict(frozen=True)

    program: str
    permission_mode: str
    prompt: ResolverPrompt
    extra_args: list[str] = Field(default_factory=list)
    add_dirs: list[Path] = Field(default_factory=list)
    workdir: Path

    def argv(self) -> list[str]:
        args = [
            self.program,
            "--print",
            "--verbose",
            "--output-format=stream-json",
            f"--permission-mode={self.permission_mode}",
            "--append-system-prompt",
            self.prompt.system,
            *self.extra_args,
            self.prompt.user,
        ]
        for directory in self.add_dirs:
            args.extend(["--add-dir", str(directory)])
        return args

    def command(self) -> str:
        return quote_command(self.argv())


class ClaudeResolver:
    """Runs the ``claude`` CLI in print mode with streamed output.

    Args:
        config: Program, permission mode and extra arguments
        out_stream: Receives the child's stdout as it arrives
        runner: Command runner; a fresh one by default
    """

    def __init__(
        self,
        config: ResolverConfig,
        out_stream: IO[str],
        runner: Runner | None = None,
    ):
        self.config = config
        self.out_stream = out_stream
        self.runner = runner or Runner()

    def invocation(
        self,
        prompt: ResolverPrompt,
        workdir: Path,
        access: Iterable[Path] = (),
    ) -> ResolverInvocation:
        return ResolverInvocation(
            program=self.config.program,
            permission_mode=self.config.permission_mode,
            prompt=prompt,
            extra_args=self.config.extra_args,
            add_dirs=access_dirs(access),
            workdir=workdir,
        )

    def invoke(
        self,
        prompt: ResolverPrompt,
        workdir: Path,
        access: Iterable[Path] = (),
    ) -> int:
        invocation = self.invocation(prompt, workdir, access)
        program = invocation.program

        if shutil.which(program) is None:
            raise ResolverLaunchFailed(program, "not found on PATH")

        for directory in invocation.add_dirs:
            logger.debug(f"Granting access to {directory}")
        command = invocation.command()
        logger.debug("Resolver command", command=command)

        try:
            result = self.runner.stream(
                command, out_stream=self.out_stream, cwd=workdir
            )
        except OSError as e:
            raise ResolverLaunchFailed(program, str(e)) from e

        if result.exited in (SHELL_CANNOT_EXECUTE, SHELL_NOT_FOUND):
            raise ResolverLaunchFailed(
                program,
                f"shell could not execute it (exit {result.exited})",
            )

        logger.debug("Resolver exited", returncode=result.exited)
        return result.exited
