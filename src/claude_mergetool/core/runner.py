"""Command execution using invoke library with custom extensions."""

import io
import shlex
from pathlib import Path
from typing import IO

from invoke import Context, Result
from invoke.exceptions import CommandTimedOut

from claude_mergetool.core.log import logger


def quote_command(args: list[str]) -> str:
    """Join program and arguments into one shell-safe command string.

    invoke runs everything through a shell, so every argument is
    quoted individually.
    """
    return ' '.join(shlex.quote(str(part)) for part in args)


def in_directory(command: str, cwd: Path | None) -> str:
    """Prefix a command with a quoted ``cd`` when it must run elsewhere.

    invoke's own ``Context.cd`` escapes only spaces, so paths holding
    shell metacharacters would break the command line.
    """
    if cwd is None or Path(cwd).absolute() == Path.cwd():
        return command
    return f"cd {shlex.quote(str(cwd))} && {command}"


class Runner(Context):
    """Wrapper around invoke.Context with custom command
    execution methods.

    Provides custom methods that don't collide with invoke's
    built-in functionality. Uses invoke internally for all
    command execution.
    """

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        timeout: int | None = None,
        check: bool = True,
        env: dict[str, str] | None = None,
    ) -> Result:
        """Execute a command and capture its output.

        Args:
            command: Command string to execute
            cwd: Working directory for command execution
            timeout: Maximum execution time in seconds
            check: If True, raise exception on non-zero exit
                code
            env: Environment variables to set (updates os.environ,
                does not replace it)

        Returns:
            invoke.Result with stdout, stderr, exited (return
                code)

        Raises:
            invoke.UnexpectedExit: If check=True and command
                returns non-zero
        """
        kwargs = {
            "hide": True,
            "warn": not check,
            "in_stream": False,
        }

        if timeout:
            kwargs["timeout"] = timeout

        if env:
            kwargs["env"] = env

        logger.spew("Executing command", command=command)

        try:
            result = self.run(in_directory(command, cwd), **kwargs)
        except CommandTimedOut as e:
            # Timeouts come back as an ordinary failed result
            result = e.result
            result.exited = -1

        logger.spew(
            "Command finished", command=command, exited=result.exited
        )
        return result

    def stream(
        self,
        command: str,
        out_stream: IO[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> Result:
        """Run a long-lived command, relaying stdout as it arrives.

        invoke drains stdout and stderr on background threads while
        this call blocks until the process exits. Stdout chunks are
        written to ``out_stream`` as they are read; stderr passes
        through to our own stderr. Stdin is closed immediately so the
        child never waits for input.

        Never raises on a non-zero exit; inspect ``result.exited``.

        invoke decodes each chunk separately with errors="replace", so a
        multi-byte character split across chunks shows as U+FFFD, and
        Result.stdout holds the whole stream. The relayed output is
        advisory only.

        Args:
            command: Command string to execute
            out_stream: Writable text stream receiving stdout chunks
            cwd: Working directory for command execution
            env: Environment variables to add

        Returns:
            invoke.Result once the process has exited
        """
        kwargs = {
            "hide": False,
            "warn": True,
            "out_stream": out_stream,
            "in_stream": io.StringIO(""),
        }

        if env:
            kwargs["env"] = env

        return self.run(in_directory(command, cwd), **kwargs)
