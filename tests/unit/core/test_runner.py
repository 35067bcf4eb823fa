"""Tests for the invoke-based Runner."""

import io
import shlex

from claude_mergetool.core.runner import Runner, in_directory, quote_command


def test_quote_command_quotes_each_argument():
    command = quote_command(["claude", "--print", "it's a prompt", "a b"])

    assert command == "claude --print 'it'\"'\"'s a prompt' 'a b'"


def test_execute_captures_output():
    result = Runner().execute("echo hello", check=False)

    assert result.ok
    assert result.stdout.strip() == "hello"


def test_execute_nonzero_exit_without_check():
    result = Runner().execute("exit 3", check=False)

    assert result.exited == 3
    assert not result.ok


def test_execute_in_directory(tmp_path):
    result = Runner().execute("pwd", cwd=tmp_path, check=False)

    assert result.stdout.strip() == str(tmp_path)


def test_execute_timeout_becomes_failed_result():
    result = Runner().execute("sleep 5", timeout=1, check=False)

    assert result.exited == -1


def test_stream_writes_chunks_to_out_stream():
    out = io.StringIO()

    result = Runner().stream("printf 'one\\ntwo\\n'", out_stream=out)

    assert result.exited == 0
    assert out.getvalue() == "one\ntwo\n"


def test_stream_reports_exit_code_without_raising():
    out = io.StringIO()

    result = Runner().stream("echo partial; exit 7", out_stream=out)

    assert result.exited == 7
    assert "partial" in out.getvalue()


def test_stream_closes_stdin():
    """A child reading stdin sees EOF immediately instead of hanging."""
    out = io.StringIO()

    result = Runner().stream("cat; echo done", out_stream=out)

    assert result.exited == 0
    assert out.getvalue().strip() == "done"


def test_in_directory_quotes_metacharacters(tmp_path):
    target = tmp_path / "proj (copy) $HOME & 'x'"

    command = in_directory("pwd", target)

    assert command == f"cd {shlex.quote(str(target))} && pwd"


def test_in_directory_skips_current_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert in_directory("pwd", tmp_path) == "pwd"
    assert in_directory("pwd", None) == "pwd"


def test_execute_in_directory_with_shell_metacharacters(tmp_path):
    target = tmp_path / "proj (copy) & $x"
    target.mkdir()

    result = Runner().execute("pwd", cwd=target, check=False)

    assert result.exited == 0
    assert result.stdout.strip() == str(target)


def test_stream_in_directory_with_shell_metacharacters(tmp_path):
    target = tmp_path / "it's (here)"
    target.mkdir()
    out = io.StringIO()

    result = Runner().stream("pwd", out_stream=out, cwd=target)

    assert result.exited == 0
    assert out.getvalue().strip() == str(target)
