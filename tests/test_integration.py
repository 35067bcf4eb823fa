"""End-to-end tests of the merge pipeline with a stand-in resolver.

A small shell script plays the part of the resolver CLI so the whole
path runs: argument validation, prompt composition, process launch,
output relay and outcome mapping.
"""

import asyncio
import json

import pytest
from pydantic_settings import CliApp

from claude_mergetool.cli import CliState
from claude_mergetool.command.merge import MergeCommand
from claude_mergetool.core.config import State

RESULT_EVENT = json.dumps({
    "type": "result",
    "subtype": "success",
    "duration_ms": 2500,
    "duration_api_ms": 2000,
    "total_cost_usd": 0.05,
})


@pytest.fixture
def resolver(make_script, monkeypatch):
    """Install a stand-in resolver script as the configured program."""
    def _install(body):
        script = make_script(body)
        monkeypatch.setenv(
            "CLAUDE_MERGETOOL_CONFIG__RESOLVER__PROGRAM", str(script)
        )
        return script

    return _install


def merge(*files, **options):
    base, left, right = files
    command = MergeCommand(base=base, left=left, right=right, **options)
    state = State()
    return asyncio.run(command.run_workflow(state)), state


def test_output_mode_success(conflict_files, resolver, tmp_path):
    output = tmp_path / "resolved.txt"
    resolver(f"printf 'greeting = \"hi there\"\\n' > '{output}'")

    code, state = merge(*conflict_files, output=output)

    assert code == 0
    assert output.read_text() == 'greeting = "hi there"\n'
    outcome = state.runtime.merge.outcome
    assert outcome.resolved
    assert outcome.destination == output
    assert state.runtime.merge.stage == "done"


def test_git_mode_overwrites_left(conflict_files, resolver):
    base, left, right = conflict_files
    resolver(f"printf 'merged\\n' > '{left}'")

    code, state = merge(base, left, right, git_merge_driver=True)

    assert code == 0
    assert left.read_text() == "merged\n"
    assert state.runtime.merge.outcome.destination == left


def test_resolver_failure_is_not_resolved(conflict_files, resolver, tmp_path, capsys):
    resolver("exit 1")

    code, state = merge(*conflict_files, output=tmp_path / "out.txt")

    assert code != 0
    assert not state.runtime.merge.outcome.resolved
    assert "resolver exited with code 1" in capsys.readouterr().err


def test_resolver_exit_code_is_not_passed_through(conflict_files, resolver, tmp_path):
    resolver("exit 42")

    code, state = merge(*conflict_files, output=tmp_path / "out.txt")

    assert code == 1
    assert state.runtime.merge.outcome.reason == "ResolverFailed"


def test_missing_input_never_launches(conflict_files, resolver, tmp_path):
    marker = tmp_path / "launched"
    resolver(f"touch '{marker}'")
    conflict_files[0].unlink()

    code, state = merge(*conflict_files, output=tmp_path / "out.txt")

    assert code == 3
    assert state.runtime.merge.outcome.stage == "input"
    assert not marker.exists()


def test_missing_mode_never_launches(conflict_files, resolver, tmp_path, capsys):
    marker = tmp_path / "launched"
    resolver(f"touch '{marker}'")

    code, _state = merge(*conflict_files)

    assert code == 2
    assert not marker.exists()
    assert "either --git-merge-driver or -o <path> is required" in (
        capsys.readouterr().err
    )


def test_missing_program(conflict_files, monkeypatch, tmp_path):
    monkeypatch.setenv(
        "CLAUDE_MERGETOOL_CONFIG__RESOLVER__PROGRAM", "no-such-resolver-cli"
    )

    code, state = merge(*conflict_files, output=tmp_path / "out.txt")

    assert code == 5
    assert state.runtime.merge.outcome.stage == "launch"


def test_verify_output_rejects_untouched_destination(
    conflict_files, resolver, monkeypatch
):
    resolver("exit 0")
    monkeypatch.setenv(
        "CLAUDE_MERGETOOL_CONFIG__RESOLVER__VERIFY_OUTPUT", "true"
    )

    code, state = merge(*conflict_files, git_merge_driver=True)

    assert code == 6
    assert "not changed" in state.runtime.merge.outcome.message


def test_without_verification_exit_zero_is_trusted(conflict_files, resolver, tmp_path):
    resolver("exit 0")

    code, _state = merge(*conflict_files, output=tmp_path / "never-written.txt")

    assert code == 0


def test_prompt_reaches_resolver(conflict_files, resolver, tmp_path):
    args_file = tmp_path / "args"
    output = tmp_path / "out.txt"
    resolver(f"printf '%s\\n' \"$@\" > '{args_file}'")

    merge(
        *conflict_files,
        output=output,
        filepath="src/greeting.py",
        ancestor_label="base-rev",
        left_label="mine",
        right_label="yours",
        marker_size=9,
    )

    args = args_file.read_text()
    assert "--permission-mode=acceptEdits" in args
    assert "`src/greeting.py`" in args
    assert "- Base (base-rev): " in args
    assert "- Left (mine): " in args
    assert "Conflict markers in this file are 9 characters long." in args
    assert f"Write the resolved file to: {output}" in args
    assert f"--add-dir\n{conflict_files[0].parent}\n" in args


def test_stream_output_is_rendered_and_logged(conflict_files, resolver, tmp_path, capsys):
    assistant = json.dumps({
        "type": "assistant",
        "message": {"content": [{"type": "text", "text": "Merging the greeting."}]},
    })
    resolver(f"cat <<'EOF'\n{assistant}\n{RESULT_EVENT}\nEOF")

    code, _state = merge(
        *conflict_files, output=tmp_path / "out.txt", filepath="greeting.py"
    )

    err = capsys.readouterr().err
    assert code == 0
    assert "Resolving merge conflict in greeting.py" in err
    assert "Merging the greeting." in err
    assert "Finished in 2.50s (2.00s API time). Total cost: $0.0500" in err

    logs = tmp_path / "state" / "logs"
    (event_file,) = logs.glob("*_greeting.py.jsonl")
    assert len(event_file.read_text().splitlines()) == 2
    assert (logs / "summary.jsonl").read_text().splitlines() == [RESULT_EVENT]


def test_event_log_can_be_disabled(conflict_files, resolver, tmp_path, monkeypatch):
    resolver(f"echo '{RESULT_EVENT}'")
    monkeypatch.setenv("CLAUDE_MERGETOOL_CONFIG__EVENT_LOG", "false")

    code, _state = merge(*conflict_files, output=tmp_path / "out.txt")

    assert code == 0
    assert not (tmp_path / "state" / "logs").exists()


def test_cli_entry_point(conflict_files, resolver, tmp_path, monkeypatch):
    output = tmp_path / "out.txt"
    resolver(f"printf 'merged\\n' > '{output}'")
    monkeypatch.setattr("sys.argv", ["claude-mergetool"])
    base, left, right = conflict_files

    with pytest.raises(SystemExit) as excinfo:
        CliApp.run(
            CliState,
            cli_args=[
                "merge", str(base), str(left), str(right),
                "-o", str(output), "-p", "greeting.py",
            ],
        )

    assert excinfo.value.code == 0
    assert output.read_text() == "merged\n"


def test_cli_git_driver_flag(conflict_files, resolver, monkeypatch):
    base, left, right = conflict_files
    resolver(f"printf 'merged\\n' > '{left}'")
    monkeypatch.setattr("sys.argv", ["claude-mergetool"])

    with pytest.raises(SystemExit) as excinfo:
        CliApp.run(
            CliState,
            cli_args=["merge", "--git", str(base), str(left), str(right)],
        )

    assert excinfo.value.code == 0
    assert left.read_text() == "merged\n"


def test_cli_without_subcommand(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["claude-mergetool"])

    with pytest.raises(SystemExit) as excinfo:
        CliApp.run(CliState, cli_args=[])

    assert excinfo.value.code == 1
    assert "merge" in capsys.readouterr().out


def test_merge_from_directory_with_shell_metacharacters(
    conflict_files, resolver, tmp_path, monkeypatch
):
    repo = tmp_path / "proj (copy)"
    repo.mkdir()
    monkeypatch.chdir(repo)
    output = tmp_path / "resolved.txt"
    resolver(f"pwd > '{output}'")

    code, _state = merge(*conflict_files, output=output)

    assert code == 0
    assert output.read_text().strip() == str(repo)


def test_interrupted_resolver_is_a_failure(conflict_files, resolver, tmp_path):
    resolver("kill -INT $$")

    code, state = merge(*conflict_files, output=tmp_path / "out.txt")

    assert code == 1
    assert state.runtime.merge.outcome.reason == "ResolverFailed"


def test_cli_help(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["claude-mergetool"])

    with pytest.raises(SystemExit) as excinfo:
        CliApp.run(CliState, cli_args=["--help"])

    assert excinfo.value.code == 0
    assert "generate-config" in capsys.readouterr().out


def test_merge_help_shows_invocation_shapes(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["claude-mergetool"])

    with pytest.raises(SystemExit) as excinfo:
        CliApp.run(CliState, cli_args=["merge", "--help"])

    out = capsys.readouterr().out
    assert excinfo.value.code == 0
    assert "merge --git BASE LEFT RIGHT" in out
    assert "-o $output" in out
