from types import SimpleNamespace
from typing import Any

import pytest
import sft_bang_last
import sft_bang_nth


@pytest.fixture
def histfile(tmp_path, monkeypatch: Any):
    path = tmp_path / "hist"
    path.write_text("ls /tmp\n\necho 'hello world'\ngit status\n")
    monkeypatch.setenv("HISTFILE", str(path))
    return path


@pytest.fixture
def runs(monkeypatch: Any) -> list:
    calls: list = []

    def fake_run(command):
        calls.append(command)
        return SimpleNamespace(returncode=0)

    monkeypatch.setattr(sft_bang_last.subprocess, "run", fake_run)
    monkeypatch.setattr(sft_bang_nth.subprocess, "run", fake_run)
    return calls


def test_last_reruns_full_command(histfile, runs, capsys) -> None:
    assert sft_bang_last.main([]) == 0
    assert runs == [["git", "status"]]
    assert capsys.readouterr().out == "git status\n"


def test_last_appends_arguments(histfile, runs, capsys) -> None:
    assert sft_bang_last.main(["-s", "--short"]) == 0
    assert runs == [["git", "status", "-s", "--short"]]


def test_last_double_dash_forwards_help(histfile, runs) -> None:
    assert sft_bang_last.main(["--", "-h"]) == 0
    assert runs == [["git", "status", "-h"]]


def test_last_help_is_not_forwarded(histfile, runs, capsys) -> None:
    assert sft_bang_last.main(["-h"]) == 0
    assert runs == []
    assert "run the last command" in capsys.readouterr().out


def test_last_empty_history(tmp_path, monkeypatch: Any, runs, capsys) -> None:
    monkeypatch.setenv("HISTFILE", str(tmp_path / "none"))
    assert sft_bang_last.main([]) == 1
    assert "!!: history is empty" in capsys.readouterr().err


def test_last_reports_failing_command(histfile, monkeypatch: Any, capsys) -> None:
    monkeypatch.setattr(sft_bang_last.subprocess, "run", lambda command: SimpleNamespace(returncode=2))
    assert sft_bang_last.main([]) == 1
    assert "!!: 'git' exited with status 2" in capsys.readouterr().err


def test_last_missing_program(histfile, monkeypatch: Any, capsys) -> None:
    def missing(command):
        raise FileNotFoundError(2, "No such file or directory")

    monkeypatch.setattr(sft_bang_last.subprocess, "run", missing)
    assert sft_bang_last.main([]) == 1
    assert "!!: git: No such file or directory" in capsys.readouterr().err


def test_nth_runs_numbered_entry(histfile, runs, capsys) -> None:
    assert sft_bang_nth.main(["2"]) == 0
    assert runs == [["echo", "hello world"]]
    assert capsys.readouterr().out == "echo 'hello world'\n"


def test_nth_appends_arguments(histfile, runs) -> None:
    assert sft_bang_nth.main(["1", "-la"]) == 0
    assert runs == [["ls", "/tmp", "-la"]]


def test_nth_prompts_for_number(histfile, runs, monkeypatch: Any) -> None:
    monkeypatch.setattr("builtins.input", lambda prompt: "3")
    assert sft_bang_nth.main([]) == 0
    assert runs == [["git", "status"]]


@pytest.mark.parametrize("answer", ["abc", "0", ""])
def test_nth_rejects_bad_prompt_answer(answer, histfile, runs, monkeypatch: Any, capsys) -> None:
    monkeypatch.setattr("builtins.input", lambda prompt: answer)
    assert sft_bang_nth.main([]) == 1
    assert "command number must be a positive integer" in capsys.readouterr().err
    assert runs == []


def test_nth_prompt_eof(histfile, runs, monkeypatch: Any, capsys) -> None:
    def eof(prompt):
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)
    assert sft_bang_nth.main([]) == 1
    assert runs == []


def test_nth_out_of_range(histfile, runs, capsys) -> None:
    assert sft_bang_nth.main(["7"]) == 1
    assert "!n: command #7 does not exist (total 3)" in capsys.readouterr().err
    assert runs == []


def test_nth_unparsable_entry(tmp_path, monkeypatch: Any, runs, capsys) -> None:
    path = tmp_path / "hist"
    path.write_text("echo 'unterminated\n")
    monkeypatch.setenv("HISTFILE", str(path))
    assert sft_bang_nth.main(["1"]) == 1
    assert "cannot parse" in capsys.readouterr().err
    assert runs == []
