import os
from types import SimpleNamespace
from typing import Any

import pytest
import sft_cd


@pytest.fixture
def shells(monkeypatch: Any) -> list:
    calls: list = []

    def fake_run(cmd, cwd=None, env=None):
        calls.append((cmd, cwd, env))
        return SimpleNamespace(returncode=0)

    monkeypatch.setattr(sft_cd.subprocess, "run", fake_run)
    monkeypatch.setenv("SHELL", "/bin/sh")
    return calls


def test_starts_shell_in_target(tmp_path, shells) -> None:
    assert sft_cd.main([str(tmp_path)]) == 0
    [(cmd, cwd, env)] = shells
    assert cmd == ["/bin/sh"]
    assert cwd == str(tmp_path)
    assert env["PWD"] == str(tmp_path)
    assert env["OLDPWD"] == os.getcwd()


def test_no_operand_goes_home(tmp_path, monkeypatch: Any, shells) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert sft_cd.main([]) == 0
    assert shells[0][1] == str(tmp_path)


def test_dash_uses_oldpwd_and_prints_it(tmp_path, monkeypatch: Any, shells, capsys) -> None:
    monkeypatch.setenv("OLDPWD", str(tmp_path))
    assert sft_cd.main(["-"]) == 0
    assert capsys.readouterr().out == f"{tmp_path}\n"


def test_dash_without_oldpwd(monkeypatch: Any, shells, capsys) -> None:
    monkeypatch.delenv("OLDPWD", raising=False)
    assert sft_cd.main(["-"]) == 1
    assert "OLDPWD not set" in capsys.readouterr().err
    assert shells == []


def test_verbose(tmp_path, shells, capsys) -> None:
    assert sft_cd.main(["-v", str(tmp_path)]) == 0
    assert capsys.readouterr().out == f"Was: {os.getcwd()}\nNow: {tmp_path}\n"


def test_physical_resolves_symlinks(tmp_path, shells) -> None:
    real = tmp_path / "real"
    real.mkdir()
    link = tmp_path / "link"
    link.symlink_to(real)
    assert sft_cd.main(["-P", str(link)]) == 0
    assert sft_cd.main(["-PL", str(link)]) == 0
    assert shells[0][1] == os.path.realpath(real)
    assert shells[1][1] == str(link)


def test_shell_exit_status_is_returned(tmp_path, monkeypatch: Any) -> None:
    monkeypatch.setattr(sft_cd.subprocess, "run", lambda cmd, cwd=None, env=None: SimpleNamespace(returncode=3))
    assert sft_cd.main([str(tmp_path)]) == 3


@pytest.mark.parametrize(
    "name, message",
    [("ghost", "No such file or directory"), ("file.txt", "Not a directory")],
)
def test_bad_targets(name, message, tmp_path, shells, capsys) -> None:
    (tmp_path / "file.txt").write_text("")
    assert sft_cd.main([str(tmp_path / name)]) == 1
    assert f"cd: {tmp_path / name}: {message}" in capsys.readouterr().err
    assert shells == []


def test_extra_operand(shells, capsys) -> None:
    assert sft_cd.main(["a", "b"]) == 1
    assert "extra operand 'b'" in capsys.readouterr().err
