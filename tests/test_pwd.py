import os
from typing import Any

import sft_pwd


def test_physical_by_default(tmp_path, monkeypatch: Any, capsys) -> None:
    real = tmp_path / "real"
    real.mkdir()
    link = tmp_path / "link"
    link.symlink_to(real)
    monkeypatch.chdir(link)
    monkeypatch.setenv("PWD", str(link))
    assert sft_pwd.main([]) == 0
    assert capsys.readouterr().out == os.path.realpath(real) + "\n"


def test_logical_uses_pwd(tmp_path, monkeypatch: Any, capsys) -> None:
    real = tmp_path / "real"
    real.mkdir()
    link = tmp_path / "link"
    link.symlink_to(real)
    monkeypatch.chdir(link)
    monkeypatch.setenv("PWD", str(link))
    assert sft_pwd.main(["-L"]) == 0
    assert capsys.readouterr().out == f"{link}\n"


def test_last_of_l_and_p_wins(tmp_path, monkeypatch: Any, capsys) -> None:
    real = tmp_path / "real"
    real.mkdir()
    link = tmp_path / "link"
    link.symlink_to(real)
    monkeypatch.chdir(link)
    monkeypatch.setenv("PWD", str(link))
    assert sft_pwd.main(["-LP"]) == 0
    assert capsys.readouterr().out == os.path.realpath(real) + "\n"


def test_logical_falls_back_on_stale_pwd(tmp_path, monkeypatch: Any, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PWD", "/nonexistent/../elsewhere")
    assert sft_pwd.main(["-L"]) == 0
    assert capsys.readouterr().out == os.getcwd() + "\n"


def test_operand_rejected(capsys) -> None:
    assert sft_pwd.main(["x"]) == 1
    assert "ignoring non-option arguments: 'x'" in capsys.readouterr().err
