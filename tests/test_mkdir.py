import os
import stat

import sft_mkdir


def test_creates_directory_with_default_mode(tmp_path) -> None:
    target = tmp_path / "new"
    assert sft_mkdir.main([str(target)]) == 0
    umask = os.umask(0)
    os.umask(umask)
    assert stat.S_IMODE(target.stat().st_mode) == 0o755 & ~umask


def test_existing_directory_fails_without_p(tmp_path, capsys) -> None:
    assert sft_mkdir.main([str(tmp_path)]) == 1
    assert "File exists" in capsys.readouterr().err


def test_parents_is_idempotent(tmp_path) -> None:
    target = tmp_path / "a" / "b" / "c"
    assert sft_mkdir.main(["-p", str(target)]) == 0
    assert sft_mkdir.main(["-p", str(target)]) == 0
    assert target.is_dir()


def test_missing_parent_without_p(tmp_path, capsys) -> None:
    assert sft_mkdir.main([str(tmp_path / "x" / "y")]) == 1
    assert "No such file or directory" in capsys.readouterr().err


def test_verbose_reports_every_created_directory(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    assert sft_mkdir.main(["-pv", "a/b"]) == 0
    assert capsys.readouterr().out == (
        "mkdir: created directory 'a'\n"
        "mkdir: created directory 'a/b'\n"
    )


def test_failure_does_not_stop_later_operands(tmp_path, capsys) -> None:
    status = sft_mkdir.main([str(tmp_path / "no" / "parent"), str(tmp_path / "ok")])
    assert status == 1
    assert (tmp_path / "ok").is_dir()


def test_v_is_verbose_so_version_is_long_only(capsys) -> None:
    assert sft_mkdir.main(["--version"]) == 0
    assert capsys.readouterr().out.startswith("mkdir version 1.0.0\n")
    assert sft_mkdir.main(["-v"]) == 1
    assert "missing operand" in capsys.readouterr().err
