import os

import pytest
import sft_rm


def test_removes_file(tmp_path) -> None:
    target = tmp_path / "f"
    target.write_text("x")
    assert sft_rm.main([str(target)]) == 0
    assert not target.exists()


def test_directory_needs_recursive(tmp_path, capsys) -> None:
    (tmp_path / "d").mkdir()
    assert sft_rm.main([str(tmp_path / "d")]) == 1
    assert "Is a directory" in capsys.readouterr().err
    assert (tmp_path / "d").is_dir()


def test_recursive_removal_is_post_order(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "d" / "sub").mkdir(parents=True)
    (tmp_path / "d" / "sub" / "f").write_text("x")
    (tmp_path / "d" / "g").write_text("y")
    assert sft_rm.main(["-rv", "d"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert set(lines) == {
        "removed 'd/sub/f'",
        "removed directory 'd/sub'",
        "removed 'd/g'",
        "removed directory 'd'",
    }
    assert lines.index("removed 'd/sub/f'") < lines.index("removed directory 'd/sub'")
    assert lines[-1] == "removed directory 'd'"
    assert not (tmp_path / "d").exists()


def test_recursive_does_not_follow_symlinks(tmp_path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "keep").write_text("x")
    tree = tmp_path / "tree"
    tree.mkdir()
    os.symlink(outside, tree / "link")
    assert sft_rm.main(["-r", str(tree)]) == 0
    assert (outside / "keep").exists()


def test_force_ignores_missing(tmp_path, capsys) -> None:
    assert sft_rm.main(["-f", str(tmp_path / "ghost")]) == 0
    assert capsys.readouterr().err == ""
    assert sft_rm.main(["-f"]) == 0


def test_missing_without_force(tmp_path, capsys) -> None:
    assert sft_rm.main([str(tmp_path / "ghost")]) == 1
    assert "No such file or directory" in capsys.readouterr().err


def test_refuses_dot_and_dotdot(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    assert sft_rm.main(["-rf", "."]) == 1
    assert "refusing to remove '.' or '..'" in capsys.readouterr().err
    assert tmp_path.is_dir()


def test_failure_isolation(tmp_path) -> None:
    (tmp_path / "a").write_text("x")
    (tmp_path / "dir").mkdir()
    (tmp_path / "b").write_text("y")
    status = sft_rm.main([str(tmp_path / "a"), str(tmp_path / "dir"), str(tmp_path / "b")])
    assert status == 1
    assert not (tmp_path / "a").exists()
    assert not (tmp_path / "b").exists()
    assert (tmp_path / "dir").exists()


def test_no_operand_is_usage_error(capsys) -> None:
    assert sft_rm.main([]) == 1
    assert "missing operand" in capsys.readouterr().err


@pytest.mark.parametrize("root", ["/", "//"])
def test_refuses_filesystem_root(root, monkeypatch, capsys) -> None:
    touched: list = []

    def guard(path, *args, **kwargs):
        touched.append(path)
        raise RuntimeError("filesystem root reached")

    monkeypatch.setattr(sft_rm.os, "lstat", guard)
    assert sft_rm.main(["-rf", root]) == 1
    assert f"rm: it is dangerous to operate recursively on '{root}'" in capsys.readouterr().err
    assert touched == []
