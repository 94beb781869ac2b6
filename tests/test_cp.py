import os

import pytest
import sft_cp


def test_copy_file_to_new_name(tmp_path) -> None:
    (tmp_path / "a").write_text("hello")
    assert sft_cp.main([str(tmp_path / "a"), str(tmp_path / "b")]) == 0
    assert (tmp_path / "b").read_text() == "hello"


def test_copy_into_directory_keeps_basename(tmp_path) -> None:
    (tmp_path / "a").write_text("1")
    (tmp_path / "b").write_text("2")
    (tmp_path / "dest").mkdir()
    assert sft_cp.main([str(tmp_path / "a"), str(tmp_path / "b"), str(tmp_path / "dest")]) == 0
    assert (tmp_path / "dest" / "a").read_text() == "1"
    assert (tmp_path / "dest" / "b").read_text() == "2"


def test_several_sources_need_a_directory(tmp_path, capsys) -> None:
    (tmp_path / "a").write_text("1")
    (tmp_path / "b").write_text("2")
    assert sft_cp.main([str(tmp_path / "a"), str(tmp_path / "b"), str(tmp_path / "c")]) == 1
    assert "is not a directory" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv, message",
    [
        ([], "missing file operand"),
        (["only"], "missing destination file operand after 'only'"),
    ],
)
def test_operand_errors(argv, message, capsys) -> None:
    assert sft_cp.main(argv) == 1
    err = capsys.readouterr().err
    assert message in err
    assert "Try 'cp -h'" in err


def test_directory_without_recursive_is_omitted(tmp_path, capsys) -> None:
    (tmp_path / "src").mkdir()
    assert sft_cp.main([str(tmp_path / "src"), str(tmp_path / "dst")]) == 1
    assert "-r not specified; omitting directory" in capsys.readouterr().err
    assert not (tmp_path / "dst").exists()


def test_recursive_copy_pre_order_with_symlinks(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "src" / "sub").mkdir(parents=True)
    (tmp_path / "src" / "a.txt").write_text("a")
    (tmp_path / "src" / "sub" / "b.txt").write_text("b")
    os.symlink("a.txt", tmp_path / "src" / "link")
    assert sft_cp.main(["-rv", "src", "dst"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "'src' -> 'dst'",
        "'src/a.txt' -> 'dst/a.txt'",
        "'src/sub' -> 'dst/sub'",
        "'src/sub/b.txt' -> 'dst/sub/b.txt'",
    ]
    assert (tmp_path / "dst" / "sub" / "b.txt").read_text() == "b"
    assert os.readlink(tmp_path / "dst" / "link") == "a.txt"


def test_cannot_copy_directory_into_itself(tmp_path, capsys) -> None:
    (tmp_path / "src").mkdir()
    assert sft_cp.main(["-r", str(tmp_path / "src"), str(tmp_path / "src")]) == 1
    assert "into itself" in capsys.readouterr().err


def test_preserve_keeps_mtime(tmp_path) -> None:
    src = tmp_path / "a"
    src.write_text("x")
    os.utime(src, (1_000_000_000, 1_000_000_000))
    assert sft_cp.main(["-p", str(src), str(tmp_path / "b")]) == 0
    assert (tmp_path / "b").stat().st_mtime == 1_000_000_000


def test_update_skips_newer_destination(tmp_path) -> None:
    src, dst = tmp_path / "a", tmp_path / "b"
    src.write_text("old")
    dst.write_text("newer")
    os.utime(src, (1_000_000_000, 1_000_000_000))
    assert sft_cp.main(["-u", str(src), str(dst)]) == 0
    assert dst.read_text() == "newer"


def test_interactive_declined(tmp_path, monkeypatch) -> None:
    src, dst = tmp_path / "a", tmp_path / "b"
    src.write_text("new")
    dst.write_text("keep")
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    assert sft_cp.main(["-i", str(src), str(dst)]) == 0
    assert dst.read_text() == "keep"
    monkeypatch.setattr("builtins.input", lambda prompt: "yes")
    assert sft_cp.main(["-i", str(src), str(dst)]) == 0
    assert dst.read_text() == "new"


def test_missing_source_does_not_stop_the_rest(tmp_path, capsys) -> None:
    (tmp_path / "dest").mkdir()
    (tmp_path / "ok").write_text("fine")
    status = sft_cp.main([str(tmp_path / "gone"), str(tmp_path / "ok"), str(tmp_path / "dest")])
    assert status == 1
    assert (tmp_path / "dest" / "ok").read_text() == "fine"
    assert "No such file or directory" in capsys.readouterr().err
