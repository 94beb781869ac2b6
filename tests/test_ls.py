import os

import sft_ls


def _populate(root) -> None:
    (root / "b.txt").write_text("bb")
    (root / "a.txt").write_text("a")
    (root / ".hidden").write_text("")
    (root / "sub").mkdir()
    (root / "sub" / "inner").write_text("")


def test_columns_sorted_hidden_skipped(tmp_path, monkeypatch, capsys) -> None:
    _populate(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert sft_ls.main([]) == 0
    assert capsys.readouterr().out == "a.txt".ljust(16) + "b.txt".ljust(16) + "sub\n"


def test_all_and_reverse(tmp_path, capsys) -> None:
    _populate(tmp_path)
    assert sft_ls.main(["-ar", str(tmp_path)]) == 0
    names = capsys.readouterr().out.split()
    assert names == ["sub", "b.txt", "a.txt", ".hidden"]


def test_format_columns_wraps_at_80() -> None:
    names = [f"name{i:02d}" for i in range(7)]
    rows = sft_ls.format_columns(names)
    assert len(rows) == 2
    assert rows[0].split() == names[:5]
    assert rows[1].split() == names[5:]


def test_long_format(tmp_path, capsys) -> None:
    (tmp_path / "f").write_text("12345")
    os.chmod(tmp_path / "f", 0o640)
    assert sft_ls.main(["-l", str(tmp_path)]) == 0
    line = capsys.readouterr().out.rstrip("\n")
    assert line.startswith("-rw-r-----      5 ")
    assert line.endswith(" f")


def test_files_before_directories_with_headers(tmp_path, monkeypatch, capsys) -> None:
    _populate(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert sft_ls.main(["sub", "a.txt"]) == 0
    assert capsys.readouterr().out == "a.txt\n\nsub:\ninner\n"


def test_recursive_headers(tmp_path, monkeypatch, capsys) -> None:
    _populate(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert sft_ls.main(["-R", "sub"]) == 0
    assert capsys.readouterr().out == "sub:\ninner\n"


def test_missing_path_is_reported_others_listed(tmp_path, monkeypatch, capsys) -> None:
    _populate(tmp_path)
    monkeypatch.chdir(tmp_path)
    status = sft_ls.main(["nope", "a.txt"])
    captured = capsys.readouterr()
    assert status == 1
    assert captured.out == "a.txt\n"
    assert "ls: nope: No such file or directory" in captured.err
