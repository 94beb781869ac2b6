import os

import sft_du


def _tree(root):
    (root / "d" / "sub").mkdir(parents=True)
    (root / "d" / "a").write_bytes(b"x" * 10)
    (root / "d" / "sub" / "b").write_bytes(b"y" * 5)
    return root / "d"


def test_disk_usage_sums_post_order(tmp_path) -> None:
    d = _tree(tmp_path)
    usage = sft_du.disk_usage(str(d))
    sub_expected = os.lstat(d / "sub").st_size + 5
    assert usage.entries["a"] == 10
    assert usage.entries[os.path.join("sub", "b")] == 5
    assert usage.entries["sub"] == sub_expected
    assert usage.total == os.lstat(d).st_size + 10 + sub_expected
    assert usage.errors == []


def test_default_sentence(tmp_path, capsys) -> None:
    d = _tree(tmp_path)
    total = sft_du.disk_usage(str(d)).total
    assert sft_du.main([str(d)]) == 0
    assert capsys.readouterr().out == f"Size of '{d}': {total} bytes\n"


def test_summary_line(tmp_path, capsys) -> None:
    d = _tree(tmp_path)
    total = sft_du.disk_usage(str(d)).total
    assert sft_du.main(["-s", str(d)]) == 0
    assert capsys.readouterr().out == f"{total}\t{d}\n"


def test_all_lists_every_entry_then_total(tmp_path, capsys) -> None:
    d = _tree(tmp_path)
    assert sft_du.main(["-a", str(d)]) == 0
    lines = capsys.readouterr().out.splitlines()
    names = [line.split("\t")[1] for line in lines]
    assert names == ["a", "sub", os.path.join("sub", "b"), str(d)]
    assert lines[0] == "10\ta"


def test_missing_path_reported_rest_continue(tmp_path, capsys) -> None:
    (tmp_path / "f").write_bytes(b"abc")
    status = sft_du.main(["-s", str(tmp_path / "ghost"), str(tmp_path / "f")])
    captured = capsys.readouterr()
    assert status == 1
    assert captured.out == f"3\t{tmp_path / 'f'}\n"
    assert "No such file or directory" in captured.err
