import pytest
import sft_wc


@pytest.fixture
def files(tmp_path):
    a = tmp_path / "a.txt"
    a.write_text("one two\nthree\nfour five six\n")
    b = tmp_path / "b.txt"
    b.write_text("x\n")
    return str(a), str(b)


def test_all_counters(files, capsys) -> None:
    a, _ = files
    assert sft_wc.main([a]) == 0
    assert capsys.readouterr().out == f"3       6       28      {a}\n"


def test_line_count_only(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "file.txt").write_text("a\nb\nc\n")
    assert sft_wc.main(["-l", "file.txt"]) == 0
    assert capsys.readouterr().out == "3       file.txt\n"


def test_total_line_for_several_files(files, capsys) -> None:
    a, b = files
    assert sft_wc.main(["-lw", a, b]) == 0
    assert capsys.readouterr().out.splitlines() == [f"3       6       {a}", f"1       1       {b}", "4       7       total"]


def test_failure_is_isolated(files, tmp_path, capsys) -> None:
    a, _ = files
    ghost = str(tmp_path / "ghost")
    assert sft_wc.main(["-c", ghost, a]) == 1
    captured = capsys.readouterr()
    assert f"wc: {ghost}: No such file or directory" in captured.err
    assert captured.out.splitlines() == [f"28      {a}", "28      total"]


def test_counts_piped_stdin(piped_stdin, capsys) -> None:
    piped_stdin(b"hello world\n")
    assert sft_wc.main([]) == 0
    assert capsys.readouterr().out == "1       2       12      -\n"


def test_missing_operand_on_terminal(capsys) -> None:
    assert sft_wc.main([]) == 1
    err = capsys.readouterr().err
    assert "missing file operand" in err
    assert "for more information." in err
