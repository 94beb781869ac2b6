import pytest
import sft_tail


@pytest.fixture
def numbers(tmp_path):
    path = tmp_path / "numbers.txt"
    path.write_text("".join(f"{i}\n" for i in range(1, 21)))
    return path


def test_default_is_last_ten_lines(numbers, capsys) -> None:
    assert sft_tail.main([str(numbers)]) == 0
    assert capsys.readouterr().out.splitlines() == [str(i) for i in range(11, 21)]


def test_n_three(numbers, capsys) -> None:
    assert sft_tail.main(["-n", "3", str(numbers)]) == 0
    assert capsys.readouterr().out == "18\n19\n20\n"


def test_zero_lines(numbers, capsys) -> None:
    assert sft_tail.main(["-n", "0", str(numbers)]) == 0
    assert capsys.readouterr().out == ""


def test_bytes_from_the_end(numbers, capsys) -> None:
    assert sft_tail.main(["-c", "3", str(numbers)]) == 0
    assert capsys.readouterr().out == "20\n"


def test_more_than_the_file_has(tmp_path, capsys) -> None:
    short = tmp_path / "short.txt"
    short.write_text("a\nb\n")
    assert sft_tail.main(["-n", "100", str(short)]) == 0
    assert capsys.readouterr().out == "a\nb\n"
    assert sft_tail.main(["-c", "100", str(short)]) == 0
    assert capsys.readouterr().out == "a\nb\n"


def test_headers_and_isolation(tmp_path, capsys) -> None:
    (tmp_path / "a").write_text("A\n")
    a = str(tmp_path / "a")
    status = sft_tail.main([str(tmp_path / "gone"), a, "-q"])
    captured = capsys.readouterr()
    assert status == 1
    assert captured.out == "A\n"
    assert "gone" in captured.err


def test_standard_input_header(tmp_path, piped_stdin, capsys) -> None:
    (tmp_path / "a").write_text("A\n")
    piped_stdin(b"P\n")
    a = str(tmp_path / "a")
    assert sft_tail.main([a, "-"]) == 0
    assert capsys.readouterr().out == f"==> {a} <==\nA\n\n==> standard input <==\nP\n"
