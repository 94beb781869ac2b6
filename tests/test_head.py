import pytest
import sft_head


@pytest.fixture
def numbers(tmp_path):
    path = tmp_path / "numbers.txt"
    path.write_text("".join(f"{i}\n" for i in range(1, 21)))
    return path


def test_default_is_ten_lines(numbers, capsys) -> None:
    assert sft_head.main([str(numbers)]) == 0
    assert capsys.readouterr().out.splitlines() == [str(i) for i in range(1, 11)]


def test_n_two(numbers, capsys) -> None:
    assert sft_head.main(["-n", "2", str(numbers)]) == 0
    assert capsys.readouterr().out == "1\n2\n"


def test_bytes(numbers, capsys) -> None:
    assert sft_head.main(["-c", "3", str(numbers)]) == 0
    assert capsys.readouterr().out == "1\n2"


def test_more_lines_than_the_file_has(tmp_path, capsys) -> None:
    short = tmp_path / "short.txt"
    short.write_text("a\nb\n")
    assert sft_head.main(["-n", "50", str(short)]) == 0
    assert capsys.readouterr().out == "a\nb\n"


def test_headers_for_several_files(tmp_path, capsys) -> None:
    (tmp_path / "a").write_text("A\n")
    (tmp_path / "b").write_text("B\n")
    a, b = str(tmp_path / "a"), str(tmp_path / "b")
    assert sft_head.main([a, b]) == 0
    assert capsys.readouterr().out == f"==> {a} <==\nA\n\n==> {b} <==\nB\n"


def test_quiet_suppresses_headers(tmp_path, capsys) -> None:
    (tmp_path / "a").write_text("A\n")
    (tmp_path / "b").write_text("B\n")
    assert sft_head.main(["-q", str(tmp_path / "a"), str(tmp_path / "b")]) == 0
    assert capsys.readouterr().out == "A\nB\n"


def test_failing_operand_is_isolated(numbers, tmp_path, capsys) -> None:
    status = sft_head.main(["-n", "1", str(tmp_path / "nope"), str(numbers)])
    captured = capsys.readouterr()
    assert status == 1
    assert captured.out.endswith("1\n")
    assert "No such file or directory" in captured.err


@pytest.mark.parametrize(
    "argv, message",
    [
        (["-n"], "option requires an argument -- 'n'"),
        (["-n", "x", "f"], "invalid value 'x' for option -n"),
        (["-n", "-1", "f"], "invalid value '-1' for option -n"),
        (["-qn", "2", "f"], "option -n takes a value and cannot be bundled in '-qn'"),
    ],
)
def test_value_flag_errors(argv, message, capsys) -> None:
    assert sft_head.main(argv) == 1
    assert message in capsys.readouterr().err


def test_piped_stdin(piped_stdin, capsys) -> None:
    piped_stdin(b"x\ny\nz\n")
    assert sft_head.main(["-n", "1"]) == 0
    assert capsys.readouterr().out == "x\n"
