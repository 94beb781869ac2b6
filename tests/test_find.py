import os

import pytest
import sft_find


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "b").mkdir()
    (tmp_path / "a.log").write_bytes(b"x" * 2048)
    (tmp_path / "b" / "c.log").write_bytes(b"x" * 10)
    (tmp_path / "b" / "d.txt").write_bytes(b"")
    return tmp_path


def test_positional_dir_and_pattern(tree, capsys) -> None:
    assert sft_find.main([str(tree), "*.log"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        os.path.join(str(tree), "a.log"),
        os.path.join(str(tree), "b", "c.log"),
    ]


def test_min_size_with_suffix(tree, capsys) -> None:
    assert sft_find.main(["-d", str(tree), "-s", "1K"]) == 0
    assert capsys.readouterr().out.splitlines() == [os.path.join(str(tree), "a.log")]


def test_options_take_precedence_over_positionals(tree, capsys) -> None:
    assert sft_find.main(["-n", "*.txt", str(tree), "*.log"]) == 0
    assert capsys.readouterr().out.splitlines() == [os.path.join(str(tree), "b", "d.txt")]


@pytest.mark.parametrize("raw, expected", [("0", 0), ("512", 512), ("4k", 4096), ("2M", 2 * 1024**2), ("1G", 1024**3)])
def test_parse_size(raw, expected) -> None:
    assert sft_find.parse_size(raw) == expected


def test_bundled_value_options_are_rejected(capsys) -> None:
    assert sft_find.main(["-dn", "x", "y"]) == 1
    assert "option -d takes a value and cannot be bundled in '-dn'" in capsys.readouterr().err


def test_bad_size_and_extra_operand(capsys) -> None:
    assert sft_find.main(["-s", "lots"]) == 1
    assert "invalid value 'lots' for option -s" in capsys.readouterr().err
    assert sft_find.main([".", "*", "more"]) == 1
    assert "extra operand 'more'" in capsys.readouterr().err


def test_not_a_directory(tmp_path, capsys) -> None:
    (tmp_path / "f").write_text("")
    assert sft_find.main([str(tmp_path / "f")]) == 1
    assert "Not a directory" in capsys.readouterr().err
