import io
import re
import tarfile
import tomllib
from pathlib import Path

import pytest
import sft_tar


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.txt").write_text("alpha")
    sub = tmp_path / "dir"
    sub.mkdir()
    (sub / "b.txt").write_text("beta")
    return tmp_path


def test_create_list_extract(tree, tmp_path, capsys) -> None:
    archive = str(tmp_path / "out.tar.gz")
    assert sft_tar.main(["-c", "-f", archive, "-C", str(tree), "a.txt", "dir"]) == 0

    assert sft_tar.main(["-t", "-f", archive]) == 0
    assert capsys.readouterr().out.splitlines() == ["a.txt", "dir/", "dir/b.txt"]

    dest = tmp_path / "dest"
    assert sft_tar.main(["-x", "-f", archive, "-C", str(dest)]) == 0
    assert (dest / "a.txt").read_text() == "alpha"
    assert (dest / "dir" / "b.txt").read_text() == "beta"


def test_arcname_is_basename(tree, tmp_path) -> None:
    archive = tmp_path / "base.tar.gz"
    assert sft_tar.main(["-c", "-f", str(archive), str(tree / "dir" / "b.txt")]) == 0
    with tarfile.open(archive) as tar:
        assert tar.getnames() == ["b.txt"]


def test_missing_member_does_not_stop_create(tree, tmp_path, capsys) -> None:
    archive = tmp_path / "partial.tar.gz"
    assert sft_tar.main(["-c", "-f", str(archive), "-C", str(tree), "ghost", "a.txt"]) == 1
    assert "tar: ghost: No such file or directory" in capsys.readouterr().err
    with tarfile.open(archive) as tar:
        assert tar.getnames() == ["a.txt"]


def test_extract_refuses_escaping_members(tmp_path, capsys) -> None:
    archive = tmp_path / "evil.tar.gz"
    with tarfile.open(archive, "w:gz") as tar:
        data = b"boom"
        info = tarfile.TarInfo("../escaped.txt")
        info.size = len(data)
        tar.addfile(info, io.BytesIO(data))
    dest = tmp_path / "dest"
    assert sft_tar.main(["-x", "-f", str(archive), "-C", str(dest)]) == 1
    assert not (tmp_path / "escaped.txt").exists()
    assert "evil.tar.gz" in capsys.readouterr().err


def test_missing_archive(tmp_path, capsys) -> None:
    assert sft_tar.main(["-t", "-f", str(tmp_path / "none.tar.gz")]) == 1
    assert "No such file or directory" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv, message",
    [
        (["-f", "x.tar.gz"], "exactly one of -c, -x or -t is required"),
        (["-c", "-x", "a"], "exactly one of -c, -x or -t is required"),
        (["-c", "-f", "x.tar.gz"], "cowardly refusing to create an empty archive"),
        (["-cf", "x.tar.gz"], "option -f takes a value and cannot be bundled in '-cf'"),
        (["-t", "-f"], "option requires an argument -- 'f'"),
    ],
)
def test_usage_errors(argv, message, tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    assert sft_tar.main(argv) == 1
    assert message in capsys.readouterr().err


def test_python_floor_supports_extraction_filters() -> None:
    root = Path(__file__).resolve().parent.parent
    header = re.search(r'# requires-python = "(.+)"', (root / "scripts" / "sft_tar.py").read_text()).group(1)
    project = tomllib.loads((root / "pyproject.toml").read_text())["project"]
    assert header == ">=3.11.4"
    assert project["requires-python"] == ">=3.11.4"
    assert hasattr(tarfile, "data_filter")
