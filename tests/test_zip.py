import zipfile

import pytest
import sft_unzip
import sft_zip


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.txt").write_text("alpha")
    docs = tmp_path / "docs"
    (docs / "img").mkdir(parents=True)
    (docs / "intro.md").write_text("# intro")
    (docs / "img" / "b.png").write_bytes(b"\x89PNG")
    return tmp_path


def test_plan_entries_names_relative_to_parent(tree) -> None:
    assert [arc for _, arc in sft_zip.plan_entries(str(tree / "docs"))] == ["docs/intro.md", "docs/img/b.png"]
    assert sft_zip.plan_entries(str(tree / "a.txt")) == [(str(tree / "a.txt"), "a.txt")]


def test_create_prints_each_entry(tree, capsys) -> None:
    archive = tree / "out.zip"
    assert sft_zip.main([str(archive), str(tree / "a.txt"), str(tree / "docs")]) == 0
    assert capsys.readouterr().out == "  adding: a.txt\n  adding: docs/intro.md\n  adding: docs/img/b.png\n"
    with zipfile.ZipFile(archive) as zf:
        assert zf.read("docs/intro.md") == b"# intro"


def test_update_replaces_and_keeps_entries(tree, capsys) -> None:
    archive = tree / "out.zip"
    assert sft_zip.main([str(archive), str(tree / "a.txt"), str(tree / "docs")]) == 0
    (tree / "a.txt").write_text("changed")
    (tree / "new.txt").write_text("new")
    assert sft_zip.main(["-u", str(archive), str(tree / "a.txt"), str(tree / "new.txt")]) == 0
    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()
        assert sorted(names) == ["a.txt", "docs/img/b.png", "docs/intro.md", "new.txt"]
        assert len(names) == len(set(names))
        assert zf.read("a.txt") == b"changed"
    assert not (tree / "out.zip.tmp").exists()


def test_update_creates_missing_archive(tree) -> None:
    archive = tree / "fresh.zip"
    assert sft_zip.main(["-u", str(archive), str(tree / "a.txt")]) == 0
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["a.txt"]


def test_delete_removes_sources_after_adding(tree) -> None:
    archive = tree / "moved.zip"
    assert sft_zip.main(["-d", str(archive), str(tree / "a.txt"), str(tree / "docs")]) == 0
    assert not (tree / "a.txt").exists()
    assert not (tree / "docs").exists()
    with zipfile.ZipFile(archive) as zf:
        assert len(zf.namelist()) == 3


def test_archive_inside_source_is_not_added(tmp_path) -> None:
    work = tmp_path / "work"
    work.mkdir()
    (work / "a.txt").write_text("alpha")
    archive = work / "out.zip"
    assert sft_zip.main([str(archive), str(work)]) == 0
    assert sft_zip.main([str(archive), str(work)]) == 0
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["work/a.txt"]


def test_update_delete_keeps_archive_inside_source(tmp_path) -> None:
    work = tmp_path / "work"
    (work / "sub").mkdir(parents=True)
    (work / "a.txt").write_text("alpha")
    (work / "sub" / "b.txt").write_text("beta")
    archive = work / "out.zip"
    assert sft_zip.main([str(archive), str(work / "a.txt")]) == 0
    assert sft_zip.main(["-u", "-d", str(archive), str(work)]) == 0
    assert archive.is_file()
    assert sorted(p.name for p in work.iterdir()) == ["out.zip"]
    with zipfile.ZipFile(archive) as zf:
        assert sorted(zf.namelist()) == ["a.txt", "work/a.txt", "work/sub/b.txt"]
        assert zf.read("work/sub/b.txt") == b"beta"
    assert not (work / "out.zip.tmp").exists()


def test_archive_named_as_its_own_source_survives_delete(tmp_path) -> None:
    (tmp_path / "a.txt").write_text("alpha")
    archive = tmp_path / "out.zip"
    assert sft_zip.main([str(archive), str(tmp_path / "a.txt")]) == 0
    assert sft_zip.main(["-u", "-d", str(archive), str(archive)]) == 0
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["a.txt"]


def test_missing_source_keeps_going(tree, capsys) -> None:
    archive = tree / "partial.zip"
    assert sft_zip.main(["-d", str(archive), str(tree / "ghost"), str(tree / "a.txt")]) == 1
    assert "ghost: No such file or directory" in capsys.readouterr().err
    assert not (tree / "a.txt").exists()
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["a.txt"]


@pytest.mark.parametrize(
    "argv, message",
    [([], "missing archive operand"), (["only.zip"], "nothing to do: no FILE given"), (["-z"], "invalid option -- 'z'")],
)
def test_zip_usage_errors(argv, message, capsys) -> None:
    assert sft_zip.main(argv) == 1
    assert message in capsys.readouterr().err


def test_unzip_lists_and_extracts(tree, capsys) -> None:
    archive = tree / "out.zip"
    sft_zip.main([str(archive), str(tree / "a.txt"), str(tree / "docs")])
    capsys.readouterr()

    assert sft_unzip.main(["-l", str(archive)]) == 0
    assert capsys.readouterr().out == "Archive contents:\na.txt\ndocs/intro.md\ndocs/img/b.png\n"

    dest = tree / "dest"
    assert sft_unzip.main(["-f", str(archive), "-o", str(dest)]) == 0
    assert capsys.readouterr().out == f"Files extracted to: {dest}\n"
    assert (dest / "docs" / "img" / "b.png").read_bytes() == b"\x89PNG"


def test_unzip_skips_escaping_entries(tmp_path, capsys) -> None:
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("../escaped.txt", "boom")
        zf.writestr("ok.txt", "fine")
    dest = tmp_path / "dest"
    assert sft_unzip.main([str(archive), "-o", str(dest)]) == 1
    assert "unzip: ../escaped.txt: entry escapes the output directory, skipped" in capsys.readouterr().err
    assert (dest / "ok.txt").read_text() == "fine"
    assert not (tmp_path / "escaped.txt").exists()


def test_is_within(tmp_path) -> None:
    assert sft_unzip.is_within(str(tmp_path), "a/b.txt")
    assert not sft_unzip.is_within(str(tmp_path), "../x")
    assert not sft_unzip.is_within(str(tmp_path), "a/../../x")


def test_unzip_bad_archive(tmp_path, capsys) -> None:
    bogus = tmp_path / "bogus.zip"
    bogus.write_text("not a zip")
    assert sft_unzip.main([str(bogus), "-o", str(tmp_path / "d")]) == 1
    assert "bogus.zip" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv, message",
    [
        ([], "missing archive operand"),
        (["a.zip", "b.zip"], "extra operand 'b.zip'"),
        (["-f", "a.zip", "b.zip"], "extra operand 'b.zip'"),
        (["-o"], "option requires an argument -- 'o'"),
    ],
)
def test_unzip_usage_errors(argv, message, capsys) -> None:
    assert sft_unzip.main(argv) == 1
    assert message in capsys.readouterr().err
