import pytest
import sft_file


@pytest.mark.parametrize(
    "head, kind",
    [
        (b"", "empty"),
        (b"\x89PNG\r\n\x1a\n....", "PNG image"),
        (b"%PDF-1.7", "PDF document"),
        (b"PK\x03\x04rest", "Zip archive"),
        (b"\x7fELF\x02\x01", "ELF executable"),
        (b"#!/bin/sh\necho hi\n", "script text executable"),
        (b"plain words\n", "text"),
        ("café".encode(), "text"),
        (b"\x00\x01\x02", "data"),
        (b"\xff\xfe\xfd\xfc\xfb\xfa", "data"),
    ],
)
def test_sniff(head, kind) -> None:
    assert sft_file.sniff(head) == kind


def test_extension_wins_over_content(tmp_path, capsys) -> None:
    path = tmp_path / "notes.md"
    path.write_bytes(b"\x00\x00")
    assert sft_file.main([str(path)]) == 0
    assert capsys.readouterr().out == f"{path}: Markdown document\n"


def test_unknown_extension_is_sniffed(tmp_path, capsys) -> None:
    path = tmp_path / "blob.bin"
    path.write_bytes(b"GIF89a....")
    assert sft_file.main([str(path)]) == 0
    assert capsys.readouterr().out == f"{path}: GIF image\n"


def test_directory_and_missing_are_errors(tmp_path, capsys) -> None:
    (tmp_path / "ok.txt").write_text("hi")
    status = sft_file.main([str(tmp_path), str(tmp_path / "ghost.txt"), str(tmp_path / "ok.txt")])
    captured = capsys.readouterr()
    assert status == 1
    assert captured.out == f"{tmp_path / 'ok.txt'}: text file\n"
    assert "Is a directory" in captured.err
    assert "No such file or directory" in captured.err
