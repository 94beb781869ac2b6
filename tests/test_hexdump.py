import sft_hexdump


def test_canonical_full_line(tmp_path, capsys) -> None:
    (tmp_path / "d").write_bytes(b"0123456789abcdef")
    assert sft_hexdump.main(["-C", str(tmp_path / "d")]) == 0
    assert capsys.readouterr().out == (
        "00000000  30 31 32 33 34 35 36 37  38 39 61 62 63 64 65 66  |0123456789abcdef|\n"
        "00000010\n"
    )


def test_canonical_partial_line_keeps_ascii_column_aligned() -> None:
    lines = sft_hexdump.dump(b"A\n", 0, canonical=True)
    assert lines[0].startswith("00000000  41 0a ")
    assert lines[0].endswith("  |A.|")
    assert lines[0].index("|") == len("00000000  ") + 23 + 2 + 23 + 2
    assert lines[1] == "00000002"


def test_default_little_endian_words(tmp_path, capsys) -> None:
    (tmp_path / "d").write_bytes(b"abcde")
    assert sft_hexdump.main([str(tmp_path / "d")]) == 0
    assert capsys.readouterr().out == "0000000 6261 6463 0065\n0000005\n"


def test_skip_and_length_offsets(tmp_path, capsys) -> None:
    (tmp_path / "d").write_bytes(bytes(range(64)))
    assert sft_hexdump.main(["-s", "0x10", "-n", "4", "-C", str(tmp_path / "d")]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("00000010  10 11 12 13")
    assert out[-1] == "00000014"


def test_empty_file_prints_only_the_offset(tmp_path, capsys) -> None:
    (tmp_path / "empty").write_bytes(b"")
    assert sft_hexdump.main([str(tmp_path / "empty")]) == 0
    assert capsys.readouterr().out == "0000000\n"


def test_several_files_get_name_headers(tmp_path, capsys) -> None:
    (tmp_path / "a").write_bytes(b"ab")
    a = str(tmp_path / "a")
    status = sft_hexdump.main([a, str(tmp_path / "missing")])
    captured = capsys.readouterr()
    assert status == 1
    assert captured.out == f"{a}:\n0000000 6261\n0000002\n"
    assert "missing" in captured.err


def test_negative_skip_is_rejected(capsys) -> None:
    assert sft_hexdump.main(["-s", "-4", "f"]) == 1
    assert "invalid value '-4' for option -s" in capsys.readouterr().err
