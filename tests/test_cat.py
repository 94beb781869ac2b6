import sft_cat


def test_concatenates_in_order(tmp_path, capsys) -> None:
    (tmp_path / "a").write_text("one\n")
    (tmp_path / "b").write_text("two\n")
    assert sft_cat.main([str(tmp_path / "a"), str(tmp_path / "b")]) == 0
    assert capsys.readouterr().out == "one\ntwo\n"


def test_numbering_continues_across_files(tmp_path, capsys) -> None:
    (tmp_path / "a").write_text("x\ny\n")
    (tmp_path / "b").write_text("z\n")
    assert sft_cat.main(["-n", str(tmp_path / "a"), str(tmp_path / "b")]) == 0
    assert capsys.readouterr().out == "     1\tx\n     2\ty\n     3\tz\n"


def test_number_nonblank_wins_over_number(tmp_path, capsys) -> None:
    (tmp_path / "a").write_text("x\n\ny\n")
    assert sft_cat.main(["-nb", str(tmp_path / "a")]) == 0
    assert capsys.readouterr().out == "     1\tx\n\n     2\ty\n"


def test_show_all_marks_tabs_controls_and_line_ends(tmp_path, capsys) -> None:
    (tmp_path / "a").write_bytes(b"a\tb\x01\x7f\nlast")
    assert sft_cat.main(["-A", str(tmp_path / "a")]) == 0
    assert capsys.readouterr().out == "a^Ib^A^?$\nlast"


def test_show_ends_only(tmp_path, capsys) -> None:
    (tmp_path / "a").write_text("a\tb\n")
    assert sft_cat.main(["-e", str(tmp_path / "a")]) == 0
    assert capsys.readouterr().out == "a\tb$\n"


def test_missing_operand_does_not_stop_the_rest(tmp_path, capsys) -> None:
    (tmp_path / "ok").write_text("fine\n")
    status = sft_cat.main([str(tmp_path / "missing"), str(tmp_path / "ok")])
    captured = capsys.readouterr()
    assert status == 1
    assert captured.out == "fine\n"
    assert "cat: " in captured.err and "No such file or directory" in captured.err


def test_reads_piped_stdin_without_operands(piped_stdin, capsys) -> None:
    piped_stdin(b"from pipe\n")
    assert sft_cat.main([]) == 0
    assert capsys.readouterr().out == "from pipe\n"


def test_dash_means_stdin_between_files(tmp_path, piped_stdin, capsys) -> None:
    (tmp_path / "a").write_text("file\n")
    piped_stdin(b"pipe\n")
    assert sft_cat.main([str(tmp_path / "a"), "-"]) == 0
    assert capsys.readouterr().out == "file\npipe\n"


def test_no_operand_on_a_terminal_is_a_usage_error(capsys) -> None:
    assert sft_cat.main([]) == 1
    err = capsys.readouterr().err
    assert "missing file operand" in err
    assert "Try 'cat -h' or 'cat --help' for more information." in err
