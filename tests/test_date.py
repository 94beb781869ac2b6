import os
import re
from datetime import datetime

import pytest
import sft_date


def test_now_in_rfc1123(capsys) -> None:
    assert sft_date.main([]) == 0
    assert re.fullmatch(r"\w{3}, \d{2} \w{3} \d{4} \d{2}:\d{2}:\d{2} .+\n", capsys.readouterr().out)


def test_convert_with_default_format(capsys) -> None:
    assert sft_date.main(["-d", "2026-01-13T12:00:00Z"]) == 0
    assert capsys.readouterr().out == "Date: Tue, 13 Jan 2026 12:00:00 UTC\n"


def test_convert_with_custom_format(capsys) -> None:
    assert sft_date.main(["-d", "2026-01-13T12:30:00+02:00", "+%H:%M"]) == 0
    assert capsys.readouterr().out == "Date: 12:30\n"


def test_missing_offset_is_rejected(capsys) -> None:
    assert sft_date.main(["-d", "2026-01-13T12:00:00"]) == 1
    assert "invalid date '2026-01-13T12:00:00'" in capsys.readouterr().err


def test_dates_from_file_keep_going(tmp_path, capsys) -> None:
    f = tmp_path / "dates.txt"
    f.write_text("2026-01-01T00:00:00Z\n\nnonsense\n2026-12-31T23:59:00Z\n")
    assert sft_date.main(["-f", str(f), "+%Y-%m-%d"]) == 1
    captured = capsys.readouterr()
    assert captured.out == "Date: 2026-01-01\nDate: 2026-12-31\n"
    assert "invalid date 'nonsense" in captured.err


def test_reference_file_time(tmp_path, capsys) -> None:
    f = tmp_path / "ref"
    f.write_text("")
    stamp = datetime(2025, 6, 1, 8, 15).timestamp()
    os.utime(f, (stamp, stamp))
    assert sft_date.main(["-r", str(f), "+%Y-%m-%d %H:%M"]) == 0
    assert capsys.readouterr().out == "File time: 2025-06-01 08:15\n"


def test_reference_missing(tmp_path, capsys) -> None:
    assert sft_date.main(["-r", str(tmp_path / "ghost")]) == 1
    assert "ghost: No such file or directory" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv, message",
    [
        (["-d"], "option requires an argument -- 'd'"),
        (["tomorrow"], "invalid date 'tomorrow'"),
        (["+%H", "+%M"], "extra operand '+%M'"),
    ],
)
def test_usage_errors(argv, message, capsys) -> None:
    assert sft_date.main(argv) == 1
    assert message in capsys.readouterr().err
