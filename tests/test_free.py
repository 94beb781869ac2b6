from types import SimpleNamespace
from typing import Any

import pytest
import sft_free

GIB = 1024**3


@pytest.fixture(autouse=True)
def fake_memory(monkeypatch: Any) -> None:
    monkeypatch.setattr(sft_free.psutil, "virtual_memory", lambda: SimpleNamespace(total=8 * GIB, free=3 * GIB))
    monkeypatch.setattr(sft_free.psutil, "swap_memory", lambda: SimpleNamespace(total=2 * GIB, free=2 * GIB))


def test_default_unit_is_megabytes(capsys) -> None:
    assert sft_free.main([]) == 0
    assert capsys.readouterr().out == (
        "Mem: 8192 MB total, 5120 MB used, 3072 MB free\n"
        "Swap: 2048 MB total, 0 MB used, 2048 MB free\n"
    )


@pytest.mark.parametrize(
    "flag, first_line",
    [
        ("-g", "Mem: 8 GB total, 5 GB used, 3 GB free"),
        ("-k", f"Mem: {8 * 1024**2} KB total, {5 * 1024**2} KB used, {3 * 1024**2} KB free"),
        ("-b", f"Mem: {8 * GIB} B total, {5 * GIB} B used, {3 * GIB} B free"),
    ],
)
def test_units(flag, first_line, capsys) -> None:
    assert sft_free.main([flag]) == 0
    assert capsys.readouterr().out.splitlines()[0] == first_line


def test_bytes_wins_when_several_units_given(capsys) -> None:
    assert sft_free.main(["-gb"]) == 0
    assert " B total" in capsys.readouterr().out


def test_operands_are_rejected(capsys) -> None:
    assert sft_free.main(["now"]) == 1
    assert "extra operand 'now'" in capsys.readouterr().err
