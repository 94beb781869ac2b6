from types import SimpleNamespace
from typing import Any

import pytest
import sft_df

MIB = 1024**2


@pytest.fixture
def fake_disks(monkeypatch: Any) -> None:
    parts = [SimpleNamespace(mountpoint="/"), SimpleNamespace(mountpoint="/proc")]
    sizes = {"/": (100 * MIB, 40 * MIB, 60 * MIB), "/proc": (0, 0, 0)}
    monkeypatch.setattr(sft_df.psutil, "disk_partitions", lambda all=False: parts)
    monkeypatch.setattr(
        sft_df.psutil,
        "disk_usage",
        lambda path: SimpleNamespace(total=sizes[path][0], used=sizes[path][1], free=sizes[path][2]),
    )


def test_default_table_in_1k_blocks(fake_disks, capsys) -> None:
    assert sft_df.main([]) == 0
    assert capsys.readouterr().out.splitlines() == [
        sft_df.ROW.format("Filesystem", "1K-blocks", "Used", "Available"),
        sft_df.ROW.format("/", 102400, 40960, 61440),
    ]


def test_all_keeps_empty_file_systems(fake_disks, capsys) -> None:
    assert sft_df.main(["-a"]) == 0
    assert capsys.readouterr().out.splitlines()[-1].split() == ["/proc", "0", "0", "0"]


def test_block_size_scales(fake_disks, capsys) -> None:
    assert sft_df.main(["-B", "M"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["Filesystem", "M-blocks", "Used", "Available"]
    assert lines[1].split() == ["/", "100", "40", "60"]


@pytest.mark.parametrize("raw, size", [("1K", 1024), ("M", MIB), ("512", 512), ("2g", 2 * 1024**3)])
def test_parse_block_size(raw, size) -> None:
    assert sft_df.parse_block_size(raw).size == size


def test_bad_block_size(capsys) -> None:
    assert sft_df.main(["-B", "0"]) == 1
    assert "invalid value '0' for option -B" in capsys.readouterr().err


def test_path_operand_uses_its_mount_point(tmp_path, capsys) -> None:
    assert sft_df.main(["--direct", str(tmp_path), str(tmp_path / "ghost")]) == 1
    captured = capsys.readouterr()
    assert len(captured.out.splitlines()) == 2
    assert "ghost: No such file or directory" in captured.err


def test_unreadable_path_operand_is_reported(tmp_path, monkeypatch: Any, capsys) -> None:
    def denied(mount, direct):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(sft_df, "_usage", denied)
    assert sft_df.main([str(tmp_path)]) == 1
    captured = capsys.readouterr()
    assert f"df: {tmp_path}: Permission denied" in captured.err
    assert len(captured.out.splitlines()) == 1


def test_unreadable_mount_is_skipped_without_operands(fake_disks, monkeypatch: Any, capsys) -> None:
    def denied(path):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(sft_df.psutil, "disk_usage", denied)
    assert sft_df.main([]) == 0
    captured = capsys.readouterr()
    assert captured.err == ""
    assert len(captured.out.splitlines()) == 1
