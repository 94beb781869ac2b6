import os

import sft_touch

OLD = 1_000_000_000


def test_creates_missing_file(tmp_path) -> None:
    target = tmp_path / "new"
    assert sft_touch.main([str(target)]) == 0
    assert target.exists() and target.read_bytes() == b""


def test_no_create_skips_missing(tmp_path) -> None:
    target = tmp_path / "new"
    assert sft_touch.main(["-c", str(target)]) == 0
    assert sft_touch.main(["--no-create", str(target)]) == 0
    assert not target.exists()


def test_updates_both_times_by_default(tmp_path) -> None:
    target = tmp_path / "f"
    target.write_text("x")
    os.utime(target, (OLD, OLD))
    assert sft_touch.main([str(target)]) == 0
    st = target.stat()
    assert st.st_atime > OLD and st.st_mtime > OLD


def test_access_only_keeps_mtime(tmp_path) -> None:
    target = tmp_path / "f"
    target.write_text("x")
    os.utime(target, (OLD, OLD))
    assert sft_touch.main(["-a", str(target)]) == 0
    st = target.stat()
    assert st.st_atime > OLD
    assert st.st_mtime == OLD


def test_modify_only_keeps_atime(tmp_path) -> None:
    target = tmp_path / "f"
    target.write_text("x")
    os.utime(target, (OLD, OLD))
    assert sft_touch.main(["-m", str(target)]) == 0
    st = target.stat()
    assert st.st_atime == OLD
    assert st.st_mtime > OLD


def test_failure_isolation(tmp_path, capsys) -> None:
    status = sft_touch.main([str(tmp_path / "no" / "such"), str(tmp_path / "ok")])
    assert status == 1
    assert (tmp_path / "ok").exists()
    assert "No such file or directory" in capsys.readouterr().err
