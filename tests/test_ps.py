from types import SimpleNamespace
from typing import Any

import pytest
import sft_ps


def _proc(pid: int, user: str, cmdline: list[str], name: str = "x") -> SimpleNamespace:
    return SimpleNamespace(
        info={
            "pid": pid,
            "name": name,
            "username": user,
            "terminal": "/dev/pts/0",
            "status": sft_ps.psutil.STATUS_SLEEPING,
            "cpu_times": SimpleNamespace(user=61.0, system=1.5),
            "memory_percent": 2.5,
            "memory_info": SimpleNamespace(vms=4096 * 1024, rss=2048 * 1024),
            "create_time": None,
            "cmdline": cmdline,
        }
    )


@pytest.fixture(autouse=True)
def fake_processes(monkeypatch: Any) -> None:
    procs = [_proc(30, "bob", ["vim", "notes"]), _proc(7, "alice", [], name="kworker"), _proc(12, "alice", ["bash"])]
    monkeypatch.setattr(sft_ps.psutil, "process_iter", lambda attrs, ad_value=None: list(procs))
    monkeypatch.setattr(sft_ps.getpass, "getuser", lambda: "alice")


def test_default_shows_current_user_sorted_by_pid(capsys) -> None:
    assert sft_ps.main([]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["USER", "PID", "%CPU", "%MEM", "VSZ", "RSS", "TTY", "STAT", "START", "TIME", "COMMAND"]
    assert [line.split()[1] for line in lines[1:]] == ["7", "12"]
    assert lines[1].split() == ["alice", "7", "0.0", "2.5", "4096", "2048", "pts/0", "S", "?", "1:02", "[kworker]"]


def test_all_processes_short_format(capsys) -> None:
    assert sft_ps.main(["-a"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["PID", "TTY", "TIME", "CMD"]
    assert lines[-1].split() == ["30", "pts/0", "1:02", "vim", "notes"]


def test_named_user(capsys) -> None:
    assert sft_ps.main(["bob"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert lines[1].endswith("vim notes")


def test_job_format(capsys) -> None:
    assert sft_ps.main(["-g"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["PID", "TTY", "STAT", "TIME", "COMMAND"]
    assert lines[2].split() == ["12", "pts/0", "S", "1:02", "bash"]


def test_extra_operand(capsys) -> None:
    assert sft_ps.main(["alice", "bob"]) == 1
    assert "extra operand 'bob'" in capsys.readouterr().err


def test_cpu_share_is_cpu_time_over_lifetime(monkeypatch: Any) -> None:
    now = 1_700_000_000.0
    monkeypatch.setattr(sft_ps.time, "time", lambda: now)
    info = dict(_proc(5, "alice", ["busy"]).info, create_time=now - 625)
    row = sft_ps._row(info)
    assert row.cpu == 10.0
    assert row.time == "1:02"


def test_cpu_share_shows_in_user_format(monkeypatch: Any, capsys) -> None:
    busy = _proc(3, "alice", ["busy"])
    busy.info["create_time"] = sft_ps.time.time() - 125
    monkeypatch.setattr(sft_ps.psutil, "process_iter", lambda attrs, ad_value=None: [busy])
    assert sft_ps.main([]) == 0
    cpu = float(capsys.readouterr().out.splitlines()[1].split()[2])
    assert cpu > 0.0


def test_cpu_share_without_times() -> None:
    assert sft_ps._cpu_share(None, 100.0) == 0.0
    assert sft_ps._cpu_share(SimpleNamespace(user=1.0, system=0.0), None) == 0.0
