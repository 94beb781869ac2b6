import os
import signal
from typing import Any

import sft_exit


def test_hangs_up_parent(monkeypatch: Any) -> None:
    sent: list = []
    monkeypatch.setattr(sft_exit.os, "kill", lambda pid, sig: sent.append((pid, sig)))
    assert sft_exit.main([]) == 0
    assert sent == [(os.getppid(), signal.SIGHUP)]


def test_failure_is_reported(monkeypatch: Any, capsys) -> None:
    def refuse(pid, sig):
        raise PermissionError(1, "Operation not permitted")

    monkeypatch.setattr(sft_exit.os, "kill", refuse)
    assert sft_exit.main([]) == 1
    assert f"exit: {os.getppid()}: Operation not permitted" in capsys.readouterr().err


def test_operand_rejected(monkeypatch: Any, capsys) -> None:
    sent: list = []
    monkeypatch.setattr(sft_exit.os, "kill", lambda pid, sig: sent.append((pid, sig)))
    assert sft_exit.main(["0"]) == 1
    assert "extra operand '0'" in capsys.readouterr().err
    assert sent == []
