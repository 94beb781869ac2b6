import io
import os
import sys
import tempfile
from typing import Any, Callable

import pytest

# Scripts resolve their log file at import time; keep test runs out of scripts/.
os.environ.setdefault("SFC_LOG_DIR", tempfile.mkdtemp(prefix="sfc-logs-"))


class TtyStdin(io.StringIO):
    """Interactive stdin: utilities must not fall back to reading it."""

    def isatty(self) -> bool:
        return True


@pytest.fixture(autouse=True)
def tty_stdin(monkeypatch: Any) -> None:
    monkeypatch.setattr(sys, "stdin", TtyStdin())


@pytest.fixture
def piped_stdin(monkeypatch: Any) -> Callable[[bytes], io.TextIOWrapper]:
    """Replace stdin with a pipe-like stream holding the given bytes."""

    def _feed(data: bytes) -> io.TextIOWrapper:
        stream = io.TextIOWrapper(io.BytesIO(data))
        monkeypatch.setattr(sys, "stdin", stream)
        return stream

    return _feed
