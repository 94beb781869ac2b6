#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = []
# ///
"""!n — re-run a numbered command from the bash history.

Numbers match the ones `history` prints. Without N the user is asked for
one. Arguments after N are appended to the recalled command.

Usage:
    sft_bang_nth.py [N] [ARG...]

Examples:
    sft_bang_nth.py 92         # run entry 92 again
    sft_bang_nth.py 92 -la     # ... with -la appended
"""

import os
import shlex
import subprocess
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TextIO

# =============================================================================
# LOGGING
# =============================================================================
_LEVELS = {"TRACE": 5, "DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40, "FATAL": 50}
_THRESHOLD = _LEVELS.get(os.environ.get("SFC_LOG_LEVEL", "INFO"), 20)
_LOG_DIR = os.environ.get("SFC_LOG_DIR", "")
_SCRIPT = Path(__file__).stem
_LOG = Path(_LOG_DIR) / f"{_SCRIPT}_log.tsv" if _LOG_DIR else Path(__file__).parent / f"{_SCRIPT}_log.tsv"
_HEADER = "#timestamp\tscript\tlevel\tevent\tmessage\tdetail\tmetrics\ttrace\n"


def _log(level: str, event: str, msg: str, *, detail: str = "", metrics: str = "", trace: str = ""):
    """Append TSV log line. Logging never crashes the main flow."""
    if _LEVELS.get(level, 20) < _THRESHOLD:
        return
    try:
        ts = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
        write_header = not _LOG.exists()
        with open(_LOG, "a") as f:
            if write_header:
                f.write(_HEADER)
            f.write(f"{ts}\t{_SCRIPT}\t{level}\t{event}\t{msg}\t{detail}\t{metrics}\t{trace}\n")
    except Exception:
        pass


# =============================================================================
# CONFIGURATION
# =============================================================================
EXPOSED = []  # CLI only: runs commands in the calling terminal

PROG = "!n"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version"}

HELP = f"""{PROG} - run a numbered command from the history again

Usage: {PROG} [OPTION] [N] [ARG...]

N is the entry number shown by 'history'; when absent it is asked for.
Only -h/--help and -v/--version are read as options, and only before the
first operand; ARGs are appended to the recalled command.

Options:
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Examples:
  {PROG} 92          # run entry 92
  {PROG} 92 -la      # ls  ->  ls -la
  {PROG}             # prompt for the number"""


@dataclass(frozen=True)
class BangNthConfig:
    help: bool = False
    version: bool = False
    number: int | None = None
    args: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _entry_number(raw: str) -> int | None:
    return int(raw) if raw.isdigit() and int(raw) > 0 else None


def _parse_args(argv: list[str]) -> tuple[BangNthConfig | None, str]:
    rest: list[str] = []
    for i, arg in enumerate(argv):
        if arg == "--":
            rest = argv[i + 1:]
            break
        if arg in LONG_FLAGS:
            return BangNthConfig(**{LONG_FLAGS[arg]: True}), ""
        if arg.startswith("-") and len(arg) == 2 and arg[1] in SHORT_FLAGS:
            return BangNthConfig(**{SHORT_FLAGS[arg[1]]: True}), ""
        rest = argv[i:]
        break
    if rest and _entry_number(rest[0]) is not None:
        return BangNthConfig(number=_entry_number(rest[0]), args=tuple(rest[1:])), ""
    return BangNthConfig(args=tuple(rest)), ""


def history_file() -> Path:
    if os.environ.get("HISTFILE"):
        return Path(os.environ["HISTFILE"])
    home = os.environ.get("HOME")
    assert home, "HOME not set"
    return Path(home) / ".bash_history"


def read_history(path: Path) -> list[str]:
    try:
        text = path.read_text(errors="replace")
    except FileNotFoundError:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def _ask_number() -> int | None:
    try:
        raw = input(f"{PROG}: enter command number: ")
    except EOFError:
        return None
    return _entry_number(raw.strip())


def _bang_nth_impl(config: BangNthConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: !n"""
    entries = read_history(history_file())
    if not entries:
        print(f"{PROG}: history is empty", file=err)
        return 1, {"command": "", "latency_ms": 0, "status": "error"}

    number = config.number or _ask_number()
    if number is None:
        print(f"{PROG}: command number must be a positive integer", file=err)
        return 1, {"command": "", "latency_ms": 0, "status": "error"}
    if number > len(entries):
        print(f"{PROG}: command #{number} does not exist (total {len(entries)})", file=err)
        return 1, {"command": "", "latency_ms": 0, "status": "error"}

    try:
        command = shlex.split(entries[number - 1]) + list(config.args)
    except ValueError as e:
        print(f"{PROG}: cannot parse '{entries[number - 1]}': {e}", file=err)
        return 1, {"command": entries[number - 1], "latency_ms": 0, "status": "error"}

    line = shlex.join(command)
    print(line, file=out)
    out.flush()
    try:
        result = subprocess.run(command)
    except OSError as e:
        print(f"{PROG}: {command[0]}: {e.strerror or e}", file=err)
        return 1, {"command": line, "latency_ms": 0, "status": "error"}
    if result.returncode:
        print(f"{PROG}: '{command[0]}' exited with status {result.returncode}", file=err)
        return 1, {"command": line, "latency_ms": 0, "status": "error"}
    return 0, {"command": line, "latency_ms": 0, "status": "success"}


# =============================================================================
# CLI INTERFACE
# =============================================================================
def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    config, error = _parse_args(argv)
    if config is None:
        _log("ERROR", "usage", error, detail=f"argv={argv}")
        print(f"{PROG}: {error}", file=sys.stderr)
        print(f"Try '{PROG} -h' or '{PROG} --help' for more information.", file=sys.stderr)
        return 1
    if config.help:
        print(HELP)
        return 0
    if config.version:
        print(_version_banner())
        return 0

    try:
        status, metrics = _bang_nth_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "rerun", metrics["command"], metrics=f"status={metrics['status']}")
        return status
    except AssertionError as e:
        _log("ERROR", "contract_violation", str(e))
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        _log("ERROR", "runtime_error", str(e))
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
