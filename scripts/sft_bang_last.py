#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = []
# ///
"""!! — re-run the last command from the bash history.

Extra arguments are appended to the recalled command. The command line is
echoed before it runs, as an interactive shell does.

Usage:
    sft_bang_last.py [ARG...]

Examples:
    sft_bang_last.py           # repeat the last command
    sft_bang_last.py -la       # ls  ->  ls -la
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

PROG = "!!"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version"}

HELP = f"""{PROG} - run the last command from the history again

Usage: {PROG} [OPTION] [ARG...]

Only -h/--help and -v/--version are read as options, and only before the
first ARG; everything from there on is appended to the recalled command.
Use -- to pass an argument that looks like one of those options.

Options:
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Examples:
  {PROG}             # repeat the last command
  {PROG} -l -a       # ... with -l -a appended"""


@dataclass(frozen=True)
class BangLastConfig:
    help: bool = False
    version: bool = False
    args: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[BangLastConfig | None, str]:
    for i, arg in enumerate(argv):
        if arg == "--":
            return BangLastConfig(args=tuple(argv[i + 1:])), ""
        if arg in LONG_FLAGS:
            return BangLastConfig(**{LONG_FLAGS[arg]: True}), ""
        if arg.startswith("-") and len(arg) == 2 and arg[1] in SHORT_FLAGS:
            return BangLastConfig(**{SHORT_FLAGS[arg[1]]: True}), ""
        return BangLastConfig(args=tuple(argv[i:])), ""
    return BangLastConfig(), ""


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


def _bang_last_impl(config: BangLastConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: !!"""
    entries = read_history(history_file())
    if not entries:
        print(f"{PROG}: history is empty", file=err)
        return 1, {"command": "", "latency_ms": 0, "status": "error"}
    try:
        command = shlex.split(entries[-1]) + list(config.args)
    except ValueError as e:
        print(f"{PROG}: cannot parse '{entries[-1]}': {e}", file=err)
        return 1, {"command": entries[-1], "latency_ms": 0, "status": "error"}

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
        status, metrics = _bang_last_impl(config, sys.stdout, sys.stderr)
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
