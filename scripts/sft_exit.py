#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = []
# ///
"""exit — hang up the shell that launched this script.

Sends SIGHUP to the parent process.

Usage:
    sft_exit.py
"""

import os
import signal
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

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
EXPOSED = []  # CLI only: acts on the calling terminal

PROG = "exit"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version"}

HELP = f"""{PROG} - close the calling shell

Usage: {PROG} [OPTION]

Sends SIGHUP to the parent process.

Options:
  -h, --help     show this help and exit
  -v, --version  show version information and exit"""


@dataclass(frozen=True)
class ExitConfig:
    help: bool = False
    version: bool = False


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[ExitConfig | None, str]:
    fields: dict[str, Any] = {}
    for arg in argv:
        if arg.startswith("--"):
            if arg not in LONG_FLAGS:
                return None, f"unrecognized option '{arg}'"
            fields[LONG_FLAGS[arg]] = True
        elif arg.startswith("-") and arg != "-":
            for ch in arg[1:]:
                if ch not in SHORT_FLAGS:
                    return None, f"invalid option -- '{ch}'"
                fields[SHORT_FLAGS[ch]] = True
                break
        else:
            return None, f"extra operand '{arg}'"
        if fields:
            break
    return ExitConfig(**fields), ""


def _exit_impl(config: ExitConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: exit"""
    parent = os.getppid()
    _log("INFO", "exit", f"SIGHUP -> {parent}")
    try:
        os.kill(parent, signal.SIGHUP)
    except OSError as e:
        print(f"{PROG}: {parent}: {e.strerror or e}", file=err)
        return 1, {"pid": parent, "latency_ms": 0, "status": "error"}
    return 0, {"pid": parent, "latency_ms": 0, "status": "success"}


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

    status, _ = _exit_impl(config, sys.stdout, sys.stderr)
    return status


if __name__ == "__main__":
    sys.exit(main())
