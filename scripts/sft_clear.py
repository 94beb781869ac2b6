#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = []
# ///
"""clear — clear the terminal screen with ANSI escape codes.

Refuses when $TERM is not a known ANSI-capable terminal unless -f is given.

Usage:
    sft_clear.py [-f]
"""

import os
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

PROG = "clear"
VERSION = "1.0.0"

CLEAR_SEQUENCE = "\033[H\033[2J\033[H"
ANSI_TERMS = {
    "xterm", "xterm-256color", "xterm-color",
    "screen", "screen-256color",
    "linux", "vt100", "vt220",
    "rxvt", "rxvt-unicode",
    "eterm", "ansi",
}

LONG_FLAGS = {"--help": "help", "--version": "version", "--force": "force"}
SHORT_FLAGS = {"h": "help", "v": "version", "f": "force"}

HELP = f"""{PROG} - clear the terminal screen

Usage: {PROG} [OPTION]

Options:
  -f, --force    clear even when $TERM is not a known ANSI terminal
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Examples:
  {PROG}          # clear the screen
  {PROG} -f       # clear regardless of $TERM"""


@dataclass(frozen=True)
class ClearConfig:
    help: bool = False
    version: bool = False
    force: bool = False


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[ClearConfig | None, str]:
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
                if fields.get("help") or fields.get("version"):
                    break
        else:
            return None, f"extra operand '{arg}'"
        if fields.get("help") or fields.get("version"):
            break
    return ClearConfig(**fields), ""


def ansi_capable(term: str | None) -> bool:
    return (term or "") in ANSI_TERMS


def _clear_impl(config: ClearConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: clear"""
    term = os.environ.get("TERM")
    if not config.force and not ansi_capable(term):
        print(f"{PROG}: terminal '{term or ''}' may not support clearing the screen", file=err)
        print(f"Use '{PROG} -f' to clear anyway", file=err)
        return 1, {"term": term, "latency_ms": 0, "status": "error"}
    out.write(CLEAR_SEQUENCE)
    out.flush()
    return 0, {"term": term, "latency_ms": 0, "status": "success"}


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
        status, metrics = _clear_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "clear", str(metrics["term"]), metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}")
        return status
    except Exception as e:
        _log("ERROR", "runtime_error", str(e))
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
