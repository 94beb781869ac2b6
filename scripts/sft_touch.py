#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""touch — change file timestamps, creating missing files.

Usage:
    sft_touch.py [-a] [-m] [-c] FILE...
    sft_touch.py mcp-stdio
"""

import io
import os
import sys
import time
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
EXPOSED = ["touch"]  # CLI + MCP

PROG = "touch"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version", "--no-create": "no_create"}
SHORT_FLAGS = {"h": "help", "v": "version", "a": "access", "m": "modify", "c": "no_create"}

HELP = f"""{PROG} - change file timestamps

Usage: {PROG} [OPTION]... FILE...

Options:
  -a             change only the access time
  -m             change only the modification time
  -c, --no-create
                 do not create files that do not exist
  -h, --help     show this help and exit
  -v, --version  show version information and exit

A FILE that does not exist is created empty, unless -c is given.

Examples:
  {PROG} new.txt          # create or update
  {PROG} -c maybe.txt     # update only if present
  {PROG} -m a.txt b.txt   # only the modification times"""


@dataclass(frozen=True)
class TouchConfig:
    help: bool = False
    version: bool = False
    access: bool = False
    modify: bool = False
    no_create: bool = False
    files: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[TouchConfig | None, str]:
    fields: dict[str, Any] = {}
    operands: list[str] = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        i += 1
        if arg == "--":
            operands.extend(argv[i:])
            break
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
            operands.append(arg)
        if fields.get("help") or fields.get("version"):
            break
    return TouchConfig(files=tuple(operands), **fields), ""


def _touch_one(name: str, config: TouchConfig, now: float) -> bool:
    """Touch a single path. Returns False when -c skipped a missing file."""
    try:
        st = os.stat(name)
    except FileNotFoundError:
        if config.no_create:
            return False
        with open(name, "a"):
            pass
        st = os.stat(name)
    both = config.access == config.modify
    atime = now if (both or config.access) else st.st_atime
    mtime = now if (both or config.modify) else st.st_mtime
    os.utime(name, (atime, mtime))
    return True


def _touch_impl(config: TouchConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Update timestamps of every operand.

    CLI: touch
    MCP: touch
    """
    start_ms = time.time() * 1000
    assert config.files, "missing file operand"

    now = time.time()
    failed = 0
    touched = 0
    for name in config.files:
        try:
            touched += _touch_one(name, config, now)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            _log("WARN", "touch_operand", name, detail=str(e))

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "files": len(config.files),
        "touched": touched,
        "failed": failed,
        "latency_ms": latency_ms,
        "status": "error" if failed else "success",
    }
    return (1 if failed else 0), metrics


# =============================================================================
# CLI INTERFACE
# =============================================================================
def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if argv[:1] == ["mcp-stdio"]:
        _run_mcp()
        return 0

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
        status, metrics = _touch_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "touch",
            f"{metrics['touched']} touched",
            metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']} failed={metrics['failed']}",
        )
        return status
    except AssertionError as e:
        _log("ERROR", "contract_violation", str(e))
        print(f"{PROG}: {e}", file=sys.stderr)
        print(f"Try '{PROG} -h' or '{PROG} --help' for more information.", file=sys.stderr)
        return 1
    except Exception as e:
        _log("ERROR", "runtime_error", str(e))
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1


# =============================================================================
# FASTMCP SERVER
# =============================================================================
def _run_mcp():
    from fastmcp import FastMCP

    mcp = FastMCP("touch")

    @mcp.tool()
    def touch(files: list[str], no_create: bool = False) -> str:
        """Set access and modification times to now, creating missing files.

        Args:
            files: Paths to touch
            no_create: Skip files that do not exist instead of creating them
        """
        config = TouchConfig(no_create=no_create, files=tuple(files))
        out, err = io.StringIO(), io.StringIO()
        status, metrics = _touch_impl(config, out, err)
        if status:
            return f"[exit {status}]\n{err.getvalue()}"
        return f"{metrics['touched']} file(s) touched"

    print("touch MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
