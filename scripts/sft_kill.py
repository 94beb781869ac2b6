#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""kill — send a signal to a process.

Usage:
    sft_kill.py PID [SIGNAL]
    sft_kill.py -l
    sft_kill.py mcp-stdio

Examples:
    sft_kill.py 4242                 # SIGTERM
    sft_kill.py 4242 9
    sft_kill.py 4242 HUP             # names with or without the SIG prefix
"""

import io
import os
import signal
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
EXPOSED = ["kill"]  # CLI + MCP

PROG = "kill"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version", "--list": "list"}
SHORT_FLAGS = {"h": "help", "v": "version", "l": "list"}

HELP = f"""{PROG} - send a signal to a process

Usage: {PROG} PID [SIGNAL]
  or:  {PROG} -l

Options:
  -l, --list     list signal numbers and names
  -h, --help     show this help and exit
  -v, --version  show version information and exit

SIGNAL is a number (9) or a name (KILL, SIGKILL); the default is TERM.

Examples:
  {PROG} 1234          # terminate process 1234
  {PROG} 1234 KILL     # force kill
  {PROG} -l            # list signals"""


@dataclass(frozen=True)
class KillConfig:
    help: bool = False
    version: bool = False
    list: bool = False
    operands: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[KillConfig | None, str]:
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
    return KillConfig(operands=tuple(operands), **fields), ""


def resolve_signal(raw: str) -> signal.Signals:
    """'9', 'KILL', 'sigkill' -> signal.SIGKILL. Raises ValueError."""
    if raw.isdigit():
        return signal.Signals(int(raw))
    name = raw.upper()
    if not name.startswith("SIG"):
        name = "SIG" + name
    try:
        return signal.Signals[name]
    except KeyError:
        raise ValueError(f"invalid signal '{raw}'") from None


def signal_table() -> list[str]:
    return [f"{sig.value:2d}) {sig.name}" for sig in sorted(signal.Signals, key=lambda s: s.value)]


def _kill_impl(config: KillConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: kill / MCP: kill"""
    start_ms = time.time() * 1000
    if config.list:
        for line in signal_table():
            print(line, file=out)
        return 0, {"latency_ms": 0, "status": "success"}

    assert config.operands, "missing process id"
    assert len(config.operands) <= 2, f"extra operand '{config.operands[2]}'"
    try:
        pid = int(config.operands[0])
    except ValueError:
        raise AssertionError(f"invalid process id '{config.operands[0]}'") from None
    try:
        sig = resolve_signal(config.operands[1]) if len(config.operands) > 1 else signal.SIGTERM
    except ValueError as e:
        raise AssertionError(str(e)) from None

    status = 0
    try:
        os.kill(pid, sig)
    except OSError as e:
        status = 1
        print(f"{PROG}: {pid}: {e.strerror or e}", file=err)
    _log("INFO", "signal", f"{sig.name} -> {pid}", detail="sent" if not status else "failed")

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    return status, {"latency_ms": latency_ms, "status": "error" if status else "success"}


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
        status, metrics = _kill_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "kill", " ".join(config.operands), metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}")
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

    mcp = FastMCP("kill")

    @mcp.tool()
    def kill(pid: int, sig: str = "TERM") -> str:
        """Send a signal to a process.

        Args:
            pid: Target process id
            sig: Signal number or name (default TERM)
        """
        config = KillConfig(operands=(str(pid), sig))
        out, err = io.StringIO(), io.StringIO()
        try:
            status, _ = _kill_impl(config, out, err)
        except AssertionError as e:
            return f"[exit 1]\n{PROG}: {e}\n"
        return f"[exit {status}]\n{err.getvalue()}" if status else f"signal {sig} sent to {pid}"

    print("kill MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
