#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""history — show and edit the bash history file.

The history file is $HISTFILE, or ~/.bash_history when that is unset.
Blank lines are ignored; entries are numbered from 1 in file order, and the
numbers stay the same under -n so they can be passed to `!n`.

Usage:
    sft_history.py [-n N]
    sft_history.py -d N
    sft_history.py -c
    sft_history.py mcp-stdio

Examples:
    sft_history.py -n 20    # last 20 commands
    sft_history.py -d 42    # drop entry 42
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
EXPOSED = ["history"]  # CLI + MCP

PROG = "history"
VERSION = "1.0.0"


def _positive(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise ValueError(raw)
    return value


LONG_FLAGS = {"--help": "help", "--version": "version", "--clear": "clear"}
SHORT_FLAGS = {"h": "help", "v": "version", "c": "clear"}
VALUE_FLAGS = {"d": ("delete", _positive), "n": ("last", _positive)}

HELP = f"""{PROG} - show and edit the bash command history

Usage: {PROG} [OPTION]...

Options:
  -c, --clear    empty the history file
  -d N           delete entry N
  -n N           show only the last N entries
  -h, --help     show this help and exit
  -v, --version  show version information and exit

The file is $HISTFILE, or $HOME/.bash_history.

Examples:
  {PROG}            # whole history
  {PROG} -n 10      # last 10 commands
  {PROG} -d 5       # delete entry 5
  {PROG} -c         # clear"""


@dataclass(frozen=True)
class HistoryConfig:
    help: bool = False
    version: bool = False
    clear: bool = False
    delete: int | None = None
    last: int | None = None


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[HistoryConfig | None, str]:
    fields: dict[str, Any] = {}
    i = 0
    while i < len(argv):
        arg = argv[i]
        i += 1
        if arg.startswith("--"):
            if arg not in LONG_FLAGS:
                return None, f"unrecognized option '{arg}'"
            fields[LONG_FLAGS[arg]] = True
        elif arg.startswith("-") and arg != "-":
            letters = arg[1:]
            for ch in letters:
                if ch in VALUE_FLAGS:
                    if len(letters) > 1:
                        return None, f"option -{ch} takes a value and cannot be bundled in '{arg}'"
                    if i >= len(argv):
                        return None, f"option requires an argument -- '{ch}'"
                    field, convert = VALUE_FLAGS[ch]
                    raw = argv[i]
                    i += 1
                    try:
                        fields[field] = convert(raw)
                    except ValueError:
                        return None, f"invalid value '{raw}' for option -{ch}"
                    continue
                if ch not in SHORT_FLAGS:
                    return None, f"invalid option -- '{ch}'"
                fields[SHORT_FLAGS[ch]] = True
                if fields.get("help") or fields.get("version"):
                    break
        else:
            return None, f"extra operand '{arg}'"
        if fields.get("help") or fields.get("version"):
            break
    return HistoryConfig(**fields), ""


def history_file() -> Path:
    if os.environ.get("HISTFILE"):
        return Path(os.environ["HISTFILE"])
    home = os.environ.get("HOME")
    assert home, "HOME not set"
    return Path(home) / ".bash_history"


def read_history(path: Path) -> list[str]:
    """Non-blank, stripped entries; a missing file is an empty history."""
    try:
        text = path.read_text(errors="replace")
    except FileNotFoundError:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def _history_impl(config: HistoryConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Show, delete from, or clear the history.

    CLI: history
    MCP: history
    """
    start_ms = time.time() * 1000
    assert sum((config.clear, config.delete is not None)) <= 1, "-c and -d are mutually exclusive"
    path = history_file()
    action = "show"

    try:
        if config.clear:
            action = "clear"
            if path.exists():
                os.truncate(path, 0)
            print("History cleared", file=out)
        elif config.delete is not None:
            action = "delete"
            entries = read_history(path)
            if config.delete > len(entries):
                print(f"{PROG}: entry {config.delete} out of range (1-{len(entries)})", file=err)
                return 1, {"action": action, "entries": len(entries), "latency_ms": 0, "status": "error"}
            del entries[config.delete - 1]
            path.write_text("".join(f"{line}\n" for line in entries))
            print(f"Deleted entry {config.delete}", file=out)
        else:
            entries = read_history(path)
            first = max(len(entries) - config.last, 0) if config.last else 0
            for number, line in enumerate(entries[first:], start=first + 1):
                print(f"{number:5d}  {line}", file=out)
    except OSError as e:
        print(f"{PROG}: {path}: {e.strerror or e}", file=err)
        _log("ERROR", f"history_{action}", str(path), detail=str(e))
        return 1, {"action": action, "latency_ms": 0, "status": "error"}

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    return 0, {"action": action, "latency_ms": latency_ms, "status": "success"}


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
        status, metrics = _history_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "history", metrics["action"], metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}")
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

    mcp = FastMCP("history")

    @mcp.tool()
    def history(last: int | None = None) -> str:
        """Numbered bash history entries (read-only).

        Args:
            last: Only the last N entries
        """
        out, err = io.StringIO(), io.StringIO()
        try:
            status, _ = _history_impl(HistoryConfig(last=last), out, err)
        except AssertionError as e:
            return f"[exit 1]\n{PROG}: {e}\n"
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("history MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
