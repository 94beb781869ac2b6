#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""tail — output the last part of files.

Only the requested tail is kept in memory: lines go through a bounded
deque, bytes through a seek from the end when the stream allows it.

Usage:
    sft_tail.py [-n N | -c N] [-q] FILE...
    sft_tail.py mcp-stdio

Examples:
    sft_tail.py app.log              # last 10 lines
    sft_tail.py -n 50 app.log        # last 50 lines
    sft_tail.py -c 16 blob.bin       # last 16 bytes
"""

import io
import os
import sys
import time
from collections import deque
from dataclasses import dataclass, replace
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
EXPOSED = ["tail"]  # CLI + MCP

PROG = "tail"
VERSION = "1.0.0"
DEFAULT_LINES = 10


def _count(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise ValueError(raw)
    return value


LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version", "q": "quiet"}
VALUE_FLAGS = {"n": ("lines", _count), "c": ("count_bytes", _count)}

HELP = f"""{PROG} - output the last part of files

Usage: {PROG} [OPTION]... FILE...

Options:
  -n N           print the last N lines (default {DEFAULT_LINES})
  -c N           print the last N bytes (takes precedence over -n)
  -q             never print file name headers
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Examples:
  {PROG} file.txt           # last 10 lines
  {PROG} -n 20 file.txt     # last 20 lines
  {PROG} -c 100 file.txt    # last 100 bytes
  {PROG} a.log b.log        # with '==> FILE <==' headers"""


@dataclass(frozen=True)
class TailConfig:
    help: bool = False
    version: bool = False
    quiet: bool = False
    lines: int = DEFAULT_LINES
    count_bytes: int | None = None
    files: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[TailConfig | None, str]:
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
            operands.append(arg)
        if fields.get("help") or fields.get("version"):
            break
    return TailConfig(files=tuple(operands), **fields), ""


def _write_bytes(out: TextIO, data: bytes) -> None:
    buffer = getattr(out, "buffer", None)
    if buffer is None:
        out.write(data.decode("utf-8", errors="replace"))
        return
    out.flush()
    buffer.write(data)
    buffer.flush()


def _tail_stream(stream, config: TailConfig) -> bytes:
    if config.count_bytes is not None:
        if config.count_bytes == 0:
            return b""
        if stream.seekable():
            size = stream.seek(0, os.SEEK_END)
            stream.seek(max(0, size - config.count_bytes))
            return stream.read()
        return stream.read()[-config.count_bytes:]
    if config.lines == 0:
        return b""
    return b"".join(deque(stream, maxlen=config.lines))


def _tail_impl(config: TailConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Print the trailing lines or bytes of each file.

    CLI: tail
    MCP: tail
    """
    start_ms = time.time() * 1000
    assert config.files, "missing file operand"

    headers = len(config.files) > 1 and not config.quiet
    failed = 0
    printed = 0
    for name in config.files:
        try:
            if name == "-":
                data = _tail_stream(sys.stdin.buffer, config)
            else:
                with open(name, "rb") as f:
                    data = _tail_stream(f, config)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            _log("WARN", "tail_operand", name, detail=str(e))
            continue
        if headers:
            if printed:
                print(file=out)
            print(f"==> {'standard input' if name == '-' else name} <==", file=out)
        _write_bytes(out, data)
        printed += 1

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "files": len(config.files),
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
        if not config.files and not sys.stdin.isatty():
            config = replace(config, files=("-",))
        status, metrics = _tail_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "tail",
            f"{metrics['files']} file(s)",
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

    mcp = FastMCP("tail")

    @mcp.tool()
    def tail(files: list[str], lines: int = DEFAULT_LINES, count_bytes: int | None = None, quiet: bool = False) -> str:
        """Return the last lines (or bytes) of each file.

        Args:
            files: Paths of the files to read
            lines: Number of trailing lines to return (default 10)
            count_bytes: Return this many trailing bytes instead of lines
            quiet: Suppress '==> file <==' headers
        """
        config = TailConfig(lines=lines, count_bytes=count_bytes, quiet=quiet, files=tuple(files))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _tail_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("tail MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
