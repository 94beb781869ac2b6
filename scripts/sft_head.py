#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""head — output the first part of files.

Usage:
    sft_head.py [-n N | -c N] [-q] FILE...
    sft_head.py mcp-stdio

Examples:
    sft_head.py notes.txt            # first 10 lines
    sft_head.py -n 2 notes.txt       # first 2 lines
    sft_head.py -c 64 image.png      # first 64 bytes
    sft_head.py a.txt b.txt          # '==> a.txt <==' headers between files
"""

import io
import os
import sys
import time
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
EXPOSED = ["head"]  # CLI + MCP

PROG = "head"
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

HELP = f"""{PROG} - output the first part of files

Usage: {PROG} [OPTION]... FILE...

Options:
  -n N           print the first N lines (default {DEFAULT_LINES})
  -c N           print the first N bytes (takes precedence over -n)
  -q             never print file name headers
  -h, --help     show this help and exit
  -v, --version  show version information and exit

With more than one FILE, each is preceded by a '==> FILE <==' header.

Examples:
  {PROG} file.txt          # first 10 lines
  {PROG} -n 5 file.txt     # first 5 lines
  {PROG} -c 100 file.txt   # first 100 bytes
  {PROG} -q a.txt b.txt    # no headers"""


@dataclass(frozen=True)
class HeadConfig:
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
def _parse_args(argv: list[str]) -> tuple[HeadConfig | None, str]:
    """Parse an explicit argument slice. Returns (config, error)."""
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
    return HeadConfig(files=tuple(operands), **fields), ""


def _write_bytes(out: TextIO, data: bytes) -> None:
    buffer = getattr(out, "buffer", None)
    if buffer is None:
        out.write(data.decode("utf-8", errors="replace"))
        return
    out.flush()
    buffer.write(data)
    buffer.flush()


def _head_stream(stream, config: HeadConfig) -> bytes:
    if config.count_bytes is not None:
        return stream.read(config.count_bytes)
    chunks = []
    for line in stream:
        if len(chunks) >= config.lines:
            break
        chunks.append(line)
    return b"".join(chunks)


def _head_impl(config: HeadConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Print the leading lines or bytes of each file.

    CLI: head
    MCP: head
    """
    start_ms = time.time() * 1000
    assert config.files, "missing file operand"

    headers = len(config.files) > 1 and not config.quiet
    failed = 0
    printed = 0
    for name in config.files:
        try:
            if name == "-":
                data = _head_stream(sys.stdin.buffer, config)
            else:
                with open(name, "rb") as f:
                    data = _head_stream(f, config)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            _log("WARN", "head_operand", name, detail=str(e))
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
        status, metrics = _head_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "head",
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

    mcp = FastMCP("head")

    @mcp.tool()
    def head(files: list[str], lines: int = DEFAULT_LINES, count_bytes: int | None = None, quiet: bool = False) -> str:
        """Return the first lines (or bytes) of each file.

        Args:
            files: Paths of the files to read
            lines: Number of leading lines to return (default 10)
            count_bytes: Return this many leading bytes instead of lines
            quiet: Suppress '==> file <==' headers
        """
        config = HeadConfig(lines=lines, count_bytes=count_bytes, quiet=quiet, files=tuple(files))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _head_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("head MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
