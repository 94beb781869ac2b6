#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""wc — count lines, words and bytes in files.

Counters are printed left-aligned in 8-character columns, in the order
lines, words, bytes, followed by the file name. With no counter flag all
three are printed. A `total` line follows when more than one file is given.

Usage:
    sft_wc.py [-l] [-w] [-c] FILE...
    sft_wc.py mcp-stdio

Examples:
    sft_wc.py -l notes.txt          # 3       notes.txt
    sft_wc.py a.txt b.txt           # per-file counts plus total
    cat notes.txt | sft_wc.py -w    # counts standard input
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
_LOG = (
    Path(_LOG_DIR) / f"{_SCRIPT}_log.tsv"
    if _LOG_DIR
    else Path(__file__).parent / f"{_SCRIPT}_log.tsv"
)
_HEADER = "#timestamp\tscript\tlevel\tevent\tmessage\tdetail\tmetrics\ttrace\n"


def _log(
    level: str,
    event: str,
    msg: str,
    *,
    detail: str = "",
    metrics: str = "",
    trace: str = "",
):
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
EXPOSED = ["wc"]  # CLI + MCP

PROG = "wc"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {
    "h": "help",
    "v": "version",
    "l": "lines",
    "w": "words",
    "c": "count_bytes",
}

HELP = f"""{PROG} - count lines, words and bytes

Usage: {PROG} [OPTION]... FILE...

Options:
  -l             print the line count
  -w             print the word count
  -c             print the byte count
  -h, --help     show this help and exit
  -v, --version  show version information and exit

With no counter option, all three counters are printed.
With no FILE and piped input, standard input is read; '-' also means stdin.

Examples:
  {PROG} file.txt           # lines, words and bytes
  {PROG} -l file.txt        # line count only
  {PROG} -lw a.txt b.txt    # lines and words, plus a total line"""


@dataclass(frozen=True)
class WcConfig:
    help: bool = False
    version: bool = False
    lines: bool = False
    words: bool = False
    count_bytes: bool = False
    files: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[WcConfig | None, str]:
    """Parse an explicit argument slice (program name excluded).

    Returns (config, error). error is "" on success, config is None on failure.
    Help and version stop parsing as soon as they are seen.
    """
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
    return WcConfig(files=tuple(operands), **fields), ""


def _count_stream(stream) -> tuple[int, int, int]:
    """Count (lines, words, bytes) of a binary stream."""
    lines = words = nbytes = 0
    for chunk in stream:
        lines += chunk.count(b"\n")
        words += len(chunk.split())
        nbytes += len(chunk)
    return lines, words, nbytes


def _format_counts(counts: tuple[int, int, int], name: str, config: WcConfig) -> str:
    show_all = not (config.lines or config.words or config.count_bytes)
    selected = (show_all or config.lines, show_all or config.words, show_all or config.count_bytes)
    cells = [f"{value:<8}" for value, keep in zip(counts, selected) if keep]
    return "".join(cells) + name


def _wc_impl(config: WcConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Count every file operand, isolating per-file failures.

    CLI: wc
    MCP: wc

    Returns (exit_status, metrics).
    """
    start_ms = time.time() * 1000
    assert config.files, "missing file operand"

    totals = [0, 0, 0]
    failed = 0
    for name in config.files:
        try:
            if name == "-":
                counts = _count_stream(sys.stdin.buffer)
            else:
                with open(name, "rb") as f:
                    counts = _count_stream(f)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            _log("WARN", "wc_operand", name, detail=str(e))
            continue
        for idx, value in enumerate(counts):
            totals[idx] += value
        print(_format_counts(counts, name, config), file=out)

    if len(config.files) > 1:
        print(_format_counts(tuple(totals), "total", config), file=out)

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
        status, metrics = _wc_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "wc",
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

    mcp = FastMCP("wc")

    @mcp.tool()
    def wc(files: list[str], lines: bool = False, words: bool = False, count_bytes: bool = False) -> str:
        """Count lines, words and bytes in files.

        Args:
            files: Paths of the files to count
            lines: Report the line count
            words: Report the word count
            count_bytes: Report the byte count (all three when none is set)
        """
        config = WcConfig(lines=lines, words=words, count_bytes=count_bytes, files=tuple(files))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _wc_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("wc MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
