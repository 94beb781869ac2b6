#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""du — estimate disk usage of directory trees.

Sizes are apparent sizes (st_size) in bytes, summed by a post-order walk
that counts every entry, directories included. Unreadable entries are
reported and skipped; the walk always finishes.

Usage:
    sft_du.py [-s] [-a] [PATH...]
    sft_du.py mcp-stdio

Examples:
    sft_du.py                        # Size of '.': 12345 bytes
    sft_du.py -s src                 # 12345<TAB>src
    sft_du.py -a src                 # every entry, then the total
"""

import io
import os
import stat
import sys
import time
from dataclasses import dataclass, field
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
EXPOSED = ["du"]  # CLI + MCP

PROG = "du"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version", "s": "summarize", "a": "all"}

HELP = f"""{PROG} - estimate file space usage

Usage: {PROG} [OPTION]... [PATH]...

Options:
  -s             print only the total for each PATH
  -a             print every file and directory, then the total
  -h, --help     show this help and exit
  -v, --version  show version information and exit

PATH defaults to the current directory.

Examples:
  {PROG}              # size of the current directory
  {PROG} -s /tmp      # total only
  {PROG} -a dir       # every entry"""


@dataclass(frozen=True)
class DuConfig:
    help: bool = False
    version: bool = False
    summarize: bool = False
    all: bool = False
    paths: tuple[str, ...] = ()


@dataclass
class Usage:
    """Result of one walk: total size, per-entry sizes, collected errors."""

    total: int = 0
    entries: dict[str, int] = field(default_factory=dict)
    errors: list[tuple[str, OSError]] = field(default_factory=list)


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[DuConfig | None, str]:
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
    return DuConfig(paths=tuple(operands), **fields), ""


def _walk(path: str, root: str, usage: Usage) -> int:
    """Post-order size of path; records each entry relative to root."""
    try:
        st = os.lstat(path)
    except OSError as e:
        usage.errors.append((path, e))
        return 0
    size = st.st_size
    if stat.S_ISDIR(st.st_mode):
        try:
            with os.scandir(path) as it:
                children = [entry.path for entry in it]
        except OSError as e:
            usage.errors.append((path, e))
            children = []
        for child in children:
            size += _walk(child, root, usage)
    if path != root:
        usage.entries[os.path.relpath(path, root)] = size
    return size


def disk_usage(root: str) -> Usage:
    usage = Usage()
    usage.total = _walk(root, root, usage)
    return usage


def _du_impl(config: DuConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Report the size of each PATH.

    CLI: du
    MCP: du
    """
    start_ms = time.time() * 1000
    paths = config.paths or (".",)

    failed = 0
    for path in paths:
        if not os.path.lexists(path):
            failed += 1
            print(f"{PROG}: {path}: No such file or directory", file=err)
            continue
        usage = disk_usage(path)
        for bad, e in usage.errors:
            print(f"{PROG}: {bad}: {e.strerror or e}", file=err)
            _log("WARN", "du_walk", bad, detail=str(e))
        if usage.errors:
            failed += 1

        if config.all:
            for rel in sorted(usage.entries):
                print(f"{usage.entries[rel]}\t{rel}", file=out)
            print(f"{usage.total}\t{path}", file=out)
        elif config.summarize:
            print(f"{usage.total}\t{path}", file=out)
        else:
            print(f"Size of '{path}': {usage.total} bytes", file=out)

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "paths": len(paths),
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
        status, metrics = _du_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "du",
            f"{metrics['paths']} path(s)",
            metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']} failed={metrics['failed']}",
        )
        return status
    except Exception as e:
        _log("ERROR", "runtime_error", str(e))
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1


# =============================================================================
# FASTMCP SERVER
# =============================================================================
def _run_mcp():
    from fastmcp import FastMCP

    mcp = FastMCP("du")

    @mcp.tool()
    def du(paths: list[str] | None = None, summarize: bool = True, all: bool = False) -> str:
        """Disk usage (apparent size in bytes) of files and directory trees.

        Args:
            paths: Paths to measure (default: current directory)
            summarize: One 'size<TAB>path' line per path (default True)
            all: List every entry under each path before its total
        """
        config = DuConfig(summarize=summarize, all=all, paths=tuple(paths or ()))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _du_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("du MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
