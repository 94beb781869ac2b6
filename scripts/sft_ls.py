#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""ls — list directory contents.

Short format fills an 80-column grid row by row; every column is as wide
as the longest name plus two (names shorter than 14 characters still get a
16-character column). Long format prints mode, size, mtime and name.

Usage:
    sft_ls.py [-a] [-l] [-r] [-R] [PATH...]
    sft_ls.py mcp-stdio

Examples:
    sft_ls.py
    sft_ls.py -la /tmp
    sft_ls.py -R src
"""

import io
import os
import stat
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
EXPOSED = ["ls"]  # CLI + MCP

PROG = "ls"
VERSION = "1.0.0"
TERM_WIDTH = 80
MIN_NAME_WIDTH = 14

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {
    "h": "help",
    "v": "version",
    "a": "all",
    "l": "long",
    "r": "reverse",
    "R": "recursive",
}

HELP = f"""{PROG} - list directory contents

Usage: {PROG} [OPTION]... [PATH]...

Options:
  -a             include entries starting with '.'
  -l             long listing format
  -r             reverse sort order
  -R             list subdirectories recursively
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Examples:
  {PROG}                 # current directory
  {PROG} -l /tmp         # long format
  {PROG} -a -r dir       # hidden entries, reverse order"""


@dataclass(frozen=True)
class LsConfig:
    help: bool = False
    version: bool = False
    all: bool = False
    long: bool = False
    reverse: bool = False
    recursive: bool = False
    paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class Entry:
    name: str
    path: str
    st: os.stat_result

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.st.st_mode)


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[LsConfig | None, str]:
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
    return LsConfig(paths=tuple(operands), **fields), ""


def _read_dir(path: str, config: LsConfig) -> list[Entry]:
    with os.scandir(path) as it:
        entries = [
            Entry(e.name, e.path, e.stat(follow_symlinks=False))
            for e in it
            if config.all or not e.name.startswith(".")
        ]
    entries.sort(key=lambda e: e.name, reverse=config.reverse)
    return entries


def format_long(entries: list[Entry]) -> list[str]:
    lines = []
    for e in entries:
        mtime = datetime.fromtimestamp(e.st.st_mtime).strftime("%b %d %H:%M")
        lines.append(f"{stat.filemode(e.st.st_mode)} {e.st.st_size:6d} {mtime} {e.name}")
    return lines


def format_columns(names: list[str], width: int = TERM_WIDTH) -> list[str]:
    """Row-major grid of names padded to a shared column width."""
    if not names:
        return []
    col_width = max(MIN_NAME_WIDTH, *(len(n) for n in names)) + 2
    cols = max(1, width // col_width)
    rows = []
    for start in range(0, len(names), cols):
        row = names[start : start + cols]
        rows.append("".join(n.ljust(col_width) for n in row).rstrip())
    return rows


def _render(entries: list[Entry], config: LsConfig, out: TextIO) -> None:
    lines = format_long(entries) if config.long else format_columns([e.name for e in entries])
    for line in lines:
        print(line, file=out)


def _list_dir(path: str, config: LsConfig, out: TextIO, err: TextIO, header: bool) -> int:
    """List one directory; returns the number of directories that failed."""
    try:
        entries = _read_dir(path, config)
    except OSError as e:
        print(f"{PROG}: {path}: {e.strerror or e}", file=err)
        _log("WARN", "ls_dir", path, detail=str(e))
        return 1
    if header:
        print(f"{path}:", file=out)
    _render(entries, config, out)
    failed = 0
    if config.recursive:
        for e in entries:
            if e.is_dir and e.name not in (".", ".."):
                print(file=out)
                failed += _list_dir(e.path, config, out, err, header=True)
    return failed


def _ls_impl(config: LsConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """List files first, then each directory operand.

    CLI: ls
    MCP: ls
    """
    start_ms = time.time() * 1000
    paths = config.paths or (".",)

    failed = 0
    files: list[Entry] = []
    dirs: list[str] = []
    for name in paths:
        try:
            st = os.stat(name)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            continue
        if stat.S_ISDIR(st.st_mode):
            dirs.append(name)
        else:
            files.append(Entry(name, name, os.lstat(name)))

    files.sort(key=lambda e: e.name, reverse=config.reverse)
    dirs.sort(reverse=config.reverse)
    if files:
        _render(files, config, out)
    headers = len(paths) > 1 or config.recursive
    for idx, path in enumerate(dirs):
        if files or idx:
            print(file=out)
        failed += _list_dir(path, config, out, err, header=headers)

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
        status, metrics = _ls_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "ls",
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

    mcp = FastMCP("ls")

    @mcp.tool()
    def ls(
        paths: list[str] | None = None,
        all: bool = False,
        long: bool = True,
        reverse: bool = False,
        recursive: bool = False,
    ) -> str:
        """List directory contents.

        Args:
            paths: Files or directories to list (default: current directory)
            all: Include hidden entries
            long: Long format with mode, size and mtime (default True)
            reverse: Reverse the name order
            recursive: Descend into subdirectories
        """
        config = LsConfig(all=all, long=long, reverse=reverse, recursive=recursive, paths=tuple(paths or ()))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _ls_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("ls MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
