#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""find — search for regular files by name pattern and minimum size.

Usage:
    sft_find.py [DIR] [PATTERN] [-d DIR] [-n PATTERN] [-s MINSIZE]
    sft_find.py mcp-stdio

Examples:
    sft_find.py . '*.py'
    sft_find.py -d /var/log -n '*.log' -s 1M
"""

import io
import os
import stat
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from fnmatch import fnmatch
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
EXPOSED = ["find"]  # CLI + MCP

PROG = "find"
VERSION = "1.0.0"
_UNITS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3}


def parse_size(raw: str) -> int:
    """'1024', '4K', '10M' or '2G' -> bytes."""
    text = raw.strip().upper()
    suffix = text[-1:] if text[-1:] in ("K", "M", "G") else ""
    number = int(text[: len(text) - len(suffix)])
    if number < 0:
        raise ValueError(raw)
    return number * _UNITS[suffix]


LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version"}
VALUE_FLAGS = {
    "d": ("directory", str),
    "n": ("pattern", str),
    "s": ("min_size", parse_size),
}

HELP = f"""{PROG} - search for files by name and size

Usage: {PROG} [DIR] [PATTERN] [OPTION]...

Options:
  -d DIR         directory to search (default ".")
  -n PATTERN     shell-style name pattern (*.py, test*, *log)
  -s MINSIZE     minimum size in bytes, K, M or G suffix allowed
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Value options take their value as the next argument and cannot be bundled.

Examples:
  {PROG} . "*.py"             # Python files under the current directory
  {PROG} -d /tmp -n "*.log"   # logs under /tmp
  {PROG} -s 1M                # files of at least 1 MiB"""


@dataclass(frozen=True)
class FindConfig:
    help: bool = False
    version: bool = False
    directory: str = "."
    pattern: str = "*"
    min_size: int = 0


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[FindConfig | None, str]:
    """Parse an explicit argument slice.

    Positional DIR and PATTERN fill the same fields as -d and -n; the
    options take precedence. Bundled value options (-dn) are rejected.
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
            letters = arg[1:]
            for ch in letters:
                if ch in VALUE_FLAGS:
                    if len(letters) > 1:
                        return None, f"option -{ch} takes a value and cannot be bundled in '{arg}'"
                    if i >= len(argv):
                        return None, f"option requires an argument -- '{ch}'"
                    name, convert = VALUE_FLAGS[ch]
                    raw = argv[i]
                    i += 1
                    try:
                        fields[name] = convert(raw)
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

    if fields.get("help") or fields.get("version"):
        return FindConfig(**fields), ""
    if len(operands) > 2:
        return None, f"extra operand '{operands[2]}'"
    for name, value in zip(("directory", "pattern"), operands):
        fields.setdefault(name, value)
    return FindConfig(**fields), ""


def search(config: FindConfig, errors: list[OSError]):
    """Yield matching regular-file paths; walk errors are appended to errors."""
    for dirpath, dirnames, filenames in os.walk(config.directory, onerror=errors.append):
        dirnames.sort()
        for name in sorted(filenames):
            if not fnmatch(name, config.pattern):
                continue
            path = os.path.join(dirpath, name)
            try:
                st = os.lstat(path)
            except OSError as e:
                errors.append(e)
                continue
            if stat.S_ISREG(st.st_mode) and st.st_size >= config.min_size:
                yield path


def _find_impl(config: FindConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: find / MCP: find"""
    start_ms = time.time() * 1000
    if not os.path.isdir(config.directory):
        print(f"{PROG}: {config.directory}: Not a directory or does not exist", file=err)
        return 1, {"matches": 0, "latency_ms": 0, "status": "error"}

    errors: list[OSError] = []
    matches = 0
    for path in search(config, errors):
        print(path, file=out)
        matches += 1
    for e in errors:
        print(f"{PROG}: {e.filename}: {e.strerror or e}", file=err)
        _log("WARN", "find_walk", str(e.filename), detail=str(e))

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "matches": matches,
        "latency_ms": latency_ms,
        "status": "error" if errors else "success",
    }
    return (1 if errors else 0), metrics


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
        status, metrics = _find_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "find",
            f"{metrics['matches']} match(es) for {config.pattern}",
            metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}",
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

    mcp = FastMCP("find")

    @mcp.tool()
    def find(directory: str = ".", pattern: str = "*", min_size: str = "0") -> str:
        """Find regular files by glob pattern and minimum size.

        Args:
            directory: Directory to search recursively
            pattern: Shell-style pattern matched against file names
            min_size: Minimum size, e.g. "0", "4K", "10M"
        """
        config = FindConfig(directory=directory, pattern=pattern, min_size=parse_size(min_size))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _find_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("find MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
