#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""rmdir — remove empty directories.

Usage:
    sft_rmdir.py [-p] [-v] DIR...
    sft_rmdir.py mcp-stdio

Examples:
    sft_rmdir.py empty_dir
    sft_rmdir.py -p a/b/c            # removes a/b/c, then a/b, then a
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
EXPOSED = ["rmdir"]  # CLI + MCP

PROG = "rmdir"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version", "--parents": "parents", "--verbose": "verbose"}
SHORT_FLAGS = {"h": "help", "p": "parents", "v": "verbose"}

HELP = f"""{PROG} - remove empty directories

Usage: {PROG} [OPTION]... DIR...

Options:
  -p, --parents  remove DIR and then each of its ancestors in turn
  -v, --verbose  print a message for each removed directory
  -h, --help     show this help and exit
      --version  show version information and exit

Examples:
  {PROG} dir          # remove an empty directory
  {PROG} -p a/b/c     # remove a/b/c, a/b and a"""


@dataclass(frozen=True)
class RmdirConfig:
    help: bool = False
    version: bool = False
    parents: bool = False
    verbose: bool = False
    dirs: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[RmdirConfig | None, str]:
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
                if fields.get("help"):
                    break
        else:
            operands.append(arg)
        if fields.get("help") or fields.get("version"):
            break
    return RmdirConfig(dirs=tuple(operands), **fields), ""


def _chain(name: str, parents: bool) -> list[str]:
    """DIR itself, followed by its ancestors when parents is set."""
    path = Path(name.rstrip("/") or name)
    chain = [str(path)]
    if parents:
        for ancestor in path.parents:
            if str(ancestor) in (".", "/"):
                break
            chain.append(str(ancestor))
    return chain


def _rmdir_impl(config: RmdirConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Remove each empty directory operand (and its ancestors with -p).

    CLI: rmdir
    MCP: rmdir
    """
    start_ms = time.time() * 1000
    assert config.dirs, "missing operand"

    failed = 0
    removed = 0
    for name in config.dirs:
        for target in _chain(name, config.parents):
            try:
                os.rmdir(target)
            except OSError as e:
                failed += 1
                print(f"{PROG}: {target}: {e.strerror or e}", file=err)
                _log("WARN", "rmdir_operand", target, detail=str(e))
                break
            removed += 1
            if config.verbose:
                print(f"{PROG}: removing directory, '{target}'", file=out)

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "dirs": len(config.dirs),
        "removed": removed,
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
        status, metrics = _rmdir_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "rmdir",
            f"{metrics['removed']} removed",
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

    mcp = FastMCP("rmdir")

    @mcp.tool()
    def rmdir(dirs: list[str], parents: bool = False) -> str:
        """Remove empty directories.

        Args:
            dirs: Directory paths to remove
            parents: Also remove each ancestor once it becomes empty
        """
        config = RmdirConfig(parents=parents, verbose=True, dirs=tuple(dirs))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _rmdir_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("rmdir MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
