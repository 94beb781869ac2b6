#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""rm — remove files or directories.

Recursive removal is a post-order walk: every child is removed before its
directory, symlinks are unlinked and never followed. Errors inside a tree
are collected and reported while the walk keeps going.

Usage:
    sft_rm.py [-f] [-r] [-v] PATH...
    sft_rm.py mcp-stdio

Examples:
    sft_rm.py old.txt
    sft_rm.py -rf build/             # no error when build/ is absent
    sft_rm.py -rv tmp/               # report every removal
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
EXPOSED = ["rm"]  # CLI + MCP

PROG = "rm"
VERSION = "1.0.0"

LONG_FLAGS = {
    "--help": "help",
    "--version": "version",
    "--force": "force",
    "--recursive": "recursive",
    "--verbose": "verbose",
}
SHORT_FLAGS = {"h": "help", "f": "force", "r": "recursive", "R": "recursive", "v": "verbose"}

HELP = f"""{PROG} - remove files or directories

Usage: {PROG} [OPTION]... PATH...

Options:
  -f, --force      ignore nonexistent files, never fail on them
  -r, -R, --recursive
                   remove directories and their contents recursively
  -v, --verbose    explain what is being done
  -h, --help       show this help and exit
      --version    show version information and exit

Examples:
  {PROG} file.txt       # remove a file
  {PROG} -r dir         # remove a directory tree
  {PROG} -f missing     # silently ignore a missing file
  {PROG} -rv dir        # remove a tree and report each entry"""


@dataclass(frozen=True)
class RmConfig:
    help: bool = False
    version: bool = False
    force: bool = False
    recursive: bool = False
    verbose: bool = False
    paths: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[RmConfig | None, str]:
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
    return RmConfig(paths=tuple(operands), **fields), ""


def _remove_tree(path: str, verbose: bool, out: TextIO, errors: list[tuple[str, OSError]]) -> None:
    """Post-order removal of a directory tree; failures are appended to errors."""
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        errors.append((path, e))
        return
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            _remove_tree(entry.path, verbose, out, errors)
            continue
        try:
            os.unlink(entry.path)
        except OSError as e:
            errors.append((entry.path, e))
            continue
        if verbose:
            print(f"removed '{entry.path}'", file=out)
    try:
        os.rmdir(path)
    except OSError as e:
        errors.append((path, e))
        return
    if verbose:
        print(f"removed directory '{path}'", file=out)


def _rm_impl(config: RmConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Remove each operand.

    CLI: rm
    MCP: rm

    Missing operands are ignored under force and do not affect the status.
    """
    start_ms = time.time() * 1000
    assert config.paths or config.force, "missing operand"

    failed = 0
    for name in config.paths:
        if os.path.basename(name.rstrip("/")) in (".", ".."):
            failed += 1
            print(f"{PROG}: refusing to remove '.' or '..' directory: skipping '{name}'", file=err)
            continue
        if not os.path.abspath(name).strip("/"):
            failed += 1
            print(f"{PROG}: it is dangerous to operate recursively on '{name}'", file=err)
            continue
        try:
            mode = os.lstat(name).st_mode
        except FileNotFoundError as e:
            if not config.force:
                failed += 1
                print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            continue
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            continue

        if stat.S_ISDIR(mode):
            if not config.recursive:
                failed += 1
                print(f"{PROG}: {name}: Is a directory", file=err)
                continue
            errors: list[tuple[str, OSError]] = []
            _remove_tree(name, config.verbose, out, errors)
            for path, e in errors:
                print(f"{PROG}: {path}: {e.strerror or e}", file=err)
                _log("WARN", "rm_tree", path, detail=str(e))
            if errors:
                failed += 1
            continue

        try:
            os.unlink(name)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            _log("WARN", "rm_operand", name, detail=str(e))
            continue
        if config.verbose:
            print(f"removed '{name}'", file=out)

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "paths": len(config.paths),
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
        status, metrics = _rm_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "rm",
            f"{metrics['paths']} path(s)",
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

    mcp = FastMCP("rm")

    @mcp.tool()
    def rm(paths: list[str], recursive: bool = False, force: bool = False) -> str:
        """Remove files, or directory trees with recursive=True.

        Args:
            paths: Paths to remove
            recursive: Required to remove directories
            force: Ignore paths that do not exist
        """
        config = RmConfig(recursive=recursive, force=force, verbose=True, paths=tuple(paths))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _rm_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("rm MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
