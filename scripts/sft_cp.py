#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""cp — copy files and directories.

A directory copy is a pre-order walk: the destination directory is created
before its children are copied. Failures on individual entries are
collected and reported without stopping the rest of the tree.

Usage:
    sft_cp.py [-r] [-i] [-v] [-p] [-u] SRC... DEST
    sft_cp.py mcp-stdio

Examples:
    sft_cp.py a.txt b.txt
    sft_cp.py a.txt b.txt backup/    # DEST must be a directory for many SRCs
    sft_cp.py -rp project/ /tmp/     # recursive, keep modes and times
    sft_cp.py -u *.log archive/      # only newer files
"""

import io
import os
import shutil
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
EXPOSED = ["cp"]  # CLI + MCP

PROG = "cp"
VERSION = "1.0.0"

LONG_FLAGS = {
    "--help": "help",
    "--version": "version",
    "--recursive": "recursive",
    "--interactive": "interactive",
    "--verbose": "verbose",
    "--preserve": "preserve",
    "--update": "update",
}
SHORT_FLAGS = {
    "h": "help",
    "r": "recursive",
    "R": "recursive",
    "i": "interactive",
    "v": "verbose",
    "p": "preserve",
    "u": "update",
}

HELP = f"""{PROG} - copy files and directories

Usage: {PROG} [OPTION]... SRC DEST
  or:  {PROG} [OPTION]... SRC... DIRECTORY

Options:
  -r, -R, --recursive  copy directories recursively
  -i, --interactive    prompt before overwriting
  -v, --verbose        explain what is being done
  -p, --preserve       preserve mode and timestamps
  -u, --update         copy only when SRC is newer than DEST or DEST is missing
  -h, --help           show this help and exit
      --version        show version information and exit

Examples:
  {PROG} a.txt b.txt          # copy a file
  {PROG} -r src/ dst/         # copy a directory tree
  {PROG} -i a.txt b.txt       # ask before overwriting b.txt
  {PROG} a b c dir/           # copy several files into dir/"""


@dataclass(frozen=True)
class CpConfig:
    help: bool = False
    version: bool = False
    recursive: bool = False
    interactive: bool = False
    verbose: bool = False
    preserve: bool = False
    update: bool = False
    operands: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[CpConfig | None, str]:
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
    return CpConfig(operands=tuple(operands), **fields), ""


def _confirm(target: str) -> bool:
    answer = input(f"{PROG}: overwrite '{target}'? ")
    return answer.strip().lower().startswith("y")


def _copy_file(src: str, dst: str, config: CpConfig, out: TextIO) -> bool:
    """Copy one file. Returns False when the copy was skipped by -u or -i."""
    if os.path.exists(dst):
        if config.update and os.stat(dst).st_mtime >= os.stat(src).st_mtime:
            return False
        if config.interactive and not _confirm(dst):
            return False
    shutil.copyfile(src, dst)
    if config.preserve:
        shutil.copystat(src, dst)
    else:
        shutil.copymode(src, dst)
    if config.verbose:
        print(f"'{src}' -> '{dst}'", file=out)
    return True


def _copy_tree(src: str, dst: str, config: CpConfig, out: TextIO, errors: list[tuple[str, OSError]]) -> int:
    """Pre-order directory copy. Returns the number of files copied."""
    if not os.path.isdir(dst):
        os.mkdir(dst)
        if config.verbose:
            print(f"'{src}' -> '{dst}'", file=out)
    with os.scandir(src) as it:
        entries = sorted(it, key=lambda e: e.name)

    copied = 0
    for entry in entries:
        target = os.path.join(dst, entry.name)
        try:
            if entry.is_dir(follow_symlinks=False):
                copied += _copy_tree(entry.path, target, config, out, errors)
            elif entry.is_symlink():
                if os.path.lexists(target):
                    os.unlink(target)
                os.symlink(os.readlink(entry.path), target)
            else:
                copied += _copy_file(entry.path, target, config, out)
        except OSError as e:
            errors.append((entry.path, e))
    if config.preserve:
        shutil.copystat(src, dst)
    return copied


def _inside(path: str, parent: str) -> bool:
    path, parent = os.path.realpath(path), os.path.realpath(parent)
    return path == parent or path.startswith(parent + os.sep)


def _cp_impl(config: CpConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Copy every SRC operand to DEST.

    CLI: cp
    MCP: cp
    """
    start_ms = time.time() * 1000
    assert config.operands, "missing file operand"
    assert len(config.operands) > 1, f"missing destination file operand after '{config.operands[0]}'"

    *sources, dest = config.operands
    dest_is_dir = os.path.isdir(dest)
    assert len(sources) == 1 or dest_is_dir, f"target '{dest}' is not a directory"

    failed = 0
    copied = 0
    for src in sources:
        target = os.path.join(dest, os.path.basename(src.rstrip("/"))) if dest_is_dir else dest
        try:
            if os.path.isdir(src):
                if not config.recursive:
                    failed += 1
                    print(f"{PROG}: -r not specified; omitting directory '{src}'", file=err)
                    continue
                if _inside(target, src):
                    failed += 1
                    print(f"{PROG}: cannot copy a directory, '{src}', into itself, '{target}'", file=err)
                    continue
                errors: list[tuple[str, OSError]] = []
                copied += _copy_tree(src, target, config, out, errors)
                for path, e in errors:
                    print(f"{PROG}: {path}: {e.strerror or e}", file=err)
                    _log("WARN", "cp_tree", path, detail=str(e))
                if errors:
                    failed += 1
            else:
                copied += _copy_file(src, target, config, out)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {src}: {e.strerror or e}", file=err)
            _log("WARN", "cp_operand", src, detail=str(e))

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "sources": len(sources),
        "copied": copied,
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
        status, metrics = _cp_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "cp",
            f"{metrics['copied']} file(s) copied",
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

    mcp = FastMCP("cp")

    @mcp.tool()
    def cp(sources: list[str], dest: str, recursive: bool = False, preserve: bool = False, update: bool = False) -> str:
        """Copy files or directories to a destination.

        Args:
            sources: Files or directories to copy
            dest: Destination path; must be a directory when several sources are given
            recursive: Required to copy directories
            preserve: Keep mode and timestamps
            update: Only copy when the source is newer than the destination
        """
        config = CpConfig(
            recursive=recursive,
            preserve=preserve,
            update=update,
            verbose=True,
            operands=(*sources, dest),
        )
        out, err = io.StringIO(), io.StringIO()
        try:
            status, _ = _cp_impl(config, out, err)
        except AssertionError as e:
            return f"[exit 1]\n{PROG}: {e}\n"
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("cp MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
