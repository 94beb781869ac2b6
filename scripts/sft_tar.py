#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11.4"
# dependencies = ["fastmcp"]
# ///
"""tar — create, extract and list gzip-compressed tar archives.

Members are stored under their base name, so `tar -c -f a.tgz src/lib`
produces entries `lib`, `lib/...`. Extraction goes through the tarfile
"data" filter: absolute names, links out of the target and device files
are refused.

Usage:
    sft_tar.py -c [-f ARCHIVE] [-C DIR] FILE...
    sft_tar.py -x [-f ARCHIVE] [-C DIR]
    sft_tar.py -t [-f ARCHIVE]
    sft_tar.py mcp-stdio

Examples:
    sft_tar.py -c -f backup.tar.gz notes.txt src/
    sft_tar.py -t -f backup.tar.gz
    sft_tar.py -x -f backup.tar.gz -C restore/
"""

import io
import os
import sys
import tarfile
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
EXPOSED = ["tar_create", "tar_extract", "tar_list"]  # MCP; the CLI picks one by -c / -x / -t

PROG = "tar"
VERSION = "1.0.0"
DEFAULT_ARCHIVE = "archive.tar.gz"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version", "c": "create", "x": "extract", "t": "list"}
VALUE_FLAGS = {"f": ("archive", str), "C": ("directory", str)}

HELP = f"""{PROG} - gzip-compressed tar archiver

Usage: {PROG} -c [-f ARCHIVE] [-C DIR] FILE...
  or:  {PROG} -x [-f ARCHIVE] [-C DIR]
  or:  {PROG} -t [-f ARCHIVE]

Options:
  -c             create a new archive from FILEs (directories recursively)
  -x             extract the archive
  -t             list the archive members
  -f ARCHIVE     archive path (default {DEFAULT_ARCHIVE})
  -C DIR         with -c, FILEs are relative to DIR; with -x, extract into DIR
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Examples:
  {PROG} -c -f out.tar.gz a.txt dir/   # create
  {PROG} -t -f out.tar.gz              # list
  {PROG} -x -f out.tar.gz -C dest/     # extract into dest/"""


@dataclass(frozen=True)
class TarConfig:
    help: bool = False
    version: bool = False
    create: bool = False
    extract: bool = False
    list: bool = False
    archive: str = DEFAULT_ARCHIVE
    directory: str | None = None
    files: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[TarConfig | None, str]:
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
                    fields[VALUE_FLAGS[ch][0]] = argv[i]
                    i += 1
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
    return TarConfig(files=tuple(operands), **fields), ""


def _create(config: TarConfig, out: TextIO, err: TextIO) -> int:
    """Returns the number of operands that could not be added."""
    assert config.files, "cowardly refusing to create an empty archive"
    failed = 0
    with tarfile.open(config.archive, "w:gz") as tar:
        for name in config.files:
            path = os.path.join(config.directory, name) if config.directory else name
            arcname = os.path.basename(os.path.normpath(name))
            try:
                tar.add(path, arcname=arcname)
            except OSError as e:
                failed += 1
                print(f"{PROG}: {name}: {e.strerror or e}", file=err)
                _log("WARN", "tar_add", name, detail=str(e))
    return failed


def _extract(config: TarConfig, out: TextIO, err: TextIO) -> int:
    dest = config.directory or "."
    os.makedirs(dest, exist_ok=True)
    with tarfile.open(config.archive, "r:*") as tar:
        tar.extractall(dest, filter="data")
    return 0


def _list(config: TarConfig, out: TextIO, err: TextIO) -> int:
    with tarfile.open(config.archive, "r:*") as tar:
        for member in tar.getmembers():
            print(member.name + ("/" if member.isdir() else ""), file=out)
    return 0


def _tar_impl(config: TarConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Run exactly one of create / extract / list.

    CLI: tar
    MCP: tar_create, tar_extract, tar_list
    """
    start_ms = time.time() * 1000
    modes = [m for m, on in (("create", config.create), ("extract", config.extract), ("list", config.list)) if on]
    assert len(modes) == 1, "exactly one of -c, -x or -t is required"
    mode = modes[0]
    action = {"create": _create, "extract": _extract, "list": _list}[mode]

    try:
        failed = action(config, out, err)
    except (OSError, tarfile.TarError) as e:
        failed = 1
        print(f"{PROG}: {config.archive}: {getattr(e, 'strerror', None) or e}", file=err)
        _log("ERROR", f"tar_{mode}", config.archive, detail=str(e))

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "mode": mode,
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
        status, metrics = _tar_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "tar",
            f"{metrics['mode']} {config.archive}",
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

    mcp = FastMCP("tar")

    def _run(config: TarConfig) -> str:
        out, err = io.StringIO(), io.StringIO()
        try:
            status, _ = _tar_impl(config, out, err)
        except AssertionError as e:
            return f"[exit 1]\n{PROG}: {e}\n"
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    @mcp.tool()
    def tar_create(archive: str, files: list[str], directory: str | None = None) -> str:
        """Create a gzip tar archive.

        Args:
            archive: Output archive path
            files: Files or directories to add (stored under their base names)
            directory: Resolve files relative to this directory
        """
        return _run(TarConfig(create=True, archive=archive, directory=directory, files=tuple(files))) or "ok\n"

    @mcp.tool()
    def tar_extract(archive: str, directory: str = ".") -> str:
        """Extract a tar archive safely (data filter).

        Args:
            archive: Archive path
            directory: Destination directory, created when missing
        """
        return _run(TarConfig(extract=True, archive=archive, directory=directory)) or f"extracted to {directory}\n"

    @mcp.tool()
    def tar_list(archive: str) -> str:
        """List the members of a tar archive.

        Args:
            archive: Archive path
        """
        return _run(TarConfig(list=True, archive=archive))

    print("tar MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
