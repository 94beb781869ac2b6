#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""zip — package files into a ZIP archive (deflate).

Without -u the archive is written from scratch. With -u an existing
archive is rebuilt through ARCHIVE.tmp: old entries are copied over
except those about to be replaced, the new files are added, then the
temporary file atomically replaces the archive. A file that cannot be
read is reported and skipped; the rest still go in.

Usage:
    sft_zip.py [-d] [-u] ARCHIVE FILE...
    sft_zip.py mcp-stdio

Examples:
    sft_zip.py out.zip a.txt docs/   # docs/ is added recursively
    sft_zip.py -u out.zip a.txt      # refresh a.txt inside out.zip
    sft_zip.py -d logs.zip *.log     # move the logs into the archive
"""

import io
import os
import shutil
import sys
import time
import zipfile
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
EXPOSED = ["zip"]  # CLI + MCP

PROG = "zip"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version", "d": "delete", "u": "update"}

HELP = f"""{PROG} - package and compress files into a ZIP archive

Usage: {PROG} [OPTION]... ARCHIVE FILE...

Options:
  -d             delete the source files once they are safely in the archive
  -u             update an existing archive instead of overwriting it
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Directories are added recursively.

Examples:
  {PROG} out.zip a.txt b.txt      # new archive
  {PROG} out.zip dir/             # a whole directory
  {PROG} -u out.zip a.txt         # add or replace a.txt in out.zip
  {PROG} -d out.zip a.txt         # add a.txt, then delete it"""


@dataclass(frozen=True)
class ZipConfig:
    help: bool = False
    version: bool = False
    delete: bool = False
    update: bool = False
    operands: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[ZipConfig | None, str]:
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
    return ZipConfig(operands=tuple(operands), **fields), ""


def plan_entries(source: str, exclude: frozenset[str] = frozenset()) -> list[tuple[str, str]]:
    """(path, arcname) pairs for one source; directories expand recursively.

    Files keep their base name; files under a directory are named relative
    to that directory's parent, so `docs/` yields `docs/a.md`, `docs/img/b.png`.
    Paths whose real path is in `exclude` (the archive being written) are left out.
    """
    source = os.path.normpath(source)
    if not os.path.isdir(source):
        if not os.path.exists(source):
            raise FileNotFoundError(2, "No such file or directory", source)
        if os.path.realpath(source) in exclude:
            return []
        return [(source, os.path.basename(source))]
    base = os.path.dirname(source)
    entries = []
    for dirpath, dirnames, filenames in os.walk(source):
        dirnames.sort()
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            if os.path.realpath(path) in exclude:
                continue
            entries.append((path, os.path.relpath(path, base)))
    return entries


def _write_entries(zf: zipfile.ZipFile, plan: dict[str, list[tuple[str, str]]], out: TextIO, err: TextIO) -> set[str]:
    """Add planned files; returns the sources whose every file went in."""
    ok = set()
    for source, entries in plan.items():
        source_ok = True
        for path, arcname in entries:
            try:
                zf.write(path, arcname)
            except OSError as e:
                source_ok = False
                print(f"{PROG}: {path}: {e.strerror or e}", file=err)
                _log("WARN", "zip_add", path, detail=str(e))
                continue
            print(f"  adding: {arcname}", file=out)
        if source_ok:
            ok.add(source)
    return ok


def _update(archive: str, plan: dict[str, list[tuple[str, str]]], out: TextIO, err: TextIO) -> set[str]:
    tmp = archive + ".tmp"
    replacing = {arcname for entries in plan.values() for _, arcname in entries}
    try:
        with zipfile.ZipFile(archive) as old, zipfile.ZipFile(tmp, "w", zipfile.ZIP_DEFLATED) as new:
            for info in old.infolist():
                if info.filename not in replacing:
                    new.writestr(info, old.read(info))
            ok = _write_entries(new, plan, out, err)
        os.replace(tmp, archive)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise
    return ok


def _remove_source(source: str, entries: list[tuple[str, str]], archive: str) -> None:
    """Delete an added source; a directory holding the archive loses only its added files."""
    archive = os.path.realpath(archive)
    if os.path.realpath(source) == archive:
        return
    if not (os.path.isdir(source) and not os.path.islink(source)):
        os.remove(source)
        return
    if not archive.startswith(os.path.realpath(source) + os.sep):
        shutil.rmtree(source)
        return
    for path, _ in entries:
        os.remove(path)
    for dirpath, _, _ in os.walk(source, topdown=False):
        if not os.listdir(dirpath):
            os.rmdir(dirpath)


def _zip_impl(config: ZipConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Create or update ARCHIVE from the FILE operands.

    CLI: zip
    MCP: zip
    """
    start_ms = time.time() * 1000
    assert config.operands, "missing archive operand"
    assert len(config.operands) > 1, "nothing to do: no FILE given"
    archive, *sources = config.operands

    failed = 0
    own = frozenset({os.path.realpath(archive), os.path.realpath(archive + ".tmp")})
    plan: dict[str, list[tuple[str, str]]] = {}
    for source in sources:
        try:
            plan[source] = plan_entries(source, own)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {source}: {e.strerror or e}", file=err)

    try:
        if config.update and os.path.exists(archive):
            ok = _update(archive, plan, out, err)
        else:
            with zipfile.ZipFile(archive, "w", zipfile.ZIP_DEFLATED) as zf:
                ok = _write_entries(zf, plan, out, err)
    except (OSError, zipfile.BadZipFile) as e:
        print(f"{PROG}: {archive}: {getattr(e, 'strerror', None) or e}", file=err)
        _log("ERROR", "zip_archive", archive, detail=str(e))
        return 1, {"added": 0, "failed": failed + len(plan), "latency_ms": 0, "status": "error"}

    failed += len(plan) - len(ok)
    if config.delete:
        for source in sorted(ok):
            try:
                _remove_source(source, plan[source], archive)
            except OSError as e:
                failed += 1
                print(f"{PROG}: {source}: {e.strerror or e}", file=err)

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "added": len(ok),
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
        status, metrics = _zip_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "zip",
            f"{metrics['added']} source(s) -> {config.operands[0]}",
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

    mcp = FastMCP("zip")

    @mcp.tool()
    def zip(archive: str, files: list[str], update: bool = False, delete: bool = False) -> str:
        """Create or update a ZIP archive.

        Args:
            archive: Archive path
            files: Files or directories to add
            update: Keep existing entries that are not being replaced
            delete: Remove sources that were added successfully
        """
        config = ZipConfig(update=update, delete=delete, operands=(archive, *files))
        out, err = io.StringIO(), io.StringIO()
        try:
            status, _ = _zip_impl(config, out, err)
        except AssertionError as e:
            return f"[exit 1]\n{PROG}: {e}\n"
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("zip MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
