#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""unzip — list or extract ZIP archives.

Entries whose resolved path would land outside the output directory are
rejected (zip-slip); the remaining entries are still extracted.

Usage:
    sft_unzip.py [-l] [-o DIR] ARCHIVE
    sft_unzip.py [-l] -f ARCHIVE [-o DIR]
    sft_unzip.py mcp-stdio

Examples:
    sft_unzip.py -l bundle.zip
    sft_unzip.py bundle.zip -o out/
"""

import io
import os
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
EXPOSED = ["unzip"]  # CLI + MCP

PROG = "unzip"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version", "l": "list"}
VALUE_FLAGS = {"f": ("archive", str), "o": ("output_dir", str)}

HELP = f"""{PROG} - list or extract ZIP archives

Usage: {PROG} [OPTION]... ARCHIVE

Options:
  -l             list archive contents
  -f ARCHIVE     archive path (alternative to the operand)
  -o DIR         extract into DIR (default ".")
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Examples:
  {PROG} -l data.zip          # list
  {PROG} data.zip             # extract here
  {PROG} -f data.zip -o out   # extract into out/"""


@dataclass(frozen=True)
class UnzipConfig:
    help: bool = False
    version: bool = False
    list: bool = False
    archive: str | None = None
    output_dir: str = "."


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[UnzipConfig | None, str]:
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
            return UnzipConfig(**fields), ""

    if operands:
        if "archive" in fields or len(operands) > 1:
            return None, f"extra operand '{operands[-1]}'"
        fields["archive"] = operands[0]
    return UnzipConfig(**fields), ""


def is_within(root: str, name: str) -> bool:
    root = os.path.realpath(root)
    target = os.path.realpath(os.path.join(root, name))
    return target == root or target.startswith(root + os.sep)


def _unzip_impl(config: UnzipConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """List or extract one archive.

    CLI: unzip
    MCP: unzip
    """
    start_ms = time.time() * 1000
    assert config.archive, "missing archive operand"

    rejected = 0
    extracted = 0
    try:
        with zipfile.ZipFile(config.archive) as zf:
            if config.list:
                print("Archive contents:", file=out)
                for name in zf.namelist():
                    print(name, file=out)
            else:
                os.makedirs(config.output_dir, exist_ok=True)
                for info in zf.infolist():
                    if os.path.isabs(info.filename) or not is_within(config.output_dir, info.filename):
                        rejected += 1
                        print(f"{PROG}: {info.filename}: entry escapes the output directory, skipped", file=err)
                        _log("WARN", "zip_slip", info.filename, detail=config.archive)
                        continue
                    zf.extract(info, config.output_dir)
                    extracted += 1
                print(f"Files extracted to: {config.output_dir}", file=out)
    except (OSError, zipfile.BadZipFile) as e:
        print(f"{PROG}: {config.archive}: {getattr(e, 'strerror', None) or e}", file=err)
        return 1, {"extracted": extracted, "rejected": rejected, "latency_ms": 0, "status": "error"}

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "extracted": extracted,
        "rejected": rejected,
        "latency_ms": latency_ms,
        "status": "error" if rejected else "success",
    }
    return (1 if rejected else 0), metrics


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
        status, metrics = _unzip_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "unzip",
            f"{config.archive}: {metrics['extracted']} extracted",
            metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']} rejected={metrics['rejected']}",
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

    mcp = FastMCP("unzip")

    @mcp.tool()
    def unzip(archive: str, output_dir: str = ".", list_only: bool = False) -> str:
        """List or safely extract a ZIP archive.

        Args:
            archive: Archive path
            output_dir: Destination directory (created when missing)
            list_only: Only list the entry names
        """
        config = UnzipConfig(list=list_only, archive=archive, output_dir=output_dir)
        out, err = io.StringIO(), io.StringIO()
        status, _ = _unzip_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("unzip MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
