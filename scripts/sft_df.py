#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp", "psutil"]
# ///
"""df — report file system disk space usage.

Mounted file systems come from psutil.disk_partitions(); sizes from
psutil.disk_usage(), or straight from os.statvfs() with --direct.
Values are divided by the block size (-B, default 1K) and truncated.

Usage:
    sft_df.py [-a] [-B SIZE] [--direct] [PATH...]
    sft_df.py mcp-stdio

Examples:
    sft_df.py
    sft_df.py -B M /home             # the file system holding /home, in MiB
    sft_df.py -a --direct
"""

import io
import os
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NamedTuple, TextIO

import psutil

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
EXPOSED = ["df"]  # CLI + MCP

PROG = "df"
VERSION = "1.0.0"
ROW = "{:<30} {:>12} {:>12} {:>12}"
_UNITS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3}


class BlockSize(NamedTuple):
    size: int
    label: str


def parse_block_size(raw: str) -> BlockSize:
    """'1K', 'M', '512', '4G' -> BlockSize."""
    text = raw.strip().upper()
    suffix = text[-1:] if text[-1:] in ("K", "M", "G") else ""
    digits = text[: len(text) - len(suffix)]
    number = int(digits) if digits else 1
    if number <= 0:
        raise ValueError(raw)
    return BlockSize(number * _UNITS[suffix], text)


LONG_FLAGS = {"--help": "help", "--version": "version", "--all": "all", "--direct": "direct"}
SHORT_FLAGS = {"h": "help", "v": "version", "a": "all"}
VALUE_FLAGS = {"B": ("block_size", parse_block_size)}

HELP = f"""{PROG} - report file system disk space usage

Usage: {PROG} [OPTION]... [PATH]...

Options:
  -a, --all      include pseudo, duplicate and empty file systems
  -B SIZE        scale sizes by SIZE (N, NK, NM, NG; default 1K)
      --direct   read sizes with statvfs directly
  -h, --help     show this help and exit
  -v, --version  show version information and exit

With PATH operands, only the file systems holding them are shown.

Examples:
  {PROG}               # all real file systems, 1K blocks
  {PROG} -B M          # in MiB
  {PROG} /home /tmp    # the file systems of two paths"""


@dataclass(frozen=True)
class DfConfig:
    help: bool = False
    version: bool = False
    all: bool = False
    direct: bool = False
    block_size: BlockSize = BlockSize(1024, "1K")
    paths: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[DfConfig | None, str]:
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
    return DfConfig(paths=tuple(operands), **fields), ""


def _usage(mountpoint: str, direct: bool) -> tuple[int, int, int]:
    """(total, used, available) bytes for a mount point."""
    if direct:
        st = os.statvfs(mountpoint)
        total = st.f_blocks * st.f_frsize
        used = (st.f_blocks - st.f_bfree) * st.f_frsize
        return total, used, st.f_bavail * st.f_frsize
    du = psutil.disk_usage(mountpoint)
    return du.total, du.used, du.free


def _mount_point(path: str) -> str:
    path = os.path.realpath(path)
    while not os.path.ismount(path):
        path = os.path.dirname(path)
    return path


def _df_impl(config: DfConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Print one row per file system.

    CLI: df
    MCP: df
    """
    start_ms = time.time() * 1000
    failed = 0
    # mount point -> the operand that named it, None when listing every mount
    mounts: dict[str, str | None] = {}
    if config.paths:
        for path in config.paths:
            if not os.path.exists(path):
                failed += 1
                print(f"{PROG}: {path}: No such file or directory", file=err)
                continue
            mounts.setdefault(_mount_point(path), path)
    else:
        mounts = dict.fromkeys(p.mountpoint for p in psutil.disk_partitions(all=config.all))

    bs = config.block_size
    print(ROW.format("Filesystem", f"{bs.label}-blocks", "Used", "Available"), file=out)
    rows = 0
    for mount, operand in mounts.items():
        try:
            total, used, avail = _usage(mount, config.direct)
        except OSError as e:
            if operand is None:
                _log("DEBUG", "df_skip", mount, detail=str(e))
                continue
            failed += 1
            print(f"{PROG}: {operand}: {e.strerror or e}", file=err)
            continue
        if total == 0 and not (config.all or config.paths):
            continue
        print(ROW.format(mount, total // bs.size, used // bs.size, avail // bs.size), file=out)
        rows += 1

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "rows": rows,
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
        status, metrics = _df_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "df",
            f"{metrics['rows']} file system(s)",
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

    mcp = FastMCP("df")

    @mcp.tool()
    def df(paths: list[str] | None = None, block_size: str = "1K", all: bool = False) -> str:
        """Disk space per file system.

        Args:
            paths: Only show the file systems holding these paths
            block_size: Scale for the size columns (e.g. 1K, M, G)
            all: Include pseudo and empty file systems
        """
        config = DfConfig(all=all, block_size=parse_block_size(block_size), paths=tuple(paths or ()))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _df_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("df MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
