#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp", "psutil"]
# ///
"""free — display amount of free and used memory.

Usage:
    sft_free.py [-b | -k | -m | -g]
    sft_free.py mcp-stdio

Examples:
    sft_free.py          # Mem: 15890 MB total, 9021 MB used, 6869 MB free
    sft_free.py -g
"""

import io
import os
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

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
EXPOSED = ["free"]  # CLI + MCP

PROG = "free"
VERSION = "1.0.0"

UNITS = {"b": (1, "B"), "k": (1024, "KB"), "m": (1024**2, "MB"), "g": (1024**3, "GB")}

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version", "b": "bytes", "k": "kilo", "m": "mega", "g": "giga"}

HELP = f"""{PROG} - display amount of free and used memory

Usage: {PROG} [OPTION]

Options:
  -b             show output in bytes
  -k             show output in kibibytes
  -m             show output in mebibytes (default)
  -g             show output in gibibytes
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Examples:
  {PROG}         # in MB
  {PROG} -g      # in GB
  {PROG} -b      # in bytes"""


@dataclass(frozen=True)
class FreeConfig:
    help: bool = False
    version: bool = False
    bytes: bool = False
    kilo: bool = False
    mega: bool = False
    giga: bool = False

    @property
    def unit(self) -> str:
        for letter, chosen in (("b", self.bytes), ("k", self.kilo), ("g", self.giga)):
            if chosen:
                return letter
        return "m"


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[FreeConfig | None, str]:
    fields: dict[str, Any] = {}
    for arg in argv:
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
            return None, f"extra operand '{arg}'"
        if fields.get("help") or fields.get("version"):
            break
    return FreeConfig(**fields), ""


def format_line(label: str, total: int, free: int, unit: str) -> str:
    size, name = UNITS[unit]
    used = total - free
    return f"{label} {total // size} {name} total, {used // size} {name} used, {free // size} {name} free"


def _free_impl(config: FreeConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: free / MCP: free"""
    start_ms = time.time() * 1000
    mem = psutil.virtual_memory()
    swap = psutil.swap_memory()
    print(format_line("Mem:", mem.total, mem.free, config.unit), file=out)
    print(format_line("Swap:", swap.total, swap.free, config.unit), file=out)

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    return 0, {"unit": config.unit, "latency_ms": latency_ms, "status": "success"}


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
        status, metrics = _free_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "free", f"unit={metrics['unit']}", metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}")
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

    mcp = FastMCP("free")

    @mcp.tool()
    def free(unit: str = "m") -> str:
        """Memory and swap usage.

        Args:
            unit: One of b, k, m, g (bytes, KB, MB, GB)
        """
        if unit not in UNITS:
            return f"[exit 1]\n{PROG}: invalid unit '{unit}'\n"
        config = FreeConfig(**{SHORT_FLAGS[unit]: True})
        out = io.StringIO()
        _free_impl(config, out, io.StringIO())
        return out.getvalue()

    print("free MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
