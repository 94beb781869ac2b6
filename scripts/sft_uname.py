#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""uname — print system information.

Usage:
    sft_uname.py [-a] [-s] [-n] [-r] [-m]
    sft_uname.py mcp-stdio
"""

import io
import os
import platform
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
EXPOSED = ["uname"]  # CLI + MCP

PROG = "uname"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version", "--all": "all"}
SHORT_FLAGS = {
    "h": "help",
    "v": "version",
    "a": "all",
    "s": "kernel_name",
    "n": "nodename",
    "r": "kernel_release",
    "m": "machine",
}

# field, label for -a
FIELDS = [
    ("kernel_name", "Kernel name"),
    ("nodename", "Network node hostname"),
    ("kernel_release", "Kernel release"),
    ("machine", "Machine hardware name"),
]

HELP = f"""{PROG} - print system information

Usage: {PROG} [OPTION]...

Options:
  -a, --all      print every field on its own labelled line
  -s             kernel name (default)
  -n             network node hostname
  -r             kernel release
  -m             machine hardware name
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Examples:
  {PROG}          # Linux
  {PROG} -a       # all fields
  {PROG} -srm     # name, release and machine on one line"""


@dataclass(frozen=True)
class UnameConfig:
    help: bool = False
    version: bool = False
    all: bool = False
    kernel_name: bool = False
    nodename: bool = False
    kernel_release: bool = False
    machine: bool = False


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[UnameConfig | None, str]:
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
    return UnameConfig(**fields), ""


def system_info() -> dict[str, str]:
    u = platform.uname()
    return {
        "kernel_name": u.system,
        "nodename": u.node,
        "kernel_release": u.release,
        "machine": u.machine,
    }


def _uname_impl(config: UnameConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: uname / MCP: uname"""
    info = system_info()
    if config.all:
        for name, label in FIELDS:
            print(f"{label}: {info[name]}", file=out)
    else:
        chosen = [info[name] for name, _ in FIELDS if getattr(config, name)]
        print(" ".join(chosen or [info["kernel_name"]]), file=out)
    return 0, {"latency_ms": 0, "status": "success"}


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
        status, metrics = _uname_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "uname", "ok", metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}")
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

    mcp = FastMCP("uname")

    @mcp.tool()
    def uname() -> str:
        """Kernel name, hostname, kernel release and machine, one labelled line each.

        Args:
            None
        """
        out = io.StringIO()
        _uname_impl(UnameConfig(all=True), out, io.StringIO())
        return out.getvalue()

    print("uname MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
