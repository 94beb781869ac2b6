#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""arch — print machine architecture.

Usage:
    sft_arch.py [-v]
    sft_arch.py mcp-stdio
"""

import io
import os
import platform
import sys
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
EXPOSED = ["arch"]  # CLI + MCP

PROG = "arch"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version", "--verbose": "verbose"}
SHORT_FLAGS = {"h": "help", "v": "verbose"}

HELP = f"""{PROG} - print machine architecture

Usage: {PROG} [OPTION]

Options:
  -v, --verbose  also print the operating system and platform
  -h, --help     show this help and exit
      --version  show version information and exit

Examples:
  {PROG}          # Architecture: x86_64
  {PROG} -v       # with OS and platform lines"""


@dataclass(frozen=True)
class ArchConfig:
    help: bool = False
    version: bool = False
    verbose: bool = False


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[ArchConfig | None, str]:
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
                if fields.get("help"):
                    break
        else:
            return None, f"extra operand '{arg}'"
        if fields.get("help") or fields.get("version"):
            break
    return ArchConfig(**fields), ""


def _arch_impl(config: ArchConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: arch / MCP: arch"""
    print(f"Architecture: {platform.machine() or 'unknown'}", file=out)
    if config.verbose:
        print(f"OS: {platform.system()}", file=out)
        print(f"Platform: {platform.platform()}", file=out)
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
        status, metrics = _arch_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "arch", platform.machine(), metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}")
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

    mcp = FastMCP("arch")

    @mcp.tool()
    def arch(verbose: bool = False) -> str:
        """Machine architecture.

        Args:
            verbose: Add operating system and platform lines
        """
        out = io.StringIO()
        _arch_impl(ArchConfig(verbose=verbose), out, io.StringIO())
        return out.getvalue()

    print("arch MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
