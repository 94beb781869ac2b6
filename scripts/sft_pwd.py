#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""pwd — print the current working directory.

Physical by default (symlinks resolved). With -L the value of $PWD is
printed when it is absolute and names the current directory.

Usage:
    sft_pwd.py [-L | -P]
    sft_pwd.py mcp-stdio
"""

import io
import os
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
EXPOSED = ["pwd"]  # CLI + MCP

PROG = "pwd"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version", "--logical": "logical", "--physical": "physical"}
SHORT_FLAGS = {"h": "help", "v": "version", "L": "logical", "P": "physical"}

HELP = f"""{PROG} - print name of current working directory

Usage: {PROG} [OPTION]

Options:
  -L, --logical   use $PWD, even if it contains symlinks
  -P, --physical  resolve all symlinks (default)
  -h, --help      show this help and exit
  -v, --version   show version information and exit

Examples:
  {PROG}          # physical path
  {PROG} -L       # logical path from $PWD"""


@dataclass(frozen=True)
class PwdConfig:
    help: bool = False
    version: bool = False
    logical: bool = False
    physical: bool = False


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[PwdConfig | None, str]:
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
                # the last of -L / -P wins
                if ch in "LP":
                    fields["logical"], fields["physical"] = ch == "L", ch == "P"
                    continue
                fields[SHORT_FLAGS[ch]] = True
                break
        else:
            return None, f"ignoring non-option arguments: '{arg}'"
        if fields.get("help") or fields.get("version"):
            break
    return PwdConfig(**fields), ""


def logical_cwd() -> str | None:
    """$PWD when it is absolute, has no '.' or '..' parts and names the cwd."""
    env = os.environ.get("PWD", "")
    if not os.path.isabs(env):
        return None
    if any(part in (".", "..") for part in env.split("/")):
        return None
    try:
        if os.path.samefile(env, "."):
            return env
    except OSError:
        return None
    return None


def _pwd_impl(config: PwdConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: pwd / MCP: pwd"""
    path = (config.logical and logical_cwd()) or os.getcwd()
    print(path, file=out)
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
        status, metrics = _pwd_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "pwd", "logical" if config.logical else "physical", metrics=f"status={metrics['status']}")
        return status
    except OSError as e:
        _log("ERROR", "runtime_error", str(e))
        print(f"{PROG}: {e.strerror or e}", file=sys.stderr)
        return 1


# =============================================================================
# FASTMCP SERVER
# =============================================================================
def _run_mcp():
    from fastmcp import FastMCP

    mcp = FastMCP("pwd")

    @mcp.tool()
    def pwd(logical: bool = False) -> str:
        """Current working directory of the server process.

        Args:
            logical: Prefer $PWD (keeps symlinked path components)
        """
        out = io.StringIO()
        _pwd_impl(PwdConfig(logical=logical), out, io.StringIO())
        return out.getvalue()

    print("pwd MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
