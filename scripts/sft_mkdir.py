#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""mkdir — make directories.

Usage:
    sft_mkdir.py [-p] [-v] DIR...
    sft_mkdir.py mcp-stdio

Examples:
    sft_mkdir.py build
    sft_mkdir.py -p a/b/c            # parents as needed, no error if present
    sft_mkdir.py -pv out/logs        # report each directory created
"""

import io
import os
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
EXPOSED = ["mkdir"]  # CLI + MCP

PROG = "mkdir"
VERSION = "1.0.0"
DIR_MODE = 0o755

# -v is verbose here, so the version is only reachable as --version
LONG_FLAGS = {"--help": "help", "--version": "version", "--parents": "parents", "--verbose": "verbose"}
SHORT_FLAGS = {"h": "help", "p": "parents", "v": "verbose"}

HELP = f"""{PROG} - make directories

Usage: {PROG} [OPTION]... DIR...

Options:
  -p, --parents  make parent directories as needed, no error if existing
  -v, --verbose  print a message for each created directory
  -h, --help     show this help and exit
      --version  show version information and exit

Examples:
  {PROG} dir              # create one directory
  {PROG} -p a/b/c         # create the whole chain
  {PROG} -v d1 d2         # create two directories and report them"""


@dataclass(frozen=True)
class MkdirConfig:
    help: bool = False
    version: bool = False
    parents: bool = False
    verbose: bool = False
    dirs: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[MkdirConfig | None, str]:
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
    return MkdirConfig(dirs=tuple(operands), **fields), ""


def _missing_chain(path: Path) -> list[Path]:
    """Directories that -p would have to create, outermost first."""
    chain = []
    while not path.exists() and path != path.parent:
        chain.append(path)
        path = path.parent
    return list(reversed(chain))


def _mkdir_impl(config: MkdirConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Create each directory operand.

    CLI: mkdir
    MCP: mkdir
    """
    start_ms = time.time() * 1000
    assert config.dirs, "missing operand"

    failed = 0
    created = 0
    for name in config.dirs:
        path = Path(name)
        try:
            if config.parents:
                new_dirs = _missing_chain(path)
                path.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            else:
                new_dirs = [path]
                path.mkdir(mode=DIR_MODE)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            _log("WARN", "mkdir_operand", name, detail=str(e))
            continue
        created += len(new_dirs)
        if config.verbose:
            for new_dir in new_dirs:
                print(f"{PROG}: created directory '{new_dir}'", file=out)

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "dirs": len(config.dirs),
        "created": created,
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
        status, metrics = _mkdir_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "mkdir",
            f"{metrics['created']} created",
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

    mcp = FastMCP("mkdir")

    @mcp.tool()
    def mkdir(dirs: list[str], parents: bool = False) -> str:
        """Create directories (mode 0755).

        Args:
            dirs: Directory paths to create
            parents: Create missing parents and accept existing directories
        """
        config = MkdirConfig(parents=parents, verbose=True, dirs=tuple(dirs))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _mkdir_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("mkdir MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
