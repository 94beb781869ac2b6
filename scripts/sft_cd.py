#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = []
# ///
"""cd — open a new shell in another directory.

A child process cannot change its parent's working directory, so this
starts $SHELL (default bash) inside the target directory with PWD and
OLDPWD set. Leaving that shell returns to the original one.

Usage:
    sft_cd.py [-L | -P] [-v] [DIR | -]

Examples:
    sft_cd.py /tmp         # shell in /tmp
    sft_cd.py -            # shell in $OLDPWD
    sft_cd.py              # shell in $HOME
    sft_cd.py -P -v link/  # resolve symlinks, report the move
"""

import os
import subprocess
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
EXPOSED = []  # CLI only: acts on the calling terminal

PROG = "cd"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version", "--verbose": "verbose"}
SHORT_FLAGS = {"h": "help", "v": "verbose", "L": "logical", "P": "physical"}

HELP = f"""{PROG} - start a shell in another directory

Usage: {PROG} [OPTION]... [DIR]

With no DIR, use $HOME. A DIR of '-' means $OLDPWD.

Options:
  -L             keep symbolic links in the new path (default)
  -P             resolve symbolic links
  -v, --verbose  report the old and new directory
  -h, --help     show this help and exit
      --version  show version information and exit

Examples:
  {PROG} /tmp     # shell in /tmp
  {PROG} -        # back to the previous directory
  {PROG}          # home directory"""


@dataclass(frozen=True)
class CdConfig:
    help: bool = False
    version: bool = False
    logical: bool = False
    physical: bool = False
    verbose: bool = False
    target: str | None = None


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[CdConfig | None, str]:
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
                if ch in "LP":
                    fields["logical"], fields["physical"] = ch == "L", ch == "P"
                    continue
                fields[SHORT_FLAGS[ch]] = True
                if fields.get("help"):
                    break
        else:
            operands.append(arg)
        if fields.get("help") or fields.get("version"):
            return CdConfig(**fields), ""
    if len(operands) > 1:
        return None, f"extra operand '{operands[1]}'"
    return CdConfig(target=operands[0] if operands else None, **fields), ""


def resolve_target(config: CdConfig) -> str:
    """Absolute directory the new shell starts in."""
    if config.target == "-":
        target = os.environ.get("OLDPWD")
        assert target, "OLDPWD not set"
    elif config.target is None:
        target = os.environ.get("HOME")
        assert target, "HOME not set"
    else:
        target = config.target
    target = os.path.realpath(target) if config.physical else os.path.abspath(target)
    if not os.path.exists(target):
        raise FileNotFoundError(2, "No such file or directory", target)
    if not os.path.isdir(target):
        raise NotADirectoryError(20, "Not a directory", target)
    return target


def _cd_impl(config: CdConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: cd"""
    start_ms = time.time() * 1000
    try:
        target = resolve_target(config)
    except OSError as e:
        print(f"{PROG}: {config.target or e.filename}: {e.strerror or e}", file=err)
        return 1, {"target": config.target, "latency_ms": 0, "status": "error"}

    current = os.getcwd()
    if config.verbose:
        print(f"Was: {current}", file=out)
        print(f"Now: {target}", file=out)
    if config.target == "-":
        print(target, file=out)
    out.flush()

    shell = os.environ.get("SHELL") or "bash"
    env = dict(os.environ, PWD=target, OLDPWD=current)
    result = subprocess.run([shell], cwd=target, env=env)

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    return result.returncode, {"target": target, "latency_ms": latency_ms, "status": "success"}


# =============================================================================
# CLI INTERFACE
# =============================================================================
def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

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
        status, metrics = _cd_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "cd",
            str(metrics["target"]),
            metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']} exit={status}",
        )
        return status
    except AssertionError as e:
        _log("ERROR", "contract_violation", str(e))
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        _log("ERROR", "runtime_error", str(e))
        print(f"{PROG}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
