#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""pwgen — generate random passwords with the secrets module.

Usage:
    sft_pwgen.py [-n] [-s] [-y] [LENGTH] [COUNT]
    sft_pwgen.py mcp-stdio

Examples:
    sft_pwgen.py                     # 160 passwords of 8 letters
    sft_pwgen.py -n 12 4             # 4 passwords of 12 letters and digits
"""

import io
import os
import secrets
import string
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
EXPOSED = ["pwgen"]  # CLI + MCP

PROG = "pwgen"
VERSION = "1.0.0"
DEFAULT_LENGTH = 8
DEFAULT_COUNT = 160
PER_LINE = 8

LETTERS = string.ascii_letters
DIGITS = string.digits
SYMBOLS = "!@#$%^&*()-_=+[]{}|;:,.<>?"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version", "n": "digits", "s": "symbols", "y": "append_symbol"}

HELP = f"""{PROG} - generate random passwords

Usage: {PROG} [OPTION]... [LENGTH] [COUNT]

Options:
  -n             include digits
  -s             include symbols
  -y             append one extra symbol to every password
  -h, --help     show this help and exit
  -v, --version  show version information and exit

LENGTH defaults to {DEFAULT_LENGTH}, COUNT to {DEFAULT_COUNT}. Passwords are printed {PER_LINE} per line.

Examples:
  {PROG}              # {DEFAULT_COUNT} passwords of {DEFAULT_LENGTH} characters
  {PROG} 12 5         # 5 passwords of 12 characters
  {PROG} -ns 16 1     # one strong password"""


@dataclass(frozen=True)
class PwgenConfig:
    help: bool = False
    version: bool = False
    digits: bool = False
    symbols: bool = False
    append_symbol: bool = False
    length: int = DEFAULT_LENGTH
    count: int = DEFAULT_COUNT


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[PwgenConfig | None, str]:
    fields: dict[str, Any] = {}
    numbers: list[int] = []
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
            try:
                value = int(arg)
            except ValueError:
                return None, f"invalid number '{arg}'"
            if value <= 0:
                return None, f"invalid number '{arg}'"
            numbers.append(value)
        if fields.get("help") or fields.get("version"):
            return PwgenConfig(**fields), ""
    if len(numbers) > 2:
        return None, f"extra operand '{numbers[2]}'"
    for name, value in zip(("length", "count"), numbers):
        fields[name] = value
    return PwgenConfig(**fields), ""


def charset(config: PwgenConfig) -> str:
    chars = LETTERS
    if config.digits:
        chars += DIGITS
    if config.symbols:
        chars += SYMBOLS
    return chars


def generate(config: PwgenConfig) -> list[str]:
    chars = charset(config)
    passwords = []
    for _ in range(config.count):
        pw = "".join(secrets.choice(chars) for _ in range(config.length))
        if config.append_symbol:
            pw += secrets.choice(SYMBOLS)
        passwords.append(pw)
    return passwords


def _pwgen_impl(config: PwgenConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: pwgen / MCP: pwgen"""
    start_ms = time.time() * 1000
    passwords = generate(config)
    width = config.length + (2 if config.append_symbol else 1)
    for start in range(0, len(passwords), PER_LINE):
        row = passwords[start : start + PER_LINE]
        print("".join(f"{pw:<{width}}" for pw in row).rstrip(), file=out)
    latency_ms = round(time.time() * 1000 - start_ms, 2)
    return 0, {"count": len(passwords), "latency_ms": latency_ms, "status": "success"}


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
        status, metrics = _pwgen_impl(config, sys.stdout, sys.stderr)
        # never log the passwords themselves
        _log("INFO", "pwgen", f"{metrics['count']} x {config.length}", metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}")
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

    mcp = FastMCP("pwgen")

    @mcp.tool()
    def pwgen(length: int = DEFAULT_LENGTH, count: int = 1, digits: bool = True, symbols: bool = False) -> str:
        """Generate random passwords, one per line.

        Args:
            length: Characters per password
            count: Number of passwords
            digits: Include digits
            symbols: Include symbols
        """
        config = PwgenConfig(length=max(1, length), count=max(1, count), digits=digits, symbols=symbols)
        return "\n".join(generate(config)) + "\n"

    print("pwgen MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
