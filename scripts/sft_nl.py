#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""nl — number lines of a file.

Usage:
    sft_nl.py [-b a|t] [-n ln|rn] [-w WIDTH] [FILE]
    sft_nl.py mcp-stdio

Examples:
    sft_nl.py notes.txt
    sft_nl.py -b t -w 4 notes.txt    # skip blank lines, 4-wide numbers
    sft_nl.py -n ln < notes.txt      # left-justified numbers
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
EXPOSED = ["nl"]  # CLI + MCP

PROG = "nl"
VERSION = "1.0.0"


def _choice(*allowed: str):
    def convert(raw: str) -> str:
        if raw not in allowed:
            raise ValueError(raw)
        return raw

    return convert


def _width(raw: str) -> int:
    value = int(raw.strip())
    if not 1 <= value <= 20:
        raise ValueError(raw)
    return value


LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version"}
VALUE_FLAGS = {
    "b": ("body", _choice("a", "t")),
    "n": ("number_format", _choice("ln", "rn")),
    "w": ("width", _width),
}

HELP = f"""{PROG} - number lines of a file

Usage: {PROG} [OPTION]... [FILE]

Options:
  -b STYLE       a: number all lines (default), t: number non-empty lines only
  -n FORMAT      ln: left-justified, rn: right-justified (default)
  -w WIDTH       width of the number column, 1..20 (default 6)
  -h, --help     show this help and exit
  -v, --version  show version information and exit

With no FILE, or when FILE is '-', standard input is read.

Examples:
  {PROG} file.txt              # number all lines
  {PROG} -b t -w 4 file.txt    # non-empty lines, width 4
  {PROG} -n ln file.txt        # left-justified numbers"""


@dataclass(frozen=True)
class NlConfig:
    help: bool = False
    version: bool = False
    body: str = "a"
    number_format: str = "rn"
    width: int = 6
    file: str = "-"


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[NlConfig | None, str]:
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
    if len(operands) > 1 and not (fields.get("help") or fields.get("version")):
        return None, f"extra operand '{operands[1]}'"
    if operands:
        fields["file"] = operands[0]
    return NlConfig(**fields), ""


def number_lines(lines, config: NlConfig):
    """Yield output lines; with body 't' blank lines pass through unnumbered."""
    n = 1
    align = "<" if config.number_format == "ln" else ">"
    for line in lines:
        text = line.rstrip("\n")
        if config.body == "t" and not text.strip():
            yield text
            continue
        yield f"{n:{align}{config.width}}  {text}"
        n += 1


def _nl_impl(config: NlConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: nl / MCP: nl"""
    start_ms = time.time() * 1000
    count = 0
    try:
        if config.file == "-":
            for line in number_lines(sys.stdin, config):
                print(line, file=out)
                count += 1
        else:
            with open(config.file, encoding="utf-8", errors="replace") as f:
                for line in number_lines(f, config):
                    print(line, file=out)
                    count += 1
    except OSError as e:
        print(f"{PROG}: {config.file}: {e.strerror or e}", file=err)
        return 1, {"lines": count, "latency_ms": 0, "status": "error"}

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    return 0, {"lines": count, "latency_ms": latency_ms, "status": "success"}


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
        status, metrics = _nl_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "nl", config.file, metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}")
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

    mcp = FastMCP("nl")

    @mcp.tool()
    def nl(file: str, body: str = "a", number_format: str = "rn", width: int = 6) -> str:
        """Number the lines of a file.

        Args:
            file: Path of the file to number
            body: 'a' numbers every line, 't' skips blank lines
            number_format: 'rn' right-justified or 'ln' left-justified
            width: Number column width, 1..20
        """
        config = NlConfig(body=body, number_format=number_format, width=width, file=file)
        out, err = io.StringIO(), io.StringIO()
        status, _ = _nl_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("nl MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
