#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""date — print or convert dates.

Without options the current local time is printed in RFC 1123 form.
-d and -f accept RFC 3339 timestamps (an explicit offset or Z is required).

Usage:
    sft_date.py [-d DATE] [-f FILE] [-r FILE] [+FORMAT]
    sft_date.py mcp-stdio

Examples:
    sft_date.py                              # Tue, 13 Jan 2026 12:00:00 UTC
    sft_date.py +%Y-%m-%d                    # 2026-01-13
    sft_date.py -d 2026-01-13T12:00:00Z      # Date: Tue, 13 Jan 2026 12:00:00 UTC
    sft_date.py -r notes.txt                 # File time: ...
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
EXPOSED = ["date"]  # CLI + MCP

PROG = "date"
VERSION = "1.0.0"
RFC1123 = "%a, %d %b %Y %H:%M:%S %Z"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version"}
VALUE_FLAGS = {
    "d": ("date", str),
    "f": ("date_file", str),
    "r": ("reference", str),
}

HELP = f"""{PROG} - print or convert dates

Usage: {PROG} [OPTION]... [+FORMAT]

Options:
  -d DATE        display DATE (RFC 3339, e.g. 2026-01-13T12:00:00Z)
  -f FILE        like -d, once for each line of FILE
  -r FILE        display the last modification time of FILE
  -h, --help     show this help and exit
  -v, --version  show version information and exit

FORMAT uses strftime directives (%Y, %m, %d, %H, %M, %S, ...).
Without FORMAT dates are printed in RFC 1123 form.

Examples:
  {PROG}                              # current time
  {PROG} +%H:%M                       # current hour and minute
  {PROG} -d 2026-01-13T12:00:00Z      # convert a date
  {PROG} -r file.txt                  # file modification time
  {PROG} -f dates.txt                 # dates from a file"""


@dataclass(frozen=True)
class DateConfig:
    help: bool = False
    version: bool = False
    date: str | None = None
    date_file: str | None = None
    reference: str | None = None
    format: str = RFC1123


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[DateConfig | None, str]:
    fields: dict[str, Any] = {}
    i = 0
    while i < len(argv):
        arg = argv[i]
        i += 1
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
        elif arg.startswith("+"):
            if "format" in fields:
                return None, f"extra operand '{arg}'"
            fields["format"] = arg[1:]
        else:
            return None, f"invalid date '{arg}'"
        if fields.get("help") or fields.get("version"):
            break
    return DateConfig(**fields), ""


def parse_rfc3339(text: str) -> datetime:
    """Parse an RFC 3339 timestamp; a UTC offset (or Z) is mandatory."""
    parsed = datetime.fromisoformat(text.strip())
    if parsed.tzinfo is None:
        raise ValueError(f"missing UTC offset in '{text}'")
    return parsed


def _convert(text: str, config: DateConfig, out: TextIO, err: TextIO) -> bool:
    try:
        parsed = parse_rfc3339(text)
    except ValueError:
        print(f"{PROG}: invalid date '{text}' (expected RFC 3339, e.g. 2026-01-13T12:00:00Z)", file=err)
        return False
    print(f"Date: {parsed.strftime(config.format)}", file=out)
    return True


def _date_impl(config: DateConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Print now, convert -d / -f dates, or show a file time with -r.

    CLI: date
    MCP: date
    """
    start_ms = time.time() * 1000
    failed = 0
    handled = False

    if config.date is not None:
        handled = True
        failed += not _convert(config.date, config, out, err)

    if config.date_file is not None:
        handled = True
        try:
            with open(config.date_file) as f:
                for line in f:
                    if line.strip():
                        failed += not _convert(line.strip(), config, out, err)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {config.date_file}: {e.strerror or e}", file=err)

    if config.reference is not None:
        handled = True
        try:
            mtime = os.stat(config.reference).st_mtime
        except OSError as e:
            failed += 1
            print(f"{PROG}: {config.reference}: {e.strerror or e}", file=err)
        else:
            stamp = datetime.fromtimestamp(mtime).astimezone()
            print(f"File time: {stamp.strftime(config.format)}", file=out)

    if not handled:
        print(datetime.now().astimezone().strftime(config.format), file=out)

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {"failed": failed, "latency_ms": latency_ms, "status": "error" if failed else "success"}
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
        status, metrics = _date_impl(config, sys.stdout, sys.stderr)
        _log("INFO", "date", "ok" if not status else "failed", metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}")
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

    mcp = FastMCP("date")

    @mcp.tool()
    def date(date: str | None = None, reference: str | None = None, format: str = RFC1123) -> str:
        """Current time, an RFC 3339 date converted, or a file's modification time.

        Args:
            date: RFC 3339 timestamp to convert (e.g. 2026-01-13T12:00:00Z)
            reference: Path whose modification time to show
            format: strftime format (default RFC 1123)
        """
        config = DateConfig(date=date, reference=reference, format=format)
        out, err = io.StringIO(), io.StringIO()
        status, _ = _date_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("date MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
