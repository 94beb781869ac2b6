#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""cat — concatenate files to standard output.

Usage:
    sft_cat.py [-A] [-b] [-e] [-n] FILE...
    sft_cat.py mcp-stdio

Examples:
    sft_cat.py notes.txt
    sft_cat.py -n a.txt b.txt       # number every line, numbering continues across files
    sft_cat.py -A script.sh         # show tabs, control bytes and line ends
    echo hi | sft_cat.py -e         # piped input when no FILE is given
"""

import io
import os
import sys
import time
from dataclasses import dataclass, replace
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
EXPOSED = ["cat"]  # CLI + MCP

PROG = "cat"
VERSION = "1.0.0"

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {
    "h": "help",
    "v": "version",
    "A": "show_all",
    "b": "number_nonblank",
    "e": "show_ends",
    "n": "number",
}

HELP = f"""{PROG} - concatenate files and print them on standard output

Usage: {PROG} [OPTION]... FILE...

Options:
  -A             show everything: tabs as ^I, control bytes as ^X / M-X, '$' at line ends
  -b             number non-blank output lines (overrides -n)
  -e             print '$' at the end of each line
  -n             number all output lines
  -h, --help     show this help and exit
  -v, --version  show version information and exit

With no FILE and piped input, standard input is read; '-' also means stdin.

Examples:
  {PROG} file.txt             # print a file
  {PROG} -n file.txt          # number all lines
  {PROG} -b file.txt          # number non-blank lines
  {PROG} -e file.txt          # mark line ends
  {PROG} -A file.txt          # show all control characters
  {PROG} a.txt b.txt          # concatenate several files"""


@dataclass(frozen=True)
class CatConfig:
    help: bool = False
    version: bool = False
    show_all: bool = False
    number_nonblank: bool = False
    show_ends: bool = False
    number: bool = False
    files: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[CatConfig | None, str]:
    """Parse an explicit argument slice into a CatConfig.

    Returns (config, error); config is None when error is set.
    """
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
                if fields.get("help") or fields.get("version"):
                    break
        else:
            operands.append(arg)
        if fields.get("help") or fields.get("version"):
            break
    return CatConfig(files=tuple(operands), **fields), ""


def _visible(data: bytes) -> bytes:
    """Render control and high bytes in ^X / M-X notation (tabs included)."""
    parts = []
    for b in data:
        if b >= 128:
            parts.append(b"M-")
            b -= 128
        if b < 32:
            parts.append(b"^" + bytes([b + 64]))
        elif b == 127:
            parts.append(b"^?")
        else:
            parts.append(bytes([b]))
    return b"".join(parts)


def _write_bytes(out: TextIO, data: bytes) -> None:
    buffer = getattr(out, "buffer", None)
    if buffer is None:
        out.write(data.decode("utf-8", errors="replace"))
        return
    out.flush()
    buffer.write(data)
    buffer.flush()


def _cat_stream(stream, config: CatConfig, out: TextIO, line_no: int) -> int:
    """Copy one binary stream to out, applying options. Returns the next line number."""
    plain = not (config.show_all or config.number_nonblank or config.show_ends or config.number)
    if plain:
        for chunk in iter(lambda: stream.read(65536), b""):
            _write_bytes(out, chunk)
        return line_no

    for raw in stream:
        has_newline = raw.endswith(b"\n")
        body = raw[:-1] if has_newline else raw
        prefix = b""
        if config.number_nonblank:
            if body:
                prefix = f"{line_no:6d}\t".encode()
                line_no += 1
        elif config.number:
            prefix = f"{line_no:6d}\t".encode()
            line_no += 1
        if config.show_all:
            body = _visible(body)
        end = b""
        if has_newline:
            end = b"$\n" if (config.show_all or config.show_ends) else b"\n"
        _write_bytes(out, prefix + body + end)
    return line_no


def _cat_impl(config: CatConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Concatenate every operand in order; a failing operand does not stop the rest.

    CLI: cat
    MCP: cat
    """
    start_ms = time.time() * 1000
    assert config.files, "missing file operand"

    failed = 0
    line_no = 1
    for name in config.files:
        try:
            if name == "-":
                line_no = _cat_stream(sys.stdin.buffer, config, out, line_no)
            else:
                with open(name, "rb") as f:
                    line_no = _cat_stream(f, config, out, line_no)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            _log("WARN", "cat_operand", name, detail=str(e))

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "files": len(config.files),
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
        if not config.files and not sys.stdin.isatty():
            config = replace(config, files=("-",))
        status, metrics = _cat_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "cat",
            f"{metrics['files']} file(s)",
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

    mcp = FastMCP("cat")

    @mcp.tool()
    def cat(
        files: list[str],
        number: bool = False,
        number_nonblank: bool = False,
        show_ends: bool = False,
        show_all: bool = False,
    ) -> str:
        """Concatenate files and return their content.

        Args:
            files: Paths of the files to print, in order
            number: Number all output lines
            number_nonblank: Number only non-blank lines (overrides number)
            show_ends: Mark line ends with '$'
            show_all: Show tabs and control bytes in caret notation
        """
        config = CatConfig(
            number=number,
            number_nonblank=number_nonblank,
            show_ends=show_ends,
            show_all=show_all,
            files=tuple(files),
        )
        out, err = io.StringIO(), io.StringIO()
        status, _ = _cat_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("cat MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
