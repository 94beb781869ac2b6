#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""hexdump — display file contents in hexadecimal.

Default output prints a 7-digit offset followed by eight little-endian
16-bit words per line. Canonical output (-C) prints an 8-digit offset,
sixteen hex bytes in two groups of eight and the printable ASCII column.
Offsets always count from the start of the file, so they include -s SKIP.
The last line of every dump is the offset one past the final byte shown.

Usage:
    sft_hexdump.py [-C] [-n LEN] [-s SKIP] FILE...
    sft_hexdump.py mcp-stdio

Examples:
    sft_hexdump.py -C /bin/true | head
    sft_hexdump.py -s 512 -n 64 disk.img
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
EXPOSED = ["hexdump"]  # CLI + MCP

PROG = "hexdump"
VERSION = "1.0.0"
BYTES_PER_LINE = 16


def _size(raw: str) -> int:
    value = int(raw, 0)
    if value < 0:
        raise ValueError(raw)
    return value


LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version", "C": "canonical"}
VALUE_FLAGS = {"n": ("length", _size), "s": ("skip", _size)}

HELP = f"""{PROG} - display file contents in hexadecimal

Usage: {PROG} [OPTION]... FILE...

Options:
  -C             canonical hex+ASCII display
  -n LEN         interpret only LEN bytes of input
  -s SKIP        skip SKIP bytes from the beginning of the input
  -h, --help     show this help and exit
  -v, --version  show version information and exit

LEN and SKIP accept decimal, 0x hex or 0o octal values.

Examples:
  {PROG} file.bin              # 16-bit words
  {PROG} -C file.bin           # canonical hex+ASCII
  {PROG} -n 32 -s 16 file.bin  # 32 bytes starting at offset 16"""


@dataclass(frozen=True)
class HexdumpConfig:
    help: bool = False
    version: bool = False
    canonical: bool = False
    length: int | None = None
    skip: int = 0
    files: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[HexdumpConfig | None, str]:
    """Parse an explicit argument slice. Returns (config, error)."""
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
                    field, convert = VALUE_FLAGS[ch]
                    raw = argv[i]
                    i += 1
                    try:
                        fields[field] = convert(raw)
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
    return HexdumpConfig(files=tuple(operands), **fields), ""


def _read_span(stream, skip: int, length: int | None) -> bytes:
    if skip:
        if stream.seekable():
            stream.seek(skip)
        else:
            stream.read(skip)
    return stream.read() if length is None else stream.read(length)


def _canonical_line(offset: int, chunk: bytes) -> str:
    left = " ".join(f"{b:02x}" for b in chunk[:8])
    right = " ".join(f"{b:02x}" for b in chunk[8:])
    text = "".join(chr(b) if 32 <= b <= 126 else "." for b in chunk)
    return f"{offset:08x}  {left:<23}  {right:<23}  |{text}|"


def _words_line(offset: int, chunk: bytes) -> str:
    words = []
    for i in range(0, len(chunk), 2):
        pair = chunk[i : i + 2]
        words.append(f"{int.from_bytes(pair, 'little'):04x}")
    return f"{offset:07x} " + " ".join(words)


def dump(data: bytes, start: int, canonical: bool) -> list[str]:
    """Format data as hexdump lines, with offsets starting at start."""
    render = _canonical_line if canonical else _words_line
    lines = [
        render(start + pos, data[pos : pos + BYTES_PER_LINE])
        for pos in range(0, len(data), BYTES_PER_LINE)
    ]
    end = start + len(data)
    lines.append(f"{end:08x}" if canonical else f"{end:07x}")
    return lines


def _hexdump_impl(config: HexdumpConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """Dump each file operand independently.

    CLI: hexdump
    MCP: hexdump
    """
    start_ms = time.time() * 1000
    assert config.files, "missing file operand"

    failed = 0
    total = 0
    for name in config.files:
        try:
            if name == "-":
                data = _read_span(sys.stdin.buffer, config.skip, config.length)
            else:
                with open(name, "rb") as f:
                    data = _read_span(f, config.skip, config.length)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            _log("WARN", "hexdump_operand", name, detail=str(e))
            continue
        if len(config.files) > 1:
            print(f"{name}:", file=out)
        for line in dump(data, config.skip, config.canonical):
            print(line, file=out)
        total += len(data)

    latency_ms = round(time.time() * 1000 - start_ms, 2)
    metrics = {
        "files": len(config.files),
        "failed": failed,
        "bytes": total,
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
        status, metrics = _hexdump_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "hexdump",
            f"{metrics['bytes']} bytes",
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

    mcp = FastMCP("hexdump")

    @mcp.tool()
    def hexdump(files: list[str], canonical: bool = True, length: int | None = None, skip: int = 0) -> str:
        """Hex dump of file contents.

        Args:
            files: Paths of the files to dump
            canonical: Canonical hex+ASCII layout (default True)
            length: Dump at most this many bytes
            skip: Start this many bytes into the file
        """
        config = HexdumpConfig(canonical=canonical, length=length, skip=skip, files=tuple(files))
        out, err = io.StringIO(), io.StringIO()
        status, _ = _hexdump_impl(config, out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("hexdump MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
