#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""file — determine file type.

Usage:
    sft_file.py FILE...
    sft_file.py mcp-stdio

Examples:
    sft_file.py photo.jpg            # photo.jpg: JPEG image
    sft_file.py /bin/ls blob         # ELF executable / magic-byte sniffing
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
EXPOSED = ["file"]  # CLI + MCP

PROG = "file"
VERSION = "1.0.0"
SNIFF_BYTES = 512

EXTENSIONS = {
    ".txt": "text file",
    ".md": "Markdown document",
    ".jpg": "JPEG image",
    ".jpeg": "JPEG image",
    ".png": "PNG image",
    ".gif": "GIF image",
    ".go": "Go source",
    ".c": "C source",
    ".h": "C header",
    ".py": "Python script",
    ".pdf": "PDF document",
    ".zip": "Zip archive",
    ".tar": "tar archive",
    ".gz": "gzip compressed data",
    ".sh": "shell script",
    ".html": "HTML document",
    ".htm": "HTML document",
    ".css": "CSS stylesheet",
    ".json": "JSON data",
}

MAGIC = [
    (b"\x89PNG\r\n\x1a\n", "PNG image"),
    (b"\xff\xd8\xff", "JPEG image"),
    (b"GIF87a", "GIF image"),
    (b"GIF89a", "GIF image"),
    (b"%PDF-", "PDF document"),
    (b"PK\x03\x04", "Zip archive"),
    (b"\x1f\x8b", "gzip compressed data"),
    (b"\x7fELF", "ELF executable"),
    (b"#!", "script text executable"),
]

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version"}

HELP = f"""{PROG} - determine file type

Usage: {PROG} FILE...

Options:
  -h, --help     show this help and exit
  -v, --version  show version information and exit

The type comes from the file extension when it is known, otherwise from
the leading bytes of the content.

Examples:
  {PROG} image.png           # PNG image
  {PROG} script.py data.bin  # several files"""


@dataclass(frozen=True)
class FileConfig:
    help: bool = False
    version: bool = False
    files: tuple[str, ...] = ()


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[FileConfig | None, str]:
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
                break
        else:
            operands.append(arg)
        if fields:
            break
    return FileConfig(files=tuple(operands), **fields), ""


def sniff(head: bytes) -> str:
    if not head:
        return "empty"
    for signature, kind in MAGIC:
        if head.startswith(signature):
            return kind
    if b"\x00" in head:
        return "data"
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as e:
        # a multi-byte sequence cut at the sniff boundary is still text
        if e.start < len(head) - 3:
            return "data"
    return "text"


def file_type(path: str) -> str:
    """Extension first, then magic bytes and a text heuristic."""
    if os.path.isdir(path):
        raise IsADirectoryError(21, "Is a directory", path)
    if not os.path.exists(path):
        raise FileNotFoundError(2, "No such file or directory", path)
    kind = EXTENSIONS.get(os.path.splitext(path)[1].lower())
    if kind:
        return kind
    with open(path, "rb") as f:
        return sniff(f.read(SNIFF_BYTES))


def _file_impl(config: FileConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: file / MCP: file"""
    start_ms = time.time() * 1000
    assert config.files, "missing file operand"

    failed = 0
    for name in config.files:
        try:
            kind = file_type(name)
        except OSError as e:
            failed += 1
            print(f"{PROG}: {name}: {e.strerror or e}", file=err)
            continue
        print(f"{name}: {kind}", file=out)

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
        status, metrics = _file_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "file",
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

    mcp = FastMCP("file")

    @mcp.tool()
    def file(files: list[str]) -> str:
        """Identify file types.

        Args:
            files: Paths to classify
        """
        out, err = io.StringIO(), io.StringIO()
        status, _ = _file_impl(FileConfig(files=tuple(files)), out, err)
        return out.getvalue() + (f"[exit {status}]\n{err.getvalue()}" if status else "")

    print("file MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
