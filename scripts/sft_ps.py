#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp", "psutil"]
# ///
"""ps — report a snapshot of the current processes.

Selection: -a shows every process, a USER operand shows that user's
processes, otherwise only the current user's. Format: -g prints the job
columns, -a alone prints the short columns, anything else prints the
user-oriented columns.

Usage:
    sft_ps.py [-a] [-u] [-g] [USER]
    sft_ps.py mcp-stdio

Examples:
    sft_ps.py                # my processes, user format
    sft_ps.py -a             # everything, PID TTY TIME CMD
    sft_ps.py -u root
"""

import getpass
import io
import os
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

import psutil

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
EXPOSED = ["ps"]  # CLI + MCP

PROG = "ps"
VERSION = "1.0.0"

ATTRS = [
    "pid",
    "name",
    "username",
    "terminal",
    "status",
    "cpu_times",
    "memory_percent",
    "memory_info",
    "create_time",
    "cmdline",
]

STATUS_CODES = {
    psutil.STATUS_RUNNING: "R",
    psutil.STATUS_SLEEPING: "S",
    psutil.STATUS_DISK_SLEEP: "D",
    psutil.STATUS_STOPPED: "T",
    psutil.STATUS_TRACING_STOP: "t",
    psutil.STATUS_ZOMBIE: "Z",
    psutil.STATUS_DEAD: "X",
    psutil.STATUS_IDLE: "I",
}

LONG_FLAGS = {"--help": "help", "--version": "version"}
SHORT_FLAGS = {"h": "help", "v": "version", "a": "all", "u": "user_format", "g": "job_format"}

HELP = f"""{PROG} - report a snapshot of current processes

Usage: {PROG} [OPTION]... [USER]

Options:
  -a             show processes of all users (PID TTY TIME CMD)
  -u             user-oriented format
  -g             job format (PID TTY STAT TIME COMMAND)
  -h, --help     show this help and exit
  -v, --version  show version information and exit

Without -a, only processes of USER (default: the current user) are listed.

Examples:
  {PROG}            # my processes
  {PROG} -a         # all processes
  {PROG} -au        # all processes, user format
  {PROG} root       # processes owned by root"""


@dataclass(frozen=True)
class PsConfig:
    help: bool = False
    version: bool = False
    all: bool = False
    user_format: bool = False
    job_format: bool = False
    user: str | None = None


@dataclass(frozen=True)
class ProcRow:
    pid: int
    user: str
    tty: str
    stat: str
    cpu: float
    mem: float
    vsz: int
    rss: int
    start: str
    time: str
    command: str


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\nDeveloped as a study project\nImplementation language: Python"


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _parse_args(argv: list[str]) -> tuple[PsConfig | None, str]:
    fields: dict[str, Any] = {}
    operands: list[str] = []
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
            operands.append(arg)
        if fields.get("help") or fields.get("version"):
            return PsConfig(**fields), ""
    if len(operands) > 1:
        return None, f"extra operand '{operands[1]}'"
    return PsConfig(user=operands[0] if operands else None, **fields), ""


def _cpu_time(times) -> str:
    if times is None:
        return "0:00"
    seconds = int(times.user + times.system)
    return f"{seconds // 60}:{seconds % 60:02d}"


def _cpu_share(times, created) -> float:
    """CPU time over lifetime, in percent, as ps reports it."""
    if times is None or not created:
        return 0.0
    elapsed = time.time() - created
    if elapsed <= 0:
        return 0.0
    return round((times.user + times.system) / elapsed * 100, 1)


def _row(info: dict) -> ProcRow:
    mem_info = info.get("memory_info")
    created = info.get("create_time")
    tty = info.get("terminal") or "?"
    command = " ".join(info.get("cmdline") or []) or f"[{info.get('name') or '?'}]"
    return ProcRow(
        pid=info["pid"],
        user=info.get("username") or "?",
        tty=tty.removeprefix("/dev/"),
        stat=STATUS_CODES.get(info.get("status"), "?"),
        cpu=_cpu_share(info.get("cpu_times"), created),
        mem=info.get("memory_percent") or 0.0,
        vsz=(mem_info.vms // 1024) if mem_info else 0,
        rss=(mem_info.rss // 1024) if mem_info else 0,
        start=datetime.fromtimestamp(created).strftime("%H:%M") if created else "?",
        time=_cpu_time(info.get("cpu_times")),
        command=command,
    )


def snapshot(config: PsConfig) -> list[ProcRow]:
    """Selected processes ordered by PID."""
    wanted = None if config.all else (config.user or getpass.getuser())
    rows = []
    for proc in psutil.process_iter(ATTRS, ad_value=None):
        info = proc.info
        if wanted is not None and info.get("username") != wanted:
            continue
        rows.append(_row(info))
    rows.sort(key=lambda r: r.pid)
    return rows


def render(rows: list[ProcRow], config: PsConfig) -> list[str]:
    if config.job_format:
        lines = [f"{'PID':>7} {'TTY':<8} {'STAT':<4} {'TIME':>7} COMMAND"]
        lines += [f"{r.pid:>7} {r.tty:<8} {r.stat:<4} {r.time:>7} {r.command}" for r in rows]
    elif config.all and not config.user_format:
        lines = [f"{'PID':>7} {'TTY':<8} {'TIME':>7} CMD"]
        lines += [f"{r.pid:>7} {r.tty:<8} {r.time:>7} {r.command}" for r in rows]
    else:
        lines = [
            f"{'USER':<10} {'PID':>7} {'%CPU':>5} {'%MEM':>5} {'VSZ':>9} {'RSS':>8} "
            f"{'TTY':<8} {'STAT':<4} {'START':<5} {'TIME':>7} COMMAND"
        ]
        lines += [
            f"{r.user[:10]:<10} {r.pid:>7} {r.cpu:>5.1f} {r.mem:>5.1f} {r.vsz:>9} {r.rss:>8} "
            f"{r.tty:<8} {r.stat:<4} {r.start:<5} {r.time:>7} {r.command}"
            for r in rows
        ]
    return lines


def _ps_impl(config: PsConfig, out: TextIO, err: TextIO) -> tuple[int, dict]:
    """CLI: ps / MCP: ps"""
    start_ms = time.time() * 1000
    rows = snapshot(config)
    for line in render(rows, config):
        print(line, file=out)
    latency_ms = round(time.time() * 1000 - start_ms, 2)
    return 0, {"processes": len(rows), "latency_ms": latency_ms, "status": "success"}


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
        status, metrics = _ps_impl(config, sys.stdout, sys.stderr)
        _log(
            "INFO",
            "ps",
            f"{metrics['processes']} process(es)",
            metrics=f"latency_ms={metrics['latency_ms']} status={metrics['status']}",
        )
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

    mcp = FastMCP("ps")

    @mcp.tool()
    def ps(all: bool = False, user: str | None = None, job_format: bool = False) -> str:
        """Process listing.

        Args:
            all: Every process instead of one user's
            user: Only this user's processes (default: current user)
            job_format: PID TTY STAT TIME COMMAND columns
        """
        config = PsConfig(all=all, user=user, job_format=job_format, user_format=not job_format)
        out = io.StringIO()
        _ps_impl(config, out, io.StringIO())
        return out.getvalue()

    print("ps MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
