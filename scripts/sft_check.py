#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = ["fastmcp"]
# ///
"""Layout checker for the coreutils scripts.

Every utility is a single self-contained script with the same skeleton:
PEP 723 header, module docstring, five banner sections in a fixed order,
table-driven `_parse_args(argv)`, `main(argv)` entry point, TSV logging.
This tool verifies a script still has that shape.

Usage:
    sft_check.py check scripts/sft_cat.py
    sft_check.py check scripts/sft_*.py
    ls scripts/sft_*.py | sft_check.py check
    sft_check.py mcp-stdio
"""

import os
import re
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

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
EXPOSED = ["check"]  # CLI + MCP

PROG = "check"
VERSION = "1.0.0"

# Section headers in mandatory order; the last one is optional for
# utilities that act on the calling terminal (EXPOSED = [])
REQUIRED_SECTIONS = [
    "LOGGING",
    "CONFIGURATION",
    "CORE FUNCTIONS",
    "CLI INTERFACE",
    "FASTMCP SERVER",
]
OPTIONAL_SECTION = "FASTMCP SERVER"

BANNER_LINES = ("Developed as a study project", "Implementation language: Python")


def _version_banner() -> str:
    return f"{PROG} version {VERSION}\n" + "\n".join(BANNER_LINES)


# =============================================================================
# CORE FUNCTIONS
# =============================================================================
def _section_positions(lines: list[str]) -> dict[str, int]:
    """Line index of each banner label framed by a ==== line."""
    positions: dict[str, int] = {}
    for i, line in enumerate(lines):
        label = line.lstrip("# ").strip()
        if label not in REQUIRED_SECTIONS:
            continue
        above = lines[i - 1] if i > 0 else ""
        below = lines[i + 1] if i + 1 < len(lines) else ""
        if "====" in above or "====" in below:
            positions[label] = i
    return positions


def _exposed_names(content: str) -> list[str] | None:
    m = re.search(r"^EXPOSED\s*=\s*\[([^\]]*)\]", content, re.MULTILINE)
    if not m:
        return None
    return [s for s in (t.strip().strip('"').strip("'") for t in m.group(1).split(",")) if s]


def _mcp_tools(content: str) -> dict[str, str]:
    """Map of MCP tool name -> source snippet following its `def`."""
    tools = {}
    for m in re.finditer(r"@mcp\.tool\([^)]*\)", content):
        func = re.search(r"def\s+(\w+)\s*\(", content[m.end():m.end() + 500])
        if func:
            start = m.end() + func.start()
            tools[func.group(1)] = content[start:start + 3000]
    return tools


def _check_impl(filepath: str) -> tuple[dict, dict]:
    """Check a single utility script.

    CLI: check
    MCP: check

    Returns (result_dict, metrics_dict).
    """
    start_ms = time.time() * 1000
    path = Path(filepath)

    assert path.exists(), f"{filepath} not found"
    assert path.suffix == ".py", f"{filepath} must be a .py file"

    content = path.read_text()
    lines = content.splitlines()

    checks = []

    def _record(name: str, ok: bool, detail: str = ""):
        checks.append({"check": name, "status": "PASS" if ok else "FAIL", "detail": "" if ok else detail})

    # ---- 1. PEP 723 header ----
    _record("shebang", bool(lines) and lines[0].startswith("#!/usr/bin/env -S uv run"),
            "Missing #!/usr/bin/env -S uv run --script")
    _record("pep723_block", "# /// script" in content, "Missing # /// script metadata block")
    _record("requires_python", bool(re.search(r'# requires-python\s*=\s*"', content)),
            "Missing requires-python in PEP 723 block")
    _record("dependencies", bool(re.search(r"# dependencies\s*=\s*\[", content)),
            "Missing dependencies in PEP 723 block")

    # ---- 2. Module docstring ----
    _record("module_docstring", bool(re.search(r'^"""', content, re.MULTILINE)), "Missing module-level docstring")

    # ---- 3. EXPOSED list ----
    exposed = _exposed_names(content)
    _record("exposed_list", exposed is not None, "Missing EXPOSED list in CONFIGURATION section")
    exposed = exposed or []

    # ---- 4. Sections present and ordered ----
    positions = _section_positions(lines)
    required = [s for s in REQUIRED_SECTIONS if s != OPTIONAL_SECTION or exposed]
    missing = [s for s in required if s not in positions]
    _record("sections_present", not missing, f"Missing sections: {missing}")
    present = [positions[s] for s in REQUIRED_SECTIONS if s in positions]
    _record("sections_ordered", present == sorted(present),
            f"Sections out of order: {sorted(positions, key=positions.get)}")
    has_mcp = OPTIONAL_SECTION in positions

    # ---- 5. Logging ----
    tsv_issues = [
        label
        for label, needle in (
            ("missing _log()", "def _log("),
            ("missing _HEADER", "_HEADER"),
            ("missing SFC_LOG_LEVEL", "SFC_LOG_LEVEL"),
            ("missing SFC_LOG_DIR", "SFC_LOG_DIR"),
            ("log file should be _log.tsv", "_log.tsv"),
        )
        if needle not in content
    ]
    _record("tsv_logging", not tsv_issues, f"TSV logging issues: {tsv_issues}")
    log_calls = len(re.findall(r"(?<!def )_log\(", content))
    _record("log_usage", log_calls >= 1, "_log() defined but never called")

    # ---- 6. Argument parser ----
    _record("parse_args", bool(re.search(r"def _parse_args\(argv\b", content)),
            "Missing _parse_args(argv) taking an explicit argument slice")
    _record("help_flags", '"--help": "help"' in content and '"h": "help"' in content,
            "-h/--help missing from SHORT_FLAGS/LONG_FLAGS")
    _record("version_banner", all(line in content for line in BANNER_LINES) and '"--version"' in content,
            "Missing --version flag or version banner text")

    # ---- 7. Entry point ----
    _record("main_argv", bool(re.search(r"def main\(argv\b", content)), "Missing main(argv) entry point")
    _record("main_guard", "sys.exit(main())" in content, 'Missing if __name__ == "__main__": sys.exit(main())')

    # ---- 8. Usage errors point at -h ----
    cli_start = positions.get("CLI INTERFACE", 0)
    cli_end = positions.get(OPTIONAL_SECTION, len(lines))
    cli_section = "\n".join(lines[cli_start:cli_end])
    _record("usage_hint", "for more information." in cli_section and '_log("ERROR"' in cli_section,
            "CLI section must log usage errors and print the -h hint")

    # ---- 9. Bare except ----
    bare = [i for i, line in enumerate(lines, 1) if re.match(r"except\s*:", line.strip())]
    _record("bare_except", not bare, f"Bare except: at line(s) {bare}; use except Exception: or narrower")

    # ---- 10. MCP server ----
    if has_mcp:
        _record("mcp_stdio", '"mcp-stdio"' in content, "Missing mcp-stdio dispatch")
        module_level = [ln for ln in lines if re.match(r"(from|import) fastmcp", ln)]
        _record("fastmcp_lazy", not module_level, "FastMCP imported at module level; import inside _run_mcp()")
        tools = _mcp_tools(content)
        unmatched = sorted(set(exposed) ^ set(tools))
        _record("mcp_parity", not unmatched, f"EXPOSED and @mcp.tool() names differ: {unmatched}")
        bad_returns = [name for name, body in tools.items() if not re.match(r"def\s+\w+\s*\([^)]*\)\s*->\s*str", body)]
        _record("mcp_return_type", not bad_returns, f"MCP tools must return str: {bad_returns}")
        no_args = [
            name for name, body in tools.items()
            if (doc := re.search(r'"""(.*?)"""', body, re.DOTALL)) is None or "Args:" not in doc.group(1)
        ]
        _record("mcp_docstring_args", not no_args, f"MCP tools missing Args: in docstring: {no_args}")
    else:
        _record("mcp_absent", not exposed, "EXPOSED names tools but there is no FASTMCP SERVER section")

    passed = sum(c["status"] == "PASS" for c in checks)
    failed = len(checks) - passed
    compliant = failed == 0
    latency_ms = round(time.time() * 1000 - start_ms, 2)
    status_label = "COMPLIANT" if compliant else "NON-COMPLIANT"

    _log(
        "INFO",
        "check_complete",
        f"{path.name}: {status_label}",
        detail=f"passed={passed} failed={failed}",
        metrics=f"latency_ms={latency_ms} status=success",
    )

    result = {
        "file": str(path),
        "filename": path.name,
        "status": status_label,
        "passed": passed,
        "failed": failed,
        "total": len(checks),
        "checks": checks,
    }
    metrics = {"file": str(path), "passed": passed, "failed": failed, "compliant": compliant, "latency_ms": latency_ms, "status": "success"}
    return result, metrics


# =============================================================================
# CLI INTERFACE
# =============================================================================
def main(argv: list[str] | None = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(prog=PROG, description="Layout checker for the coreutils scripts")
    parser.add_argument("-v", "--version", action="version", version=_version_banner())
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("mcp-stdio", help="Run as MCP server")

    p_check = subparsers.add_parser("check", help="Check utility script(s)")
    p_check.add_argument("files", nargs="*", help="Script file(s) to check")

    args = parser.parse_args(argv)

    try:
        if args.command == "mcp-stdio":
            _run_mcp()
            return 0
        if args.command != "check":
            parser.print_help()
            return 0

        files = args.files
        if not files and not sys.stdin.isatty():
            files = [line.strip() for line in sys.stdin if line.strip()]
        assert files, "no files specified (positional argument or stdin)"

        non_compliant = 0
        for filepath in files:
            try:
                result, metrics = _check_impl(filepath)
            except (AssertionError, OSError) as e:
                _log("ERROR", "check", str(e), detail=f"file={filepath}")
                print(f"[-] {filepath}: ERROR: {e}")
                non_compliant += 1
                continue
            if not metrics["compliant"]:
                non_compliant += 1
            icon = "+" if metrics["compliant"] else "-"
            print(f"[{icon}] {result['filename']}: {result['status']} ({result['passed']}/{result['total']} checks passed)")
            for check in result["checks"]:
                if check["status"] == "FAIL":
                    print(f"    FAIL: {check['check']}: {check['detail']}")

        if len(files) > 1:
            print(f"\nSummary: {len(files) - non_compliant} compliant, {non_compliant} non-compliant, {len(files)} total")
        return 1 if non_compliant else 0
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
    import json

    mcp = FastMCP("check")

    @mcp.tool()
    def check(filepath: str) -> str:
        """Check a utility script against the shared script layout.

        Returns detailed pass/fail results for each check.

        Args:
            filepath: Path to the Python script to check
        """
        result, metrics = _check_impl(filepath)
        return json.dumps({"result": result, "metrics": metrics}, indent=2)

    print("check MCP server starting...", file=sys.stderr)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    sys.exit(main())
