import json
from pathlib import Path

import pytest
import sft_check

SCRIPTS = Path(__file__).resolve().parent.parent / "scripts"
UTILITIES = sorted(str(p) for p in SCRIPTS.glob("sft_*.py") if p.name != "sft_check.py")

MINIMAL = '''#!/usr/bin/env -S uv run --script
# /// script
# requires-python = ">=3.11"
# dependencies = []
# ///
"""demo"""

import sys

print("no structure at all")
'''


def test_every_utility_is_compliant(capsys) -> None:
    assert sft_check.main(["check", *UTILITIES]) == 0
    out = capsys.readouterr().out
    assert "FAIL" not in out
    assert f"Summary: {len(UTILITIES)} compliant, 0 non-compliant, {len(UTILITIES)} total" in out


@pytest.mark.parametrize("name", ["sft_cat.py", "sft_cd.py", "sft_tar.py"])
def test_single_file_result(name) -> None:
    result, metrics = sft_check._check_impl(str(SCRIPTS / name))
    assert metrics["compliant"]
    assert result["status"] == "COMPLIANT"
    names = {c["check"] for c in result["checks"]}
    if name == "sft_cd.py":
        assert "mcp_absent" in names and "mcp_parity" not in names
    else:
        assert "mcp_parity" in names


def test_non_compliant_script(tmp_path, capsys) -> None:
    script = tmp_path / "sft_demo.py"
    script.write_text(MINIMAL)
    assert sft_check.main(["check", str(script)]) == 1
    out = capsys.readouterr().out
    assert out.startswith("[-] sft_demo.py: NON-COMPLIANT")
    assert "FAIL: exposed_list" in out
    assert "FAIL: parse_args" in out
    assert "Summary" not in out


def test_bare_except_and_tool_parity(tmp_path) -> None:
    source = (SCRIPTS / "sft_pwd.py").read_text()
    source = source.replace('EXPOSED = ["pwd"]', 'EXPOSED = ["pwd", "ghost"]')
    source = source.replace("    except OSError:\n        return None", "    except:\n        return None", 1)
    script = tmp_path / "sft_pwd.py"
    script.write_text(source)
    result, metrics = sft_check._check_impl(str(script))
    failed = {c["check"] for c in result["checks"] if c["status"] == "FAIL"}
    assert failed == {"bare_except", "mcp_parity"}
    assert not metrics["compliant"]


def test_missing_file_is_reported(tmp_path, capsys) -> None:
    assert sft_check.main(["check", str(tmp_path / "nope.py")]) == 1
    assert "ERROR" in capsys.readouterr().out


def test_files_from_piped_stdin(piped_stdin, capsys) -> None:
    piped_stdin(f"{UTILITIES[0]}\n".encode())
    assert sft_check.main(["check"]) == 0
    assert "COMPLIANT" in capsys.readouterr().out


def test_no_files_on_terminal(capsys) -> None:
    assert sft_check.main(["check"]) == 1
    assert "no files specified" in capsys.readouterr().err


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        sft_check.main(["--version"])
    assert exc.value.code == 0
    assert "Developed as a study project" in capsys.readouterr().out


def test_result_is_json_serialisable() -> None:
    result, _ = sft_check._check_impl(UTILITIES[0])
    assert json.loads(json.dumps(result))["filename"] == Path(UTILITIES[0]).name
