"""Behaviour every utility shares: help, version banner and usage errors."""

import importlib

import pytest

UTILITIES = [
    "arch", "bang_last", "bang_nth", "cat", "cd", "clear", "cp", "date", "df", "du", "exit",
    "file", "find", "free", "head", "hexdump", "history", "kill", "ls", "mkdir", "nl", "ps",
    "pwd", "pwgen", "rm", "rmdir", "tail", "tar", "touch", "uname", "unzip", "wc", "zip",
]
VERBOSE_V = {"arch", "cd", "cp", "mkdir", "rm", "rmdir"}
FORWARDING = {"bang_last", "bang_nth"}
BANNER = "version 1.0.0\nDeveloped as a study project\nImplementation language: Python\n"


def _module(name: str):
    return importlib.import_module(f"sft_{name}")


@pytest.mark.parametrize("name", UTILITIES)
@pytest.mark.parametrize("flag", ["-h", "--help"])
def test_help(name, flag, capsys) -> None:
    mod = _module(name)
    assert mod.main([flag]) == 0
    out = capsys.readouterr().out
    assert out.startswith(f"{mod.PROG} - ")
    assert "Usage:" in out


@pytest.mark.parametrize("name", UTILITIES)
def test_version_banner(name, capsys) -> None:
    mod = _module(name)
    flag = "--version" if name in VERBOSE_V else "-v"
    assert mod.main([flag]) == 0
    assert capsys.readouterr().out == f"{mod.PROG} {BANNER}"


@pytest.mark.parametrize("name", sorted(set(UTILITIES) - FORWARDING))
def test_unknown_long_option(name, capsys) -> None:
    mod = _module(name)
    assert mod.main(["--bogus"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == (
        f"{mod.PROG}: unrecognized option '--bogus'\n"
        f"Try '{mod.PROG} -h' or '{mod.PROG} --help' for more information.\n"
    )


@pytest.mark.parametrize("name", sorted(set(UTILITIES) - FORWARDING))
def test_help_wins_over_later_garbage(name, capsys) -> None:
    mod = _module(name)
    assert mod.main(["-h", "--bogus"]) == 0
    assert capsys.readouterr().err == ""


@pytest.mark.parametrize("name", UTILITIES)
def test_exposed_matches_shape(name) -> None:
    mod = _module(name)
    shell_only = {"bang_last", "bang_nth", "cd", "clear", "exit"}
    if name in shell_only:
        assert mod.EXPOSED == []
    else:
        assert mod.EXPOSED
        assert callable(mod._run_mcp)
