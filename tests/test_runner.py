from __future__ import annotations

import logging
from textwrap import dedent

import pytest

from treelox.__main__ import main
from treelox.lox import Lox


def test_run_file_success(write_script, capsys) -> None:
    path = write_script('print "hello";')

    assert main([str(path)]) == 0
    assert capsys.readouterr().out == "hello\n"


def test_explicit_run_command(write_script, capsys) -> None:
    path = write_script("var a = 2; print a * a;")

    assert main(["run", str(path)]) == 0
    assert capsys.readouterr().out == "4.0\n"


def test_three_syntax_errors_exit_65(write_script, capsys) -> None:
    path = write_script(
        dedent(
            """\
            print 1 +;
            var 2 = x;
            print (;
            print "never";
            """
        )
    )

    assert main([str(path)]) == 65
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.splitlines() == [
        "[line 1] Error at ';': Expected expression.",
        "[line 2] Error at '2': Expected variable name.",
        "[line 3] Error at ';': Expected expression.",
    ]


def test_resolution_error_exit_65(write_script, capsys) -> None:
    path = write_script('print "x";\nreturn;')

    assert main([str(path)]) == 65
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Can't return from top-level code." in captured.err


def test_runtime_error_exit_70(write_script, capsys) -> None:
    path = write_script('print "ok";\nprint -true;')

    assert main([str(path)]) == 70
    captured = capsys.readouterr()
    assert captured.out == "ok\n"
    assert captured.err == "Operand must be a number.\n[line 2]\n"


@pytest.mark.parametrize(
    "command, source, expected",
    [
        pytest.param("tokenize", "+", "PLUS + null\nEOF  null\n", id="tokenize"),
        pytest.param("parse", "1 + 2 * 3", "(+ 1 (* 2 3))\n", id="parse"),
        pytest.param("evaluate", "-1 + 2 * 3", "5.0\n", id="evaluate"),
    ],
)
def test_commands(write_script, capsys, command: str, source: str, expected: str) -> None:
    path = write_script(source)

    assert main([command, str(path)]) == 0
    assert capsys.readouterr().out == expected


@pytest.mark.parametrize(
    "argv",
    [
        pytest.param(["frobnicate", "x.lox"], id="unknown-command"),
        pytest.param(["run", "a.lox", "extra"], id="too-many-arguments"),
    ],
)
def test_usage_errors_exit_1(argv, capsys) -> None:
    assert main(argv) == 1
    assert "Usage:" in capsys.readouterr().err


def test_missing_file_exits_1(tmp_path, capsys) -> None:
    assert main([str(tmp_path / "absent.lox")]) == 1
    assert "Could not read" in capsys.readouterr().err


def test_internal_failure_exits_1(write_script, monkeypatch, caplog) -> None:
    path = write_script("print 1;")

    def explode(self, source: str) -> None:
        raise AssertionError("invariant broken")

    monkeypatch.setattr(Lox, "run", explode)

    with caplog.at_level(logging.ERROR, logger="treelox"):
        assert main([str(path)]) == 1

    assert "Internal interpreter failure" in caplog.text


def test_prompt_keeps_state_and_resets_errors(monkeypatch, capsys) -> None:
    lines = iter(["var a = 1;", "print ;", "print a + 1;"])

    def fake_input(prompt: str) -> str:
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)

    lox = Lox()
    lox.run_prompt()

    captured = capsys.readouterr()
    assert captured.out == "2.0\nBye.\n"
    assert "Expected expression." in captured.err
    assert lox.exit_code() == 0


def test_stack_overflow_exits_70(write_script, capsys) -> None:
    path = write_script("fun down(n) { return down(n + 1); }\ndown(0);")

    assert main([str(path)]) == 70
    assert capsys.readouterr().err.splitlines()[0] == "Stack overflow."


def test_prompt_does_not_accumulate_messages(monkeypatch, capsys) -> None:
    lines = iter(["print ;", "print -nil;", "print 1;"])

    def fake_input(prompt: str) -> str:
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)

    lox = Lox()
    lox.run_prompt()

    assert lox.diagnostics.messages == []
    assert capsys.readouterr().out == "1.0\nBye.\n"
