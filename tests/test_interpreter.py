from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import run_mode, run_source
from treelox.lox import Lox

EVALUATED = [
    pytest.param("-1 + 2 * 3", "5.0", id="precedence"),
    pytest.param("(1 + 2) * 3", "9.0", id="grouping"),
    pytest.param("10 / 4", "2.5", id="fractional-division"),
    pytest.param("7 - 2 - 1", "4.0", id="left-associative-minus"),
    pytest.param('"foo" + "bar"', "foobar", id="string-concatenation"),
    pytest.param("1 < 2", "true", id="less"),
    pytest.param("2 <= 1", "false", id="less-equal"),
    pytest.param("nil", "nil", id="nil"),
    pytest.param("!nil", "true", id="nil-is-falsy"),
    pytest.param("!0", "false", id="zero-is-truthy"),
    pytest.param('!""', "false", id="empty-string-is-truthy"),
    pytest.param("1 == 1", "true", id="number-equality"),
    pytest.param('"a" == "a"', "true", id="string-equality"),
    pytest.param("nil == nil", "true", id="nil-equality"),
    pytest.param("nil == false", "false", id="nil-is-not-false"),
    pytest.param("true == 1", "false", id="no-bool-number-coercion"),
    pytest.param('1 == "1"', "false", id="no-string-number-coercion"),
    pytest.param("1 != 2", "true", id="not-equal"),
    pytest.param("nil or 3", "3.0", id="or-returns-right"),
    pytest.param("2 or 3", "2.0", id="or-short-circuits"),
    pytest.param("nil and 3", "nil", id="and-short-circuits"),
    pytest.param("1 and 3", "3.0", id="and-returns-right"),
    pytest.param("clock", "<native fn>", id="native-function"),
    pytest.param("-0", "-0.0", id="negative-zero-keeps-sign"),
    pytest.param("10000000000000000", "10000000000000000.0", id="large-integral"),
    pytest.param("100000000000000000000000", "1e+23", id="huge-uses-exponent"),
    pytest.param("0.1 + 0.2", "0.30000000000000004", id="shortest-float-repr"),
]


@pytest.mark.parametrize("source, expected", EVALUATED)
def test_evaluate_mode(source: str, expected: str) -> None:
    result = run_mode(source, "evaluate")

    assert result.lines == [expected]
    assert result.exit_code == 0


RUNTIME_ERRORS = [
    pytest.param("-\"x\";", "Operand must be a number.", id="negate-string"),
    pytest.param("1 < \"x\";", "Operands must be numbers.", id="compare-mixed"),
    pytest.param("\"a\" < \"b\";", "Operands must be numbers.", id="compare-strings"),
    pytest.param("1 * nil;", "Operands must be numbers.", id="multiply-nil"),
    pytest.param("1 + \"x\";", "Operands must be two numbers or two strings.", id="add-mixed"),
    pytest.param("1 / 0;", "Division by zero.", id="division-by-zero"),
    pytest.param("print missing;", "Undefined variable 'missing'.", id="undefined-read"),
    pytest.param("missing = 1;", "Undefined variable 'missing'.", id="undefined-assign"),
    pytest.param("\"str\"();", "Can only call functions and classes.", id="call-non-callable"),
    pytest.param("fun f() {} f(1);", "Expected 0 arguments but got 1.", id="arity"),
    pytest.param("var x = 1; x.y;", "Only instances have properties.", id="get-on-number"),
    pytest.param("var x = 1; x.y = 2;", "Only instances have fields.", id="set-on-number"),
    pytest.param("class A {} A().nope;", "Undefined property 'nope'.", id="undefined-property"),
    pytest.param("var B = 1; class A < B {}", "Superclass must be a class.", id="non-class-superclass"),
]


@pytest.mark.parametrize("source, message", RUNTIME_ERRORS)
def test_runtime_errors(source: str, message: str) -> None:
    result = run_source(source)

    assert result.errors == [message, "[line 1]"]
    assert result.exit_code == 70


def test_evaluate_mode_runtime_error() -> None:
    result = run_mode('"a" * 2', "evaluate")

    assert result.stdout == ""
    assert result.errors == ["Operands must be numbers.", "[line 1]"]
    assert result.exit_code == 70


def test_runtime_error_aborts_rest_of_program() -> None:
    source = dedent(
        """\
        print "one";
        print nope;
        print "three";
        """
    )
    result = run_source(source)

    assert result.lines == ["one"]
    assert result.errors == ["Undefined variable 'nope'.", "[line 2]"]
    assert result.exit_code == 70


def test_print_formats_values() -> None:
    source = dedent(
        """\
        print 3;
        print 3.25;
        print true;
        print nil;
        print "text";
        fun f() {}
        print f;
        class Bagel {}
        print Bagel;
        print Bagel();
        """
    )
    result = run_source(source)

    assert result.lines == [
        "3.0", "3.25", "true", "nil", "text", "<fn f>", "Bagel", "Bagel instance",
    ]


def test_control_flow() -> None:
    source = dedent(
        """\
        var i = 0;
        while (i < 3) {
          if (i == 1) print "one"; else print i;
          i = i + 1;
        }
        for (var j = 0; j < 2; j = j + 1) print j;
        """
    )
    result = run_source(source)

    assert result.lines == ["0.0", "one", "2.0", "0.0", "1.0"]


def test_for_loop_matches_hand_written_while() -> None:
    looped = run_source("var s = 0; for (var i = 1; i <= 4; i = i + 1) s = s + i; print s;")
    unrolled = run_source("var s = 0; { var i = 1; while (i <= 4) { s = s + i; i = i + 1; } } print s;")

    assert looped.lines == unrolled.lines == ["10.0"]


def test_for_loop_variable_is_shared_across_iterations() -> None:
    source = dedent(
        """\
        var fs = nil;
        for (var i = 0; i < 3; i = i + 1) {
          fun show() { print i; }
          if (i == 0) fs = show;
        }
        fs();
        """
    )
    result = run_source(source)

    assert result.lines == ["3.0"]


def test_assignment_is_an_expression() -> None:
    result = run_source("var a; var b; a = b = 2; print a + b;")

    assert result.lines == ["4.0"]


def test_clock_returns_a_number() -> None:
    result = run_source("print clock() > 0;")

    assert result.lines == ["true"]


def test_state_persists_between_runs() -> None:
    lox = Lox()
    run_mode("var counter = 1;", "run", lox)
    result = run_mode("counter = counter + 1; print counter;", "run", lox)

    assert result.lines == ["2.0"]


def test_deep_recursion_completes() -> None:
    source = dedent(
        """\
        fun count(n) {
          if (n > 0) return count(n - 1);
          return n;
        }
        print count(500);
        """
    )
    result = run_source(source)

    assert result.errors == []
    assert result.lines == ["0.0"]


def test_unbounded_recursion_is_a_runtime_error() -> None:
    source = dedent(
        """\
        fun forever(n) {
          return forever(n + 1);
        }
        print "start";
        forever(0);
        """
    )
    result = run_source(source)

    assert result.lines == ["start"]
    assert result.errors[0] == "Stack overflow."
    assert result.exit_code == 70


def test_interpreter_usable_after_stack_overflow() -> None:
    lox = Lox()
    first = run_mode("fun f() { f(); } f();", lox=lox)
    second = run_mode("print 1 + 1;", lox=lox)

    assert first.exit_code == 70
    assert second.lines == ["2.0"]
    assert second.exit_code == 0
