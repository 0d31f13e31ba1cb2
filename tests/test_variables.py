from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    JistLookupError,
    JistRuntimeError,
    JistSyntaxError,
    JistTypeError,
    run_program,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param("let n: int = 5;", ("int", "n", 5), None, id="int-literal"),
    pytest.param("let f: float = 2;", ("float", "f", 2.0), None, id="int-widens-to-float"),
    pytest.param('let s: string = "hi";', ("string", "s", "hi"), None, id="string-literal"),
    pytest.param('let s: string = "a\\tb";', ("string", "s", "a\tb"), None, id="string-escape"),
    pytest.param("let c: char = 'x';", ("char", "c", "x"), None, id="char-literal"),
    pytest.param('let c: char = "y";', ("char", "c", "y"), None, id="one-letter-string-to-char"),
    pytest.param("let b: bool = true;", ("bool", "b", True), None, id="bool-literal"),
    pytest.param("let b: bool = 1 == 1;", ("bool", "b", True), None, id="comparison-to-bool"),
    pytest.param("let n: int = 2.0;", ("int", "n", 2), None, id="integral-float-to-int"),
    pytest.param("x: int = 3;", ("int", "x", 3), None, id="declaration-without-let"),
    pytest.param("let n: int;", ("int", "n", 0), None, id="zero-int"),
    pytest.param("let s: str;", ("string", "s", ""), None, id="zero-string"),
    pytest.param("let b: bool;", ("bool", "b", False), None, id="zero-bool"),
    pytest.param("let z: null;", ("null", "z", None), None, id="zero-null"),
    pytest.param("let n: int = 2 + 3 * 4;", ("int", "n", 20), None, id="left-to-right"),
    pytest.param("let n: int = 2 + (3 * 4);", ("int", "n", 14), None, id="parenthesized"),
    pytest.param("let n: int = 7 / 2;", ("int", "n", 3), None, id="int-division-truncates"),
    pytest.param("let n: int = -7 / 2;", ("int", "n", -3), None, id="int-division-toward-zero"),
    pytest.param("let n: int = 7 % 3;", ("int", "n", 1), None, id="modulo"),
    pytest.param("let n: int = -7 % 3;", ("int", "n", -1), None, id="modulo-sign-of-dividend"),
    pytest.param("let f: float = 7.0 / 2;", ("float", "f", 3.5), None, id="float-division"),
    pytest.param("let f: float = 1.0 / 0;", ("float", "f", float("inf")), None, id="float-division-by-zero"),
    pytest.param("let n: int = 3; let m: int = n * -2;", ("int", "m", -6), None, id="negative-literal-operand"),
    pytest.param("let n: int = 3; let m: int = -n;", ("int", "m", -3), None, id="unary-minus"),
    pytest.param("let n: int = !0;", ("int", "n", 1), None, id="not-zero"),
    pytest.param("let n: int = !(2 > 1);", ("int", "n", 0), None, id="not-group"),
    pytest.param("let n: int = 3 > 2;", ("int", "n", 1), None, id="comparison-result"),
    pytest.param('let n: int = "a" == 1;', ("int", "n", 0), None, id="mismatched-equality"),
    pytest.param('let n: int = "a" != 1;', ("int", "n", 1), None, id="mismatched-inequality"),
    pytest.param('let n: int = "abc" < "abd";', ("int", "n", 1), None, id="text-ordering"),
    pytest.param("let n: int = 1 == 1.0;", ("int", "n", 1), None, id="numeric-equality"),
    pytest.param("let n: int = 1 && 0;", ("int", "n", 0), None, id="and"),
    pytest.param("let n: int = 0 || 1;", ("int", "n", 1), None, id="or"),
    pytest.param("let n: int = 2 || 0;", ("int", "n", 0), None, id="only-exact-one-is-true"),
    pytest.param('let s: string = "a" + 1;', ("string", "s", "a1"), None, id="text-concatenation"),
    pytest.param("let s: string = 'a' + 'b';", ("string", "s", "ab"), None, id="char-concatenation"),
    pytest.param(
        dedent(
            """\
            let n: int = 1;
            n = n + 1;
            """
        ),
        ("int", "n", 2),
        None,
        id="reassignment",
    ),
    pytest.param(
        dedent(
            """\
            let n: int = 1;
            n++;
            n++;
            n--;
            """
        ),
        ("int", "n", 2),
        None,
        id="increment-decrement",
    ),
    pytest.param("let f: float = 0.5; f++;", ("float", "f", 1.5), None, id="float-increment"),
    pytest.param("let f: float = 1; f = 3;", ("float", "f", 3.0), None, id="reassignment-coerces"),
    pytest.param(
        "let n: int = 1; let n: int = 9;",
        ("int", "n", 9),
        None,
        id="redeclaration",
    ),
    pytest.param('let n: int = "a";', None, JistTypeError, id="text-to-int"),
    pytest.param("let n: int = 2.5;", None, JistTypeError, id="fraction-to-int"),
    pytest.param("let b: bool = 2;", None, JistTypeError, id="two-to-bool"),
    pytest.param("let x: int = 5; let s: string = x;", None, JistTypeError, id="int-to-string"),
    pytest.param("let n: int = 1; n = \"x\";", None, JistTypeError, id="reassignment-type"),
    pytest.param('let s: string = "a"; s++;', None, JistTypeError, id="increment-text"),
    pytest.param('let n: int = "a" < 1;', None, JistTypeError, id="mismatched-ordering"),
    pytest.param("let n: int = 1 +;", None, JistTypeError, id="missing-right-operand"),
    pytest.param("let n: int = 1 + true;", None, JistTypeError, id="number-plus-bool"),
    pytest.param("let z: null; let n: int = z + 1;", None, JistTypeError, id="null-operand"),
    pytest.param("let n: int = 2147483647 + 1;", None, JistRuntimeError, id="int-overflow"),
    pytest.param("let n: int = 3000000000;", None, JistSyntaxError, id="literal-overflow"),
    pytest.param("let n: int = 1 / 0;", None, JistRuntimeError, id="int-division-by-zero"),
    pytest.param("let n: int = 1 % 0;", None, JistRuntimeError, id="int-modulo-by-zero"),
    pytest.param("y = 3;", None, JistLookupError, id="assign-undeclared"),
    pytest.param("let n: int = missing;", None, JistLookupError, id="read-undeclared"),
    pytest.param("let n: int = 1 2;", None, JistSyntaxError, id="missing-operator"),
    pytest.param("let n: int =;", None, JistSyntaxError, id="missing-initializer"),
    pytest.param("let n: int 5;", None, JistSyntaxError, id="missing-equals"),
    pytest.param("let n: int = 1; n;", None, JistSyntaxError, id="bare-name"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_variables(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_redeclaration_replaces_in_place() -> None:
    ctx = run_program("let n: int = 1; let n: float = 2.5;")

    assert len(ctx.variables) == 1
    var = ctx.variables.get("n")
    assert var.tag.label == "Float"
    assert var.value.value == 2.5


def test_declaration_has_exactly_one_entry() -> None:
    ctx = run_program("let a: int = 1; let b: string = \"x\";")

    assert [v.name for v in ctx.variables] == ["a", "b"]
