from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pytest

from jist.lexer import LexError, Lexer, tokenize
from jist.token_types import (
    TT,
    BlockPayload,
    CollectionHeader,
    CondClause,
    DotCall,
    ForHeader,
    FunctionHeader,
    ParamSpec,
    WhileHeader,
    render_token,
)
from jist.types import JistSyntaxError


@dataclass(frozen=True)
class Case:
    """Unified lexer case payload."""

    name: str
    source: str
    expected: Optional[Tuple[Tuple[TT, object], ...]] = None
    expected_types: Optional[Tuple[TT, ...]] = None
    payload: object = None
    exc: Optional[type[Exception]] = None
    msg: Optional[str] = None


BASIC_TOKEN_CASES: List[Case] = [
    Case("int", "123", expected=((TT.INT, "123"),)),
    Case("float", "3.14", expected=((TT.FLOAT, "3.14"),)),
    Case("negative-int", "-7", expected=((TT.INT, "-7"),)),
    Case("string", '"hello"', expected=((TT.STRING, '"hello"'),)),
    Case("string-escape", '"a\\"b"', expected=((TT.STRING, '"a\\"b"'),)),
    Case("char", "'c'", expected=((TT.CHAR, "'c'"),)),
    Case("bool-lower", "true", expected=((TT.BOOL, "true"),)),
    Case("bool-title", "False", expected=((TT.BOOL, "False"),)),
    Case("variable-call", "count", expected=((TT.VARIABLE_CALL, "count"),)),
    Case("function-call", "max(", expected=((TT.FUNCTION_CALL, "max"), (TT.LPAR, "("))),
    Case("dot-call", "list.push", expected=((TT.DOT, "list.push"),)),
    Case("keyword-prefix-name", "iffy", expected=((TT.VARIABLE_CALL, "iffy"),)),
    Case("bool-prefix-name", "trueish", expected=((TT.VARIABLE_CALL, "trueish"),)),
]

OPERATOR_CASES: List[Case] = [
    Case("plus", "a + b", expected_types=(TT.VARIABLE_CALL, TT.PLUS, TT.VARIABLE_CALL)),
    Case("minus-after-name", "a -1", expected_types=(TT.VARIABLE_CALL, TT.MINUS, TT.INT)),
    Case("minus-after-int", "3 -1", expected_types=(TT.INT, TT.MINUS, TT.INT)),
    Case("minus-after-rpar", "(a) -1", expected_types=(TT.LPAR, TT.VARIABLE_CALL, TT.RPAR, TT.MINUS, TT.INT)),
    Case("negative-after-star", "a * -2", expected_types=(TT.VARIABLE_CALL, TT.STAR, TT.INT)),
    Case("mod", "a % 2", expected_types=(TT.VARIABLE_CALL, TT.MOD, TT.INT)),
    Case("eq-neq", "a == b != c", expected_types=(TT.VARIABLE_CALL, TT.EQ, TT.VARIABLE_CALL, TT.NEQ, TT.VARIABLE_CALL)),
    Case("and-or", "a && b || c", expected_types=(TT.VARIABLE_CALL, TT.AND, TT.VARIABLE_CALL, TT.OR, TT.VARIABLE_CALL)),
    Case("ordering", "a <= b >= c < d > e", expected_types=(
        TT.VARIABLE_CALL, TT.LTE, TT.VARIABLE_CALL, TT.GTE, TT.VARIABLE_CALL,
        TT.LT, TT.VARIABLE_CALL, TT.GT, TT.VARIABLE_CALL,
    )),
    Case("not", "!a", expected_types=(TT.NOT, TT.VARIABLE_CALL)),
    Case("increment", "i++;", expected_types=(TT.VARIABLE_CALL, TT.INCR, TT.SEMI)),
    Case("decrement", "i--;", expected_types=(TT.VARIABLE_CALL, TT.DECR, TT.SEMI)),
    Case("fat-arrow", '{"a" => 1}', expected_types=(TT.LBRACE, TT.STRING, TT.FAT_ARROW, TT.INT, TT.RBRACE)),
    Case("brackets", "[1, 2]", expected_types=(TT.LSQB, TT.INT, TT.COMMA, TT.INT, TT.RSQB)),
]

STATEMENT_CASES: List[Case] = [
    Case(
        "let-declaration",
        "let x: int = 5;",
        expected=((TT.VARIABLE, "x"), (TT.VAR_TYPE, "int"), (TT.ASSIGN, "="), (TT.INT, "5"), (TT.SEMI, ";")),
    ),
    Case(
        "bare-declaration",
        "x: float;",
        expected=((TT.VARIABLE, "x"), (TT.VAR_TYPE, "float"), (TT.SEMI, ";")),
    ),
    Case(
        "reassignment",
        "x = x + 1;",
        expected_types=(TT.VARIABLE_CALL, TT.ASSIGN, TT.VARIABLE_CALL, TT.PLUS, TT.INT, TT.SEMI),
    ),
    Case(
        "call-statement",
        'print("hi");',
        expected_types=(TT.FUNCTION_CALL, TT.LPAR, TT.STRING, TT.RPAR, TT.SEMI),
    ),
    Case(
        "return",
        "return x;",
        expected_types=(TT.RETURN, TT.VARIABLE_CALL, TT.SEMI),
    ),
    Case("break", "break;", expected_types=(TT.BREAK, TT.SEMI)),
    Case("continue", "continue;", expected_types=(TT.CONTINUE, TT.SEMI)),
    Case(
        "trailing-line-comment",
        "x = 1; // note",
        expected_types=(TT.VARIABLE_CALL, TT.ASSIGN, TT.INT, TT.SEMI),
    ),
    Case(
        "inline-block-comment",
        "x = /* one */ 1;",
        expected_types=(TT.VARIABLE_CALL, TT.ASSIGN, TT.INT, TT.SEMI),
    ),
]

COMPOSITE_CASES: List[Case] = [
    Case(
        "array-collection",
        "a: Array<int> = [1, 2];",
        expected_types=(TT.COLLECTION, TT.ASSIGN, TT.LSQB, TT.INT, TT.COMMA, TT.INT, TT.RSQB, TT.SEMI),
        payload=CollectionHeader("a", "array", "int", None),
    ),
    Case(
        "dict-collection",
        "let d: Dict<string, int>;",
        expected_types=(TT.COLLECTION, TT.SEMI),
        payload=CollectionHeader("d", "dict", "", ("string", "int")),
    ),
    Case(
        "if-else",
        "if (x > 1) { y = 2; } else { y = 3; }",
        expected_types=(TT.IF, TT.ELSE),
        payload=CondClause("x > 1", ("y = 2;",)),
    ),
    Case(
        "elif",
        "if (a) { } elif (b == 2) { c = 1; }",
        expected_types=(TT.IF, TT.ELIF),
        payload=CondClause("a", ("",)),
    ),
    Case(
        "while",
        "while (i < 3) { i = i + 1; }",
        expected_types=(TT.WHILE,),
        payload=WhileHeader("i < 3", ("i = i + 1;",)),
    ),
    Case(
        "for-range",
        "for (i, 0..3) { print(i); }",
        expected_types=(TT.FOR,),
        payload=ForHeader("i", "0", "3", None, ("print(i);",)),
    ),
    Case(
        "for-range-variables",
        "for(k, lo..hi){ s = s + k; }",
        expected_types=(TT.FOR,),
        payload=ForHeader("k", "lo", "hi", None, ("s = s + k;",)),
    ),
    Case(
        "for-condition",
        "for (i < 3) { i++; }",
        expected_types=(TT.FOR,),
        payload=ForHeader(None, None, None, "i < 3", ("i++;",)),
    ),
    Case(
        "function",
        "func add(a: int, b: int = 2) -> int { return a + b; }",
        expected_types=(TT.FUNCTION,),
        payload=FunctionHeader(
            "add",
            (ParamSpec("a", "int"), ParamSpec("b", "int", "2")),
            "int",
            ("return a + b;",),
        ),
    ),
    Case(
        "function-no-return-type",
        'func hello() { println("hi"); }',
        expected_types=(TT.FUNCTION,),
        payload=FunctionHeader("hello", (), None, ('println("hi");',)),
    ),
    Case(
        "try-catch-finally",
        "try { x = 1; } catch { y = 2; } finally { z = 3; }",
        expected_types=(TT.TRY, TT.CATCH, TT.FINALLY),
        payload=BlockPayload(("x = 1;",)),
    ),
]

LEX_ERROR_CASES: List[Case] = [
    Case("unterminated-string", '"abc', exc=LexError, msg="Unterminated string literal"),
    Case("unterminated-char", "'a", exc=LexError, msg="Unterminated char literal"),
    Case("bad-number", "1.2.3", exc=LexError, msg="Invalid numeric literal"),
    Case("stray-character", "x = @;", exc=LexError, msg="Unexpected character"),
    Case("let-without-type", "let = 5;", exc=LexError, msg="Declaration requires"),
    Case("unterminated-condition", "if (x { }", exc=LexError, msg="Unterminated condition in if"),
    Case("unterminated-body", "while (x) { y = 1;", exc=LexError, msg="Unterminated block"),
    Case("missing-body", "while (x) y = 1;", exc=LexError, msg="Expected '{'"),
    Case("dangling-dot", "list.", exc=LexError, msg="Expected a method name"),
    Case("bad-function-header", "func add(a int) { }", exc=JistSyntaxError, msg="Malformed function header"),
    Case("dict-one-type", "d: Dict<int> = {};", exc=JistSyntaxError, msg="needs key and value types"),
    Case("unterminated-block-comment", "x = 1; /* open", exc=LexError, msg="Unterminated block comment"),
]


@pytest.mark.parametrize("case", BASIC_TOKEN_CASES, ids=lambda case: case.name)
def test_basic_tokens(case: Case) -> None:
    tokens = tokenize(case.source)

    assert case.expected is not None
    assert len(tokens) == len(case.expected)
    for token, (expected_type, expected_value) in zip(tokens, case.expected):
        assert token.type == expected_type
        assert token.value == expected_value


@pytest.mark.parametrize("case", OPERATOR_CASES, ids=lambda case: case.name)
def test_operators(case: Case) -> None:
    tokens = tokenize(case.source)
    assert case.expected_types is not None
    assert [token.type for token in tokens] == list(case.expected_types)


@pytest.mark.parametrize("case", STATEMENT_CASES, ids=lambda case: case.name)
def test_statements(case: Case) -> None:
    tokens = tokenize(case.source)

    if case.expected is not None:
        assert [(token.type, token.value) for token in tokens] == list(case.expected)
    if case.expected_types is not None:
        assert [token.type for token in tokens] == list(case.expected_types)


@pytest.mark.parametrize("case", COMPOSITE_CASES, ids=lambda case: case.name)
def test_composite_tokens(case: Case) -> None:
    tokens = tokenize(case.source)

    assert case.expected_types is not None
    assert [token.type for token in tokens] == list(case.expected_types)
    assert tokens[0].payload == case.payload


@pytest.mark.parametrize("case", COMPOSITE_CASES, ids=lambda case: case.name)
def test_render_round_trip(case: Case) -> None:
    first = tokenize(case.source)[0]
    rendered = render_token(first)
    again = tokenize(rendered)[0]

    assert again.type == first.type
    assert again.value == first.value
    assert again.payload == first.payload


@pytest.mark.parametrize("case", LEX_ERROR_CASES, ids=lambda case: case.name)
def test_lex_errors(case: Case) -> None:
    assert case.exc is not None
    assert case.msg is not None
    with pytest.raises(case.exc) as exc_info:
        tokenize(case.source)

    assert case.msg in str(exc_info.value)


def test_consumed_lengths_cover_statement() -> None:
    source = "total = add(1, 2.5);"
    tokens = tokenize(source)
    consumed = sum(token.consumed for token in tokens)
    whitespace = source.count(" ")

    assert consumed + whitespace == len(source)


def test_recognizer_miss_returns_none_token() -> None:
    lexer = Lexer("+ 1")

    assert lexer.scan_number().type == TT.NONE
    assert lexer.scan_number().consumed == 0
    assert lexer.scan_operator().type == TT.PLUS


def test_declaration_only_at_statement_start() -> None:
    tokens = tokenize("f(a: 1)")

    assert [token.type for token in tokens] == [
        TT.FUNCTION_CALL, TT.LPAR, TT.VARIABLE_CALL, TT.COLON, TT.INT, TT.RPAR,
    ]


def test_range_dots_end_a_number() -> None:
    assert [token.type for token in tokenize("0..3")] == [TT.INT, TT.RANGE, TT.INT]


def test_dot_call_payload() -> None:
    tokens = tokenize("scores.insert(0, 5);")

    assert tokens[0].type == TT.DOT
    assert tokens[0].payload == DotCall("scores", "insert")
    assert render_token(tokens[0]) == "scores.insert"
