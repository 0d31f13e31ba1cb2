from __future__ import annotations

import pytest

from jist.headers import parse_collection_type, parse_for_range, parse_function_header
from jist.token_types import CollectionHeader, ParamSpec
from jist.types import JistSyntaxError

FUNCTION_HEADERS = [
    pytest.param("main()", ("main", (), None), id="no-params"),
    pytest.param(" add(a: int, b: int) -> int ", (
        "add", (ParamSpec("a", "int"), ParamSpec("b", "int")), "int",
    ), id="typed"),
    pytest.param('greet(name: string = "world")', (
        "greet", (ParamSpec("name", "string", '"world"'),), None,
    ), id="string-default"),
    pytest.param("scale(x: float = -1.5) -> float", (
        "scale", (ParamSpec("x", "float", "-1.5"),), "float",
    ), id="negative-default"),
    pytest.param("pick(c: char = 'z', flag: bool = true)", (
        "pick", (ParamSpec("c", "char", "'z'"), ParamSpec("flag", "bool", "true")), None,
    ), id="char-and-name-defaults"),
]


@pytest.mark.parametrize("text, expected", FUNCTION_HEADERS)
def test_function_headers(text: str, expected) -> None:
    assert parse_function_header(text) == expected


@pytest.mark.parametrize(
    "text",
    [
        pytest.param("add(a int)", id="missing-colon"),
        pytest.param("add(a: int,)", id="trailing-comma"),
        pytest.param("(a: int)", id="missing-name"),
        pytest.param("add(a: int) ->", id="missing-return-type"),
    ],
)
def test_malformed_function_headers(text: str) -> None:
    with pytest.raises(JistSyntaxError, match="Malformed function header"):
        parse_function_header(text)


@pytest.mark.parametrize(
    "text, expected",
    [
        pytest.param("i, 0..3", ("i", "0", "3"), id="literals"),
        pytest.param(" k , lo .. hi ", ("k", "lo", "hi"), id="names-and-spacing"),
        pytest.param("i, -2..0", ("i", "-2", "0"), id="negative-start"),
    ],
)
def test_for_range(text: str, expected) -> None:
    assert parse_for_range(text) == expected


def test_for_range_rejects_float_bounds() -> None:
    with pytest.raises(JistSyntaxError, match="Malformed for header"):
        parse_for_range("i, 0.5..3")


@pytest.mark.parametrize(
    "text, expected",
    [
        pytest.param("Array<int>", CollectionHeader("a", "array", "int", None), id="array"),
        pytest.param("array<string>", CollectionHeader("a", "array", "string", None), id="array-lower"),
        pytest.param("Dict<int, string>", CollectionHeader("a", "dict", "", ("int", "string")), id="dict"),
    ],
)
def test_collection_types(text: str, expected: CollectionHeader) -> None:
    assert parse_collection_type("a", text) == expected


@pytest.mark.parametrize(
    "text, message",
    [
        pytest.param("Dict<int>", "needs key and value types", id="dict-one-type"),
        pytest.param("Array<int, int>", "takes a single element type", id="array-two-types"),
        pytest.param("Array<>", "Malformed collection type", id="empty"),
    ],
)
def test_collection_type_errors(text: str, message: str) -> None:
    with pytest.raises(JistSyntaxError, match=message):
        parse_collection_type("a", text)
