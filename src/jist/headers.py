"""Parse composite statement headers with the bundled lark grammar."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Tuple

from lark import Lark, Token, Transformer, UnexpectedInput, v_args

from .token_types import CollectionHeader, ParamSpec
from .types import JistSyntaxError

_STARTS = ["func_header", "for_range", "collection_type"]


@lru_cache(maxsize=None)
def _parser() -> Lark:
    return Lark.open("headers.lark", rel_to=__file__, parser="lalr", start=_STARTS)


@v_args(inline=True)
class _HeaderBuilder(Transformer):
    def func_header(self, name: Token, *rest):
        params: Tuple[ParamSpec, ...] = ()
        return_type: Optional[str] = None

        for item in rest:
            if isinstance(item, tuple):
                params = item
            else:
                return_type = item

        return str(name), params, return_type

    def param_list(self, *params: ParamSpec) -> Tuple[ParamSpec, ...]:
        return tuple(params)

    def param(self, name: Token, type_name: Token, default: Optional[str]=None) -> ParamSpec:
        return ParamSpec(str(name), str(type_name), default)

    def default(self, literal: Token) -> str:
        return str(literal)

    def return_type(self, name: Token) -> str:
        return str(name)

    def for_range(self, variable: Token, start: Token, end: Token) -> Tuple[str, str, str]:
        return str(variable), str(start), str(end)

    def collection_type(self, kind: Token, first: Token, second: Optional[Token]=None) -> Tuple[str, str, Optional[str]]:
        return str(kind), str(first), None if second is None else str(second)


def _parse(text: str, start: str, what: str):
    try:
        tree = _parser().parse(text, start=start)
    except UnexpectedInput as exc:
        raise JistSyntaxError(f"Malformed {what}: {text.strip()!r}") from exc

    return _HeaderBuilder().transform(tree)


def parse_function_header(text: str) -> Tuple[str, Tuple[ParamSpec, ...], Optional[str]]:
    """`add(a: int, b: int = 2) -> int` => (name, params, return type)."""
    return _parse(text, "func_header", "function header")


def parse_for_range(text: str) -> Tuple[str, str, str]:
    """`i, 0..10` => (variable, start, end); bounds stay as source text."""
    return _parse(text, "for_range", "for header")


def parse_collection_type(name: str, text: str) -> CollectionHeader:
    kind, first, second = _parse(text, "collection_type", "collection type")
    kind = kind.lower()

    if kind == "dict":
        if second is None:
            raise JistSyntaxError(f"Dict '{name}' needs key and value types")
        return CollectionHeader(name, kind, "", (first, second))

    if second is not None:
        raise JistSyntaxError(f"{kind.capitalize()} '{name}' takes a single element type")

    return CollectionHeader(name, kind, first, None)
