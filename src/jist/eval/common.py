from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from ..nodes import PunctNode, SyntaxNode
from ..runtime import (
    JBool,
    JChar,
    JFloat,
    JInt,
    JNull,
    JText,
    JValue,
    JistRuntimeError,
    JistSyntaxError,
    JistTypeError,
    TypeTag,
    tag_of,
)
from ..token_types import TT
from ..types import INT_MAX, INT_MIN

_ZERO = {
    TypeTag.INT: lambda: JInt(0),
    TypeTag.FLOAT: lambda: JFloat(0.0),
    TypeTag.STRING: lambda: JText(""),
    TypeTag.CHAR: lambda: JChar("\0"),
    TypeTag.BOOL: lambda: JBool(False),
    TypeTag.NULL: lambda: JNull(),
}

_OPENERS = {TT.LPAR: TT.RPAR, TT.LSQB: TT.RSQB, TT.LBRACE: TT.RBRACE}
_CLOSERS = frozenset(_OPENERS.values())


def zero_value(tag: TypeTag) -> JValue:
    return _ZERO[tag]()


def checked_int(value: int) -> JInt:
    if not INT_MIN <= value <= INT_MAX:
        raise JistRuntimeError(f"Integer overflow: {value} does not fit in 32 bits")
    return JInt(value)


def display(value: JValue) -> str:
    """Text form used by print and the store dump."""
    match value:
        case JText(value=s) | JChar(value=s):
            return s
        case _:
            return repr(value)


def coerce(value: JValue, tag: TypeTag, *, parse_text: bool=False) -> JValue:
    """
    Convert value to the declared type or raise JistTypeError.

    Ints widen to floats; integral floats narrow to ints; comparison results
    (1/0) become bools. With parse_text, strings are parsed as the target
    type, which is how collection literals like `{"1" => one}` are read.
    """
    match (tag, value):
        case (TypeTag.INT, JInt()):
            return value
        case (TypeTag.INT, JFloat(value=f)) if math.isfinite(f) and f.is_integer():
            return checked_int(int(f))
        case (TypeTag.FLOAT, JFloat()):
            return value
        case (TypeTag.FLOAT, JInt(value=i)):
            return JFloat(float(i))
        case (TypeTag.STRING, JText()):
            return value
        case (TypeTag.STRING, JChar(value=c)):
            return JText(c)
        case (TypeTag.STRING, _) if parse_text:
            return JText(display(value))
        case (TypeTag.CHAR, JChar()):
            return value
        case (TypeTag.CHAR, JText(value=s)) if len(s) == 1:
            return JChar(s)
        case (TypeTag.BOOL, JBool()):
            return value
        case (TypeTag.BOOL, JInt(value=i)) if i in (0, 1):
            return JBool(i == 1)
        case (TypeTag.NULL, _):
            return JNull()
        case (_, JText(value=s)) if parse_text:
            return parse_literal(s, tag)

    raise JistTypeError(f"Cannot convert {tag_of(value).label} {display(value)!r} to {tag.label}")


def parse_literal(text: str, tag: TypeTag) -> JValue:
    """Parse source text as a value of the given type."""
    raw = text.strip()

    try:
        match tag:
            case TypeTag.INT:
                return checked_int(int(raw))
            case TypeTag.FLOAT:
                return JFloat(float(raw))
            case TypeTag.BOOL:
                if raw.lower() in ("true", "false"):
                    return JBool(raw.lower() == "true")
            case TypeTag.STRING:
                if len(raw) >= 2 and raw[0] == raw[-1] == '"':
                    raw = raw[1:-1]
                return JText(raw)
            case TypeTag.CHAR:
                if len(raw) >= 2 and raw[0] == raw[-1] == "'":
                    raw = raw[1:-1]
                if len(raw) == 1:
                    return JChar(raw)
            case TypeTag.NULL:
                return JNull()
    except (ValueError, JistRuntimeError):
        pass

    raise JistTypeError(f"Cannot read {text!r} as {tag.label}")


def as_condition(value: JValue) -> bool:
    """Only an exact 1 (or true) is truthy."""
    match value:
        case JBool(value=b):
            return b
        case JInt(value=1):
            return True
        case _:
            return False


def values_equal(a: JValue, b: JValue) -> bool:
    match (a, b):
        case (JInt() | JFloat(), JInt() | JFloat()):
            return a.value == b.value
        case (JText() | JChar(), JText() | JChar()):
            return a.value == b.value
        case (JBool(value=x), JBool(value=y)):
            return x == y
        case (JNull(), JNull()):
            return True
        case _:
            return False


def matching_close(nodes: Sequence[SyntaxNode], open_index: int) -> int:
    """Index of the punctuation node closing the group opened at open_index."""
    opener = nodes[open_index]
    depth = 0

    for i in range(open_index, len(nodes)):
        node = nodes[i]
        if not isinstance(node, PunctNode):
            continue
        if node.kind in _OPENERS:
            depth += 1
        elif node.kind in _CLOSERS:
            depth -= 1
            if depth == 0:
                return i

    raise JistSyntaxError(f"Unmatched '{opener.text}'")


def split_top_level(nodes: Sequence[SyntaxNode], separator: TT=TT.COMMA) -> List[Tuple[SyntaxNode, ...]]:
    """Split at separators outside any (...), [...] or {...} group."""
    if not nodes:
        return []

    parts: List[Tuple[SyntaxNode, ...]] = []
    current: List[SyntaxNode] = []
    depth = 0

    for node in nodes:
        if isinstance(node, PunctNode):
            if node.kind in _OPENERS:
                depth += 1
            elif node.kind in _CLOSERS:
                depth -= 1
            elif node.kind == separator and depth == 0:
                parts.append(tuple(current))
                current = []
                continue
        current.append(node)

    parts.append(tuple(current))
    return parts


def is_punct(node: SyntaxNode, kind: TT) -> bool:
    return isinstance(node, PunctNode) and node.kind == kind
