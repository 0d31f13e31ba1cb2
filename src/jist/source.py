"""
Turn raw file text into statement strings for the interpreter.

Comments are removed, braces and brackets must balance, and the text is
split at `;` outside any nesting and after a closing brace that ends a
block statement (function, loop, conditional, try).
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from .extract import block_continues, quote_end, skip_quoted
from .types import JistSyntaxError

logger = logging.getLogger(__name__)

_PAIRS = {"{": "}", "[": "]"}
_CLOSING = {v: k for k, v in _PAIRS.items()}


def _line_of(text: str, index: int) -> int:
    return text.count("\n", 0, index) + 1


def strip_comments(text: str) -> str:
    """Remove `//` and `/* */` comments outside string and char literals."""
    out: List[str] = []
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch in ('"', "'"):
            end = skip_quoted(text, i)
            out.append(text[i:end])
            i = end
            continue

        if text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue

        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise JistSyntaxError(f"Unterminated block comment starting on line {_line_of(text, i)}")
            # keep line numbers stable
            out.append("\n" * text.count("\n", i, end))
            i = end + 2
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def check_balance(text: str) -> None:
    """Raise JistSyntaxError for the first unmatched brace or bracket."""
    stack: List[Tuple[str, int]] = []
    i = 0

    while i < len(text):
        ch = text[i]

        if ch in ('"', "'"):
            end = quote_end(text, i)
            if end == -1:
                raise JistSyntaxError(f"Unterminated literal starting on line {_line_of(text, i)}")
            i = end
            continue

        if ch in _PAIRS:
            stack.append((ch, i))
        elif ch in _CLOSING:
            if not stack or stack[-1][0] != _CLOSING[ch]:
                raise JistSyntaxError(f"Unmatched '{ch}' on line {_line_of(text, i)}")
            stack.pop()

        i += 1

    if stack:
        ch, pos = stack[-1]
        raise JistSyntaxError(f"Unclosed '{ch}' opened on line {_line_of(text, pos)}")


def split_statements(text: str) -> List[str]:
    source = strip_comments(text)
    check_balance(source)

    statements: List[str] = []
    start = 0
    depth = 0
    i = 0
    n = len(source)

    def flush(end: int) -> None:
        stmt = source[start:end].strip()
        if stmt:
            statements.append(stmt)

    while i < n:
        ch = source[i]

        if ch in ('"', "'"):
            i = skip_quoted(source, i)
            continue

        if ch in "{[(":
            depth += 1
        elif ch in "}])":
            depth -= 1
            if ch == "}" and depth == 0 and not block_continues(source, i + 1):
                flush(i + 1)
                start = i + 1
        elif ch == ";" and depth == 0:
            flush(i + 1)
            start = i + 1

        i += 1

    flush(n)
    logger.debug("split source into %d statements", len(statements))
    return statements
