"""
Block extraction for brace bodies and parenthesized conditions.

Both scanners start just inside the opening delimiter (depth 1) and count
depth until the matching closer. Neither raises: an unterminated region
returns with ``depth > 0`` and ``end == len(text)``, and the caller decides
that this is a syntax error.
"""

from __future__ import annotations

from typing import List, NamedTuple, Union

# Words that keep a statement open after its closing brace.
CONTINUATION_WORDS = ("elif", "else", "catch", "finally")

_DROPPED = "\n\r\t"


class Extracted(NamedTuple):
    body: Union[List[str], str]
    end: int
    depth: int

    @property
    def closed(self) -> bool:
        return self.depth == 0


def skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index].isspace():
        index += 1
    return index


def _word_at(text: str, index: int, word: str) -> bool:
    if not text.startswith(word, index):
        return False
    after = index + len(word)
    return after >= len(text) or not (text[after].isalnum() or text[after] == "_")


def block_continues(text: str, index: int) -> bool:
    """True when the text after a closing brace still belongs to its statement."""
    j = skip_whitespace(text, index)
    if j >= len(text):
        return False
    if text[j] == ";":
        return True
    return any(_word_at(text, j, word) for word in CONTINUATION_WORDS)


def quote_end(text: str, index: int) -> int:
    """Index just past the literal opened at ``index``, or -1 if it never closes."""
    quote = text[index]
    i = index + 1

    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1

    return -1


def skip_quoted(text: str, index: int) -> int:
    """Like quote_end, but an unterminated literal runs to the end of text."""
    end = quote_end(text, index)
    return len(text) if end == -1 else end


def extract_block(text: str, index: int) -> Extracted:
    """
    Split a brace body into statements.

    ``;`` at the body's own depth ends a statement; semicolons inside nested
    braces stay with the nested statement. A nested block that closes back to
    body depth ends its statement unless ``elif``/``else``/``catch``/``finally``
    or ``;`` follows. When ``;`` is directly followed by the body's closing
    brace, extraction stops there.
    """
    depth = 1
    statements: List[str] = []
    buf: List[str] = []
    i = index
    n = len(text)

    def flush() -> None:
        stmt = "".join(buf).strip()
        if stmt:
            statements.append(stmt)
        buf.clear()

    while i < n:
        ch = text[i]

        if ch in ('"', "'"):
            end = skip_quoted(text, i)
            buf.append(text[i:end])
            i = end
            continue

        if ch in _DROPPED:
            # Never a separator; only keep word boundaries apart.
            if buf and not buf[-1][-1:].isspace():
                buf.append(" ")
            i += 1
            continue

        if ch == "{":
            depth += 1
            buf.append(ch)
            i += 1
            continue

        if ch == "}":
            depth -= 1
            i += 1
            if depth == 0:
                flush()
                break
            buf.append(ch)
            if depth == 1 and not block_continues(text, i):
                flush()
            continue

        if ch == ";" and depth == 1:
            buf.append(ch)
            flush()
            i += 1
            j = skip_whitespace(text, i)
            if j < n and text[j] == "}":
                i = j + 1
                depth = 0
                break
            continue

        buf.append(ch)
        i += 1
    else:
        flush()

    if not statements:
        statements.append("")

    return Extracted(statements, i, depth)


def extract_condition(text: str, index: int) -> Extracted:
    """Return the raw text between a `(` (just before ``index``) and its matching `)`."""
    depth = 1
    i = index
    n = len(text)

    while i < n:
        ch = text[i]

        if ch in ('"', "'"):
            i = skip_quoted(text, i)
            continue

        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return Extracted(text[index:i], i + 1, 0)

        i += 1

    return Extracted(text[index:], n, depth)
