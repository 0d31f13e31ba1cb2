"""
Statement tokenizer for Jist.

Consumes one statement string left to right. Every recognizer returns a
token together with the number of characters it consumed; a recognizer
that does not match returns ``NONE_TOKEN`` (zero consumed) and the next one
is tried.

Composite constructs (if/elif/else, while, for, try/catch/finally, func)
become single tokens that carry their condition text and body statements,
split out by the block extractor.
"""

import re
from typing import Callable, List, Optional

from .extract import extract_block, extract_condition, skip_whitespace
from .headers import parse_collection_type, parse_for_range, parse_function_header
from .token_types import (
    NONE_TOKEN, TT, VALUE_TYPES, BlockPayload, CondClause, DotCall, ForHeader,
    FunctionHeader, Tok, WhileHeader,
)
from .types import JistSyntaxError

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_DECL_RE = re.compile(r"(?:let\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*:\s*")
_COLLECTION_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\s*<[^<>]*>")
_RANGE_HEADER_RE = re.compile(r"\s*[A-Za-z_][A-Za-z0-9_]*\s*,")


class LexError(JistSyntaxError):
    pass


class Lexer:
    """Tokenizer for a single statement."""

    KEYWORDS = {
        'if': TT.IF,
        'elif': TT.ELIF,
        'else': TT.ELSE,
        'while': TT.WHILE,
        'for': TT.FOR,
        'try': TT.TRY,
        'catch': TT.CATCH,
        'finally': TT.FINALLY,
        'func': TT.FUNCTION,
        'return': TT.RETURN,
        'break': TT.BREAK,
        'continue': TT.CONTINUE,
    }

    BOOLEANS = {'true': True, 'True': True, 'false': False, 'False': False}

    # Longest matches first
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('>=', TT.GTE),
        ('<=', TT.LTE),
        ('&&', TT.AND),
        ('||', TT.OR),
        ('++', TT.INCR),
        ('--', TT.DECR),
        ('=>', TT.FAT_ARROW),
        ('->', TT.ARROW),
        ('..', TT.RANGE),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('>', TT.GT),
        ('<', TT.LT),
        ('!', TT.NOT),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        (',', TT.COMMA),
        (':', TT.COLON),
        (';', TT.SEMI),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.tokens: List[Tok] = []
        self.recognizers: List[Callable[[], Tok]] = [
            self.scan_keyword,
            self.scan_declaration,
            self.scan_bool,
            self.scan_name,
            self.scan_number,
            self.scan_operator,
            self.scan_quoted,
        ]

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize the whole statement, return token list"""
        while self.pos < len(self.source):
            if self.skip_whitespace() or self.skip_comment():
                continue
            tok = self.next_token()
            self.tokens.append(tok)
            self.pos += tok.consumed

        return self.tokens

    def next_token(self) -> Tok:
        for recognizer in self.recognizers:
            tok = recognizer()
            if tok.consumed:
                return tok

        raise LexError(f"Unexpected character {self.peek()!r} at position {self.pos}")

    # ========================================================================
    # Helpers
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return ''

    def previous(self) -> Optional[Tok]:
        return self.tokens[-1] if self.tokens else None

    def skip_whitespace(self) -> bool:
        start = self.pos
        self.pos = skip_whitespace(self.source, self.pos)
        return self.pos != start

    def skip_comment(self) -> bool:
        if self.source.startswith('//', self.pos):
            end = self.source.find('\n', self.pos)
            self.pos = len(self.source) if end == -1 else end + 1
            return True

        if self.source.startswith('/*', self.pos):
            end = self.source.find('*/', self.pos + 2)
            if end == -1:
                raise LexError("Unterminated block comment")
            self.pos = end + 2
            return True

        return False

    def match_word(self, pos: Optional[int] = None) -> Optional[str]:
        m = _NAME_RE.match(self.source, self.pos if pos is None else pos)
        return m.group(0) if m else None

    def expect(self, index: int, char: str, context: str) -> int:
        """Skip whitespace from index, require char, return the index past it."""
        j = skip_whitespace(self.source, index)
        if j >= len(self.source) or self.source[j] != char:
            raise LexError(f"Expected '{char}' after {context}")
        return j + 1

    def body_at(self, index: int, context: str):
        start = self.expect(index, '{', context)
        extracted = extract_block(self.source, start)
        if not extracted.closed:
            raise LexError(f"Unterminated block in {context}")
        return tuple(extracted.body), extracted.end

    def condition_at(self, index: int, context: str):
        start = self.expect(index, '(', context)
        extracted = extract_condition(self.source, start)
        if not extracted.closed:
            raise LexError(f"Unterminated condition in {context}")
        return extracted.body, extracted.end

    def make(self, type: TT, value, end: int, payload=None) -> Tok:
        return Tok(type, value, end - self.pos, payload)

    # ========================================================================
    # Composite keywords
    # ========================================================================

    def scan_keyword(self) -> Tok:
        word = self.match_word()
        kind = self.KEYWORDS.get(word) if word else None
        if kind is None:
            return NONE_TOKEN

        after = self.pos + len(word)

        match kind:
            case TT.IF | TT.ELIF:
                condition, end = self.condition_at(after, word)
                body, end = self.body_at(end, f"{word} condition")
                return self.make(kind, word, end, CondClause(condition.strip(), body))
            case TT.ELSE | TT.TRY | TT.CATCH | TT.FINALLY:
                body, end = self.body_at(after, word)
                return self.make(kind, word, end, BlockPayload(body))
            case TT.WHILE:
                condition, end = self.condition_at(after, word)
                body, end = self.body_at(end, "while condition")
                return self.make(kind, word, end, WhileHeader(condition.strip(), body))
            case TT.FOR:
                return self.scan_for(after)
            case TT.FUNCTION:
                return self.scan_function(after)
            case _:
                return self.make(kind, word, after)

    def scan_for(self, after: int) -> Tok:
        header, end = self.condition_at(after, "for")
        body, end = self.body_at(end, "for header")

        if _RANGE_HEADER_RE.match(header):
            variable, start, stop = parse_for_range(header)
            payload = ForHeader(variable, start, stop, None, body)
        else:
            payload = ForHeader(None, None, None, header.strip(), body)

        return self.make(TT.FOR, 'for', end, payload)

    def scan_function(self, after: int) -> Tok:
        open_paren = self.source.find('(', after)
        if open_paren == -1:
            raise LexError("Expected '(' after function name")

        params = extract_condition(self.source, open_paren + 1)
        if not params.closed:
            raise LexError("Unterminated parameter list")

        brace = self.source.find('{', params.end)
        if brace == -1:
            raise LexError("Expected '{' after function header")

        name, specs, return_type = parse_function_header(self.source[after:brace])
        body, end = self.body_at(brace, "function header")

        return self.make(TT.FUNCTION, name, end, FunctionHeader(name, specs, return_type, body))

    # ========================================================================
    # Declarations
    # ========================================================================

    def scan_declaration(self) -> Tok:
        prev = self.previous()

        if prev is not None and prev.type == TT.VARIABLE:
            word = self.match_word()
            if word is None:
                raise LexError(f"Expected a type for '{prev.value}'")
            return self.make(TT.VAR_TYPE, word, self.pos + len(word))

        if prev is not None:
            return NONE_TOKEN

        m = _DECL_RE.match(self.source, self.pos)
        if m is None:
            if self.match_word() == 'let':
                raise LexError("Declaration requires 'name: type'")
            return NONE_TOKEN

        name = m.group(1)
        coll = _COLLECTION_RE.match(self.source, m.end())
        if coll is not None:
            header = parse_collection_type(name, coll.group(0))
            return self.make(TT.COLLECTION, name, coll.end(), header)

        return self.make(TT.VARIABLE, name, m.end())

    # ========================================================================
    # Names and literals
    # ========================================================================

    def scan_bool(self) -> Tok:
        word = self.match_word()
        if word not in self.BOOLEANS:
            return NONE_TOKEN

        return self.make(TT.BOOL, word, self.pos + len(word))

    def scan_name(self) -> Tok:
        word = self.match_word()
        if word is None:
            return NONE_TOKEN

        end = self.pos + len(word)

        if self.source.startswith('.', end) and not self.source.startswith('..', end):
            method = self.match_word(end + 1)
            if method is None:
                raise LexError(f"Expected a method name after '{word}.'")
            end += 1 + len(method)
            return self.make(TT.DOT, f"{word}.{method}", end, DotCall(word, method))

        j = skip_whitespace(self.source, end)
        if j < len(self.source) and self.source[j] == '(':
            return self.make(TT.FUNCTION_CALL, word, end)

        return self.make(TT.VARIABLE_CALL, word, end)

    def scan_number(self) -> Tok:
        i = self.pos

        if self.peek() == '-':
            prev = self.previous()
            if prev is not None and prev.type in VALUE_TYPES:
                return NONE_TOKEN
            i += 1

        if i >= len(self.source) or not self.source[i].isdigit():
            return NONE_TOKEN

        seen_dot = False
        while i < len(self.source):
            ch = self.source[i]
            if ch.isdigit():
                i += 1
                continue
            if ch == '.':
                if self.source.startswith('..', i):
                    break
                if seen_dot:
                    raise LexError(f"Invalid numeric literal {self.source[self.pos:i + 1]!r}")
                seen_dot = True
                i += 1
                continue
            break

        text = self.source[self.pos:i]
        return self.make(TT.FLOAT if seen_dot else TT.INT, text, i)

    def scan_operator(self) -> Tok:
        for op, kind in self.OPERATORS:
            if self.source.startswith(op, self.pos):
                return self.make(kind, op, self.pos + len(op))

        return NONE_TOKEN

    def scan_quoted(self) -> Tok:
        quote = self.peek()
        if quote not in ('"', "'"):
            return NONE_TOKEN

        i = self.pos + 1
        while i < len(self.source):
            ch = self.source[i]
            if ch == '\\':
                i += 2
                continue
            if ch == quote:
                kind = TT.STRING if quote == '"' else TT.CHAR
                return self.make(kind, self.source[self.pos:i + 1], i + 1)
            i += 1

        label = "string" if quote == '"' else "char"
        raise LexError(f"Unterminated {label} literal")


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize one statement"""
    return Lexer(source).tokenize()
