"""
Token Types for Jist

Shared between the lexer, the header grammar and the node builder.
"""

from typing import Any, Optional, Tuple
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    INT = auto()
    FLOAT = auto()
    STRING = auto()
    CHAR = auto()
    BOOL = auto()

    # Names
    VARIABLE = auto()       # declared name in `let a: int`
    VAR_TYPE = auto()       # declared type in `let a: int`
    VARIABLE_CALL = auto()  # variable reference
    FUNCTION_CALL = auto()  # name directly followed by `(`
    DOT = auto()            # object.method
    COLLECTION = auto()     # `a: Array<int>` / `a: Dict<k, v>`

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    MOD = auto()
    EQ = auto()
    NEQ = auto()
    LT = auto()
    GT = auto()
    LTE = auto()
    GTE = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    INCR = auto()
    DECR = auto()

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LBRACE = auto()
    RBRACE = auto()
    LSQB = auto()
    RSQB = auto()
    COMMA = auto()
    ASSIGN = auto()
    FAT_ARROW = auto()
    ARROW = auto()
    RANGE = auto()
    COLON = auto()
    SEMI = auto()

    # Composite keywords
    IF = auto()
    ELIF = auto()
    ELSE = auto()
    WHILE = auto()
    FOR = auto()
    TRY = auto()
    CATCH = auto()
    FINALLY = auto()
    FUNCTION = auto()
    RETURN = auto()
    BREAK = auto()
    CONTINUE = auto()

    # Recognizer did not match
    NONE = auto()


OPERATOR_TYPES = frozenset({
    TT.PLUS, TT.MINUS, TT.STAR, TT.SLASH, TT.MOD,
    TT.EQ, TT.NEQ, TT.LT, TT.GT, TT.LTE, TT.GTE,
    TT.AND, TT.OR, TT.NOT, TT.INCR, TT.DECR,
})

# Token kinds after which `-` starts a negative literal is impossible.
VALUE_TYPES = frozenset({
    TT.INT, TT.FLOAT, TT.STRING, TT.CHAR, TT.BOOL,
    TT.VARIABLE_CALL, TT.RPAR, TT.RSQB,
})


@dataclass(frozen=True)
class CondClause:
    condition: str
    body: Tuple[str, ...]


@dataclass(frozen=True)
class BlockPayload:
    body: Tuple[str, ...]


@dataclass(frozen=True)
class WhileHeader:
    condition: str
    body: Tuple[str, ...]


@dataclass(frozen=True)
class ForHeader:
    """Range form sets variable/start/end; the condition form sets condition."""
    variable: Optional[str]
    start: Optional[str]
    end: Optional[str]
    condition: Optional[str]
    body: Tuple[str, ...]

    @property
    def is_range(self) -> bool:
        return self.variable is not None


@dataclass(frozen=True)
class ParamSpec:
    name: str
    type_name: str
    default: Optional[str] = None


@dataclass(frozen=True)
class FunctionHeader:
    name: str
    params: Tuple[ParamSpec, ...]
    return_type: Optional[str]
    body: Tuple[str, ...]


@dataclass(frozen=True)
class CollectionHeader:
    name: str
    kind: str
    single: str
    pair: Optional[Tuple[str, str]]


@dataclass(frozen=True)
class DotCall:
    object: str
    method: str


@dataclass
class Tok:
    type: TT
    value: Any
    consumed: int = 0
    payload: Any = None

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r})"


NONE_TOKEN = Tok(TT.NONE, None, 0)


def _render_body(body: Tuple[str, ...]) -> str:
    inner = " ".join(line for line in body if line)
    return "{ " + inner + " }" if inner else "{ }"


def _render_param(param: ParamSpec) -> str:
    text = f"{param.name}: {param.type_name}"
    if param.default is not None:
        text += f" = {param.default}"
    return text


def render_token(tok: Tok) -> str:
    """Render a token back to source text that tokenizes to the same token."""
    payload = tok.payload

    match tok.type:
        case TT.COLLECTION:
            if payload.pair is not None:
                key, value = payload.pair
                return f"{payload.name}: {payload.kind}<{key}, {value}>"
            return f"{payload.name}: {payload.kind}<{payload.single}>"
        case TT.FUNCTION:
            params = ", ".join(_render_param(p) for p in payload.params)
            head = f"func {payload.name}({params})"
            if payload.return_type is not None:
                head += f" -> {payload.return_type}"
            return f"{head} {_render_body(payload.body)}"
        case TT.WHILE:
            return f"while ({payload.condition}) {_render_body(payload.body)}"
        case TT.FOR:
            if payload.is_range:
                header = f"{payload.variable}, {payload.start}..{payload.end}"
            else:
                header = payload.condition
            return f"for ({header}) {_render_body(payload.body)}"
        case TT.IF | TT.ELIF:
            return f"{tok.value} ({payload.condition}) {_render_body(payload.body)}"
        case TT.ELSE | TT.TRY | TT.CATCH | TT.FINALLY:
            return f"{tok.value} {_render_body(payload.body)}"
        case TT.DOT:
            return f"{payload.object}.{payload.method}"
        case _:
            return str(tok.value)
