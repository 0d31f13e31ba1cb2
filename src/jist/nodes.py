"""Syntax nodes: one per token, with literal text parsed into native values."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional, Tuple
from typing_extensions import TypeAlias

from .config import Settings
from .lexer import tokenize
from .token_types import OPERATOR_TYPES, TT, Tok
from .types import INT_MAX, INT_MIN, JistSyntaxError, JistTypeError, TypeTag

# ---------- Literal nodes ----------

@dataclass(frozen=True)
class IntNode:
    value: int

@dataclass(frozen=True)
class FloatNode:
    value: float

@dataclass(frozen=True)
class StringNode:
    value: str

@dataclass(frozen=True)
class CharNode:
    value: str

@dataclass(frozen=True)
class BoolNode:
    value: bool

# ---------- Names, operators, punctuation ----------

@dataclass(frozen=True)
class OperatorNode:
    op: str

@dataclass(frozen=True)
class PunctNode:
    kind: TT
    text: str

@dataclass(frozen=True)
class VariableDeclNode:
    name: str

@dataclass(frozen=True)
class TypeNode:
    tag: TypeTag

@dataclass(frozen=True)
class VariableCallNode:
    name: str

@dataclass(frozen=True)
class FunctionCallNode:
    name: str

@dataclass(frozen=True)
class DotNode:
    object: str
    method: str

@dataclass(frozen=True)
class CollectionNode:
    name: str
    kind: str  # "array" | "dict"
    element: Optional[TypeTag] = None
    key: Optional[TypeTag] = None
    value: Optional[TypeTag] = None

# ---------- Composite statements ----------

@dataclass(frozen=True)
class ParamDecl:
    name: str
    tag: TypeTag
    default_text: Optional[str] = None

@dataclass(frozen=True)
class FunctionNode:
    name: str
    params: Tuple[ParamDecl, ...]
    return_tag: TypeTag
    body: Tuple[str, ...]

@dataclass(frozen=True)
class IfNode:
    condition: str
    body: Tuple[str, ...]

@dataclass(frozen=True)
class ElifNode:
    condition: str
    body: Tuple[str, ...]

@dataclass(frozen=True)
class ElseNode:
    body: Tuple[str, ...]

@dataclass(frozen=True)
class WhileNode:
    condition: str
    body: Tuple[str, ...]

@dataclass(frozen=True)
class ForNode:
    variable: Optional[str]
    start: Optional[str]
    end: Optional[str]
    condition: Optional[str]
    body: Tuple[str, ...]

@dataclass(frozen=True)
class TryNode:
    body: Tuple[str, ...]

@dataclass(frozen=True)
class CatchNode:
    body: Tuple[str, ...]

@dataclass(frozen=True)
class FinallyNode:
    body: Tuple[str, ...]

@dataclass(frozen=True)
class ReturnNode:
    pass

@dataclass(frozen=True)
class BreakNode:
    pass

@dataclass(frozen=True)
class ContinueNode:
    pass

SyntaxNode: TypeAlias = (
    IntNode
    | FloatNode
    | StringNode
    | CharNode
    | BoolNode
    | OperatorNode
    | PunctNode
    | VariableDeclNode
    | TypeNode
    | VariableCallNode
    | FunctionCallNode
    | DotNode
    | CollectionNode
    | FunctionNode
    | IfNode
    | ElifNode
    | ElseNode
    | WhileNode
    | ForNode
    | TryNode
    | CatchNode
    | FinallyNode
    | ReturnNode
    | BreakNode
    | ContinueNode
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"', "'": "'"}

def unescape(text: str) -> str:
    """Decode backslash escapes; unknown escapes keep the escaped character."""
    out = []
    i = 0

    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1

    return "".join(out)

def _int_literal(text: str) -> IntNode:
    value = int(text)
    if not INT_MIN <= value <= INT_MAX:
        raise JistSyntaxError(f"Integer literal {text} does not fit in 32 bits")
    return IntNode(value)

def _char_literal(text: str) -> CharNode:
    value = unescape(text[1:-1])
    if len(value) != 1:
        raise JistSyntaxError(f"Char literal {text} must hold exactly one character")
    return CharNode(value)

def _collection_node(tok: Tok) -> CollectionNode:
    header = tok.payload

    match header.kind:
        case "array":
            return CollectionNode(header.name, "array", element=TypeTag.parse(header.single))
        case "dict":
            key, value = header.pair
            return CollectionNode(header.name, "dict", key=TypeTag.parse(key), value=TypeTag.parse(value))
        case _:
            raise JistTypeError(f"Unknown collection type '{header.kind}'")

def _function_node(tok: Tok) -> FunctionNode:
    header = tok.payload
    params = tuple(ParamDecl(p.name, TypeTag.parse(p.type_name), p.default) for p in header.params)
    return_tag = TypeTag.NULL if header.return_type is None else TypeTag.parse(header.return_type)
    return FunctionNode(header.name, params, return_tag, header.body)

def build_node(tok: Tok) -> SyntaxNode:
    payload = tok.payload

    match tok.type:
        case TT.INT:
            return _int_literal(tok.value)
        case TT.FLOAT:
            return FloatNode(float(tok.value))
        case TT.STRING:
            return StringNode(unescape(tok.value[1:-1]))
        case TT.CHAR:
            return _char_literal(tok.value)
        case TT.BOOL:
            return BoolNode(tok.value.lower() == "true")
        case TT.VARIABLE:
            return VariableDeclNode(tok.value)
        case TT.VAR_TYPE:
            return TypeNode(TypeTag.parse(tok.value))
        case TT.VARIABLE_CALL:
            return VariableCallNode(tok.value)
        case TT.FUNCTION_CALL:
            return FunctionCallNode(tok.value)
        case TT.DOT:
            return DotNode(payload.object, payload.method)
        case TT.COLLECTION:
            return _collection_node(tok)
        case TT.FUNCTION:
            return _function_node(tok)
        case TT.IF:
            return IfNode(payload.condition, payload.body)
        case TT.ELIF:
            return ElifNode(payload.condition, payload.body)
        case TT.ELSE:
            return ElseNode(payload.body)
        case TT.WHILE:
            return WhileNode(payload.condition, payload.body)
        case TT.FOR:
            return ForNode(payload.variable, payload.start, payload.end, payload.condition, payload.body)
        case TT.TRY:
            return TryNode(payload.body)
        case TT.CATCH:
            return CatchNode(payload.body)
        case TT.FINALLY:
            return FinallyNode(payload.body)
        case TT.RETURN:
            return ReturnNode()
        case TT.BREAK:
            return BreakNode()
        case TT.CONTINUE:
            return ContinueNode()
        case kind if kind in OPERATOR_TYPES:
            return OperatorNode(tok.value)
        case TT.NONE:
            raise JistSyntaxError("Unrecognized token")
        case _:
            return PunctNode(tok.type, tok.value)

def build_nodes(tokens: Iterable[Tok]) -> Tuple[SyntaxNode, ...]:
    return tuple(build_node(tok) for tok in tokens)

def _parse_statement(text: str) -> Tuple[SyntaxNode, ...]:
    return build_nodes(tokenize(text))

# Bodies and conditions are parsed once per distinct text and re-executed
# from the cached nodes; lookups still read the live stores at run time.
parse_statement = lru_cache(maxsize=Settings.from_env().statement_cache)(_parse_statement)

def describe(node: SyntaxNode) -> str:
    """Short human label for error messages."""
    match node:
        case IntNode(value=v) | FloatNode(value=v):
            return f"number {v}"
        case StringNode(value=v):
            return f'string "{v}"'
        case CharNode(value=v):
            return f"char '{v}'"
        case BoolNode(value=v):
            return "true" if v else "false"
        case OperatorNode(op=op):
            return f"operator '{op}'"
        case PunctNode(text=text):
            return f"'{text}'"
        case VariableCallNode(name=name) | VariableDeclNode(name=name):
            return f"variable '{name}'"
        case FunctionCallNode(name=name):
            return f"call to '{name}'"
        case DotNode(object=obj, method=method):
            return f"call to '{obj}.{method}'"
        case _:
            return type(node).__name__.removesuffix("Node").lower()
