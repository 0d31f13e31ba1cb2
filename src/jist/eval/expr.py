"""
Expression evaluation.

Operators have no precedence: `a + b * c` folds left to right as
`(a + b) * c`. Parenthesized groups are evaluated first, function and dot
calls are evaluated in place.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Sequence, Tuple

from ..nodes import (
    BoolNode,
    CharNode,
    DotNode,
    FloatNode,
    FunctionCallNode,
    IntNode,
    OperatorNode,
    PunctNode,
    StringNode,
    SyntaxNode,
    VariableCallNode,
    describe,
)
from ..runtime import (
    Context,
    JBool,
    JChar,
    JFloat,
    JInt,
    JNull,
    JSequence,
    JText,
    JValue,
    JistRuntimeError,
    JistSyntaxError,
    JistTypeError,
    tag_of,
)
from ..token_types import TT
from .common import as_condition, checked_int, display, is_punct, matching_close, split_top_level, values_equal

BinaryOp = Callable[[JValue, JValue], JValue]

def evaluate(nodes: Sequence[SyntaxNode], ctx: Context) -> JValue:
    """Reduce an operand/operator/operand... sequence to one value."""
    if not nodes:
        raise JistSyntaxError("Empty expression")

    result: JValue | None = None
    pending: str | None = None
    i = 0

    while i < len(nodes):
        node = nodes[i]

        if isinstance(node, OperatorNode) and not _at_operand(result, pending, node):
            if result is None:
                raise JistSyntaxError(f"Expression cannot start with {describe(node)}")
            if pending is not None:
                raise JistSyntaxError(f"Unexpected {describe(node)} after '{pending}'")
            pending = node.op
            i += 1
            continue

        value, i = operand(nodes, i, ctx)

        if result is None:
            result = value
        elif pending is None:
            raise JistSyntaxError(f"Missing operator before {describe(node)}")
        else:
            result = apply_operator(pending, result, value)
            pending = None

    if pending is not None:
        # The right operand was never seen; it stays Null, which no operator takes.
        raise JistTypeError(f"Operator '{pending}' is missing its right operand")

    return result

def _at_operand(result, pending, node: OperatorNode) -> bool:
    """Unary `!` and `-` are allowed where an operand is expected."""
    return node.op in ("!", "-") and (result is None or pending is not None)

def operand(nodes: Sequence[SyntaxNode], i: int, ctx: Context) -> Tuple[JValue, int]:
    node = nodes[i]

    match node:
        case IntNode(value=v):
            return JInt(v), i + 1
        case FloatNode(value=v):
            return JFloat(v), i + 1
        case StringNode(value=v):
            return JText(v), i + 1
        case CharNode(value=v):
            return JChar(v), i + 1
        case BoolNode(value=v):
            return JBool(v), i + 1
        case VariableCallNode(name=name):
            return ctx.variables.get(name).value, i + 1
        case FunctionCallNode() | DotNode():
            result, end = call_at(nodes, i, ctx)
            if isinstance(result, list):
                raise JistTypeError(f"{describe(node)} returns a sequence, which only an array declaration can take")
            return result, end
        case PunctNode(kind=TT.LPAR):
            close = matching_close(nodes, i)
            return evaluate(nodes[i + 1:close], ctx), close + 1
        case OperatorNode(op="!"):
            if i + 1 >= len(nodes):
                raise JistSyntaxError("'!' needs an operand")
            value, end = operand(nodes, i + 1, ctx)
            return JInt(0 if as_condition(value) else 1), end
        case OperatorNode(op="-"):
            if i + 1 >= len(nodes):
                raise JistSyntaxError("'-' needs an operand")
            value, end = operand(nodes, i + 1, ctx)
            return _negate(value), end

    raise JistTypeError(f"Unexpected {describe(node)} in expression")

def call_at(nodes: Sequence[SyntaxNode], i: int, ctx: Context) -> Tuple[JValue | JSequence, int]:
    """Evaluate the call starting at nodes[i]; returns (result, index past `)`)."""
    from .fn import call_function, call_method  # local import to avoid cycle

    node = nodes[i]
    if i + 1 >= len(nodes) or not is_punct(nodes[i + 1], TT.LPAR):
        raise JistSyntaxError(f"Expected '(' after {describe(node)}")

    close = matching_close(nodes, i + 1)
    args: List[JValue] = []

    for part in split_top_level(nodes[i + 2:close]):
        if not part:
            raise JistSyntaxError(f"Empty argument in {describe(node)}")
        args.append(evaluate(part, ctx))

    if isinstance(node, DotNode):
        return call_method(ctx, node.object, node.method, args), close + 1

    return call_function(ctx, node.name, args), close + 1

def _negate(value: JValue) -> JValue:
    match value:
        case JInt(value=v):
            return checked_int(-v)
        case JFloat(value=v):
            return JFloat(-v)

    raise JistTypeError(f"Cannot negate {tag_of(value).label}")

# ---------- Operators ----------

def _is_number(value: JValue) -> bool:
    return isinstance(value, (JInt, JFloat))

def _is_text(value: JValue) -> bool:
    return isinstance(value, (JText, JChar))

def _operand_error(op: str, a: JValue, b: JValue) -> JistTypeError:
    return JistTypeError(f"Unsupported operand types for '{op}': {tag_of(a).label} and {tag_of(b).label}")

def _numeric(op: str, a: JValue, b: JValue, int_op: Callable[[int, int], int], float_op: Callable[[float, float], float]) -> JValue:
    if not (_is_number(a) and _is_number(b)):
        raise _operand_error(op, a, b)

    if isinstance(a, JInt) and isinstance(b, JInt):
        return checked_int(int_op(a.value, b.value))

    return JFloat(float_op(float(a.value), float(b.value)))

def float_divide(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b

def _int_divide(a: int, b: int) -> int:
    if b == 0:
        raise JistRuntimeError("Integer division by zero")
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient

def _int_modulo(a: int, b: int) -> int:
    if b == 0:
        raise JistRuntimeError("Integer modulo by zero")
    return a - b * _int_divide(a, b)

def _float_modulo(a: float, b: float) -> float:
    if b == 0.0:
        return math.nan
    return math.fmod(a, b)

def _add(a: JValue, b: JValue) -> JValue:
    if _is_text(a) or _is_text(b):
        return JText(display(a) + display(b))
    return _numeric("+", a, b, lambda x, y: x + y, lambda x, y: x + y)

def _compare(op: str, a: JValue, b: JValue) -> bool:
    if op == "==":
        return values_equal(a, b)
    if op == "!=":
        return not values_equal(a, b)

    if _is_number(a) and _is_number(b):
        x, y = a.value, b.value
    elif _is_text(a) and _is_text(b):
        x, y = a.value, b.value
    else:
        raise _operand_error(op, a, b)

    match op:
        case "<":
            return x < y
        case ">":
            return x > y
        case "<=":
            return x <= y
        case _:
            return x >= y

def _flag(value: bool) -> JInt:
    return JInt(1 if value else 0)

_ARITHMETIC: Dict[str, BinaryOp] = {
    "+": _add,
    "-": lambda a, b: _numeric("-", a, b, lambda x, y: x - y, lambda x, y: x - y),
    "*": lambda a, b: _numeric("*", a, b, lambda x, y: x * y, lambda x, y: x * y),
    "/": lambda a, b: _numeric("/", a, b, _int_divide, float_divide),
    "%": lambda a, b: _numeric("%", a, b, _int_modulo, _float_modulo),
}

_COMPARISONS = frozenset({"==", "!=", "<", ">", "<=", ">="})

def apply_operator(op: str, a: JValue, b: JValue) -> JValue:
    if isinstance(a, JNull) or isinstance(b, JNull):
        if op not in ("==", "!="):
            raise _operand_error(op, a, b)

    if op in _ARITHMETIC:
        return _ARITHMETIC[op](a, b)

    if op in _COMPARISONS:
        return _flag(_compare(op, a, b))

    if op == "&&":
        return _flag(as_condition(a) and as_condition(b))

    if op == "||":
        return _flag(as_condition(a) or as_condition(b))

    raise JistSyntaxError(f"Operator '{op}' cannot be used in an expression")
