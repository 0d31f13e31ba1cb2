from __future__ import annotations

from typing import Sequence

from ..nodes import OperatorNode, SyntaxNode, TypeNode, VariableCallNode, VariableDeclNode, describe
from ..runtime import Context, JFloat, JInt, JistSyntaxError, JistTypeError, Variable
from ..token_types import TT
from .common import checked_int, coerce, is_punct, zero_value
from .expr import evaluate

def compile_declaration(nodes: Sequence[SyntaxNode], ctx: Context) -> Variable:
    """`let name: type = expr;` (initializer optional)."""
    decl: VariableDeclNode = nodes[0]

    if len(nodes) < 2 or not isinstance(nodes[1], TypeNode):
        raise JistTypeError(f"Declaration of '{decl.name}' is missing its type")

    tag = nodes[1].tag
    rest = nodes[2:]

    if not rest:
        value = zero_value(tag)
    elif not is_punct(rest[0], TT.ASSIGN):
        raise JistSyntaxError(f"Expected '=' in declaration of '{decl.name}', got {describe(rest[0])}")
    elif len(rest) == 1:
        raise JistSyntaxError(f"Declaration of '{decl.name}' has no value after '='")
    else:
        value = coerce(evaluate(rest[1:], ctx), tag)

    variables = ctx.variables
    with variables.lock:
        existing = variables.find(decl.name)
        if existing is None:
            return variables.push(Variable(decl.name, tag, value))

        existing.tag = tag
        existing.value = value
        return existing

def compile_reassignment(nodes: Sequence[SyntaxNode], ctx: Context) -> Variable:
    """`name = expr;`, `name++;` or `name--;`."""
    call: VariableCallNode = nodes[0]

    if len(nodes) < 2:
        raise JistSyntaxError(f"Expected an assignment to '{call.name}'")

    nxt = nodes[1]

    if isinstance(nxt, OperatorNode) and nxt.op in ("++", "--"):
        if len(nodes) > 2:
            raise JistSyntaxError(f"Unexpected {describe(nodes[2])} after '{call.name}{nxt.op}'")
        return _step(call.name, 1 if nxt.op == "++" else -1, ctx)

    if not is_punct(nxt, TT.ASSIGN):
        raise JistSyntaxError(f"Expected '=' after '{call.name}', got {describe(nxt)}")

    if len(nodes) == 2:
        raise JistSyntaxError(f"Assignment to '{call.name}' has no value")

    value = evaluate(nodes[2:], ctx)
    var = ctx.variables.get(call.name)
    var.value = coerce(value, var.tag)
    return var

def _step(name: str, delta: int, ctx: Context) -> Variable:
    var = ctx.variables.get(name)

    match var.value:
        case JInt(value=v):
            var.value = checked_int(v + delta)
        case JFloat(value=v):
            var.value = JFloat(v + delta)
        case _:
            raise JistTypeError(f"Cannot increment {var.tag.label} variable '{name}'")

    return var
