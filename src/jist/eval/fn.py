from __future__ import annotations

import logging
from typing import List, Sequence

from ..nodes import FunctionNode, ParamDecl, SyntaxNode, describe
from ..runtime import (
    BuiltinFunction,
    Context,
    JChar,
    JFloat,
    JInt,
    JNull,
    JSequence,
    JText,
    JValue,
    JistArityError,
    JistLookupError,
    JistReturnSignal,
    JistRuntimeError,
    JistSyntaxError,
    JistTypeError,
    Param,
    TypeTag,
    UserFunction,
    Variable,
    call_builtin_method,
    tag_of,
)
from .blocks import call_scope, run_block
from .common import coerce, display, parse_literal
from .expr import call_at

logger = logging.getLogger(__name__)

def _param(decl: ParamDecl) -> Param:
    if decl.default_text is None:
        return Param(decl.name, decl.tag)

    try:
        default = parse_literal(decl.default_text, decl.tag)
    except JistRuntimeError:
        logger.debug("default %r for parameter '%s' is not a %s; using null", decl.default_text, decl.name, decl.tag.label)
        default = JNull()

    return Param(decl.name, decl.tag, default)

def compile_function(nodes: Sequence[SyntaxNode], ctx: Context) -> UserFunction:
    node: FunctionNode = nodes[0]

    if len(nodes) > 1:
        raise JistSyntaxError(f"Unexpected {describe(nodes[1])} after function '{node.name}'")

    fn = UserFunction(node.name, node.return_tag, tuple(_param(p) for p in node.params), node.body)
    return ctx.functions.upsert(fn)

def compile_call(nodes: Sequence[SyntaxNode], ctx: Context) -> JValue | JSequence:
    """A call used as a statement: `print("hi");`, `list.push(3);`."""
    result, end = call_at(nodes, 0, ctx)

    if end != len(nodes):
        raise JistSyntaxError(f"Unexpected {describe(nodes[end])} after {describe(nodes[0])}")

    return result

# ---------- Call resolution ----------

def call_function(ctx: Context, name: str, args: List[JValue]) -> JValue | JSequence:
    """User functions shadow builtins of the same name."""
    fn = ctx.functions.find(name)
    if fn is not None:
        return call_user_function(fn, args, ctx)

    builtin = ctx.builtins.get(name)
    if builtin is not None:
        return call_builtin(builtin, args, ctx)

    raise JistLookupError(f"Function '{name}' not found")

def call_method(ctx: Context, obj: str, method: str, args: List[JValue]) -> JValue | JSequence:
    return call_builtin_method(ctx, obj, method, args)

def _bind_arguments(fn: UserFunction, args: List[JValue]) -> List[Variable]:
    if len(args) > len(fn.params):
        raise JistArityError(f"Function '{fn.name}' takes {len(fn.params)} argument(s); got {len(args)}")

    bound = []

    for i, param in enumerate(fn.params):
        if i < len(args):
            value = coerce(args[i], param.tag)
        elif not param.required:
            value = param.default
        else:
            raise JistArityError(f"Function '{fn.name}' is missing argument '{param.name}'")
        bound.append(Variable(param.name, param.tag, value))

    return bound

def call_user_function(fn: UserFunction, args: List[JValue], ctx: Context) -> JValue:
    bound = _bind_arguments(fn, args)

    with call_scope(ctx, fn.name):
        pushed = [ctx.variables.push(var) for var in bound]
        try:
            run_block(fn.body, ctx)
            result: JValue = JNull()
        except JistReturnSignal as signal:
            result = signal.value
        finally:
            for var in pushed:
                ctx.variables.remove(var)

    if isinstance(result, JNull) or fn.return_tag is TypeTag.NULL:
        return JNull()

    return coerce(result, fn.return_tag)

def _unwrap(value: JValue, tag: TypeTag | None, name: str, position: int) -> object:
    """Argument to native form, with Int promoted to Float where a Float is expected."""
    match tag:
        case None:
            return display(value)
        case TypeTag.FLOAT if isinstance(value, (JInt, JFloat)):
            return float(value.value)
        case TypeTag.STRING if isinstance(value, (JText, JChar)):
            return value.value

    raise JistTypeError(f"{name}() argument {position} must be {tag.label}, got {tag_of(value).label}")

def _wrap(result: object, tag: TypeTag) -> JValue:
    match tag:
        case TypeTag.FLOAT:
            return JFloat(float(result))
        case TypeTag.STRING:
            return JText(str(result))
        case _:
            return JNull()

def call_builtin(builtin: BuiltinFunction, args: List[JValue], ctx: Context) -> JValue | JSequence:
    sig = builtin.signature

    if len(args) != len(sig.params):
        raise JistArityError(f"{builtin.name}() takes {len(sig.params)} argument(s); got {len(args)}")

    natives = [_unwrap(arg, tag, builtin.name, i + 1) for i, (arg, tag) in enumerate(zip(args, sig.params))]
    result = builtin.fn(ctx, *natives)

    if sig.sequence:
        return [_wrap(item, sig.returns) for item in result]

    return _wrap(result, sig.returns)

