from __future__ import annotations

import logging
import re
from typing import Iterator, Sequence

from ..nodes import ForNode, SyntaxNode, WhileNode, describe, parse_statement
from ..runtime import (
    Context,
    JInt,
    JistBreakSignal,
    JistContinueSignal,
    JistRuntimeError,
    JistSyntaxError,
    JistTypeError,
    TypeTag,
    Variable,
)
from ..types import INT_MAX
from .blocks import loop_scope, run_block
from .common import as_condition, checked_int
from .expr import evaluate

logger = logging.getLogger(__name__)

_INT_BOUND_RE = re.compile(r"[+-]?\d+")

def _iterations(ctx: Context) -> Iterator[int]:
    limit = ctx.settings.max_loop_iterations
    count = 0

    while True:
        count += 1
        if limit and count > limit:
            raise JistRuntimeError(f"Loop exceeded {limit} iterations")
        yield count

def _run_body(body: Sequence[str], ctx: Context) -> bool:
    """Run one pass; False means `break` was hit."""
    try:
        run_block(body, ctx)
    except JistBreakSignal:
        return False
    except JistContinueSignal:
        pass

    return True

def _condition_loop(condition_text: str, body: Sequence[str], ctx: Context) -> int:
    condition = parse_statement(condition_text)
    passes = 0

    with loop_scope(ctx):
        for _ in _iterations(ctx):
            if not as_condition(evaluate(condition, ctx)):
                break
            passes += 1
            if not _run_body(body, ctx):
                break

    return passes

def run_while(nodes: Sequence[SyntaxNode], ctx: Context) -> int:
    node: WhileNode = nodes[0]
    _no_trailing(nodes, "while")

    return _condition_loop(node.condition, node.body, ctx)

def _bound(text: str, ctx: Context) -> int:
    if _INT_BOUND_RE.fullmatch(text):
        return checked_int(int(text)).value

    value = ctx.variables.get(text).value
    if not isinstance(value, JInt):
        raise JistTypeError(f"for bound '{text}' must be an int variable")
    return value.value

def _induction_variable(name: str, start: int, ctx: Context) -> Variable:
    variables = ctx.variables

    with variables.lock:
        var = variables.find(name)
        if var is None:
            return variables.push(Variable(name, TypeTag.INT, JInt(start)))

    if var.tag is not TypeTag.INT:
        raise JistTypeError(f"for variable '{name}' must be an int, not {var.tag.label}")

    var.value = JInt(start)
    return var

def run_for(nodes: Sequence[SyntaxNode], ctx: Context) -> int:
    """
    `for (i, start..end) { ... }` runs with i = start, start+1, ... end
    (inclusive), creating i if it does not exist yet.

    `for (condition) { ... }` is accepted as an older spelling of `while`.
    """
    node: ForNode = nodes[0]
    _no_trailing(nodes, "for")

    if node.variable is None:
        if node.condition not in ctx.warned_headers:
            ctx.warned_headers.add(node.condition)
            logger.warning("for (%s) is deprecated; use while (%s)", node.condition, node.condition)
        return _condition_loop(node.condition, node.body, ctx)

    start = _bound(node.start, ctx)
    end = _bound(node.end, ctx)
    var = _induction_variable(node.variable, start, ctx)
    passes = 0

    with loop_scope(ctx):
        for _ in _iterations(ctx):
            if not var.value.value <= end:
                break
            passes += 1
            if not _run_body(node.body, ctx):
                break
            # no bound exceeds INT_MAX, so the loop is done
            if var.value.value >= INT_MAX:
                break
            var.value = JInt(var.value.value + 1)

    return passes

def _no_trailing(nodes: Sequence[SyntaxNode], word: str) -> None:
    if len(nodes) > 1:
        raise JistSyntaxError(f"Unexpected {describe(nodes[1])} after {word} loop")
