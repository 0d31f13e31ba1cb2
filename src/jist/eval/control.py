from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..nodes import (
    BreakNode,
    CatchNode,
    ContinueNode,
    ElifNode,
    ElseNode,
    FinallyNode,
    IfNode,
    SyntaxNode,
    TryNode,
    describe,
    parse_statement,
)
from ..runtime import (
    Context,
    JNull,
    JistBreakSignal,
    JistContinueSignal,
    JistReturnSignal,
    JistRuntimeError,
    JistSyntaxError,
)
from .blocks import run_block
from .common import as_condition
from .expr import evaluate

logger = logging.getLogger(__name__)

# ---------- if / elif / else ----------

def compile_if_elif_else(node: IfNode | ElifNode | ElseNode, ctx: Context) -> bool:
    """Whether this clause's body should run; `else` always says yes."""
    if isinstance(node, ElseNode):
        return True

    return as_condition(evaluate(parse_statement(node.condition), ctx))

def run_conditional(nodes: Sequence[SyntaxNode], ctx: Context) -> bool:
    """Run the first clause whose condition holds. Returns whether one ran."""
    head = nodes[0]
    if not isinstance(head, IfNode):
        raise JistSyntaxError(f"'{describe(head)}' without a preceding 'if'")

    for i, clause in enumerate(nodes):
        if i > 0 and not isinstance(clause, (ElifNode, ElseNode)):
            raise JistSyntaxError(f"Unexpected {describe(clause)} in if statement")
        if isinstance(clause, ElseNode) and i != len(nodes) - 1:
            raise JistSyntaxError("'else' must be the last clause of an if statement")

    for clause in nodes:
        if compile_if_elif_else(clause, ctx):
            run_block(clause.body, ctx)
            return True

    return False

# ---------- return / break / continue ----------

def compile_return(nodes: Sequence[SyntaxNode], ctx: Context) -> None:
    if ctx.call_depth == 0:
        raise JistRuntimeError("return outside of a function")

    value = evaluate(nodes[1:], ctx) if len(nodes) > 1 else JNull()
    raise JistReturnSignal(value)

def compile_loop_control(nodes: Sequence[SyntaxNode], ctx: Context) -> None:
    head = nodes[0]
    word = "break" if isinstance(head, BreakNode) else "continue"

    if len(nodes) > 1:
        raise JistSyntaxError(f"Unexpected {describe(nodes[1])} after '{word}'")

    if ctx.loop_depth == 0:
        raise JistRuntimeError(f"{word} outside of a loop")

    if isinstance(head, ContinueNode):
        raise JistContinueSignal()
    raise JistBreakSignal()

# ---------- try / catch / finally ----------

@dataclass(frozen=True)
class TryOutcome:
    succeeded: bool
    error: Optional[JistRuntimeError] = None

def run_try_block(lines: Iterable[str], ctx: Context) -> TryOutcome:
    """Run until the first failing statement."""
    from ..router import run_statement  # local import to avoid cycle

    for line in lines:
        if not line.strip():
            continue
        try:
            run_statement(line, ctx)
        except JistRuntimeError as exc:
            logger.warning("try block failed: %s", exc)
            return TryOutcome(False, exc)

    return TryOutcome(True)

def _run_logged(block: str, lines: Iterable[str], ctx: Context) -> None:
    """Run every statement; failures are logged and skipped."""
    from ..router import run_statement  # local import to avoid cycle

    for line in lines:
        if not line.strip():
            continue
        try:
            run_statement(line, ctx)
        except JistRuntimeError as exc:
            logger.warning("%s block failed: %s", block, exc)

def run_catch_block(lines: Iterable[str], outcome: TryOutcome, ctx: Context) -> bool:
    if outcome.succeeded:
        return False

    _run_logged("catch", lines, ctx)
    return True

def run_try_statement(nodes: Sequence[SyntaxNode], ctx: Context) -> TryOutcome:
    head = nodes[0]
    if not isinstance(head, TryNode):
        raise JistSyntaxError(f"'{describe(head)}' without a preceding 'try'")

    catch_node: Optional[CatchNode] = None
    finally_node: Optional[FinallyNode] = None

    for clause in nodes[1:]:
        if isinstance(clause, CatchNode) and catch_node is None and finally_node is None:
            catch_node = clause
        elif isinstance(clause, FinallyNode) and finally_node is None:
            finally_node = clause
        else:
            raise JistSyntaxError(f"Unexpected {describe(clause)} in try statement")

    try:
        outcome = run_try_block(head.body, ctx)
        if catch_node is not None:
            run_catch_block(catch_node.body, outcome, ctx)
    finally:
        if finally_node is not None:
            _run_logged("finally", finally_node.body, ctx)

    return outcome
