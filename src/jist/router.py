"""Dispatch a statement to its compiler based on its leading node."""

from __future__ import annotations

from typing import Any, Sequence

from .eval.collections import compile_collection
from .eval.control import compile_loop_control, compile_return, run_conditional, run_try_statement
from .eval.fn import compile_call, compile_function
from .eval.loops import run_for, run_while
from .eval.variables import compile_declaration, compile_reassignment
from .nodes import (
    BreakNode,
    CatchNode,
    CollectionNode,
    ContinueNode,
    DotNode,
    ElifNode,
    ElseNode,
    FinallyNode,
    ForNode,
    FunctionCallNode,
    FunctionNode,
    IfNode,
    ReturnNode,
    SyntaxNode,
    TryNode,
    VariableCallNode,
    VariableDeclNode,
    WhileNode,
    describe,
    parse_statement,
)
from .runtime import Context, JistRoutingError, JistRuntimeError, JistSyntaxError
from .token_types import TT
from .eval.common import is_punct

def route(nodes: Sequence[SyntaxNode], ctx: Context) -> Any:
    match nodes[0]:
        case VariableDeclNode():
            return compile_declaration(nodes, ctx)
        case VariableCallNode():
            return compile_reassignment(nodes, ctx)
        case CollectionNode():
            return compile_collection(nodes, ctx)
        case FunctionNode():
            return compile_function(nodes, ctx)
        case FunctionCallNode() | DotNode():
            return compile_call(nodes, ctx)
        case IfNode() | ElifNode() | ElseNode():
            return run_conditional(nodes, ctx)
        case TryNode() | CatchNode() | FinallyNode():
            return run_try_statement(nodes, ctx)
        case WhileNode():
            return run_while(nodes, ctx)
        case ForNode():
            return run_for(nodes, ctx)
        case ReturnNode():
            return compile_return(nodes, ctx)
        case BreakNode() | ContinueNode():
            return compile_loop_control(nodes, ctx)
        case head:
            raise JistRoutingError(f"No statement starts with {describe(head)}")

def run_statement(text: str, ctx: Context) -> Any:
    """Tokenize, build and execute one statement."""
    limit = ctx.settings.max_nesting

    try:
        # Every level costs several Python frames; stay clear of the recursion limit.
        if limit and ctx.nesting >= limit:
            raise JistRuntimeError(f"Statements nested too deeply (limit {limit})")

        ctx.nesting += 1
        try:
            nodes = list(parse_statement(text))
            while nodes and is_punct(nodes[-1], TT.SEMI):
                nodes.pop()

            if not nodes:
                raise JistSyntaxError("Empty statement")

            return route(nodes, ctx)
        finally:
            ctx.nesting -= 1
    except RecursionError as exc:
        err = JistRuntimeError("Statements nested too deeply (Python stack exhausted)")
        err.statement = text.strip()
        raise err from exc
    except JistRuntimeError as exc:
        if exc.statement is None:
            exc.statement = text.strip()
        raise
