from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable, Iterator

from ..runtime import Context, JistRuntimeError


def run_block(lines: Iterable[str], ctx: Context) -> None:
    """Route every statement of a body in order; errors propagate."""
    from ..router import run_statement  # local import to avoid cycle

    for line in lines:
        if not line.strip():
            continue
        run_statement(line, ctx)


@contextmanager
def loop_scope(ctx: Context) -> Iterator[None]:
    ctx.loop_depth += 1
    try:
        yield
    finally:
        ctx.loop_depth -= 1


@contextmanager
def call_scope(ctx: Context, name: str) -> Iterator[None]:
    """Track call depth; loops of the caller are not visible inside the callee."""
    if ctx.call_depth >= ctx.settings.max_call_depth:
        raise JistRuntimeError(f"Maximum call depth ({ctx.settings.max_call_depth}) exceeded calling '{name}'")

    saved_loops = ctx.loop_depth
    ctx.call_depth += 1
    ctx.loop_depth = 0
    try:
        yield
    finally:
        ctx.call_depth -= 1
        ctx.loop_depth = saved_loops
