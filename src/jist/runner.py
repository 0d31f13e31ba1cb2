from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from .config import Settings, debug_py_trace_enabled
from .report import dump_stores
from .router import run_statement
from .runtime import Context, JistRuntimeError
from .source import split_statements

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".jist"

USAGE = "usage: jist [--strict] [--log-level LEVEL] [FILE.jist | -]"

def run(source: str, ctx: Optional[Context]=None, *, strict: Optional[bool]=None) -> Context:
    """
    Execute every statement of a script against ctx (a fresh one by default).

    Without strict mode a failing statement is logged and recorded in
    ctx.errors, and execution continues with the next statement.
    """
    ctx = ctx if ctx is not None else Context()
    strict = ctx.settings.strict if strict is None else strict

    for statement in split_statements(source):
        try:
            run_statement(statement, ctx)
        except JistRuntimeError as exc:
            if strict:
                raise
            ctx.errors.append(exc)
            logger.error("%s", exc)

    return ctx

def _load_source(arg: str) -> str:
    """
    Resolve CLI input into source text.
    - "-" => read stdin.
    - Otherwise a path ending in .jist.
    """

    if arg == "-":
        return sys.stdin.read()

    path = Path(arg)
    if path.suffix != SOURCE_SUFFIX:
        raise JistRuntimeError(f"Expected a {SOURCE_SUFFIX} source file, got '{arg}'")

    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise JistRuntimeError(f"Cannot read '{arg}': {exc.strerror or exc}") from exc

def run_file(path: str, ctx: Optional[Context]=None, *, strict: Optional[bool]=None) -> Context:
    return run(_load_source(path), ctx, strict=strict)

def _report(exc: JistRuntimeError) -> None:
    print(f"error: {exc}", file=sys.stderr)
    if debug_py_trace_enabled():
        print("".join(traceback.format_exception(exc)), file=sys.stderr, end="")

def main(argv: Optional[List[str]]=None) -> int:
    settings = Settings.from_env()
    strict = settings.strict
    log_level = settings.log_level
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token in ("-h", "--help"):
            print(USAGE)
            return 0

        if token == "--strict":
            strict = True
            continue

        if token.startswith("--log-level="):
            log_level = token.split("=", 1)[1].upper()
            continue

        if token == "--log-level":
            try:
                log_level = next(it).upper()
            except StopIteration:
                print("--log-level flag requires a level", file=sys.stderr)
                return 2
            continue

        if arg is None:
            arg = token
        else:
            print(f"Unexpected argument: {token}\n{USAGE}", file=sys.stderr)
            return 2

    if not isinstance(logging.getLevelName(log_level), int):
        print(f"Unknown log level: {log_level}", file=sys.stderr)
        return 2

    logging.basicConfig(level=log_level, format="%(levelname)s %(name)s: %(message)s")

    if arg is None:
        from .repl import repl

        repl()
        return 0

    ctx = Context(settings=settings)
    try:
        run_file(arg, ctx, strict=strict)
    except JistRuntimeError as exc:
        _report(exc)
        return 1

    dump_stores(ctx, sys.stdout)
    return 0

if __name__ == "__main__":
    sys.exit(main())
