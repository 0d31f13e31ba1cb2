"""Interactive Jist prompt. One Context lives for the whole session."""

from __future__ import annotations

import os
import re
import sys
import traceback
from typing import Callable, Dict, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .config import debug_py_trace_enabled
from .report import dump_stores
from .runner import run
from .runtime import Context, JistRuntimeError
from .source import strip_comments

_TRACE_VAR = "JIST_DEBUG_PY_TRACE"

# Pasted text often carries these; the tokenizer would reject them.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

_OPEN = "{[("
_CLOSE = "}])"


def is_complete(text: str) -> bool:
    """True once every bracket is closed and the input ends a statement."""
    try:
        body = strip_comments(text)
    except JistRuntimeError:
        return False

    depth = 0
    quote = None
    escaped = False

    for ch in body:
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in ('"', "'"):
            quote = ch
        elif ch in _OPEN:
            depth += 1
        elif ch in _CLOSE:
            depth -= 1

    if quote or depth > 0:
        return False

    # A stray closer is submitted so the splitter can report it.
    return depth < 0 or body.rstrip().endswith((";", "}"))


# ---------- slash commands ----------

def _cmd_clear(_arg: str, _ctx: Context) -> None:
    clear()


def _cmd_dump(_arg: str, ctx: Context) -> None:
    dump_stores(ctx, sys.stdout)


def _cmd_reset(_arg: str, ctx: Context) -> None:
    ctx.reset()
    print("Environment reset.")


def _cmd_py_traceback(arg: str, _ctx: Context) -> None:
    choice = arg.strip().lower()

    if choice in ("on", "1", "true", "yes"):
        enable = True
    elif choice in ("off", "0", "false", "no"):
        enable = False
    elif not choice:
        enable = not debug_py_trace_enabled()
    else:
        print("Usage: /py-traceback [on|off]", file=sys.stderr)
        return

    if enable:
        os.environ[_TRACE_VAR] = "1"
    else:
        os.environ.pop(_TRACE_VAR, None)

    print(f"Python traceback: {'on' if enable else 'off'}")


SlashHandler = Callable[[str, Context], None]

# name => (description, handler)
_SLASH_CMDS: Dict[str, Tuple[str, SlashHandler]] = {
    "/clear": ("Clear the terminal screen", _cmd_clear),
    "/dump": ("Show variables, arrays and dictionaries", _cmd_dump),
    "/py-traceback": ("Toggle Python tracebacks on errors [on|off]", _cmd_py_traceback),
    "/reset": ("Forget every variable, collection and function", _cmd_reset),
}


class _SlashCompleter(Completer):
    def get_completions(self, document, complete_event):
        typed = document.text_before_cursor
        if not typed.startswith("/"):
            return

        for name, (desc, _handler) in _SLASH_CMDS.items():
            if name.startswith(typed):
                yield Completion(name, start_position=-len(typed), display_meta=desc)


def _handle_slash(line: str, ctx: Context) -> bool:
    """Run a slash command. False means the line is ordinary Jist source."""
    cmd, _, arg = line.strip().partition(" ")
    if not cmd.startswith("/"):
        return False

    entry = _SLASH_CMDS.get(cmd)
    if entry is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        return True

    entry[1](arg, ctx)
    return True


def _normalize(text: str) -> str:
    return _INVISIBLE_RE.sub("", text)


def eval_input(text: str, ctx: Context) -> None:
    """Run one submission strictly; an error is printed and the session goes on."""
    try:
        run(text, ctx, strict=True)
    except JistRuntimeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if debug_py_trace_enabled():
            print("\nPython traceback:", file=sys.stderr)
            print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")


def _key_bindings() -> KeyBindings:
    bindings = KeyBindings()

    @bindings.add("enter")
    def _submit_or_newline(event):
        buf = event.app.current_buffer
        text = buf.text.strip()

        if not text or text.startswith("/") or is_complete(buf.text):
            buf.validate_and_handle()
        else:
            buf.insert_text("\n")

    return bindings


def repl() -> None:
    ctx = Context()
    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=_key_bindings(),
        multiline=True,
        prompt_continuation="... ",
    )

    print("jist repl (Ctrl-D to exit, / for commands)")

    while True:
        try:
            text = _normalize(session.prompt("jist> "))
        except EOFError:
            print()
            return
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        if not text.strip() or _handle_slash(text, ctx):
            continue

        eval_input(text, ctx)
