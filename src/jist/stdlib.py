"""Built-in functions registered via jist.runtime."""

from __future__ import annotations

import math
import random
from pathlib import Path
from typing import List

from .runtime import Context, JistRuntimeError, TypeTag, register_builtin
from .eval.expr import float_divide

F = TypeTag.FLOAT
S = TypeTag.STRING

# ---------- two floats -> float ----------

@register_builtin("max", (F, F), returns=F)
def std_max(_ctx: Context, a: float, b: float) -> float:
    return max(a, b)

@register_builtin("min", (F, F), returns=F)
def std_min(_ctx: Context, a: float, b: float) -> float:
    return min(a, b)

@register_builtin("add", (F, F), returns=F)
def std_add(_ctx: Context, a: float, b: float) -> float:
    return a + b

@register_builtin("sub", (F, F), returns=F)
def std_sub(_ctx: Context, a: float, b: float) -> float:
    return a - b

@register_builtin("mult", (F, F), returns=F)
def std_mult(_ctx: Context, a: float, b: float) -> float:
    return a * b

@register_builtin("divide", (F, F), returns=F)
def std_divide(_ctx: Context, a: float, b: float) -> float:
    return float_divide(a, b)

@register_builtin("pow", (F, F), returns=F)
def std_pow(_ctx: Context, a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        odd = b.is_integer() and int(b) % 2 == 1
        return math.copysign(math.inf, a) if odd else math.inf
    except ValueError:
        return math.nan

def _ln(x: float) -> float:
    if x == 0.0:
        return -math.inf
    if x < 0.0 or math.isnan(x):
        return math.nan
    return math.log(x)

@register_builtin("log", (F, F), returns=F)
def std_log(_ctx: Context, a: float, base: float) -> float:
    return float_divide(_ln(a), _ln(base))

# ---------- one float -> float ----------

def _finite_or_self(fn, x: float) -> float:
    return float(fn(x)) if math.isfinite(x) else x

@register_builtin("floor", (F,), returns=F)
def std_floor(_ctx: Context, x: float) -> float:
    return _finite_or_self(math.floor, x)

@register_builtin("ceil", (F,), returns=F)
def std_ceil(_ctx: Context, x: float) -> float:
    return _finite_or_self(math.ceil, x)

@register_builtin("round", (F,), returns=F)
def std_round(_ctx: Context, x: float) -> float:
    """Half away from zero: round(2.5) == 3, round(-2.5) == -3."""
    if not math.isfinite(x):
        return x
    return math.copysign(math.floor(abs(x) + 0.5), x)

@register_builtin("abs", (F,), returns=F)
def std_abs(_ctx: Context, x: float) -> float:
    return abs(x)

@register_builtin("sqrt", (F,), returns=F)
def std_sqrt(_ctx: Context, x: float) -> float:
    if x < 0.0:
        return math.nan
    return math.sqrt(x)

@register_builtin("sin", (F,), returns=F)
def std_sin(_ctx: Context, x: float) -> float:
    return math.sin(x) if math.isfinite(x) else math.nan

@register_builtin("cos", (F,), returns=F)
def std_cos(_ctx: Context, x: float) -> float:
    return math.cos(x) if math.isfinite(x) else math.nan

@register_builtin("tan", (F,), returns=F)
def std_tan(_ctx: Context, x: float) -> float:
    return math.tan(x) if math.isfinite(x) else math.nan

@register_builtin("rand", returns=F)
def std_rand(_ctx: Context) -> float:
    return random.random()

# ---------- text ----------

@register_builtin("print", (None,))
def std_print(ctx: Context, text: str) -> None:
    ctx.out.write(text)
    ctx.out.flush()

@register_builtin("println", (None,))
def std_println(ctx: Context, text: str) -> None:
    ctx.out.write(text + "\n")
    ctx.out.flush()

@register_builtin("concat", (S, S), returns=S)
def std_concat(_ctx: Context, a: str, b: str) -> str:
    return a + b

@register_builtin("to_uppercase", (S,), returns=S)
def std_to_uppercase(_ctx: Context, text: str) -> str:
    return text.upper()

@register_builtin("to_lowercase", (S,), returns=S)
def std_to_lowercase(_ctx: Context, text: str) -> str:
    return text.lower()

@register_builtin("trim", (S,), returns=S)
def std_trim(_ctx: Context, text: str) -> str:
    return text.strip()

@register_builtin("input", (S,), returns=S)
def std_input(ctx: Context, prompt: str) -> str:
    """Write the prompt, read one line without its newline ("" at end of input)."""
    try:
        ctx.out.write(prompt)
        ctx.out.flush()
        line = ctx.inp.readline()
    except OSError as exc:
        raise JistRuntimeError(f"input failed: {exc}") from exc

    return line.rstrip("\r\n")

# ---------- files ----------

@register_builtin("read", (S,), returns=S)
def std_read(_ctx: Context, path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise JistRuntimeError(f"read({path!r}) failed: {exc.strerror or exc}") from exc

@register_builtin("write", (S, S))
def std_write(_ctx: Context, path: str, contents: str) -> None:
    try:
        Path(path).write_text(contents, encoding="utf-8")
    except OSError as exc:
        raise JistRuntimeError(f"write({path!r}) failed: {exc.strerror or exc}") from exc

# ---------- sequences ----------

@register_builtin("range", (F, F), returns=F, sequence=True)
def std_range(_ctx: Context, start: float, end: float) -> List[float]:
    """Inclusive of end, step 1."""
    if not (math.isfinite(start) and math.isfinite(end)):
        raise JistRuntimeError("range() bounds must be finite")

    values = []
    current = start

    while current <= end:
        values.append(current)
        current += 1.0

    return values
