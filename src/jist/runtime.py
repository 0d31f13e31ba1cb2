from __future__ import annotations

import importlib
import sys
import threading
from typing import Callable, Dict, Generic, Iterator, List, Optional, Set, TextIO, Tuple, TypeVar
from typing_extensions import Protocol

from .config import Settings
from .types import (
    JNull, JInt, JFloat, JText, JChar, JBool, JValue, JSequence,
    TypeTag, Variable, Array, Dictionary, Param, UserFunction,
    Signature, BuiltinFunction, BuiltinImpl,
    JistRuntimeError, JistSyntaxError, JistTypeError, JistArityError,
    JistLookupError, JistIndexError, JistMethodNotFound, JistRoutingError,
    JistReturnSignal, JistBreakSignal, JistContinueSignal,
    Method, MethodRegistry, Builtins, tag_of,
)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_builtin hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("jist.stdlib")
    _STDLIB_INITIALIZED = True

# ---------- Stores ----------

class _Named(Protocol):
    name: str

E = TypeVar("E", bound=_Named)

class Store(Generic[E]):
    """
    Name-addressed table of runtime records.

    Lookups scan from the newest entry, so a later push shadows an earlier
    entry of the same name until it is removed again.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self.lock = threading.RLock()
        self._entries: List[E] = []

    def find(self, name: str) -> Optional[E]:
        with self.lock:
            for entry in reversed(self._entries):
                if entry.name == name:
                    return entry
        return None

    def get(self, name: str) -> E:
        entry = self.find(name)
        if entry is None:
            raise JistLookupError(f"{self.kind.capitalize()} '{name}' not found")
        return entry

    def push(self, entry: E) -> E:
        with self.lock:
            self._entries.append(entry)
        return entry

    def upsert(self, entry: E) -> E:
        """Replace the newest entry with the same name, or append."""
        with self.lock:
            for i in range(len(self._entries) - 1, -1, -1):
                if self._entries[i].name == entry.name:
                    self._entries[i] = entry
                    return entry
            self._entries.append(entry)
        return entry

    def remove(self, entry: E) -> None:
        """Remove exactly this entry (by identity)."""
        with self.lock:
            for i in range(len(self._entries) - 1, -1, -1):
                if self._entries[i] is entry:
                    del self._entries[i]
                    return

    def clear(self) -> None:
        with self.lock:
            self._entries.clear()

    def snapshot(self) -> List[E]:
        with self.lock:
            return list(self._entries)

    def __iter__(self) -> Iterator[E]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self.lock:
            return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return self.find(name) is not None

class Context:
    """Interpreter context threaded through every statement compiler."""

    def __init__(self, settings: Optional[Settings]=None, stdout: Optional[TextIO]=None, stdin: Optional[TextIO]=None):
        init_stdlib()
        self.settings = settings if settings is not None else Settings.from_env()
        self.variables: Store[Variable] = Store("variable")
        self.arrays: Store[Array] = Store("array")
        self.dictionaries: Store[Dictionary] = Store("dictionary")
        self.functions: Store[UserFunction] = Store("function")
        self.builtins: Dict[str, BuiltinFunction] = Builtins.functions
        self._stdout = stdout
        self._stdin = stdin
        self.call_depth = 0
        self.loop_depth = 0
        self.nesting = 0
        self.errors: List[JistRuntimeError] = []
        # `for (condition)` headers already warned about
        self.warned_headers: Set[str] = set()

    @property
    def out(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def inp(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    def reset(self) -> None:
        for store in (self.variables, self.arrays, self.dictionaries, self.functions):
            store.clear()
        self.call_depth = 0
        self.loop_depth = 0
        self.nesting = 0
        self.errors.clear()
        self.warned_headers.clear()

# ---------- Registration ----------

def register_method(registry: MethodRegistry, name: str):
    def dec(fn: Method):
        registry[name] = fn
        return fn

    return dec

def register_array(name: str):
    return register_method(Builtins.array_methods, name)

def register_dict(name: str):
    return register_method(Builtins.dict_methods, name)

def register_text(name: str):
    return register_method(Builtins.text_methods, name)

def register_builtin(name: str, params: Tuple[Optional[TypeTag], ...]=(), *, returns: TypeTag=TypeTag.NULL, sequence: bool=False):
    def dec(fn: BuiltinImpl):
        Builtins.functions[name] = BuiltinFunction(name, Signature(tuple(params), returns, sequence), fn)
        return fn

    return dec

def _expect_arity(kind: str, method: str, args: List[JValue], expected: int) -> None:
    if len(args) != expected:
        raise JistArityError(f"{kind}.{method} expects {expected} argument(s); got {len(args)}")

def _index_arg(kind: str, method: str, arg: JValue) -> int:
    if isinstance(arg, JInt):
        return arg.value

    raise JistTypeError(f"{kind}.{method} expects an int index")

def _checked_index(arr: Array, index: int, allow_end: bool=False) -> int:
    limit = len(arr.items) + (1 if allow_end else 0)
    if not 0 <= index < limit:
        raise JistIndexError(f"Index {index} out of range for array '{arr.name}' of length {len(arr.items)}")
    return index

# ---------- Array methods ----------

@register_array("push")
def _array_push(_ctx: Context, recv: Array, args: List[JValue]) -> JNull:
    _expect_arity("array", "push", args, 1)
    from .eval.common import coerce

    recv.items.append(coerce(args[0], recv.tag))
    return JNull()

@register_array("pop")
def _array_pop(_ctx: Context, recv: Array, args: List[JValue]) -> JValue:
    _expect_arity("array", "pop", args, 0)

    if not recv.items:
        raise JistIndexError(f"Cannot pop from empty array '{recv.name}'")

    return recv.items.pop()

@register_array("len")
def _array_len(_ctx: Context, recv: Array, args: List[JValue]) -> JInt:
    _expect_arity("array", "len", args, 0)

    return JInt(len(recv.items))

@register_array("is_empty")
def _array_is_empty(_ctx: Context, recv: Array, args: List[JValue]) -> JBool:
    _expect_arity("array", "is_empty", args, 0)

    return JBool(not recv.items)

@register_array("get")
def _array_get(_ctx: Context, recv: Array, args: List[JValue]) -> JValue:
    _expect_arity("array", "get", args, 1)
    index = _checked_index(recv, _index_arg("array", "get", args[0]))

    return recv.items[index]

@register_array("set")
def _array_set(_ctx: Context, recv: Array, args: List[JValue]) -> JNull:
    _expect_arity("array", "set", args, 2)
    from .eval.common import coerce

    index = _checked_index(recv, _index_arg("array", "set", args[0]))
    recv.items[index] = coerce(args[1], recv.tag)
    return JNull()

@register_array("insert")
def _array_insert(_ctx: Context, recv: Array, args: List[JValue]) -> JNull:
    _expect_arity("array", "insert", args, 2)
    from .eval.common import coerce

    index = _checked_index(recv, _index_arg("array", "insert", args[0]), allow_end=True)
    recv.items.insert(index, coerce(args[1], recv.tag))
    return JNull()

@register_array("remove")
def _array_remove(_ctx: Context, recv: Array, args: List[JValue]) -> JValue:
    _expect_arity("array", "remove", args, 1)
    index = _checked_index(recv, _index_arg("array", "remove", args[0]))

    return recv.items.pop(index)

@register_array("contains")
def _array_contains(_ctx: Context, recv: Array, args: List[JValue]) -> JBool:
    _expect_arity("array", "contains", args, 1)
    from .eval.common import values_equal

    return JBool(any(values_equal(item, args[0]) for item in recv.items))

@register_array("clear")
def _array_clear(_ctx: Context, recv: Array, args: List[JValue]) -> JNull:
    _expect_arity("array", "clear", args, 0)

    recv.items.clear()
    return JNull()

# ---------- Dictionary methods ----------

def _find_pair(recv: Dictionary, key: JValue) -> Optional[int]:
    from .eval.common import values_equal

    for i, (k, _v) in enumerate(recv.pairs):
        if values_equal(k, key):
            return i
    return None

def _require_pair(recv: Dictionary, key: JValue) -> int:
    index = _find_pair(recv, key)
    if index is None:
        from .eval.common import display
        raise JistLookupError(f"Key '{display(key)}' not found in dictionary '{recv.name}'")
    return index

@register_dict("insert")
def _dict_insert(_ctx: Context, recv: Dictionary, args: List[JValue]) -> JNull:
    _expect_arity("dict", "insert", args, 2)
    from .eval.common import coerce

    recv.pairs.append((coerce(args[0], recv.key_tag), coerce(args[1], recv.value_tag)))
    return JNull()

@register_dict("get")
def _dict_get(_ctx: Context, recv: Dictionary, args: List[JValue]) -> JValue:
    _expect_arity("dict", "get", args, 1)
    from .eval.common import coerce

    index = _require_pair(recv, coerce(args[0], recv.key_tag))
    return recv.pairs[index][1]

@register_dict("remove")
def _dict_remove(_ctx: Context, recv: Dictionary, args: List[JValue]) -> JValue:
    _expect_arity("dict", "remove", args, 1)
    from .eval.common import coerce

    index = _require_pair(recv, coerce(args[0], recv.key_tag))
    return recv.pairs.pop(index)[1]

@register_dict("contains_key")
def _dict_contains_key(_ctx: Context, recv: Dictionary, args: List[JValue]) -> JBool:
    _expect_arity("dict", "contains_key", args, 1)
    from .eval.common import coerce

    return JBool(_find_pair(recv, coerce(args[0], recv.key_tag)) is not None)

@register_dict("len")
def _dict_len(_ctx: Context, recv: Dictionary, args: List[JValue]) -> JInt:
    _expect_arity("dict", "len", args, 0)

    return JInt(len(recv.pairs))

@register_dict("is_empty")
def _dict_is_empty(_ctx: Context, recv: Dictionary, args: List[JValue]) -> JBool:
    _expect_arity("dict", "is_empty", args, 0)

    return JBool(not recv.pairs)

@register_dict("keys")
def _dict_keys(_ctx: Context, recv: Dictionary, args: List[JValue]) -> JSequence:
    _expect_arity("dict", "keys", args, 0)

    return [k for k, _v in recv.pairs]

@register_dict("values")
def _dict_values(_ctx: Context, recv: Dictionary, args: List[JValue]) -> JSequence:
    _expect_arity("dict", "values", args, 0)

    return [v for _k, v in recv.pairs]

@register_dict("clear")
def _dict_clear(_ctx: Context, recv: Dictionary, args: List[JValue]) -> JNull:
    _expect_arity("dict", "clear", args, 0)

    recv.pairs.clear()
    return JNull()

# ---------- Text methods (string variables) ----------

def _text_of(recv: Variable) -> str:
    value = recv.value
    if isinstance(value, (JText, JChar)):
        return value.value
    raise JistTypeError(f"Variable '{recv.name}' does not hold a string")

@register_text("len")
def _text_len(_ctx: Context, recv: Variable, args: List[JValue]) -> JInt:
    _expect_arity("string", "len", args, 0)

    return JInt(len(_text_of(recv)))

@register_text("to_uppercase")
def _text_upper(_ctx: Context, recv: Variable, args: List[JValue]) -> JText:
    _expect_arity("string", "to_uppercase", args, 0)

    return JText(_text_of(recv).upper())

@register_text("to_lowercase")
def _text_lower(_ctx: Context, recv: Variable, args: List[JValue]) -> JText:
    _expect_arity("string", "to_lowercase", args, 0)

    return JText(_text_of(recv).lower())

@register_text("trim")
def _text_trim(_ctx: Context, recv: Variable, args: List[JValue]) -> JText:
    _expect_arity("string", "trim", args, 0)

    return JText(_text_of(recv).strip())

@register_text("contains")
def _text_contains(_ctx: Context, recv: Variable, args: List[JValue]) -> JBool:
    _expect_arity("string", "contains", args, 1)
    needle = args[0]

    if not isinstance(needle, (JText, JChar)):
        raise JistTypeError("string.contains expects a string argument")

    return JBool(needle.value in _text_of(recv))

def call_builtin_method(ctx: Context, obj: str, method: str, args: List[JValue]) -> JValue | JSequence:
    """Dispatch `obj.method(args)`: arrays first, then dictionaries, then variables."""
    arr = ctx.arrays.find(obj)
    if arr is not None:
        handler = Builtins.array_methods.get(method)
        if handler is None:
            raise JistMethodNotFound("Array", obj, method)
        return handler(ctx, arr, args)

    dct = ctx.dictionaries.find(obj)
    if dct is not None:
        handler = Builtins.dict_methods.get(method)
        if handler is None:
            raise JistMethodNotFound("Dictionary", obj, method)
        return handler(ctx, dct, args)

    var = ctx.variables.find(obj)
    if var is not None:
        handler = Builtins.text_methods.get(method)
        if handler is None:
            raise JistMethodNotFound(tag_of(var.value).label, obj, method)
        return handler(ctx, var, args)

    raise JistLookupError(f"No array, dictionary or variable named '{obj}'")
