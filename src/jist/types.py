from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, TypeVar
from typing_extensions import Protocol, TypeAlias, TypeGuard

# ---------- Value Model ----------

@dataclass
class JNull:
    def __repr__(self) -> str:
        return "null"

@dataclass
class JInt:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass
class JFloat:
    value: float
    def __repr__(self) -> str:
        v = self.value
        if math.isfinite(v) and v.is_integer():
            return str(int(v))
        return str(v)

@dataclass
class JText:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class JChar:
    value: str
    def __repr__(self) -> str:
        return f"'{self.value}'"

@dataclass
class JBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

JValue: TypeAlias = JNull | JInt | JFloat | JText | JChar | JBool

# Result of a call that yields an ordered sequence (range, keys, values).
JSequence: TypeAlias = List[JValue]

_J_VALUE_TYPES: Tuple[type, ...] = (JNull, JInt, JFloat, JText, JChar, JBool)

def is_j_value(value: object) -> TypeGuard[JValue]:
    return isinstance(value, _J_VALUE_TYPES)

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1

class TypeTag(Enum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    CHAR = "char"
    BOOL = "bool"
    NULL = "null"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, name: str) -> 'TypeTag':
        tag = _TYPE_ALIASES.get(name.strip().lower())
        if tag is None:
            raise JistTypeError(f"Unknown type '{name}'")
        return tag

_TYPE_ALIASES: Dict[str, TypeTag] = {
    "int": TypeTag.INT,
    "float": TypeTag.FLOAT,
    "string": TypeTag.STRING,
    "str": TypeTag.STRING,
    "char": TypeTag.CHAR,
    "bool": TypeTag.BOOL,
    "boolean": TypeTag.BOOL,
    "null": TypeTag.NULL,
    "void": TypeTag.NULL,
}

_TAG_OF: Dict[type, TypeTag] = {
    JInt: TypeTag.INT,
    JFloat: TypeTag.FLOAT,
    JText: TypeTag.STRING,
    JChar: TypeTag.CHAR,
    JBool: TypeTag.BOOL,
    JNull: TypeTag.NULL,
}

def tag_of(value: JValue) -> TypeTag:
    if not is_j_value(value):
        raise JistTypeError(f"Not a runtime value: {value!r}")
    return _TAG_OF[type(value)]

# ---------- Store records ----------

@dataclass
class Variable:
    name: str
    tag: TypeTag
    value: JValue

@dataclass
class Array:
    name: str
    tag: TypeTag
    items: List[JValue] = field(default_factory=list)

@dataclass
class Dictionary:
    """Ordered (key, value) pairs. Duplicate keys are kept."""
    name: str
    key_tag: TypeTag
    value_tag: TypeTag
    pairs: List[Tuple[JValue, JValue]] = field(default_factory=list)

@dataclass(frozen=True)
class Param:
    name: str
    tag: TypeTag
    default: Optional[JValue] = None

    @property
    def required(self) -> bool:
        return self.default is None

@dataclass
class UserFunction:
    name: str
    return_tag: TypeTag
    params: Tuple[Param, ...]
    body: Tuple[str, ...]

@dataclass(frozen=True)
class Signature:
    """Parameter tags (None accepts any value as display text) and result shape."""
    params: Tuple[Optional[TypeTag], ...]
    returns: TypeTag = TypeTag.NULL
    sequence: bool = False

BuiltinImpl = Callable[..., object]

@dataclass(frozen=True)
class BuiltinFunction:
    name: str
    signature: Signature
    fn: BuiltinImpl

# ---------- Exceptions ----------

class JistRuntimeError(Exception):
    statement: Optional[str]

    def __init__(self, message: str):
        super().__init__(message)
        self.statement = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = super().__str__()

        if self.statement is None:
            return msg

        return f"{msg} (in statement: {self.statement})"

class JistSyntaxError(JistRuntimeError):
    pass

class JistTypeError(JistRuntimeError):
    pass

class JistArityError(JistTypeError):
    pass

class JistLookupError(JistRuntimeError):
    pass

class JistIndexError(JistLookupError):
    def __init__(self, message: str = "Index out of bounds"):
        super().__init__(message)

class JistMethodNotFound(JistLookupError):
    def __init__(self, kind: str, name: str, method: str):
        super().__init__(f"{kind} '{name}' has no method '{method}'")
        self.kind = kind
        self.name = name
        self.method = method

class JistRoutingError(JistRuntimeError):
    pass

class JistReturnSignal(Exception):
    """Internal control-flow exception used to implement `return`."""
    def __init__(self, value: JValue):
        self.value = value

class JistBreakSignal(Exception):
    """Internal control flow for `break`."""

class JistContinueSignal(Exception):
    """Internal control flow for `continue`."""

# ---------- Registries ----------

R_contra = TypeVar("R_contra", contravariant=True)

class Method(Protocol[R_contra]):
    def __call__(self, ctx: object, recv: R_contra, args: List[JValue]) -> JValue | JSequence: ...

MethodRegistry = Dict[str, Method]

class Builtins:
    array_methods: MethodRegistry = {}
    dict_methods: MethodRegistry = {}
    text_methods: MethodRegistry = {}
    functions: Dict[str, BuiltinFunction] = {}
