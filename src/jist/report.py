"""Textual dump of the variable, array and dictionary stores."""

from __future__ import annotations

from typing import TextIO

from .eval.common import display
from .runtime import Array, Context, Dictionary, Variable


def format_variable(var: Variable) -> str:
    return (
        f"Variable Name: {var.name}\n"
        f"Variable Type: {var.tag.label}\n"
        f"Variable Value: {display(var.value)}"
    )


def format_array(arr: Array) -> str:
    items = ", ".join(display(item) for item in arr.items)
    return f"{arr.name}: Array<{arr.tag.value}> = [{items}]"


def format_dictionary(dct: Dictionary) -> str:
    pairs = ", ".join(f'"{display(k)}" => {display(v)}' for k, v in dct.pairs)
    return f"{dct.name}: Dict<{dct.key_tag.value}, {dct.value_tag.value}> = {{{pairs}}}"


def dump_stores(ctx: Context, stream: TextIO) -> None:
    """Variables, then arrays, then dictionaries. User functions are not shown."""
    for var in ctx.variables:
        stream.write(format_variable(var) + "\n")

    for arr in ctx.arrays:
        stream.write(format_array(arr) + "\n")

    for dct in ctx.dictionaries:
        stream.write(format_dictionary(dct) + "\n")
