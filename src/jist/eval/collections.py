from __future__ import annotations

from typing import List, Sequence, Tuple

from ..nodes import CollectionNode, DotNode, FunctionCallNode, SyntaxNode, VariableCallNode, describe
from ..runtime import Array, Context, Dictionary, JText, JValue, JistSyntaxError, JistTypeError, TypeTag
from ..token_types import TT
from .common import coerce, is_punct, matching_close, split_top_level
from .expr import call_at, evaluate

def _element(nodes: Sequence[SyntaxNode], tag: TypeTag, ctx: Context) -> JValue:
    """One collection literal element, read according to the declared type."""
    if len(nodes) == 1 and isinstance(nodes[0], VariableCallNode):
        var = ctx.variables.find(nodes[0].name)
        # A bare word that names no variable is literal text: {"1" => one}
        value: JValue = JText(nodes[0].name) if var is None else var.value
    else:
        value = evaluate(nodes, ctx)

    return coerce(value, tag, parse_text=True)

def _bracketed(nodes: Sequence[SyntaxNode], name: str) -> Sequence[SyntaxNode]:
    """Interior of the group that must make up the whole initializer."""
    close = matching_close(nodes, 0)
    if close != len(nodes) - 1:
        raise JistSyntaxError(f"Unexpected {describe(nodes[close + 1])} after initializer of '{name}'")
    return nodes[1:close]

def _array_items(node: CollectionNode, init: Sequence[SyntaxNode], ctx: Context) -> List[JValue]:
    head = init[0]

    if is_punct(head, TT.LSQB):
        items = []
        for part in split_top_level(_bracketed(init, node.name)):
            if not part:
                raise JistSyntaxError(f"Empty element in array '{node.name}'")
            items.append(_element(part, node.element, ctx))
        return items

    if isinstance(head, (FunctionCallNode, DotNode)):
        result, end = call_at(init, 0, ctx)
        if end != len(init):
            raise JistSyntaxError(f"Unexpected {describe(init[end])} after initializer of '{node.name}'")
        if not isinstance(result, list):
            raise JistTypeError(f"{describe(head)} does not return a sequence for array '{node.name}'")
        return [coerce(item, node.element) for item in result]

    raise JistTypeError(f"Array '{node.name}' expects '[' or a sequence, got {describe(head)}")

def _dict_pairs(node: CollectionNode, init: Sequence[SyntaxNode], ctx: Context) -> List[Tuple[JValue, JValue]]:
    if not is_punct(init[0], TT.LBRACE):
        raise JistTypeError(f"Dict '{node.name}' expects '{{', got {describe(init[0])}")

    pairs: List[Tuple[JValue, JValue]] = []
    entries = split_top_level(_bracketed(init, node.name))

    for entry in entries:
        if not entry:
            if len(entries) == 1:
                break
            raise JistSyntaxError(f"Empty entry in dict '{node.name}'")

        halves = split_top_level(entry, TT.FAT_ARROW)
        if len(halves) == 1:
            raise JistSyntaxError(f"Unexpected key {describe(entry[0])} without '=>' in dict '{node.name}'")
        if len(halves) > 2:
            raise JistSyntaxError(f"Too many '=>' in an entry of dict '{node.name}'")

        key_nodes, value_nodes = halves
        if not key_nodes:
            raise JistSyntaxError(f"Missing key for value in dict '{node.name}'")
        if not value_nodes:
            raise JistSyntaxError(f"Missing value for key in dict '{node.name}'")

        pairs.append((_element(key_nodes, node.key, ctx), _element(value_nodes, node.value, ctx)))

    return pairs

def compile_collection(nodes: Sequence[SyntaxNode], ctx: Context) -> Array | Dictionary:
    node: CollectionNode = nodes[0]
    rest = nodes[1:]

    if rest and not is_punct(rest[0], TT.ASSIGN):
        raise JistTypeError(f"Expected '=' after declaration of '{node.name}', got {describe(rest[0])}")

    init = rest[1:]
    if rest and not init:
        raise JistSyntaxError(f"Declaration of '{node.name}' has no value after '='")

    if node.kind == "array":
        items = _array_items(node, init, ctx) if init else []
        return ctx.arrays.upsert(Array(node.name, node.element, items))

    pairs = _dict_pairs(node, init, ctx) if init else []
    return ctx.dictionaries.upsert(Dictionary(node.name, node.key, node.value, pairs))
