"""Conversions from the AST to plain data for inspection and JSON output."""

from __future__ import annotations

from typing import Any

from litval.ast_nodes import (
    ArrayLit,
    Expressions,
    FloatLit,
    HashLit,
    IntegerLit,
    Node,
    StringLit,
)


def node_kind(node: Node) -> str:
    match node:
        case IntegerLit():
            return "integer"
        case FloatLit():
            return "float"
        case StringLit():
            return "string"
        case ArrayLit():
            return "array"
        case HashLit():
            return "hash"
        case Expressions():
            return "expressions"
    raise TypeError(f"not a litval node: {node!r}")


def to_data(node: Node) -> dict[str, Any]:
    """Describe a node as nested dicts, keeping kinds and positions."""
    data: dict[str, Any] = {"kind": node_kind(node)}
    if not isinstance(node, Expressions):
        data["line"] = node.span.start_line
        data["column"] = node.span.start_col
    match node:
        case IntegerLit(value=value) | FloatLit(value=value) | StringLit(value=value):
            data["value"] = value
        case ArrayLit(values=values):
            data["values"] = [to_data(v) for v in values]
        case HashLit(pairs=pairs):
            data["pairs"] = [{"key": to_data(k), "value": to_data(v)} for k, v in pairs]
        case Expressions(children=children):
            data["children"] = [to_data(c) for c in children]
    return data


def to_value(node: Node) -> Any:
    """Strip positions and return plain Python values.

    Hashes become lists of [key, value] pairs: keys may be arrays or hashes,
    and duplicates must survive.
    """
    match node:
        case IntegerLit(value=value) | FloatLit(value=value) | StringLit(value=value):
            return value
        case ArrayLit(values=values):
            return [to_value(v) for v in values]
        case HashLit(pairs=pairs):
            return [[to_value(k), to_value(v)] for k, v in pairs]
        case Expressions(children=children):
            return [to_value(c) for c in children]
    raise TypeError(f"not a litval node: {node!r}")


def iter_nodes(node: Node):
    """Yield a node and all of its descendants, depth first, in source order."""
    yield node
    match node:
        case ArrayLit(values=children) | Expressions(children=children):
            for child in children:
                yield from iter_nodes(child)
        case HashLit(pairs=pairs):
            for key, value in pairs:
                yield from iter_nodes(key)
                yield from iter_nodes(value)
