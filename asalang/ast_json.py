"""JSON serialization/deserialization for the Asa AST.

This module converts between Asa AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node becomes an
object with a "type" key naming the node class, plus its fields: the
operator or function `name`, the literal `value`, and the `children`
list.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict

from .ast import Node, NODE_TYPES, Number, String, Bool, Identifier
from .types import I32_MIN, I32_MAX


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (bool, int, str)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    if isinstance(node, Node) and type(node).__name__ in NODE_TYPES:
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {}
    for f in fields(cls):
        if f.name in obj:
            kwargs[f.name] = ast_from_obj(obj[f.name])
    try:
        node = cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Malformed {t} node: {e}")
    check_literal(node)
    return node


def check_literal(node: Node) -> None:
    """Reject literal payloads the parser could never have produced."""
    if isinstance(node, Number):
        value = node.value
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Malformed Number node: value must be an integer, got {value!r}")
        if value < I32_MIN or value > I32_MAX:
            raise ValueError(f"Malformed Number node: {value} does not fit in a 32-bit integer")
    elif isinstance(node, Bool) and not isinstance(node.value, bool):
        raise ValueError(f"Malformed Bool node: value must be a boolean, got {node.value!r}")
    elif isinstance(node, (String, Identifier)) and not isinstance(node.value, str):
        raise ValueError(f"Malformed {type(node).__name__} node: value must be a string, got {node.value!r}")
