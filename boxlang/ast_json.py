"""JSON serialization/deserialization for the BoxLang AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Every node becomes a dict with a
``"type"`` key naming its class plus one key per dataclass field, so a
program survives a full round-trip through ``json.dump``/``json.load``.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, Type

from . import ast as nodes
from .ast import Node


NODE_TYPES: Dict[str, Type[Node]] = {
    cls.__name__: cls
    for cls in vars(nodes).values()
    if isinstance(cls, type) and issubclass(cls, Node) and cls is not Node
}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (bool, int, float, str)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]
    if isinstance(node, Node):
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"cannot serialize {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if isinstance(obj, dict):
        t = obj.get("type")
        cls = NODE_TYPES.get(t)
        if cls is None:
            raise ValueError(f"unknown AST node type: {t!r}")
        kwargs = {f.name: ast_from_obj(obj[f.name]) for f in fields(cls) if f.name in obj}
        return cls(**kwargs)
    raise ValueError(f"cannot deserialize {obj!r}")
