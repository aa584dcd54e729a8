"""Bound a resolved structure so it can be serialized.

Resolved documents may contain genuine object cycles (a schema that refers to
itself) and arbitrarily deep nesting. :func:`sanitize` copies such a value
into a finite tree, replacing a container that reappears on its own ancestor
path with :data:`CIRCULAR_MARKER` and anything nested deeper than the limit
with a truncation marker.
"""

from __future__ import annotations

from typing import Any

CIRCULAR_MARKER = "[Circular Ref]"

DEFAULT_MAX_DEPTH = 20


def truncation_marker(max_depth: int) -> str:
    return f"[Truncated: >{max_depth} levels]"


def sanitize(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Return a finite, cycle-free copy of *value*.

    Dicts, lists and tuples are copied recursively (tuples become lists);
    every other value passes through unchanged. Shared but acyclic subtrees
    are copied at each occurrence, so only true cycles produce the marker.

    Args:
        value: The structure to copy. Never modified.
        max_depth: Containers are copied down to this depth; a value below
            it is replaced by ``"[Truncated: >{max_depth} levels]"``.

    Example::

        node = {"name": "Node"}
        node["next"] = node
        sanitize(node)  # {"name": "Node", "next": "[Circular Ref]"}
    """
    return _sanitize(value, max_depth, 0, set())


def _sanitize(value: Any, max_depth: int, depth: int, ancestors: set[int]) -> Any:
    if depth > max_depth:
        return truncation_marker(max_depth)

    if not isinstance(value, (dict, list, tuple)):
        return value

    key = id(value)
    if key in ancestors:
        return CIRCULAR_MARKER

    ancestors.add(key)
    try:
        if isinstance(value, dict):
            return {
                k: _sanitize(v, max_depth, depth + 1, ancestors) for k, v in value.items()
            }
        return [_sanitize(item, max_depth, depth + 1, ancestors) for item in value]
    finally:
        ancestors.discard(key)
