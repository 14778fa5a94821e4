"""
Helpers for reading and writing dotted paths in nested document data.

Documents are plain ``dict`` trees (as parsed from JSON). Paths such as
``"system.description.value"`` address nested keys; list elements can be
addressed by their numeric index.
"""

from __future__ import annotations

import copy
from typing import Any

_MISSING = object()


def _step(node: Any, key: str) -> Any:
    if isinstance(node, dict):
        return node.get(key, _MISSING)
    if isinstance(node, list) and key.isdigit():
        index = int(key)
        return node[index] if index < len(node) else _MISSING
    return _MISSING


def get_property(data: Any, path: str, default: Any = None) -> Any:
    """Read the value stored at a dotted path.

    Args:
        data: Root document.
        path: Dotted path, e.g. ``"prototypeToken.name"``.
        default: Returned when any segment of the path is missing.

    Returns:
        The stored value, or ``default``.
    """
    node = data
    for key in path.split("."):
        node = _step(node, key)
        if node is _MISSING:
            return default
    return node


def set_property(data: dict, path: str, value: Any) -> None:
    """Write ``value`` at a dotted path, creating intermediate dicts."""
    keys = path.split(".")
    node = data
    for key in keys[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[keys[-1]] = value


def original_name(document: dict) -> Any:
    """Name a document had before it was translated."""
    return (
        document.get("originalName")
        or get_property(document, "flags.babele.originalName")
        or document.get("name")
    )


def merge_object(original: dict, other: dict, inplace: bool = False) -> dict:
    """Deep-merge ``other`` into ``original``.

    Nested dicts are merged key by key; any other value (lists included)
    in ``other`` replaces the value in ``original``.

    Args:
        original: Base dictionary.
        other: Dictionary whose values take precedence.
        inplace: Mutate ``original`` instead of a deep copy of it.

    Returns:
        The merged dictionary.
    """
    target = original if inplace else copy.deepcopy(original)
    for key, value in other.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merge_object(current, value, inplace=True)
        else:
            target[key] = copy.deepcopy(value)
    return target
