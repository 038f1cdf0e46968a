"""Helpers for nested JSON-like mappings."""

import copy
from collections.abc import Mapping
from typing import Any

_MISSING = object()


def deep_merge(base: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new dict with *updates* merged into *base* recursively.

    Nested mappings are merged key by key; lists and scalars in *updates*
    replace the value in *base*. Neither argument is modified.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in updates.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """Look up a dotted *path* (``"technical.apiEndpoints.timeout"``).

    Returns *default* when any segment is missing, ``None``, or the parent is
    not a mapping.
    """
    current = data
    for segment in path.split("."):
        if not isinstance(current, Mapping):
            return default
        current = current.get(segment, _MISSING)
        if current is _MISSING or current is None:
            return default
    return current
