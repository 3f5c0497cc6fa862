"""Dotted path resolution.

Resolves paths such as ``user.items[2].name`` against nested dicts and lists.
"""

import re
from typing import Any

_INDEXED_SEGMENT = re.compile(r"^([^\[\]]*)((?:\[\d+\])+)$")
_INDEX = re.compile(r"\[(\d+)\]")


def _step(current: Any, key: str) -> Any:
    """Take one key step, returning None when the key does not resolve."""
    if isinstance(current, dict):
        return current.get(key)
    if isinstance(current, (list, tuple, str)) and key.isdecimal():
        index = int(key)
        return current[index] if index < len(current) else None
    return None


def _index(current: Any, index: int) -> Any:
    if isinstance(current, (list, tuple, str)) and index < len(current):
        return current[index]
    if isinstance(current, dict):
        return current.get(str(index))
    return None


def get_value_by_path(obj: Any, path: str) -> Any:
    """Resolve a dotted/indexed path against a nested object.

    Supports:
    - a.b.c - nested key access
    - a.items[0].name - index after a key
    - a.items.0.name - numeric segment on a sequence
    - a.grid[1][2] - chained indices

    Args:
        obj: Root object
        path: Path expression

    Returns:
        Resolved value, or None if any step is missing. Never raises.
    """
    current = obj

    for part in path.split("."):
        if current is None:
            return None

        match = _INDEXED_SEGMENT.match(part)
        if match:
            key, indices = match.groups()
            if key:
                current = _step(current, key)
            for raw_index in _INDEX.findall(indices):
                if current is None:
                    return None
                current = _index(current, int(raw_index))
        else:
            current = _step(current, part)

    return current
