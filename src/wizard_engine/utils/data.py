"""Helpers for nested wizard data: dot flattening, deep merge and path lookup"""
import copy
from typing import Any, Dict, Mapping

MISSING = object()


def flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into dot-path keyed leaves

    Lists and scalars are leaves. Empty mappings are kept as leaves so that
    a submitted-but-empty section is still visible.

    Args:
        data: Nested mapping
        prefix: Path prefix for the current level

    Returns:
        Dictionary mapping "a.b.c" paths to leaf values
    """
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            flat.update(flatten(value, path))
        else:
            flat[path] = value
    return flat


def deep_merge(base: Mapping[str, Any], partial: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge partial into base without mutating either

    Nested mappings merge recursively; any other value in partial replaces the
    value in base (last write wins per leaf). Leaves taken from partial are
    copied, so later changes to the caller's objects do not leak in.
    """
    merged = dict(base)
    for key, value in partial.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        elif isinstance(value, Mapping):
            merged[key] = deep_merge({}, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_path(data: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Look up a dot path in nested mappings

    Args:
        data: Nested mapping
        path: Dot separated key path
        default: Returned when any segment is missing

    Returns:
        The value at path or default
    """
    current: Any = data
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return default
        current = current[segment]
    return current
