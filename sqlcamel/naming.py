"""Naming utilities for sqlcamel.

Provides the camelCase <-> snake_case key conversion used by the casing
mixin, plus the reserved ``pivot_`` prefix convention used by many-to-many
bookkeeping. Everything here is pure: no model or session state is touched.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Mapping

__all__ = [
    "PIVOT_PREFIX",
    "camel_to_snake",
    "snake_to_camel",
    "is_pivot_key",
    "keys_to_camel",
    "keys_to_snake",
    "snake_list",
]

PIVOT_PREFIX = "pivot_"

_upper_pattern = re.compile(r"(?<!^)(?=[A-Z])")


def camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase identifier to snake_case.

    Idempotent for already snake_case input. Consecutive capitals are split
    one letter at a time (``HTTPCode`` -> ``h_t_t_p_code``).
    """
    if not isinstance(name, str) or not name:
        return name  # type: ignore
    if name.islower():
        return name
    return _upper_pattern.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    """Convert snake_case identifier to lowerCamelCase.

    Idempotent for already camelCase strings without underscores. Empty
    segments (leading, trailing or doubled underscores) are dropped.
    """
    if not isinstance(name, str) or not name:
        return name  # type: ignore
    if "_" not in name:
        return name[0].lower() + name[1:]
    parts = [p for p in name.split("_") if p]
    if not parts:
        return ""
    first = parts[0][0].lower() + parts[0][1:]
    rest = "".join(p[0].upper() + p[1:] for p in parts[1:])
    return first + rest


def is_pivot_key(key: Any) -> bool:
    return isinstance(key, str) and key.startswith(PIVOT_PREFIX)


def keys_to_camel(
    attributes: Mapping[Any, Any],
    convert: Callable[[Any], Any] = snake_to_camel,
) -> Dict[Any, Any]:
    """Return a new dict with every key passed through ``convert``.

    ``convert`` defaults to plain :func:`snake_to_camel`; the casing mixin
    passes its own per-key rule so pivot keys and disabled enforcement are
    honoured.
    """
    return {convert(key): value for key, value in attributes.items()}


def keys_to_snake(attributes: Mapping[Any, Any]) -> Dict[Any, Any]:
    """Return a new dict with every key converted to snake_case."""
    return {camel_to_snake(key): value for key, value in attributes.items()}


def snake_list(names: Iterable[str]) -> List[str]:
    return [camel_to_snake(n) for n in names]
