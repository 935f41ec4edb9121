"""Lenient coercion of query string parameters."""
from __future__ import annotations

import re
from typing import Iterable, List

_LEADING_INT_RE = re.compile(r"\s*[+-]?\d+")
_TRUE_VALUES = frozenset({"1", "true", "on", "yes"})


def absint(value: object) -> int:
    """Non-negative integer from ``value``; anything non-numeric is 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return abs(value)
    if isinstance(value, float):
        return abs(int(value))
    match = _LEADING_INT_RE.match(str(value or ""))
    return abs(int(match.group())) if match else 0


def parse_exclude_ids(values: Iterable[object] | None) -> List[int]:
    """Coerce ``current_id`` values, dropping repeats but keeping order."""
    return list(dict.fromkeys(absint(value) for value in values or ()))


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES
