"""Normalization helpers.

Centralizes defensive parsing of loosely typed JSON values.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pyshipsio._constants import IMO_PREFIX


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None or isinstance(value, (Mapping, list)):
        return None
    text = str(value).strip()
    return text if text else None


def parse_mmsi(value: Any) -> int | None:
    """Parse a numeric-looking MMSI.

    Accepts ints and digit strings (surrounding whitespace ignored).
    Zero, negatives, booleans and anything else yield ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else None
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            parsed = int(text)
            return parsed if parsed > 0 else None
    return None


def strip_imo_prefix(value: Any) -> str | None:
    """Return the digits of an ``"IMO 1234567"`` registration.

    Values without the prefix are not trusted and yield ``None``.
    """
    if not isinstance(value, str) or not value.startswith(IMO_PREFIX):
        return None
    return safe_str(value[len(IMO_PREFIX):])


def dig(document: Any, *path: str) -> Any:
    """Walk nested mappings along *path*; ``None`` when any hop is missing."""
    current = document
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current
