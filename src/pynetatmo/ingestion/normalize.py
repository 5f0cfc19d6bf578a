"""Normalization helpers.

Tolerant parsing of loosely-typed upstream values.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_number(value: Any) -> int | float | None:
    """Keep ints as ints and floats as floats; anything else becomes ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return safe_float(value)


def split_csv(value: str) -> list[str]:
    """Split a comma-separated sensor list, dropping blanks."""
    return [part.strip() for part in value.split(",") if part.strip()]
