"""
Shared validation functions for Pydantic schemas.

MCP clients send loosely typed arguments (numbers as strings, zero or null
for "use the default"), so numeric tool arguments are coerced rather than
rejected.
"""
import math
from typing import Any


def coerce_number(value: Any) -> float:  # noqa: ANN401
    """
    Coerce an arbitrary argument value to a number.

    Returns 0 for anything that is not a finite number (None, non-numeric
    strings, NaN, infinities, lists). Booleans count as 0/1.
    """
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def clamp_number(value: Any, default: int, low: int, high: int) -> int:  # noqa: ANN401
    """
    Coerce a value to an int within [low, high].

    Zero or non-numeric input falls back to the default before clamping.

    Examples:
        clamp_number(None, 19, 1, 50) -> 19
        clamp_number("200", 19, 1, 50) -> 50
        clamp_number(-3, 19, 1, 50) -> 1
    """
    number = int(coerce_number(value)) or default
    return min(max(low, number), high)


def non_negative_int(value: Any) -> int:  # noqa: ANN401
    """Coerce a value to a non-negative int, defaulting to 0."""
    return max(0, int(coerce_number(value)))


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Trim tags, drop empty ones and remove duplicates, keeping first-seen order."""
    if not tags:
        return []
    seen: dict[str, None] = {}
    for tag in tags:
        trimmed = tag.strip()
        if trimmed:
            seen.setdefault(trimmed, None)
    return list(seen)
