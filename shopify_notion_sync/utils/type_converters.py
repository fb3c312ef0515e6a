"""
Type converters — shared value conversion utilities.
Version: 1.0.0
"""
import math
from typing import Any, Optional


def to_float(value: Any) -> Optional[float]:
    """Convert value to float, returning None if missing or unparseable."""
    if value is None or value == "":
        return None
    try:
        val = float(value)
    except (ValueError, TypeError):
        return None
    return None if math.isnan(val) else val


def to_int(value: Any) -> Optional[int]:
    """Convert value to int, returning None if invalid."""
    if value is None:
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def numeric_id(value: Any) -> str:
    """
    Strip a Shopify GID down to its numeric id.

    "gid://shopify/Product/123456" -> "123456"; plain ids pass through.
    """
    if value is None:
        return ""
    return str(value).rstrip("/").split("/")[-1]

