"""AdsDesk — Upstream Number Coercion.

The Graph API returns the same numeric field as a string on one call and a
number on the next. Every numeric field goes through ``coerce_number``.
"""

import math
import re
from typing import Any

from adsdesk.core.metric_registry import MetricType

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _parse_int(text: str) -> int:
    """Leading-integer parse: "12.7" -> 12, "42abc" -> 42, "abc" -> 0."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _parse_float(text: str) -> float:
    """Leading-number parse: "12.5abc" -> 12.5, "1e3" -> 1000.0, "abc" -> 0.0."""
    match = _LEADING_FLOAT.match(text)
    if not match:
        return 0.0
    value = float(match.group(1))
    return value if math.isfinite(value) else 0.0


def coerce_number(value: Any, kind: MetricType) -> int | float:
    """Coerce a raw upstream value to the numeric kind of its field.

    Strings are parsed, numbers used as-is (truncated for COUNT fields).
    Anything else (None, bools, lists, NaN) becomes 0.
    """
    if isinstance(value, bool) or value is None:
        return 0 if kind == MetricType.COUNT else 0.0

    if isinstance(value, str):
        if kind == MetricType.COUNT:
            return _parse_int(value)
        return _parse_float(value)

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0 if kind == MetricType.COUNT else 0.0
        if kind == MetricType.COUNT:
            return int(value)
        return float(value)

    return 0 if kind == MetricType.COUNT else 0.0


def coerce_int(value: Any) -> int:
    return int(coerce_number(value, MetricType.COUNT))


def coerce_float(value: Any) -> float:
    return float(coerce_number(value, MetricType.DECIMAL))
