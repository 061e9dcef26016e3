"""Numeric parsing and length unit conversion for raw property values."""

from __future__ import annotations

import math
import re
from typing import Any

# ---------------------------------------------------------------------------
# Unit conversion helpers
# ---------------------------------------------------------------------------

_MM_TO_M = 1000.0
_CM_TO_M = 100.0
_FEET_TO_M = 0.3048
_INCHES_TO_M = 0.0254

# Unit-less values above this magnitude are read as millimetres
MM_HEURISTIC_THRESHOLD = 50.0


def convert_length_to_meters(value: float | None, unit_hint: str | None = None) -> float | None:
    """Convert *value* to metres using the unit text found next to it.

    Without a recognisable unit, a magnitude above
    :data:`MM_HEURISTIC_THRESHOLD` is taken to be millimetres and anything
    smaller is taken to be metres already.
    """
    if value is None:
        return None
    unit = (unit_hint or "").lower()
    if "mm" in unit:
        return value / _MM_TO_M
    if "cm" in unit:
        return value / _CM_TO_M
    if "m" in unit:
        return value
    if "ft" in unit or "feet" in unit:
        return value * _FEET_TO_M
    if "in" in unit:
        return value * _INCHES_TO_M
    if abs(value) > MM_HEURISTIC_THRESHOLD:
        return value / _MM_TO_M
    return value


# ---------------------------------------------------------------------------
# Number extraction
# ---------------------------------------------------------------------------

# Thousands grouping needs a leading group of 1-3 digits that does not start
# with 0, so "0,125" stays a decimal comma while "1,200" groups thousands
_THOUSANDS_RE = re.compile(r"(?<![\d.])[1-9]\d{0,2}(?:,\d{3})+(?!\d)")

_NUMBER_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)?")

_WS_RE = re.compile(r"\s+")


def _finite(value: float) -> float | None:
    return value if math.isfinite(value) else None


def split_numeric(text: str) -> tuple[float | None, str]:
    """Return the first numeric token of *text* and the text around it.

    ``"3,5 m"`` gives ``(3.5, " m")``; ``"1,200mm"`` gives ``(1200.0, "mm")``.
    """
    cleaned = _THOUSANDS_RE.sub(lambda m: m.group(0).replace(",", ""), text.strip())
    m = _NUMBER_RE.search(cleaned)
    if not m:
        return None, cleaned
    value = _finite(float(m.group(0).replace(",", ".")))
    rest = cleaned[: m.start()] + cleaned[m.end():]
    return value, rest


def parse_numeric(raw: Any) -> float | None:
    """Parse a raw property value into a float, or *None*.

    Numbers pass through; strings have whitespace and thousands separators
    removed before the first numeric token is read (decimal comma or dot).
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return _finite(float(raw))
    if not isinstance(raw, str):
        return None
    value, _rest = split_numeric(_WS_RE.sub("", raw))
    return value


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)
