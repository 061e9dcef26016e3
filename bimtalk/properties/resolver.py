"""Field resolution over schema-less property bags.

A property bag is a flat ``dict`` of free-form property names (Korean or
English, often with unit suffixes) to raw values.  The same semantic field
usually appears under several names, so every lookup walks an ordered list
of candidate keys:

1. exact key pass, in candidate order;
2. optional substring pass over lower-cased key text;
3. optional fallback regex over all key names.

The first value that converts wins.  Nothing here raises: a miss is *None*
(or ``""`` for strings) and the caller decides what to do with it.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from bimtalk.properties.numeric import (
    convert_length_to_meters,
    parse_numeric,
    round_half_up,
    split_numeric,
)

PropertyBag = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Candidate walking
# ---------------------------------------------------------------------------


def _substring_keys(bag: PropertyBag, candidate: str) -> Iterator[str]:
    lk = candidate.lower()
    for key in bag:
        low = str(key).lower()
        if low == lk or lk in low:
            yield key


def iter_candidates(
    bag: PropertyBag,
    keys: Sequence[str],
    fallback: re.Pattern[str] | None = None,
    *,
    substring: bool = False,
) -> Iterator[Any]:
    """Yield the non-null values of *bag* in resolution order."""
    for key in keys:
        value = bag.get(key)
        if value is not None:
            yield value

    if substring:
        for key in keys:
            for hit in _substring_keys(bag, key):
                value = bag[hit]
                if value is not None:
                    yield value

    if fallback is not None:
        for key, value in bag.items():
            if value is not None and fallback.search(str(key)):
                yield value


def pick(bag: PropertyBag, keys: Sequence[str]) -> Any:
    """Return the raw value of the first matching key (exact, then substring)."""
    return next(iter_candidates(bag, keys, substring=True), None)


# ---------------------------------------------------------------------------
# Typed resolution
# ---------------------------------------------------------------------------


def _length_value(raw: Any) -> float | None:
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        value, unit = split_numeric(text)
        return convert_length_to_meters(value, unit)
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return convert_length_to_meters(parse_numeric(raw))
    return None


def resolve_numeric(
    bag: PropertyBag,
    keys: Sequence[str],
    fallback: re.Pattern[str] | None = None,
    *,
    substring: bool = False,
) -> float | None:
    """First candidate value that parses as a number."""
    for raw in iter_candidates(bag, keys, fallback, substring=substring):
        value = parse_numeric(raw)
        if value is not None:
            return value
    return None


def resolve_length(
    bag: PropertyBag,
    keys: Sequence[str],
    fallback: re.Pattern[str] | None = None,
    *,
    substring: bool = False,
) -> float | None:
    """First candidate value that parses as a length, converted to metres."""
    for raw in iter_candidates(bag, keys, fallback, substring=substring):
        value = _length_value(raw)
        if value is not None:
            return value
    return None


def resolve_string(
    bag: PropertyBag,
    keys: Sequence[str],
    *,
    substring: bool = False,
) -> str:
    """First present candidate value as a trimmed string, or ``""``."""
    raw = next(iter_candidates(bag, keys, substring=substring), None)
    if raw is None:
        return ""
    return str(raw).strip()


# ---------------------------------------------------------------------------
# Thickness from names
# ---------------------------------------------------------------------------

# Priority order: "T150", "WALL-150" / "WALL_150", "150mm"
_THICKNESS_TEXT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"T(\d{2,4})"),
    re.compile(r"WALL[_-](\d{2,4})", re.I),
    re.compile(r"(\d{2,4})\s*mm", re.I),
)


def extract_thickness_from_text(text: Any) -> int | None:
    """Read a wall thickness in mm out of a type or instance name."""
    if not text:
        return None
    s = str(text)
    for pattern in _THICKNESS_TEXT_PATTERNS:
        m = pattern.search(s)
        if m:
            return int(m.group(1))
    return None


def resolve_thickness(
    bag: PropertyBag,
    keys: Sequence[str],
    texts: Iterable[Any] = (),
) -> int | None:
    """Resolve a wall thickness in mm, rounded half-up.

    Numeric thickness keys are tried first (exact names only); otherwise
    each text in *texts* is scanned with the name patterns.
    """
    value = resolve_numeric(bag, keys)
    if value is not None:
        return round_half_up(value)
    for text in texts:
        found = extract_thickness_from_text(text)
        if found is not None:
            return found
    return None


# ---------------------------------------------------------------------------
# Strategy objects
# ---------------------------------------------------------------------------


class FieldKind(str, Enum):
    """How a field's raw value is converted."""

    NUMERIC = "numeric"
    LENGTH = "length"
    STRING = "string"


@dataclass(frozen=True)
class FieldResolver:
    """Resolution strategy for one semantic field.

    Candidate keys are plain data, so a locale can be supported by adding
    names to the list without touching the lookup logic.
    """

    field: str
    kind: FieldKind
    keys: tuple[str, ...]
    fallback: re.Pattern[str] | None = None
    substring: bool = False

    def resolve(self, bag: PropertyBag) -> float | str | None:
        if self.kind is FieldKind.NUMERIC:
            return resolve_numeric(bag, self.keys, self.fallback, substring=self.substring)
        if self.kind is FieldKind.LENGTH:
            return resolve_length(bag, self.keys, self.fallback, substring=self.substring)
        return resolve_string(bag, self.keys, substring=self.substring) or None
