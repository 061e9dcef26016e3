"""Row parsing — turn one exported metadata row into an ElementRecord.

A row is either a CSV-style string::

    42,"Wall-Interior","Revit 벽","Category:Revit 벽|Thickness:150|Volume:2.500"

or a structured record with ``id``, ``name``, ``category`` and ``meta`` fields
(as a mapping or positionally as a list).  ``meta`` uses the
``key:value|key:value`` mini-syntax.  Rows without metadata parse to *None*.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from bimtalk.config import WALL_CATEGORY
from bimtalk.models.element import ElementRecord
from bimtalk.properties.keys import (
    ELEMENT_FIELDS,
    ROW_CATEGORY_KEYS,
    WALL_FIELDS,
    WALL_THICKNESS_KEYS,
)
from bimtalk.properties.numeric import parse_numeric
from bimtalk.properties.resolver import resolve_string, resolve_thickness

logger = logging.getLogger(__name__)

# Category or name text containing one of these marks a wall
WALL_TOKENS = ("벽", "wall")

_EMPTY_ROW: tuple[Any, Any, Any, Any] = (None, None, None, None)


def parse_meta(raw: Any) -> dict[str, Any]:
    """Parse the ``key:value|key:value`` mini-syntax into a property bag.

    Each chunk is split on its first colon, so values may contain colons.
    Chunks without a colon or with an empty key are ignored.  A mapping is
    accepted as an already-parsed bag.
    """
    if isinstance(raw, Mapping):
        return {str(k).strip(): v for k, v in raw.items()}

    bag: dict[str, Any] = {}
    for chunk in str(raw).split("|"):
        key, sep, value = chunk.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        bag[key] = value.strip()
    return bag


def split_row(row: Any) -> tuple[Any, Any, Any, Any]:
    """Return ``(id, name, category, meta)`` for any supported row shape."""
    if isinstance(row, str):
        try:
            fields: list[Any] = next(csv.reader([row], skipinitialspace=True), [])
        except csv.Error:
            logger.debug("Unreadable row: %s", row[:80])
            return _EMPTY_ROW
        fields = [f.strip() for f in fields]
        if len(fields) > 4:
            # Unquoted metadata that itself contains commas
            fields = fields[:3] + [",".join(fields[3:])]
    elif isinstance(row, Mapping):
        return row.get("id"), row.get("name"), row.get("category"), row.get("meta")
    elif isinstance(row, Sequence):
        fields = list(row)
    else:
        return _EMPTY_ROW

    fields = (fields + [None] * 4)[:4]
    return fields[0], fields[1], fields[2], fields[3]


def _parse_id(raw: Any) -> int | None:
    value = parse_numeric(raw)
    if value is None or not value.is_integer():
        return None
    return int(value)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def is_wall_text(text: str | None) -> bool:
    """Return *True* if *text* names a wall (Korean or English)."""
    if not text:
        return False
    lowered = text.lower()
    return any(token in lowered for token in WALL_TOKENS)


def parse_element_row(row: Any) -> ElementRecord | None:
    """Parse a row of any category into an :class:`ElementRecord`."""
    element_id, name, category, raw_meta = split_row(row)
    if not raw_meta:
        return None

    bag = parse_meta(raw_meta)
    fields = ELEMENT_FIELDS
    width = fields["width"].resolve(bag)
    thickness = fields["thickness"].resolve(bag)

    return ElementRecord(
        id=_parse_id(element_id),
        name=_text(name),
        category=_text(category) or resolve_string(bag, ROW_CATEGORY_KEYS),
        type_name=fields["type_name"].resolve(bag),
        level=fields["level"].resolve(bag),
        width=width,
        thickness=thickness if thickness is not None else width,
        height=fields["height"].resolve(bag),
        area=fields["area"].resolve(bag),
        volume=fields["volume"].resolve(bag),
        meta=bag,
    )


def parse_wall_row(row: Any) -> ElementRecord | None:
    """Parse a row, keeping it only when its category or name marks a wall.

    Thickness comes from the numeric thickness keys or, failing that, from
    the instance or type name (``T200``, ``WALL-200``, ``200mm``).
    """
    element_id, name, category, raw_meta = split_row(row)
    if not raw_meta:
        return None

    bag = parse_meta(raw_meta)
    category = _text(category) or resolve_string(bag, ROW_CATEGORY_KEYS) or None
    name = _text(name)
    if not is_wall_text(category) and not is_wall_text(name):
        return None

    fields = WALL_FIELDS
    type_name = fields["type_name"].resolve(bag)
    thickness = resolve_thickness(bag, WALL_THICKNESS_KEYS, [name or type_name, type_name])

    return ElementRecord(
        id=_parse_id(element_id),
        name=name,
        category=category or WALL_CATEGORY,
        type_name=type_name,
        level=fields["level"].resolve(bag),
        width=fields["width"].resolve(bag),
        thickness=thickness,
        height=fields["height"].resolve(bag),
        area=fields["area"].resolve(bag),
        volume=fields["volume"].resolve(bag),
        meta=bag,
    )
