"""Condition evaluation over property bags.

``passes_condition`` is a pure function of its two inputs.  Numeric range
clauses never exclude an element whose value cannot be resolved: a bag
with no volume passes ``minVolume`` so that partially-exported models are
not silently emptied.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from bimtalk.filtering.condition import (
    Condition,
    PropertyBag,
    StringProfile,
    build_string_profile,
    includes_any,
    includes_every,
)
from bimtalk.properties.keys import LEVEL_KEYS, MATERIAL_KEYS, PROPERTY_FIELDS
from bimtalk.properties.resolver import resolve_string

logger = logging.getLogger(__name__)

_CATEGORY_NOISE_RE = re.compile(r"\s+|revit|category|카테고리")


def normalize_category(value: Any) -> str:
    """Lower-case, drop whitespace and the ``revit`` / ``category`` noise words."""
    if value is None:
        return ""
    return _CATEGORY_NOISE_RE.sub("", str(value).lower())


def category_matches(profile: StringProfile, keywords: list[str]) -> bool:
    """Match category keywords against the bag's category texts.

    A direct substring pass runs first.  A second pass compares normalised
    forms in both directions, so ``"Revit 벽"`` matches ``"벽체"``.
    """
    text = profile.category_text_lower
    if not text:
        return False
    if includes_any(text, keywords):
        return True

    values = [v for v in (normalize_category(c) for c in profile.categories) if v]
    for kw in keywords:
        query = normalize_category(kw)
        if query and any(query in v or v in query for v in values):
            return True
    return False


def _outside(value: float | None, low: float | None, high: float | None) -> bool:
    if value is None:
        return False
    if low is not None and value < low:
        return True
    if high is not None and value > high:
        return True
    return False


def _material_matches(bag: PropertyBag, materials: list[str]) -> bool:
    for key in MATERIAL_KEYS:
        raw = bag.get(key)
        if raw and includes_any(str(raw).strip().lower(), materials):
            return True
    return False


def passes_condition(
    bag: PropertyBag,
    condition: Condition | Mapping[str, Any] | None,
) -> bool:
    """Return *True* if *bag* satisfies every clause of *condition*."""
    if condition is None:
        return True
    if not isinstance(condition, Condition):
        condition = Condition.model_validate(condition)

    profile = build_string_profile(bag)

    category_keywords = condition.all_category_keywords
    if category_keywords and not category_matches(profile, category_keywords):
        return False

    if condition.include_keywords and not includes_every(
        profile.searchable_text_lower, condition.include_keywords
    ):
        return False

    if condition.exclude_keywords and includes_any(
        profile.searchable_text_lower, condition.exclude_keywords
    ):
        return False

    if condition.level:
        level_text = resolve_string(bag, LEVEL_KEYS).lower()
        if not includes_any(level_text, condition.level):
            return False

    if condition.material and not _material_matches(bag, condition.material):
        return False

    if condition.min_height is not None or condition.max_height is not None:
        height = PROPERTY_FIELDS["height"].resolve(bag)
        if _outside(height, condition.min_height, condition.max_height):
            return False

    if condition.min_area is not None or condition.max_area is not None:
        area = PROPERTY_FIELDS["area"].resolve(bag)
        if _outside(area, condition.min_area, condition.max_area):
            return False

    if condition.min_volume is not None or condition.max_volume is not None:
        volume = PROPERTY_FIELDS["volume"].resolve(bag)
        if _outside(volume, condition.min_volume, condition.max_volume):
            return False

    if condition.custom_predicate is not None and not condition.custom_predicate(bag, profile):
        return False

    return True


def filter_by_condition(
    bags: Mapping[Any, PropertyBag],
    condition: Condition | Mapping[str, Any] | None,
) -> list[int]:
    """Return the integer ids of all bags that pass *condition*."""
    if condition is not None and not isinstance(condition, Condition):
        condition = Condition.model_validate(condition)

    ids = [int(db_id) for db_id, bag in bags.items() if bag and passes_condition(bag, condition)]
    logger.debug("Condition matched %d of %d elements", len(ids), len(bags))
    return ids
