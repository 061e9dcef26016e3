"""Canned queries over a :class:`PropertyDatabase`."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from bimtalk.filtering.condition import Condition, PropertyBag, StringProfile
from bimtalk.filtering.database import PropertyDatabase
from bimtalk.filtering.engine import passes_condition
from bimtalk.metadata.summary import records_from_wall_rows, summarize_by_thickness
from bimtalk.models.element import ThicknessAggregate
from bimtalk.nlp.intent import FilterIsolateIntent
from bimtalk.properties.keys import PROPERTY_FIELDS

logger = logging.getLogger(__name__)

WALL_CATEGORY_KEYWORDS = ["벽", "wall", "revit wall", "Revit 벽"]

AI_FILTER_LABEL = "AI 맞춤 필터"

# Clauses of an AI filter other than its category
_AI_RANGE_KEYS = (
    "min_height",
    "max_height",
    "min_area",
    "max_area",
    "min_volume",
    "max_volume",
)


@dataclass
class FilterPresetResult:
    label: str
    ids: list[int] = field(default_factory=list)
    condition: Condition | None = None
    fallback_used: bool = False
    mode: str = "isolate"


def _as_condition(value: Condition | Mapping[str, Any] | None) -> Condition | None:
    if value is None or isinstance(value, Condition):
        return value
    return Condition.model_validate(value)


def run_filter_preset(
    db: PropertyDatabase,
    label: str,
    condition: Condition | Mapping[str, Any] | None,
    fallback_condition: Condition | Mapping[str, Any] | None = None,
    min_result_count: int = 1,
    timeout: float | None = None,
) -> FilterPresetResult:
    """Wait for *db*, apply *condition* and fall back when too little matches.

    The fallback is only tried when *condition* yields fewer than
    *min_result_count* ids; its result is kept only if it is non-empty.
    *timeout* defaults to the database's ``ready_timeout``.

    Raises
    ------
    ReadinessTimeout
        Propagated from :meth:`PropertyDatabase.wait_until_ready`.
    """
    db.wait_until_ready(timeout)

    primary = _as_condition(condition)
    ids = db.filter(primary)
    result = FilterPresetResult(label=label, ids=ids, condition=primary)

    fallback = _as_condition(fallback_condition)
    if len(ids) < min_result_count and fallback is not None:
        fallback_ids = db.filter(fallback)
        if fallback_ids:
            result = FilterPresetResult(
                label=label, ids=fallback_ids, condition=fallback, fallback_used=True
            )

    logger.info(
        "Preset %r matched %d elements%s",
        label,
        len(result.ids),
        " (fallback)" if result.fallback_used else "",
    )
    return result


def _taller_than(threshold_m: float) -> Callable[[PropertyBag, StringProfile], bool]:
    def predicate(bag: PropertyBag, _profile: StringProfile) -> bool:
        height = PROPERTY_FIELDS["height"].resolve(bag)
        return height is None or height > threshold_m

    return predicate


def condition_from_intent(intent: FilterIsolateIntent) -> Condition:
    """Translate a wall isolation intent into a database condition.

    Intent heights are millimetres; condition heights are metres.  A
    ``Height > N`` filter is strict: ``min_height`` alone is inclusive, so
    the condition also carries a predicate rejecting heights equal to the
    threshold.  Elements without a height still pass.
    """
    keywords = list(dict.fromkeys([intent.category, *WALL_CATEGORY_KEYWORDS]))
    min_height = None
    for f in intent.filters or []:
        if f.field.lower() == "height" and f.op == ">":
            min_height = f.value_mm / 1000
    return Condition(
        category_keywords=keywords,
        min_height=min_height,
        custom_predicate=_taller_than(min_height) if min_height is not None else None,
    )


# ---------------------------------------------------------------------------
# AI filters
# ---------------------------------------------------------------------------


def has_ai_filter_clauses(ai_filter: Mapping[str, Any]) -> bool:
    """True if *ai_filter* constrains anything besides the category."""
    if any(ai_filter.get(key) for key in ("level", "name_contains", "material")):
        return True
    return any(ai_filter.get(key) is not None for key in _AI_RANGE_KEYS)


def condition_from_ai_filter(
    ai_filter: Mapping[str, Any], include_category: bool = True
) -> Condition:
    """Translate an assistant filter object into a :class:`Condition`.

    The object uses snake_case keys (``category``, ``level``, ``material``,
    ``name_contains``, ``min_height`` ... ``max_volume``).  ``name_contains``
    becomes a single include keyword.  With *include_category* false the
    category is left out, for use on ids already matched by category.
    """
    name_contains = ai_filter.get("name_contains")
    data: dict[str, Any] = {
        "level": ai_filter.get("level"),
        "material": ai_filter.get("material"),
        "include_keywords": [name_contains] if name_contains else [],
    }
    for key in _AI_RANGE_KEYS:
        data[key] = ai_filter.get(key)
    if include_category and ai_filter.get("category"):
        data["category_keywords"] = [ai_filter["category"]]
    return Condition.model_validate(data)


def apply_ai_filter(
    db: PropertyDatabase,
    ai_filter: Mapping[str, Any],
    timeout: float | None = None,
) -> FilterPresetResult:
    """Resolve the ids selected by an assistant filter object.

    A category is first matched against the ``Category`` values alone
    (:meth:`PropertyDatabase.filter_by_category`), and the remaining clauses
    are applied to those ids.  When that pass finds nothing, or there is no
    category, the whole condition runs over every element instead and
    ``fallback_used`` is set if a category pass was attempted.

    Raises
    ------
    ReadinessTimeout
        Propagated from :meth:`PropertyDatabase.wait_until_ready`.
    """
    bags = db.wait_until_ready(timeout)
    mode = ai_filter.get("mode") or "isolate"
    category = ai_filter.get("category")
    has_clauses = has_ai_filter_clauses(ai_filter)

    if category:
        base_ids = db.filter_by_category(category)
        if base_ids:
            rest = condition_from_ai_filter(ai_filter, include_category=False)
            ids = base_ids
            if has_clauses:
                ids = [i for i in base_ids if i in bags and passes_condition(bags[i], rest)]
            label = AI_FILTER_LABEL if has_clauses else f"{category} 카테고리"
            logger.info("AI filter matched %d of %d %r elements", len(ids), len(base_ids), category)
            return FilterPresetResult(label=label, ids=ids, condition=rest, mode=mode)
        logger.warning("Category %r matched nothing; scanning all properties", category)

    result = run_filter_preset(
        db, AI_FILTER_LABEL, condition_from_ai_filter(ai_filter), timeout=timeout
    )
    result.fallback_used = bool(category)
    result.mode = mode
    return result


def wall_thickness_summary(
    db: PropertyDatabase, timeout: float | None = None
) -> list[ThicknessAggregate]:
    """Thickness groups of every wall in *db* that has a thickness and volume."""
    db.wait_until_ready(timeout)
    rows = [row.model_dump() for row in db.build_wall_rows()]
    return summarize_by_thickness(records_from_wall_rows(rows))
