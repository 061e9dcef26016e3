"""Condition — a structured element query, and the string profile it reads."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from bimtalk.properties.keys import CATEGORY_KEYS, NAME_KEYS

PropertyBag = Mapping[str, Any]


def ensure_keywords(value: Any) -> list[str]:
    """Coerce a keyword or list of keywords into a list of non-blank strings."""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple, set)) else [value]
    return [str(kw) for kw in items if kw is not None and str(kw).strip()]


def includes_any(target_lower: str, keywords: list[str]) -> bool:
    if not target_lower:
        return False
    return any(kw.strip().lower() in target_lower for kw in keywords)


def includes_every(target_lower: str, keywords: list[str]) -> bool:
    if not target_lower:
        return False
    return all(kw.strip().lower() in target_lower for kw in keywords)


@dataclass
class StringProfile:
    """Category and name texts of one property bag."""

    categories: list[str] = field(default_factory=list)
    searchable_list: list[str] = field(default_factory=list)
    searchable_text_lower: str = ""

    @property
    def category_text_lower(self) -> str:
        return " | ".join(c.lower() for c in self.categories)


def _present_values(bag: PropertyBag, keys: tuple[str, ...]) -> list[str]:
    values: dict[str, None] = {}
    for key in keys:
        raw = bag.get(key)
        if raw is not None:
            text = str(raw).strip()
            if text:
                values[text] = None
    return list(values)


def build_string_profile(bag: PropertyBag) -> StringProfile:
    """Collect every category value, and every name plus category value."""
    categories = _present_values(bag, CATEGORY_KEYS)
    texts = dict.fromkeys(_present_values(bag, NAME_KEYS))
    texts.update(dict.fromkeys(categories))
    searchable = list(texts)
    return StringProfile(
        categories=categories,
        searchable_list=searchable,
        searchable_text_lower=" | ".join(s.lower() for s in searchable),
    )


class Condition(BaseModel):
    """Filter query over property bags.

    Every clause is optional and all present clauses must hold.  Keys are
    accepted in snake_case or in the camelCase used by the front end
    (``minVolume``, ``includeKeywords``).  Heights are metres.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    category: list[str] = Field(default_factory=list)
    category_keywords: list[str] = Field(default_factory=list)
    include_keywords: list[str] = Field(default_factory=list)
    exclude_keywords: list[str] = Field(default_factory=list)
    level: list[str] = Field(default_factory=list)
    material: list[str] = Field(default_factory=list)

    min_height: float | None = None
    max_height: float | None = None
    min_area: float | None = None
    max_area: float | None = None
    min_volume: float | None = None
    max_volume: float | None = None

    custom_predicate: Callable[[PropertyBag, StringProfile], bool] | None = Field(
        default=None, exclude=True
    )
    """Evaluated last with the raw bag and its :class:`StringProfile`."""

    @field_validator(
        "category",
        "category_keywords",
        "include_keywords",
        "exclude_keywords",
        "level",
        "material",
        mode="before",
    )
    @classmethod
    def _coerce_keywords(cls, value: Any) -> list[str]:
        return ensure_keywords(value)

    @property
    def all_category_keywords(self) -> list[str]:
        return self.category + self.category_keywords
