"""Relevant-property derivation — which metadata fields a question asks for."""

from __future__ import annotations

from bimtalk.nlp.keywords import (
    AREA_KEYWORDS,
    DEFAULT_METADATA_PROPERTIES,
    DIMENSION_KEYWORDS,
    FAMILY_KEYWORDS,
    HEIGHT_KEYWORDS,
    INFO_KEYWORDS,
    LEVEL_KEYWORDS,
    THICKNESS_KEYWORDS,
    TYPE_KEYWORDS,
    VOLUME_KEYWORDS,
)

BASE_PROPERTIES = ("Category", "카테고리", "Name", "이름")

# (trigger keywords, property names added when any trigger is present)
_DESCRIPTIVE_GROUPS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (TYPE_KEYWORDS, ("Type", "Type Name", "타입 이름")),
    (FAMILY_KEYWORDS, ("Family", "Family Name", "패밀리")),
    (LEVEL_KEYWORDS, ("Level", "레벨", "층")),
)

# Only consulted when the message mentions a dimension at all
_DIMENSION_GROUPS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (HEIGHT_KEYWORDS, ("Height", "Unconnected Height", "미연결 높이")),
    (THICKNESS_KEYWORDS, ("Width", "Thickness", "두께", "폭", "너비")),
    (AREA_KEYWORDS, ("Area", "면적")),
    (VOLUME_KEYWORDS, ("Volume", "체적", "부피")),
)

# At or below this size the derived list only holds the base fields
MIN_SPECIFIC_PROPERTIES = len(BASE_PROPERTIES)


def _mentions(text: str, keywords: tuple[str, ...]) -> bool:
    return any(kw in text for kw in keywords)


def relevant_properties(message: str) -> list[str]:
    """Return the property names a metadata question is about.

    Always includes the category and name fields.  A question that asks
    for generic "properties / info / data" without naming any field gets
    :data:`DEFAULT_METADATA_PROPERTIES` instead.
    """
    text = message.lower()
    props: dict[str, None] = dict.fromkeys(BASE_PROPERTIES)

    for triggers, names in _DESCRIPTIVE_GROUPS:
        if _mentions(text, triggers):
            props.update(dict.fromkeys(names))

    if _mentions(text, DIMENSION_KEYWORDS):
        for triggers, names in _DIMENSION_GROUPS:
            if _mentions(text, triggers):
                props.update(dict.fromkeys(names))

    if len(props) <= MIN_SPECIFIC_PROPERTIES and _mentions(text, INFO_KEYWORDS):
        return list(DEFAULT_METADATA_PROPERTIES)
    return list(props)
