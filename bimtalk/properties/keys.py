"""Candidate property names per semantic field, and the resolver profiles.

Revit models exported through the model-derivative service carry the same
quantity under localised names (``체적`` / ``Volume``), with and without unit
suffixes (``미연결 높이(mm)``) and with inconsistent spacing.  The lists
below are ordered by priority.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from bimtalk.properties.resolver import FieldKind, FieldResolver, PropertyBag, resolve_string

# ---------------------------------------------------------------------------
# Metadata rows (server-side summaries)
# ---------------------------------------------------------------------------

ROW_VOLUME_KEYS = ("체적", "부피", "Volume", "Volume (m3)", "Volume (m³)")
ROW_AREA_KEYS = ("면적", "Area", "Surface Area")
ROW_CATEGORY_KEYS = ("Category", "카테고리")
ROW_LEVEL_KEYS = ("Level", "레벨")

ELEMENT_WIDTH_KEYS = ("폭", "Width", "벽 폭")
ELEMENT_THICKNESS_KEYS = ("두께", "Thickness", "Overall Width", "타입 폭", "타입 두께")
ELEMENT_HEIGHT_KEYS = ("Height", "Unconnected Height", "미연결 높이", "미연결 높이(mm)")
ELEMENT_TYPE_NAME_KEYS = ("유형 이름", "Type Name", "유형 해설")

WALL_WIDTH_KEYS = ("폭", "Width", "너비", "폭(mm)")
WALL_THICKNESS_KEYS = ("폭", "Width", "두께", "벽 두께", "구조 두께", "Wall Width", "Thickness")
WALL_HEIGHT_KEYS = ("Height", "Unconnected Height", "미연결높이", "미연결높이(mm)")
WALL_TYPE_NAME_KEYS = ("유형 이름", "Type Name", "유형 설명")

# ---------------------------------------------------------------------------
# Property database bags (viewer-side filtering)
# ---------------------------------------------------------------------------

CATEGORY_KEYS = (
    "Category",
    "CategoryId",
    "카테고리",
    "분류",
    "범주",
    "Type Name",
    "종류",
    "Family",
    "패밀리",
    "패밀리 및 유형",
    "패밀리 및 타입",
    "System Classification",
    "Structural Usage",
    "Function",
)

NAME_KEYS = (
    "__name",
    "Name",
    "Element Name",
    "Type",
    "Type Name",
    "Family and Type",
    "Family",
    "Symbol Name",
    "__externalId",
    "ExternalId",
    "External Id",
)

HEIGHT_KEYS = (
    "Height",
    "Unconnected Height",
    "Unconnected Height (mm)",
    "미연결 높이",
    "미연결 높이(mm)",
    "미연결 높이 (mm)",
    "Base Constraint Height",
    "Top Offset",
    "높이",
)

MATERIAL_KEYS = (
    "Material",
    "Materials",
    "Material Name",
    "Structural Material",
    "재료",
    "구조 재료",
    "구조재료",
    "마감 재료",
    "마감재료",
)

AREA_KEYS = ("Area", "면적", "표면적")
VOLUME_KEYS = ("Volume", "체적", "용적")
LEVEL_KEYS = ("Level", "레벨", "층", "참조 레벨", "Reference Level")
THICKNESS_KEYS = ("폭", "Width", "두께", "벽 두께", "구조 두께", "Wall Width", "Thickness")

HEIGHT_FALLBACK = re.compile(r"height|높이", re.I)
AREA_FALLBACK = re.compile(r"area|면적|표면적", re.I)
VOLUME_FALLBACK = re.compile(r"volume|체적|용적", re.I)
THICKNESS_FALLBACK = re.compile(r"width|thickness|두께|폭", re.I)

# ---------------------------------------------------------------------------
# Resolver profiles
# ---------------------------------------------------------------------------

ELEMENT_FIELDS: dict[str, FieldResolver] = {
    "volume": FieldResolver("volume", FieldKind.NUMERIC, ROW_VOLUME_KEYS, substring=True),
    "area": FieldResolver("area", FieldKind.NUMERIC, ROW_AREA_KEYS, substring=True),
    "width": FieldResolver("width", FieldKind.NUMERIC, ELEMENT_WIDTH_KEYS, substring=True),
    "thickness": FieldResolver(
        "thickness", FieldKind.NUMERIC, ELEMENT_THICKNESS_KEYS, substring=True
    ),
    "height": FieldResolver("height", FieldKind.NUMERIC, ELEMENT_HEIGHT_KEYS, substring=True),
    "type_name": FieldResolver("type_name", FieldKind.STRING, ELEMENT_TYPE_NAME_KEYS),
    "level": FieldResolver("level", FieldKind.STRING, ROW_LEVEL_KEYS),
}

WALL_FIELDS: dict[str, FieldResolver] = {
    "volume": FieldResolver("volume", FieldKind.NUMERIC, ROW_VOLUME_KEYS, substring=True),
    "area": FieldResolver("area", FieldKind.NUMERIC, ROW_AREA_KEYS, substring=True),
    "width": FieldResolver("width", FieldKind.NUMERIC, WALL_WIDTH_KEYS, substring=True),
    "height": FieldResolver("height", FieldKind.NUMERIC, WALL_HEIGHT_KEYS, substring=True),
    "type_name": FieldResolver("type_name", FieldKind.STRING, WALL_TYPE_NAME_KEYS),
    "level": FieldResolver("level", FieldKind.STRING, ROW_LEVEL_KEYS),
}

PROPERTY_FIELDS: dict[str, FieldResolver] = {
    "category": FieldResolver("category", FieldKind.STRING, CATEGORY_KEYS, substring=True),
    "name": FieldResolver("name", FieldKind.STRING, NAME_KEYS, substring=True),
    "level": FieldResolver("level", FieldKind.STRING, LEVEL_KEYS),
    "height": FieldResolver("height", FieldKind.LENGTH, HEIGHT_KEYS, HEIGHT_FALLBACK),
    "thickness": FieldResolver("thickness", FieldKind.LENGTH, THICKNESS_KEYS, THICKNESS_FALLBACK),
    "area": FieldResolver("area", FieldKind.NUMERIC, AREA_KEYS, AREA_FALLBACK),
    "volume": FieldResolver("volume", FieldKind.NUMERIC, VOLUME_KEYS, VOLUME_FALLBACK),
}


def resolve_category(bag: PropertyBag) -> str:
    """Category text of *bag*, exact names first then key substrings."""
    return resolve_string(bag, CATEGORY_KEYS, substring=True)


def resolve_name(bag: PropertyBag) -> str:
    """Display name of *bag*, exact names first then key substrings."""
    return resolve_string(bag, NAME_KEYS, substring=True)


# ---------------------------------------------------------------------------
# Metadata export property lists
# ---------------------------------------------------------------------------

# Exported ahead of whatever a metadata question asks for
METADATA_ALWAYS_INCLUDE = (
    *ROW_CATEGORY_KEYS,
    "Family",
    "Family Name",
    "타입 패밀리",
    "패밀리",
    "Type",
    "Type Name",
    "타입 이름",
    "Level",
    "층",
    "Reference Level",
    "참조 레벨",
    "Height",
    "Unconnected Height",
    "Unconnected Height (mm)",
    "미연결 높이",
    "미연결 높이(mm)",
    "미연결 높이 (mm)",
    "Width",
    "벽 두께",
    "벽 폭",
    "폭",
    "두께",
    "Thickness",
    "Overall Width",
    "타입 폭",
    "Nominal Width",
)


def resolve_metadata_properties(names: Iterable[str | None] | None = None) -> list[str]:
    """:data:`METADATA_ALWAYS_INCLUDE` followed by *names*, without duplicates.

    Names are compared case-insensitively and the first spelling seen is
    kept.  Empty names are dropped.
    """
    seen: dict[str, str] = {}
    for name in (*METADATA_ALWAYS_INCLUDE, *(names or ())):
        if not name:
            continue
        seen.setdefault(str(name).lower(), str(name))
    return list(seen.values())
