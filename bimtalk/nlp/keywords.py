"""Keyword lists for intent detection, Korean and English side by side.

Matching is plain substring containment on the lower-cased message, so a
Korean stem such as ``보여`` also covers ``보여줘`` and ``보여주세요``.
"""

from __future__ import annotations

WALL_KEYWORDS = ("벽체", "벽", "wall")
SHOW_KEYWORDS = ("보여", "보여줘", "보기", "표시", "show", "추출", "확인", "검토")
ONLY_KEYWORDS = ("만", "only")

THICKNESS_KEYWORDS = ("두께", "폭", "width", "thickness")
VOLUME_KEYWORDS = ("체적", "부피", "volume")
HEIGHT_KEYWORDS = ("height", "높이")
AREA_KEYWORDS = ("area", "면적")

DIMENSION_KEYWORDS = (
    "크기", "치수", "size", "dimension",
    "길이", "length", "높이", "height",
    "너비", "width", "폭", "두께", "thickness",
    "면적", "area", "체적", "부피", "volume",
)

TABLE_KEYWORDS = ("표", "테이블", "table", "schedule", "목록", "리스트")

QUANTITY_KEYWORDS = (
    "수량", "개수", "count",
    "volume", "체적", "부피",
    "area", "면적",
    "width", "너비", "폭", "두께", "thickness",
    "추출", "확인",
)

TYPE_KEYWORDS = ("type", "타입", "형")
FAMILY_KEYWORDS = ("family", "패밀리")
LEVEL_KEYWORDS = ("level", "레벨", "층")
INFO_KEYWORDS = ("속성", "정보", "데이터")

THICKNESS_GROUP_KEYWORDS = ("두께별", "thickness")
CHART_KEYWORDS = ("차트", "chart")
HIDE_KEYWORDS = ("숨기", "hide")

# Requested when a metadata question names no specific field
DEFAULT_METADATA_PROPERTIES: tuple[str, ...] = (
    "Category", "카테고리",
    "Family", "Family Name", "패밀리", "타입 패밀리",
    "Type", "Type Name", "타입 이름",
    "Level", "레벨", "층", "Reference Level", "참조 레벨",
    "Height", "Unconnected Height", "미연결 높이", "미연결 높이(mm)",
    "Unconnected Height (mm)", "미연결 높이 (mm)",
    "Width", "너비", "폭", "두께", "Thickness", "Overall Width", "명목 너비",
    "Nominal Width", "명목 두께", "벽 두께", "벽 폭",
    "Volume", "체적", "부피",
    "Area", "면적",
)
