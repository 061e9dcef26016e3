"""Table and chart action payloads consumed by the viewer front end."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from bimtalk.models.element import ElementRecord

# Properties the client is asked to export for generic element summaries
COMMON_PROPERTIES: tuple[str, ...] = (
    "ElementId", "Category", "Family", "Family Name", "Type", "Type Name", "유형 이름",
    "Level", "레벨",
    "폭", "Width", "벽 폭", "두께", "Thickness", "Overall Width", "타입 폭", "타입 두께",
    "Height", "Unconnected Height", "미연결 높이", "미연결 높이(mm)",
    "면적", "Area", "Surface Area",
    "체적", "부피", "Volume", "Volume (m3)", "Volume (m³)",
)

# Properties the client is asked to export for wall summaries
WALL_PROPERTIES: tuple[str, ...] = (
    "ElementId", "Category", "Type", "Type Name", "유형 이름", "Level", "레벨",
    "폭", "Width", "너비", "폭(mm)", "두께", "Thickness", "Overall Width", "벽체폭", "구조두께",
    "Height", "Unconnected Height", "미연결높이", "미연결높이(mm)",
    "면적", "Area", "Surface Area",
    "체적", "부피", "Volume", "Volume (m3)", "Volume (m³)",
)

ELEMENT_COLUMNS = ("ID", "Category", "Level", "Width", "Thickness", "Height", "Volume")
WALL_COLUMNS = ("ID", "Level", "Width", "Thickness", "Height", "Volume")
CATEGORY_COLUMNS = ("Category", "Count", "Area", "Volume")
THICKNESS_COLUMNS = ("Thickness (mm)", "Count", "Volume (m3)")


def _cell(value: Any) -> Any:
    return "" if value is None else value


def element_table_rows(records: Iterable[ElementRecord]) -> list[list[Any]]:
    """One row per record in :data:`ELEMENT_COLUMNS` order."""
    return [
        [
            r.id,
            r.category or "",
            r.level or "",
            _cell(r.width),
            _cell(r.thickness if r.thickness is not None else r.width),
            _cell(r.height),
            _cell(r.volume),
        ]
        for r in records
    ]


def wall_table_rows(records: Iterable[ElementRecord]) -> list[list[Any]]:
    """One row per wall in :data:`WALL_COLUMNS` order."""
    return [
        [
            r.id,
            r.level or "",
            _cell(r.width),
            _cell(r.thickness if r.thickness is not None else r.width),
            _cell(r.height),
            _cell(r.volume),
        ]
        for r in records
    ]


def table_action(
    title: str,
    description: str,
    columns: Sequence[str],
    rows: list[list[Any]],
) -> dict[str, Any]:
    """A ``render_table`` action."""
    return {
        "action": "render_table",
        "title": title,
        "description": description,
        "columns": list(columns),
        "rows": rows,
    }


def bar_chart_action(
    title: str,
    labels: list[str],
    datasets: Mapping[str, list[Any]],
) -> dict[str, Any]:
    """A ``render_chart`` bar chart with parallel label and data arrays."""
    return {
        "action": "render_chart",
        "type": "bar",
        "title": title,
        "labels": labels,
        "datasets": [{"label": label, "data": data} for label, data in datasets.items()],
    }
