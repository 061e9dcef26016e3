"""Grouped aggregation of ElementRecords.

Aggregates are recomputed from scratch for every request.  Sums are
accumulated unrounded and rounded to 3 decimals once, on emission.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from bimtalk.config import MAX_ROWS, UNKNOWN_CATEGORY, WALL_CATEGORY
from bimtalk.metadata import report
from bimtalk.metadata.collection import collect_elements, collect_walls
from bimtalk.models.element import CategoryAggregate, ElementRecord, ThicknessAggregate
from bimtalk.properties.numeric import parse_numeric, round_half_up

logger = logging.getLogger(__name__)

_PRECISION = 3


@dataclass
class _Totals:
    count: int = 0
    area: float = 0.0
    volume: float = 0.0

    def add(self, record: ElementRecord) -> None:
        self.count += 1
        self.area += record.area or 0.0
        self.volume += record.volume or 0.0


def summarize_by_category(records: Iterable[ElementRecord]) -> list[CategoryAggregate]:
    """Group *records* by category in first-seen order.

    Every record is counted; a missing area or volume adds 0 to the sums.
    """
    groups: dict[str, _Totals] = {}
    for record in records:
        key = record.category or UNKNOWN_CATEGORY
        groups.setdefault(key, _Totals()).add(record)

    return [
        CategoryAggregate(
            category=key,
            count=totals.count,
            area=round(totals.area, _PRECISION),
            volume=round(totals.volume, _PRECISION),
        )
        for key, totals in groups.items()
    ]


def summarize_by_thickness(records: Iterable[ElementRecord]) -> list[ThicknessAggregate]:
    """Group *records* by rounded thickness (mm), ascending.

    Records without a finite thickness are left out of both counts and sums.
    """
    groups: dict[int, _Totals] = {}
    for record in records:
        if record.thickness is None or not math.isfinite(record.thickness):
            continue
        key = round_half_up(record.thickness)
        groups.setdefault(key, _Totals()).add(record)

    return [
        ThicknessAggregate(
            thickness=key,
            count=groups[key].count,
            area=round(groups[key].area, _PRECISION),
            volume=round(groups[key].volume, _PRECISION),
        )
        for key in sorted(groups)
    ]


def records_from_wall_rows(rows: Iterable[Mapping[str, Any]]) -> list[ElementRecord]:
    """Convert compact ``{id, name, thickness_mm, volume_m3}`` rows to records."""
    records: list[ElementRecord] = []
    for row in rows:
        element_id = parse_numeric(row.get("id"))
        records.append(
            ElementRecord(
                id=int(element_id) if element_id is not None else None,
                name=row.get("name") or None,
                category=WALL_CATEGORY,
                thickness=parse_numeric(row.get("thickness_mm")),
                volume=parse_numeric(row.get("volume_m3")),
            )
        )
    return records


# ---------------------------------------------------------------------------
# Request-level summaries
# ---------------------------------------------------------------------------


@dataclass
class ElementSummary:
    """All parsed elements plus their per-category aggregates."""

    records: list[ElementRecord] = field(default_factory=list)
    aggregates: list[CategoryAggregate] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        rows = report.element_table_rows(self.records)
        grouped = [a.model_dump() for a in self.aggregates]
        return {
            "columns": list(report.ELEMENT_COLUMNS),
            "rows": rows,
            "grouped": grouped,
            "action": report.table_action(
                "요소 목록", "추출된 모든 요소", report.ELEMENT_COLUMNS, rows
            ),
            "grouped_action": report.table_action(
                "카테고리별 집계",
                "카테고리별 개수/면적/체적 합계",
                report.CATEGORY_COLUMNS,
                [[a.category, a.count, a.area, a.volume] for a in self.aggregates],
            ),
        }


@dataclass
class WallSummary:
    """All parsed walls plus their per-thickness aggregates."""

    records: list[ElementRecord] = field(default_factory=list)
    aggregates: list[ThicknessAggregate] = field(default_factory=list)

    def grouped_summary(self) -> list[dict[str, Any]]:
        """Aggregates with explicit units, ascending by thickness."""
        return [
            {
                "thickness_mm": a.thickness,
                "count": a.count,
                "volume_sum_m3": a.volume,
            }
            for a in self.aggregates
        ]

    def to_payload(self) -> dict[str, Any]:
        rows = report.wall_table_rows(self.records)
        summary = self.grouped_summary()
        return {
            "columns": list(report.WALL_COLUMNS),
            "rows": rows,
            "grouped": [a.model_dump() for a in self.aggregates],
            "grouped_summary": summary,
            "action": report.table_action(
                "벽체 목록", "추출된 모든 벽체", report.WALL_COLUMNS, rows
            ),
            "grouped_action": report.table_action(
                "두께별집계",
                "두께별 서버 집계",
                report.THICKNESS_COLUMNS,
                [[g["thickness_mm"], g["count"], g["volume_sum_m3"]] for g in summary],
            ),
            "grouped_chart": report.bar_chart_action(
                "두께별체적",
                labels=[str(g["thickness_mm"]) for g in summary],
                datasets={
                    "Volume": [g["volume_sum_m3"] for g in summary],
                    "Count": [g["count"] for g in summary],
                },
            ),
        }


def build_element_summary(rows: Any, max_rows: int = MAX_ROWS) -> ElementSummary:
    """Collect *rows* and group them by category."""
    records = collect_elements(rows, max_rows)
    aggregates = summarize_by_category(records)
    logger.info(
        "Element summary: %d records in %d categories", len(records), len(aggregates)
    )
    return ElementSummary(records=records, aggregates=aggregates)


def build_wall_summary(rows: Any, max_rows: int = MAX_ROWS) -> WallSummary:
    """Collect wall *rows* and group them by thickness."""
    records = collect_walls(rows, max_rows)
    aggregates = summarize_by_thickness(records)
    logger.info(
        "Wall summary: %d walls, thickness groups %s",
        len(records),
        [a.thickness for a in aggregates],
    )
    return WallSummary(records=records, aggregates=aggregates)
