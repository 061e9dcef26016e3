"""Metadata rows — parsing, collection and grouped summaries."""

from bimtalk.metadata.collection import (
    InputShapeError,
    OverloadError,
    collect_elements,
    collect_walls,
)
from bimtalk.metadata.rows import parse_element_row, parse_wall_row
from bimtalk.metadata.summary import (
    ElementSummary,
    WallSummary,
    build_element_summary,
    build_wall_summary,
    summarize_by_category,
    summarize_by_thickness,
)

__all__ = [
    "ElementSummary",
    "InputShapeError",
    "OverloadError",
    "WallSummary",
    "build_element_summary",
    "build_wall_summary",
    "collect_elements",
    "collect_walls",
    "parse_element_row",
    "parse_wall_row",
    "summarize_by_category",
    "summarize_by_thickness",
]
