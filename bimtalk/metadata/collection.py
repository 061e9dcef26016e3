"""Batch collection of metadata rows into ElementRecords."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from bimtalk.config import MAX_ROWS
from bimtalk.metadata.rows import parse_element_row, parse_wall_row
from bimtalk.models.element import ElementRecord

logger = logging.getLogger(__name__)


class InputShapeError(ValueError):
    """Raised when a row batch is absent, empty, or not a list."""


class OverloadError(ValueError):
    """Raised when a row batch exceeds the configured ceiling."""

    def __init__(self, received: int, limit: int) -> None:
        super().__init__(f"Too many rows: {received} received, limit is {limit}")
        self.received = received
        self.limit = limit


def validate_rows(rows: Any, max_rows: int = MAX_ROWS) -> list[Any]:
    """Check the batch shape and size before any row is parsed.

    Raises
    ------
    InputShapeError
        If *rows* is not a non-empty list.
    OverloadError
        If *rows* holds more than *max_rows* entries.
    """
    if not isinstance(rows, (list, tuple)) or len(rows) == 0:
        raise InputShapeError("rows[] is required and must be a non-empty list")
    if len(rows) > max_rows:
        raise OverloadError(len(rows), max_rows)
    return list(rows)


def _collect(
    rows: Any,
    parse: Callable[[Any], ElementRecord | None],
    max_rows: int,
) -> list[ElementRecord]:
    batch = validate_rows(rows, max_rows)
    records: list[ElementRecord] = []
    for row in batch:
        record = parse(row)
        if record is not None:
            records.append(record)
    skipped = len(batch) - len(records)
    if skipped:
        logger.debug("Skipped %d of %d rows", skipped, len(batch))
    return records


def collect_elements(rows: Any, max_rows: int = MAX_ROWS) -> list[ElementRecord]:
    """Parse every row of any category, dropping unparseable rows.

    Input order is preserved.
    """
    return _collect(rows, parse_element_row, max_rows)


def collect_walls(rows: Any, max_rows: int = MAX_ROWS) -> list[ElementRecord]:
    """Parse wall rows only, dropping everything else."""
    return _collect(rows, parse_wall_row, max_rows)
