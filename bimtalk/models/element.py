"""ElementRecord — the normalised view of one model element.

Records are built per request from raw metadata rows (server) or from the
property database of the loaded model (client mirror).  They are never
persisted.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ElementRecord(BaseModel):
    """Semantically-typed view of one PropertyBag.

    Thickness, width and height taken from metadata rows are the raw numbers
    found in the bag (millimetres in practice); lengths resolved through the
    length resolver are metres.  The two conventions coexist.
    """

    id: int | None = None
    name: str | None = None
    category: str = ""
    type_name: str | None = None
    level: str | None = None

    width: float | None = None
    thickness: float | None = None
    height: float | None = None
    area: float | None = None
    volume: float | None = None

    meta: dict[str, Any] = Field(default_factory=dict)
    """The full property bag, kept for downstream lookups."""


class CategoryAggregate(BaseModel):
    """Count and summed quantities of all records sharing a category."""

    category: str
    count: int = Field(default=0, ge=0)
    area: float = 0.0
    """Total area, rounded to 3 decimals."""

    volume: float = 0.0
    """Total volume, rounded to 3 decimals."""


class ThicknessAggregate(BaseModel):
    """Count and summed quantities of walls sharing a rounded thickness (mm)."""

    thickness: int
    count: int = Field(default=0, ge=0)
    area: float = 0.0
    volume: float = 0.0


class WallRow(BaseModel):
    """Compact wall row prepared from the property database."""

    id: int
    name: str = ""
    thickness_mm: int
    volume_m3: float
