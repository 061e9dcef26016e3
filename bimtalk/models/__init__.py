"""Data models shared across the package."""

from bimtalk.models.element import CategoryAggregate, ElementRecord, ThicknessAggregate, WallRow

__all__ = ["CategoryAggregate", "ElementRecord", "ThicknessAggregate", "WallRow"]
