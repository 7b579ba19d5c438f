"""Axis-aligned bounding box in canvas units."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float
    center_x: float
    center_y: float

    @classmethod
    def from_extents(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> BoundingBox:
        width = max(0.0, max_x - min_x)
        height = max(0.0, max_y - min_y)
        return cls(
            x=min_x,
            y=min_y,
            width=width,
            height=height,
            center_x=min_x + width / 2,
            center_y=min_y + height / 2,
        )

    @classmethod
    def canvas(cls, size: float = 24.0) -> BoundingBox:
        """The fallback box: the full canvas, centered."""
        return cls.from_extents(0.0, 0.0, size, size)

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def extents(self) -> tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    @property
    def aspect_ratio(self) -> float:
        """width / height; a zero-height box is infinitely wide, a point is square."""
        if self.height == 0:
            return 1.0 if self.width == 0 else float("inf")
        return self.width / self.height

    def union(self, other: BoundingBox) -> BoundingBox:
        return BoundingBox.from_extents(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )
