from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Region:
    """Axis-aligned rectangle anchored at its top-left corner (y grows downward)."""

    x: float
    y: float
    width: float
    height: float

    @staticmethod
    def centered(cx: float, cy: float, half_width: float, half_height: float) -> "Region":
        return Region(cx - half_width, cy - half_height, 2.0 * half_width, 2.0 * half_height)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height

    def intersects(self, other: "Region") -> bool:
        # Touching edges count as overlap; only strict separation on an axis rejects.
        return not (
            other.x > self.x + self.width
            or other.x + other.width < self.x
            or other.y > self.y + self.height
            or other.y + other.height < self.y
        )

    def quarter(self) -> Tuple["Region", "Region", "Region", "Region"]:
        """Split at the midpoint into (top_left, top_right, bottom_left, bottom_right)."""
        half_w = self.width / 2.0
        half_h = self.height / 2.0
        mid_x = self.x + half_w
        mid_y = self.y + half_h
        return (
            Region(self.x, self.y, half_w, half_h),
            Region(mid_x, self.y, half_w, half_h),
            Region(self.x, mid_y, half_w, half_h),
            Region(mid_x, mid_y, half_w, half_h),
        )
