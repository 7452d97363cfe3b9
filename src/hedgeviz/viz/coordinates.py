"""2D points for scene positions.

Scene positions are plain vectors in the renderer's coordinate space; the
satellite layout only needs addition, scaling, length and quarter turns.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

# Vectors shorter than this have no usable direction
GEOM_TOL = 1e-12


@dataclass(frozen=True)
class Point:
    """Immutable 2D point / vector.

    Example:
        >>> p1 = Point(10, 20)
        >>> p2 = Point(5, 5)
        >>> p1 + p2
        Point(x=15, y=25)
        >>> (p1 - p2) * 2
        Point(x=10, y=30)
    """

    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __neg__(self) -> Point:
        return Point(-self.x, -self.y)

    @property
    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalized(self) -> Point | None:
        """Unit vector in the same direction, or None for a (near) zero vector."""
        length = self.length
        if length <= GEOM_TOL:
            return None
        return Point(self.x / length, self.y / length)

    def rotated_cw(self) -> Point:
        """Rotate by -90 degrees in a y-up frame.

        Example:
            >>> Point(1, 0).rotated_cw()
            Point(x=0, y=-1)
        """
        return Point(self.y, -self.x)

    def midpoint(self, other: Point) -> Point:
        return Point((self.x + other.x) / 2, (self.y + other.y) / 2)

    def to_dict(self) -> dict[str, float]:
        return {"x": float(self.x), "y": float(self.y)}

    @classmethod
    def from_any(cls, value: Any) -> Point:
        """Accept a Point, an {'x', 'y'} mapping or an (x, y) sequence."""
        if isinstance(value, Point):
            return value
        if isinstance(value, dict):
            return cls(float(value["x"]), float(value["y"]))
        x, y = value
        return cls(float(x), float(y))
