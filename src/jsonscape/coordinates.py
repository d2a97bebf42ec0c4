"""Coordinate primitives shared by layout, routing and transitions.

World coordinates are the layout's own pixel space. Screen coordinates
are what the renderer shows after applying a :class:`Viewport` (uniform
scale followed by a pan offset).
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """Immutable 2D point.

    Example:
        >>> Point(1, 2) + Point(3, 4)
        Point(x=4, y=6)
    """

    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def lerp(self, other: Point, t: float) -> Point:
        """Linear interpolation towards ``other`` (t=0 -> self, t=1 -> other)."""
        return Point(lerp(self.x, other.x, t), lerp(self.y, other.y, t))

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Size:
    """Width/height pair in pixels."""

    width: float
    height: float

    @property
    def is_valid(self) -> bool:
        """True when both dimensions are positive finite numbers."""
        return is_positive_finite(self.width) and is_positive_finite(self.height)


@dataclass(frozen=True)
class Viewport:
    """Pan/zoom transform from world space to screen space.

    ``screen = world * scale + (tx, ty)``

    Example:
        >>> Viewport(scale=2, tx=10, ty=5).to_screen(Point(3, 4))
        Point(x=16, y=13)
    """

    scale: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    def to_screen(self, point: Point) -> Point:
        return Point(point.x * self.scale + self.tx, point.y * self.scale + self.ty)

    def to_world(self, point: Point) -> Point:
        return Point((point.x - self.tx) / self.scale, (point.y - self.ty) / self.scale)

    def anchored(self, world: Point, screen: Point) -> Viewport:
        """Return a viewport with the same scale that maps ``world`` onto ``screen``.

        Example:
            >>> Viewport(scale=2).anchored(Point(10, 10), Point(100, 50))
            Viewport(scale=2, tx=80, ty=30)
        """
        return Viewport(
            scale=self.scale,
            tx=screen.x - world.x * self.scale,
            ty=screen.y - world.y * self.scale,
        )


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box enclosing a set of node boxes."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)


MIN_FIT_SCALE = 0.05


def fit_viewport(
    bounds: Bounds,
    screen: Size,
    padding: float = 24,
    max_scale: float = 1.0,
) -> Viewport:
    """Viewport that shows all of ``bounds`` centered on a ``screen`` sized area.

    The scale never drops below 0.05 and never exceeds ``max_scale``, so
    small graphs are not blown up.

    Example:
        >>> fit_viewport(Bounds(0, 0, 100, 50), Size(224, 124))
        Viewport(scale=1.0, tx=62.0, ty=37.0)
    """
    fit = min(
        (screen.width - padding) / max(1.0, bounds.width),
        (screen.height - padding) / max(1.0, bounds.height),
    )
    scale = max(MIN_FIT_SCALE, min(max_scale, fit))
    return centered_viewport(bounds.center, screen, scale)


def centered_viewport(world: Point, screen: Size, scale: float = 1.0) -> Viewport:
    """Viewport at ``scale`` that puts ``world`` in the middle of the screen."""
    return Viewport(scale=scale).anchored(world, Point(screen.width / 2, screen.height / 2))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def round_px(value: float) -> int:
    """Round to the nearest whole pixel, halves rounding up (-0.5 -> 0, 2.5 -> 3)."""
    return math.floor(value + 0.5)


def is_positive_finite(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )
