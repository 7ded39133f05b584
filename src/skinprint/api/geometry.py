"""
Geometry records.

Plain value types shared by the layer model, the interaction state machine and
the compositor. Workspace-space values are floats; native pixel rectangles are
floats too and get rounded only when pixels are actually read.
"""

import logging
import math
from typing import Optional

from attrs import define, evolve, field

from skinprint.constants import (
    CORNER_HANDLES,
    MAX_OPACITY,
    MAX_SCALE,
    MIN_OPACITY,
    MIN_SCALE,
    Handle,
)
from skinprint.validators import at_least, clamp_

logger = logging.getLogger(__name__)


@define(frozen=True)
class Point:
    """A point in workspace or native pixel space."""

    x: float = field(default=0.0, converter=float)
    y: float = field(default=0.0, converter=float)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def distance(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@define(frozen=True)
class Rect:
    """
    Axis-aligned rectangle.

    .. py:attribute:: x

        Left coordinate.

    .. py:attribute:: y

        Top coordinate.

    .. py:attribute:: width

        Width, never negative.

    .. py:attribute:: height

        Height, never negative.
    """

    x: float = field(default=0.0, converter=float)
    y: float = field(default=0.0, converter=float)
    width: float = field(default=0.0, converter=at_least(0.0))
    height: float = field(default=0.0, converter=at_least(0.0))

    @classmethod
    def from_bbox(cls, left: float, top: float, right: float, bottom: float) -> "Rect":
        """Create from (left, top, right, bottom)."""
        return cls(left, top, right - left, bottom - top)

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        """(left, top, right, bottom) tuple."""
        return self.left, self.top, self.right, self.bottom

    @property
    def size(self) -> tuple[float, float]:
        """(width, height) tuple."""
        return self.width, self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2.0, self.y + self.height / 2.0)

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, point: Point) -> bool:
        return (
            self.left <= point.x <= self.right and self.top <= point.y <= self.bottom
        )

    def intersect(self, other: "Rect") -> Optional["Rect"]:
        """Return the overlapping rectangle, or None when disjoint."""
        left = max(self.left, other.left)
        top = max(self.top, other.top)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if left >= right or top >= bottom:
            return None
        return Rect.from_bbox(left, top, right, bottom)

    def quantize(self, quantum: int) -> tuple[int, int, int, int]:
        """Round every component to the nearest multiple of ``quantum``."""
        return tuple(  # type: ignore[return-value]
            int(round(value / quantum)) * quantum
            for value in (self.x, self.y, self.width, self.height)
        )

    def to_box(self) -> tuple[int, int, int, int]:
        """Integer (left, top, right, bottom) box for :py:meth:`PIL.Image.crop`."""
        left, top = int(round(self.left)), int(round(self.top))
        right = max(left + 1, int(round(self.right)))
        bottom = max(top + 1, int(round(self.bottom)))
        return left, top, right, bottom


@define(frozen=True)
class Corner:
    """Labelled footprint corner."""

    handle: Handle
    x: float
    y: float

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@define
class Transform:
    """
    Per-layer transform. Out-of-range values are clamped on assignment.

    .. py:attribute:: x

        Centre x in workspace space.

    .. py:attribute:: y

        Centre y in workspace space.

    .. py:attribute:: scale

        Uniform scale, clamped to [0.05, 8.0].

    .. py:attribute:: rotation

        Rotation in radians.

    .. py:attribute:: opacity

        Opacity, clamped to [0.1, 1.0].
    """

    x: float = field(default=0.0, converter=float)
    y: float = field(default=0.0, converter=float)
    scale: float = field(default=1.0, converter=clamp_(MIN_SCALE, MAX_SCALE))
    rotation: float = field(default=0.0, converter=float)
    opacity: float = field(default=1.0, converter=clamp_(MIN_OPACITY, MAX_OPACITY))

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    def copy(self) -> "Transform":
        return evolve(self)


@define(frozen=True)
class Footprint:
    """On-screen footprint of a layer: ``crop.size * scale`` centred at the
    layer position."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def of(cls, transform: Transform, crop: Rect) -> "Footprint":
        width = crop.width * transform.scale
        height = crop.height * transform.scale
        return cls(transform.x - width / 2.0, transform.y - height / 2.0, width, height)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @property
    def center(self) -> Point:
        return self.rect.center

    @property
    def corners(self) -> tuple[Corner, Corner, Corner, Corner]:
        left, top = self.x, self.y
        right, bottom = self.x + self.width, self.y + self.height
        points = {
            Handle.NW: (left, top),
            Handle.NE: (right, top),
            Handle.SE: (right, bottom),
            Handle.SW: (left, bottom),
        }
        return tuple(  # type: ignore[return-value]
            Corner(handle, *points[handle]) for handle in CORNER_HANDLES
        )

    def contains(self, point: Point) -> bool:
        return self.rect.contains(point)


def handle_points(rect: Rect) -> dict[Handle, Point]:
    """Return the eight crop handle positions of ``rect``."""
    left, top, right, bottom = rect.bbox
    cx, cy = rect.center.x, rect.center.y
    return {
        Handle.NW: Point(left, top),
        Handle.N: Point(cx, top),
        Handle.NE: Point(right, top),
        Handle.E: Point(right, cy),
        Handle.SE: Point(right, bottom),
        Handle.S: Point(cx, bottom),
        Handle.SW: Point(left, bottom),
        Handle.W: Point(left, cy),
    }


def safe_scale(value: float) -> float:
    """Scale to divide by; non-positive or non-finite values fall back to 1."""
    if not math.isfinite(value) or value <= 0:
        logger.debug("Degenerate scale %r, falling back to 1", value)
        return 1.0
    return value
