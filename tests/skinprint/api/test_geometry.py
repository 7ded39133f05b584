import logging
import math

import pytest

from skinprint.api.geometry import (
    Footprint,
    Point,
    Rect,
    Transform,
    handle_points,
    safe_scale,
)
from skinprint.constants import Handle

logger = logging.getLogger(__name__)


@pytest.mark.parametrize(
    "scale, expected",
    [
        (0.01, 0.05),
        (0.05, 0.05),
        (1.5, 1.5),
        (8.0, 8.0),
        (10.0, 8.0),
        (float("nan"), 0.05),
    ],
)
def test_transform_scale_clamp(scale, expected):
    assert Transform(scale=scale).scale == expected
    transform = Transform()
    transform.scale = scale
    assert transform.scale == expected


@pytest.mark.parametrize(
    "opacity, expected", [(0.0, 0.1), (0.4, 0.4), (1.0, 1.0), (2.0, 1.0)]
)
def test_transform_opacity_clamp(opacity, expected):
    transform = Transform()
    transform.opacity = opacity
    assert transform.opacity == expected


def test_transform_copy_is_detached():
    transform = Transform(x=1, y=2, scale=3)
    copied = transform.copy()
    copied.x = 10
    assert transform.x == 1
    assert copied.scale == 3


def test_footprint_geometry():
    footprint = Footprint.of(Transform(x=100, y=50, scale=2), Rect(0, 0, 40, 20))
    assert (footprint.x, footprint.y) == (60, 30)
    assert (footprint.width, footprint.height) == (80, 40)
    assert footprint.center == Point(100, 50)
    corners = {corner.handle: (corner.x, corner.y) for corner in footprint.corners}
    assert corners == {
        Handle.NW: (60, 30),
        Handle.NE: (140, 30),
        Handle.SE: (140, 70),
        Handle.SW: (60, 70),
    }
    assert footprint.contains(Point(100, 50))
    assert not footprint.contains(Point(141, 50))


def test_footprint_ignores_crop_offset():
    footprint = Footprint.of(Transform(x=0, y=0, scale=1), Rect(30, 40, 10, 10))
    assert footprint.rect == Rect(-5, -5, 10, 10)


def test_rect_basics():
    rect = Rect.from_bbox(10, 20, 40, 60)
    assert rect == Rect(10, 20, 30, 40)
    assert rect.bbox == (10, 20, 40, 60)
    assert rect.center == Point(25, 40)
    assert Rect(0, 0, -5, 3).width == 0
    assert Rect(0, 0, -5, 3).is_empty()


def test_rect_intersect():
    a = Rect(0, 0, 10, 10)
    assert a.intersect(Rect(5, 5, 10, 10)) == Rect(5, 5, 5, 5)
    assert a.intersect(Rect(10, 0, 5, 5)) is None


def test_rect_quantize():
    assert Rect(7, 13, 50, 10).quantize(6) == (6, 12, 48, 12)


def test_rect_to_box():
    assert Rect(1.2, 1.2, 0.1, 0.1).to_box() == (1, 1, 2, 2)
    assert Rect(0.4, 0.6, 9.9, 10).to_box() == (0, 1, 10, 11)


def test_handle_points():
    points = handle_points(Rect(0, 0, 10, 20))
    assert len(points) == 8
    assert points[Handle.E] == Point(10, 10)
    assert points[Handle.N] == Point(5, 0)
    assert points[Handle.SW] == Point(0, 20)


def test_point():
    assert Point(3, 4) - Point(1, 1) == Point(2, 3)
    assert Point(3, 4) + Point(1, 1) == Point(4, 5)
    assert Point(0, 0).distance(Point(3, 4)) == 5


@pytest.mark.parametrize(
    "value, expected",
    [(2.0, 2.0), (0.0, 1.0), (-1.0, 1.0), (math.inf, 1.0), (math.nan, 1.0)],
)
def test_safe_scale(value, expected):
    assert safe_scale(value) == expected
