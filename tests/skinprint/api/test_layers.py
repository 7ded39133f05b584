import logging

import pytest
from PIL import Image

from skinprint.api.geometry import Point, Rect, Transform
from skinprint.api.layers import Layer
from skinprint.constants import LayerKind

logger = logging.getLogger(__name__)


@pytest.fixture
def layer(solid_image):
    return Layer(
        LayerKind.INK, solid_image((200, 100)), Transform(x=300, y=200, scale=2)
    )


@pytest.mark.parametrize("mode", ["L", "LA", "RGB", "RGBA", "P", "1"])
def test_image_is_normalized(mode):
    layer = Layer(LayerKind.INK, Image.new(mode, (4, 3)))
    assert layer.image.mode == "RGBA"
    assert layer.size == (4, 3)
    assert layer.crop == Rect(0, 0, 4, 3)


def test_skin_is_opaque_and_unrotated(solid_image):
    skin = Layer(
        LayerKind.SKIN, solid_image(), Transform(rotation=1.0, opacity=0.5)
    )
    assert skin.rotation == 0
    assert skin.opacity == 1
    assert not skin.set_rotation(1.0)
    assert not skin.set_opacity(0.5)
    assert skin.rotation == 0
    assert skin.opacity == 1


def test_ink_rotation_and_opacity(layer):
    assert layer.set_rotation(0.5)
    assert layer.rotation == 0.5
    assert not layer.set_rotation(float("nan"))
    assert layer.rotation == 0.5
    assert layer.set_opacity(0.0)
    assert layer.opacity == 0.1


def test_footprint(layer):
    assert layer.footprint().rect == Rect(100, 100, 400, 200)


def test_native_workspace_mapping(layer):
    assert layer.to_native(Point(100, 100)) == Point(0, 0)
    assert layer.to_workspace(Point(50, 25)) == Point(200, 150)
    point = Point(123.5, 180.25)
    assert layer.to_workspace(layer.to_native(point)) == point


def test_set_position_ignores_non_finite(layer):
    layer.set_position(float("inf"), 10)
    assert layer.position == Point(300, 200)
    layer.set_position(10, 20)
    assert layer.position == Point(10, 20)


def test_set_scale_clamps(layer):
    assert layer.set_scale(100) == 8.0
    assert layer.set_scale(0) == 0.05


def test_set_crop_recentres(layer):
    applied = layer.set_crop(Rect(100, 0, 100, 100))
    assert applied == Rect(100, 0, 100, 100)
    assert layer.crop == applied
    assert layer.position == Point(400, 200)
    assert layer.scale == 2
    assert layer.footprint().rect == Rect(300, 100, 200, 200)
    assert layer.revision == 1


def test_crop_composes_in_native_space(layer):
    layer.set_crop(Rect(100, 0, 100, 100))
    layer.set_crop(Rect(150, 50, 50, 50))
    assert layer.crop == Rect(150, 50, 50, 50)
    assert layer.to_native(layer.position) == Point(175, 75)


@pytest.mark.parametrize(
    "rect, expected",
    [
        (Rect(-10, -10, 5000, 5000), Rect(0, 0, 200, 100)),
        (Rect(50, 50, 0, 0), Rect(50, 50, 6, 3)),
        (Rect(199, 99, 10, 10), Rect(194, 97, 6, 3)),
    ],
)
def test_clamp_crop(layer, rect, expected):
    assert layer.clamp_crop(rect) == expected
