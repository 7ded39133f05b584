import logging

import numpy as np
import pytest

from skinprint.api.geometry import Rect
from skinprint.api.workspace import Workspace
from skinprint.composite.filters import Filters
from skinprint.composite.tone import (
    NEUTRAL,
    Tone,
    derive_filters,
    measure,
    sample_tone,
    sample_window,
)

logger = logging.getLogger(__name__)


@pytest.fixture
def workspace(skin_image, ink_image):
    # Skin 400x300 at scale 2.56, ink centred over native (200, 150).
    workspace = Workspace(1024, 768)
    workspace.attach_skin(skin_image)
    workspace.attach_ink(ink_image)
    return workspace


def test_sample_window(workspace):
    window = sample_window(workspace)
    side = 0.12 * 768
    assert window.width == pytest.approx(side)
    assert window.height == pytest.approx(side)
    assert window.center.x == pytest.approx(200)
    assert window.center.y == pytest.approx(150)


def test_sample_window_is_clamped(workspace):
    workspace.ink.set_position(0, 0)
    window = sample_window(workspace)
    assert (window.x, window.y) == (0, 0)
    workspace.ink.set_position(5000, 5000)
    window = sample_window(workspace)
    assert window.right == pytest.approx(400)
    assert window.bottom == pytest.approx(300)


def test_sample_window_minimum(solid_image, ink_image):
    workspace = Workspace(100, 100)
    workspace.attach_skin(solid_image((1000, 1000)))
    workspace.attach_ink(ink_image)
    assert sample_window(workspace).width == 36


def test_sample_window_limited_by_image(solid_image, ink_image):
    workspace = Workspace(1000, 1000)
    workspace.attach_skin(solid_image((20, 20)))
    workspace.attach_ink(ink_image)
    assert sample_window(workspace) == Rect(0, 0, 20, 20)


def test_neutral_without_ink(skin_image):
    workspace = Workspace()
    assert sample_window(workspace) is None
    assert sample_tone(workspace) == NEUTRAL
    workspace.attach_skin(skin_image)
    assert sample_tone(workspace) == NEUTRAL
    assert NEUTRAL == Tone(0.58, 0.30, 0.08)


def test_sample_tone_is_idempotent(workspace):
    assert sample_tone(workspace) == sample_tone(workspace)


def test_sample_tone_of_solid_skin(solid_image, ink_image):
    workspace = Workspace(200, 200)
    workspace.attach_skin(solid_image((200, 200), (255, 0, 0, 255)))
    workspace.attach_ink(ink_image)
    tone = sample_tone(workspace)
    assert tone.luminance == pytest.approx(0.5)
    assert tone.saturation == pytest.approx(1.0)
    assert tone.warmth == pytest.approx(1.0)


@pytest.mark.parametrize(
    "rgb, expected",
    [
        ((1.0, 0.0, 0.0), (0.5, 1.0, 1.0)),
        ((0.5, 0.5, 0.5), (0.5, 0.0, 0.0)),
        ((1.0, 1.0, 1.0), (1.0, 0.0, 0.0)),
        ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
        ((0.2, 0.4, 0.6), (0.4, 0.5, -0.4)),
    ],
)
def test_measure(rgb, expected):
    color = np.full((4, 4, 3), rgb, dtype=np.float32)
    tone = measure(color)
    assert (tone.luminance, tone.saturation, tone.warmth) == pytest.approx(
        expected, abs=1e-6
    )


def test_derive_filters_neutral():
    filters = derive_filters(NEUTRAL)
    assert filters.brightness == pytest.approx(1.0178)
    assert filters.contrast == pytest.approx(1.0256)
    assert filters.saturation == pytest.approx(0.778)
    assert filters.blur == 0


@pytest.mark.parametrize(
    "tone, expected",
    [
        (Tone(1.0, 1.0, 1.0), Filters(1.12, 0.9332, 1.06)),
        (Tone(0.0, 0.0, -1.0), Filters(0.78, 1.1532, 0.64)),
        (Tone(1.0, 0.0, 0.0), Filters(1.12, 0.9332, 0.64)),
    ],
)
def test_derive_filters_clamps(tone, expected):
    filters = derive_filters(tone)
    assert filters.brightness == pytest.approx(expected.brightness)
    assert filters.contrast == pytest.approx(expected.contrast)
    assert filters.saturation == pytest.approx(expected.saturation)
