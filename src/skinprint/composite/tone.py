"""
Tone sampler.

Summarizes the skin under the ink as mean HSL lightness, mean HSL saturation
and warmth (mean of red minus blue), and turns that summary into the filter
parameters of the ink passes::

    tone = sample_tone(workspace)
    filters = derive_filters(tone)

Sampling is a pure function of the current layer state and is cheap enough
to run on every frame.
"""

import logging
from typing import Optional

import numpy as np
from attrs import define, field
from PIL import Image

from skinprint.api import pil_io
from skinprint.api.geometry import Rect
from skinprint.api.workspace import Workspace
from skinprint.composite.filters import Filters
from skinprint.constants import (
    NEUTRAL_TONE,
    TONE_SAMPLE_SIZE,
    TONE_WINDOW_MAX,
    TONE_WINDOW_MIN,
    TONE_WINDOW_RATIO,
)
from skinprint.validators import clamp

logger = logging.getLogger(__name__)


@define(frozen=True)
class Tone:
    """Skin tone summary, every component in 0..1 units."""

    luminance: float = field(converter=float)
    saturation: float = field(converter=float)
    warmth: float = field(converter=float)


NEUTRAL = Tone(*NEUTRAL_TONE)


def sample_window(workspace: Workspace) -> Optional[Rect]:
    """
    Square window in skin native pixels centred under the ink.

    The side is 12% of the smaller skin footprint dimension, clamped to
    [36, 220] and to the image size. Returns None when there is nothing to
    sample.
    """
    skin, ink = workspace.skin, workspace.ink
    if skin is None or ink is None:
        return None
    if skin.scale <= 0 or ink.scale <= 0:
        return None
    footprint = skin.footprint()
    side = clamp(
        TONE_WINDOW_RATIO * min(footprint.width, footprint.height),
        TONE_WINDOW_MIN,
        TONE_WINDOW_MAX,
    )
    side = min(side, skin.width, skin.height)
    center = skin.to_native(ink.position)
    left = clamp(center.x - side / 2.0, 0.0, skin.width - side)
    top = clamp(center.y - side / 2.0, 0.0, skin.height - side)
    return Rect(left, top, side, side)


def measure(color: np.ndarray) -> Tone:
    """Mean HSL lightness, HSL saturation and red-minus-blue of an RGB array."""
    color = color.reshape(-1, 3).astype(np.float64)
    maxc = color.max(axis=1)
    minc = color.min(axis=1)
    lightness = (maxc + minc) / 2.0
    delta = maxc - minc
    denominator = 1.0 - np.abs(2.0 * lightness - 1.0)
    saturation = np.zeros_like(lightness)
    index = (delta > 0) & (denominator > 0)
    saturation[index] = delta[index] / denominator[index]
    warmth = color[:, 0] - color[:, 2]
    return Tone(
        float(np.mean(lightness)),
        float(np.clip(np.mean(saturation), 0.0, 1.0)),
        float(np.mean(warmth)),
    )


def sample_tone(workspace: Workspace, size: int = TONE_SAMPLE_SIZE) -> Tone:
    """Sample the skin under the ink; :py:data:`NEUTRAL` when impossible."""
    window = sample_window(workspace)
    if window is None:
        return NEUTRAL
    skin = workspace.skin
    assert skin is not None
    patch = skin.image.crop(window.to_box()).resize(
        (size, size), Image.Resampling.BILINEAR
    )
    color, _ = pil_io.to_arrays(patch)
    tone = measure(color)
    logger.debug("Sampled %s from %s", tone, window)
    return tone


def derive_filters(tone: Tone) -> Filters:
    """Brightness, contrast and saturation for the ink passes."""
    return Filters(
        brightness=clamp(0.82 + 0.33 * tone.luminance + 0.08 * tone.warmth, 0.78, 1.12),
        contrast=clamp(1.03 + 0.22 * (0.56 - tone.luminance), 0.92, 1.18),
        saturation=clamp(0.64 + 0.46 * tone.saturation, 0.58, 1.06),
    )
