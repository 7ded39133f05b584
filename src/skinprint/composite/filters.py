"""
Color filters applied to the ink raster before each blend pass.

The filters mirror the CSS/canvas filter functions ``brightness()``,
``contrast()``, ``saturate()`` and ``blur()`` and are applied in that order.
"""

import logging

import numpy as np
from attrs import define, evolve, field

from skinprint.composite import utils
from skinprint.composite._compat import require_skimage

logger = logging.getLogger(__name__)


@define(frozen=True)
class Filters:
    """
    Filter parameters.

    .. py:attribute:: brightness

        Linear multiplier, 1 is identity.

    .. py:attribute:: contrast

        Contrast around mid gray, 1 is identity.

    .. py:attribute:: saturation

        Saturation, 0 is grayscale and 1 is identity.

    .. py:attribute:: blur

        Gaussian sigma in pixels, 0 disables blurring.
    """

    brightness: float = field(default=1.0, converter=float)
    contrast: float = field(default=1.0, converter=float)
    saturation: float = field(default=1.0, converter=float)
    blur: float = field(default=0.0, converter=float)

    def replace(self, **changes) -> "Filters":
        return evolve(self, **changes)


def brightness(color: np.ndarray, amount: float) -> np.ndarray:
    return color * amount


def contrast(color: np.ndarray, amount: float) -> np.ndarray:
    return (color - 0.5) * amount + 0.5


def saturate(color: np.ndarray, amount: float) -> np.ndarray:
    """W3C ``saturate()`` color matrix."""
    s = amount
    matrix = np.array(
        [
            [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
        ],
        dtype=np.float32,
    )
    return color @ matrix.T


@require_skimage
def blur(
    color: np.ndarray, alpha: np.ndarray, sigma: float
) -> tuple[np.ndarray, np.ndarray]:
    """Gaussian blur in premultiplied space so transparent pixels do not
    bleed black into the edges."""
    from skimage import filters

    if sigma <= 0:
        return color, alpha
    premultiplied = filters.gaussian(color * alpha, sigma=sigma, channel_axis=-1)
    alpha = filters.gaussian(alpha, sigma=sigma, channel_axis=-1)
    color = utils.divide(premultiplied, alpha)
    return color.astype(np.float32), alpha.astype(np.float32)


def apply(
    color: np.ndarray, alpha: np.ndarray, spec: Filters
) -> tuple[np.ndarray, np.ndarray]:
    """Apply ``spec`` to a (color, alpha) pair and return new arrays.

    Each color step is clamped to [0, 1] like a canvas filter chain.
    """
    if spec.brightness != 1.0:
        color = utils.clip(brightness(color, spec.brightness))
    if spec.contrast != 1.0:
        color = utils.clip(contrast(color, spec.contrast))
    if spec.saturation != 1.0:
        color = utils.clip(saturate(color, spec.saturation))
    color = np.asarray(color, dtype=np.float32)
    if spec.blur > 0:
        color, alpha = blur(color, alpha, spec.blur)
        color = utils.clip(color)
    return color, alpha
