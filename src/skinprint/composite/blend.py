"""
Blend mode implementations.

Separable blend functions take the backdrop ``Cb`` and the source ``Cs`` as
float arrays in [0, 1] and follow the W3C Compositing and Blending formulas,
which is what a 2D canvas does for the same ``globalCompositeOperation``.
"""
import logging

import numpy as np

from skinprint.composite import utils
from skinprint.constants import BlendMode

logger = logging.getLogger(__name__)


def normal(Cb, Cs):
    return Cs


def multiply(Cb, Cs):
    return Cb * Cs


def soft_light(Cb, Cs):
    """
    Darkens or lightens the colors, depending on the source color. The effect
    is similar to shining a diffused spotlight on the backdrop; a 50% gray
    source leaves the backdrop unchanged.
    """
    index = Cb <= 0.25
    D = np.sqrt(Cb)
    D[index] = (((16 * Cb - 12) * Cb + 4) * Cb)[index]

    index = Cs <= 0.5
    B = Cb + (2 * Cs - 1) * (D - Cb)
    B[index] = (Cb - (1 - 2 * Cs) * Cb * (1 - Cb))[index]
    return B


"""Blend function table."""
BLEND_FUNC = {
    BlendMode.NORMAL: normal,
    BlendMode.MULTIPLY: multiply,
    BlendMode.SOFT_LIGHT: soft_light,
}


def blend(
    color_b: np.ndarray,
    alpha_b: np.ndarray,
    color_s: np.ndarray,
    alpha_s: np.ndarray,
    mode: BlendMode = BlendMode.NORMAL,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Composite a source over a backdrop with the given blend mode.

    Colors are non-premultiplied (H, W, 3) arrays, alphas (H, W, 1) arrays.
    Returns the resulting (color, alpha).
    """
    blend_fn = BLEND_FUNC.get(mode)
    if blend_fn is None:
        logger.warning("Unsupported blend mode: %s" % mode)
        blend_fn = normal
    color_b = np.asarray(color_b, dtype=np.float32)
    color_s = np.asarray(color_s, dtype=np.float32)
    mixed = (1.0 - alpha_b) * color_s + alpha_b * utils.clip(blend_fn(color_b, color_s))
    alpha = utils.union(alpha_b, alpha_s)
    color = alpha_s * mixed + (1.0 - alpha_s) * alpha_b * color_b
    color = utils.divide(color, np.repeat(alpha, color.shape[2], axis=2))
    return utils.clip(color).astype(np.float32), utils.clip(alpha).astype(np.float32)
