"""Gradient fills for the directional light pass."""

import logging
from typing import Sequence

import numpy as np

from skinprint.composite._compat import require_scipy
from skinprint.composite.utils import Box
from skinprint.constants import LIGHT_GRADIENT_STOPS

logger = logging.getLogger(__name__)

Stop = tuple[float, tuple[int, int, int], float]


@require_scipy
def draw_light_gradient(
    viewport: Box,
    center: tuple[float, float],
    half_extent: float,
    light_x: float,
    light_y: float,
    stops: Sequence[Stop] = LIGHT_GRADIENT_STOPS,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Create a linear gradient image along the light direction.

    The gradient runs from ``center - direction * half_extent`` (location 0)
    to ``center + direction * half_extent`` (location 1). A zero direction
    paints the middle stop everywhere.

    Requires scipy for gradient color interpolation.

    :return: (color, alpha) arrays covering ``viewport``
    """
    height, width = viewport[3] - viewport[1], viewport[2] - viewport[0]
    X, Y = np.meshgrid(
        np.arange(viewport[0], viewport[2], dtype=np.float32) + 0.5 - center[0],
        np.arange(viewport[1], viewport[3], dtype=np.float32) + 0.5 - center[1],
    )
    extent = half_extent if half_extent > 0 else 1.0
    Z = _make_linear_gradient(X, Y, light_x, light_y, extent)
    G = _make_gradient_color(stops)
    rgba = G(Z).astype(np.float32).reshape((height, width, 4))
    return rgba[:, :, :3], rgba[:, :, 3:4]


def _make_linear_gradient(X, Y, dx, dy, extent):
    """Generates index map for linear gradients."""
    Z = 0.5 + (X * dx + Y * dy) / (2.0 * extent)
    return np.clip(Z, 0.0, 1.0)


def _make_gradient_color(stops: Sequence[Stop]):
    from scipy import interpolate  # type: ignore[import-untyped]

    X, Y = [], []
    for location, color, opacity in stops:
        value = [c / 255.0 for c in color] + [float(opacity)]
        if len(X) and X[-1] == location:
            logger.debug("Duplicate stop at %g" % location)
            X.pop(), Y.pop()
        X.append(float(location)), Y.append(value)
    assert len(X) > 0
    if len(X) == 1:
        X = [0.0, 1.0]
        Y = [Y[0], Y[0]]
    Y = np.array(Y, dtype=np.float32)
    return interpolate.interp1d(
        X, Y, axis=0, bounds_error=False, fill_value=(Y[0], Y[-1])
    )
