"""
Integration map builder.

Derives a coarse lighting estimate and an edge/shadow alpha mask from the
skin under the ink footprint:

1. The skin sub-rectangle below the ink is downsampled to at most 112x112
   and converted to a luminance field.
2. The dominant light direction is the normalized difference of the right
   and left half luminance sums (x) and the bottom and top half sums (y).
3. Each interior pixel gets
   ``alpha = clamp(0.8 * edge + 0.45 * shadow, 0, 1)`` with
   ``edge = clamp((|dx| + |dy|) * 2.4, 0, 1)`` from central differences and
   ``shadow = clamp((0.44 - L) * 1.25, 0, 0.65)``. Border pixels stay 0.

Results are memoized by :py:class:`IntegrationCache` under a tuple key made
of the skin identity, the sample rectangle quantized to multiples of 6 source
pixels, and the output size.
"""

import logging
import math
from typing import Callable, Optional

import numpy as np
from attrs import define, field
from PIL import Image

from skinprint.api import pil_io
from skinprint.api.geometry import Point, Rect
from skinprint.api.workspace import Workspace
from skinprint.composite import utils
from skinprint.constants import (
    EDGE_GAIN,
    EDGE_WEIGHT,
    INTEGRATION_MAX_SIZE,
    INTEGRATION_QUANTUM,
    OCCLUSION_COLOR,
    SHADOW_GAIN,
    SHADOW_MAX,
    SHADOW_THRESHOLD,
    SHADOW_WEIGHT,
)

logger = logging.getLogger(__name__)

IntRect = tuple[int, int, int, int]
CacheKey = tuple[tuple[int, int], IntRect, tuple[int, int]]


@define(frozen=True, eq=False)
class IntegrationMap:
    """
    Lighting and occlusion estimate of a skin region.

    .. py:attribute:: raster

        RGBA image, dark slate color with the edge/shadow mask as alpha.

    .. py:attribute:: light_x

        X component of the unit light direction, 0 when flat.

    .. py:attribute:: light_y

        Y component of the unit light direction, 0 when flat.

    .. py:attribute:: luminance

        Mean luminance of the field.
    """

    raster: Image.Image
    light_x: float = field(converter=float)
    light_y: float = field(converter=float)
    luminance: float = field(converter=float)

    @property
    def size(self) -> tuple[int, int]:
        return self.raster.size


def sample_rect(workspace: Workspace) -> Optional[Rect]:
    """Ink footprint projected into skin native pixels, inside the image."""
    skin, ink = workspace.skin, workspace.ink
    if skin is None or ink is None:
        return None
    if skin.scale <= 0 or ink.scale <= 0:
        return None
    footprint = ink.footprint()
    top_left = skin.to_native(Point(footprint.x, footprint.y))
    bottom_right = skin.to_native(
        Point(footprint.x + footprint.width, footprint.y + footprint.height)
    )
    projected = Rect.from_bbox(top_left.x, top_left.y, bottom_right.x, bottom_right.y)
    return projected.intersect(Rect(0, 0, skin.width, skin.height))


def quantize_rect(
    rect: Rect, image_size: tuple[int, int], quantum: int = INTEGRATION_QUANTUM
) -> Optional[IntRect]:
    """Round to multiples of ``quantum`` and keep the result inside the image."""
    width, height = image_size
    if width <= 0 or height <= 0:
        return None
    x, y, w, h = rect.quantize(quantum)
    x = min(max(0, x), width - 1)
    y = min(max(0, y), height - 1)
    w = max(1, min(w, width - x))
    h = max(1, min(h, height - y))
    return x, y, w, h


def output_size(
    width: int, height: int, max_size: int = INTEGRATION_MAX_SIZE
) -> tuple[int, int]:
    """Downscaled size of a (width, height) region, never above ``max_size``."""
    scale = min(1.0, float(max_size) / max(width, height, 1))
    return (
        max(1, min(max_size, int(round(width * scale)))),
        max(1, min(max_size, int(round(height * scale)))),
    )


def luminance_field(image: Image.Image, rect: IntRect, size: tuple[int, int]) -> np.ndarray:
    x, y, w, h = rect
    region = image.crop((x, y, x + w, y + h))
    if region.size != size:
        region = region.resize(size, Image.Resampling.BILINEAR)
    color, _ = pil_io.to_arrays(region)
    return utils.luminance(color).astype(np.float64)


def light_direction(values: np.ndarray) -> tuple[float, float]:
    """Unit vector pointing from the darker towards the brighter halves."""
    height, width = values.shape
    dx = values[:, (width + 1) // 2 :].sum() - values[:, : width // 2].sum()
    dy = values[(height + 1) // 2 :, :].sum() - values[: height // 2, :].sum()
    norm = math.hypot(dx, dy)
    if norm <= 1e-9:
        return 0.0, 0.0
    return float(dx / norm), float(dy / norm)


def edge_shadow_alpha(values: np.ndarray) -> np.ndarray:
    """Edge/shadow alpha mask; pixels without a full 4-neighborhood are 0."""
    height, width = values.shape
    alpha = np.zeros((height, width), dtype=np.float32)
    if height < 3 or width < 3:
        return alpha
    center = values[1:-1, 1:-1]
    dx = values[1:-1, 2:] - values[1:-1, :-2]
    dy = values[2:, 1:-1] - values[:-2, 1:-1]
    edge = np.clip((np.abs(dx) + np.abs(dy)) * EDGE_GAIN, 0.0, 1.0)
    shadow = np.clip((SHADOW_THRESHOLD - center) * SHADOW_GAIN, 0.0, SHADOW_MAX)
    alpha[1:-1, 1:-1] = np.clip(EDGE_WEIGHT * edge + SHADOW_WEIGHT * shadow, 0.0, 1.0)
    return alpha


def build_integration_map(
    image: Image.Image, rect: IntRect, size: tuple[int, int]
) -> IntegrationMap:
    """Build the integration map of ``rect`` of ``image`` at ``size``."""
    values = luminance_field(image, rect, size)
    light_x, light_y = light_direction(values)
    alpha = edge_shadow_alpha(values)
    height, width = alpha.shape
    color = np.empty((height, width, 3), dtype=np.float32)
    color[:, :] = np.array(OCCLUSION_COLOR, dtype=np.float32) / 255.0
    raster = pil_io.from_arrays(color, alpha[:, :, np.newaxis])
    return IntegrationMap(raster, light_x, light_y, float(values.mean()))


class IntegrationCache:
    """
    Single-entry memo of the last integration map.

    :param builder: callable ``(image, rect, size) -> IntegrationMap``; tests
        inject a counting builder here.
    """

    def __init__(
        self,
        builder: Callable[[Image.Image, IntRect, tuple[int, int]], IntegrationMap] = (
            build_integration_map
        ),
    ):
        self._builder = builder
        self._key: Optional[CacheKey] = None
        self._value: Optional[IntegrationMap] = None
        self.hits = 0
        self.misses = 0

    @property
    def key(self) -> Optional[CacheKey]:
        return self._key

    def invalidate(self) -> None:
        self._key = None
        self._value = None

    def key_for(self, workspace: Workspace) -> Optional[CacheKey]:
        token = workspace.skin_token
        skin = workspace.skin
        rect = sample_rect(workspace)
        if token is None or skin is None or rect is None:
            return None
        quantized = quantize_rect(rect, skin.size)
        if quantized is None:
            return None
        return token, quantized, output_size(quantized[2], quantized[3])

    def get(self, workspace: Workspace) -> Optional[IntegrationMap]:
        """Return the map for the current workspace, computing it on a miss."""
        key = self.key_for(workspace)
        if key is None:
            if self._key is not None:
                logger.debug("Nothing to sample, dropping integration map")
            self.invalidate()
            return None
        if key == self._key and self._value is not None:
            self.hits += 1
            return self._value
        skin = workspace.skin
        assert skin is not None
        _, rect, size = key
        self.misses += 1
        logger.debug("Integration map miss: rect=%s size=%s", rect, size)
        self._value = self._builder(skin.image, rect, size)
        self._key = key
        return self._value
