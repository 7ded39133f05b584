"""
Layer module.

A :py:class:`Layer` couples an immutable RGBA raster with a
:py:class:`~skinprint.api.geometry.Transform` and a crop rectangle in the
raster's native pixel space. There are at most two layers in a workspace,
``skin`` and ``ink``; see :py:class:`~skinprint.constants.LayerKind`.

Common layer properties:

- ``kind``: :py:class:`~skinprint.constants.LayerKind`
- ``image``: RGBA :py:class:`PIL.Image.Image`
- ``transform``: position, scale, rotation and opacity
- ``crop``: crop rectangle in native pixels
- ``revision``: bumped on every crop change

The on-screen footprint is always ``crop.size * scale`` centred at the
position::

    layer = Layer(LayerKind.INK, image)
    layer.set_scale(0.5)
    fp = layer.footprint()
    assert fp.width == layer.crop.width * 0.5
"""

import logging
import math
from typing import Optional

from PIL import Image

from skinprint.api import pil_io
from skinprint.api.geometry import Footprint, Point, Rect, Transform, safe_scale
from skinprint.constants import MIN_CROP_RATIO, LayerKind
from skinprint.validators import clamp

logger = logging.getLogger(__name__)


class Layer:
    """
    One of the two compositing layers.

    :param kind: :py:class:`~skinprint.constants.LayerKind`
    :param image: decoded raster; normalized to an RGBA copy owned by the layer
    :param transform: initial transform, defaults to identity at the origin
    """

    def __init__(
        self,
        kind: LayerKind,
        image: Image.Image,
        transform: Optional[Transform] = None,
    ):
        self._kind = kind
        self._image = pil_io.normalize(image)
        self._transform = transform if transform is not None else Transform()
        self._crop = Rect(0, 0, self._image.width, self._image.height)
        self._revision = 0
        if kind == LayerKind.SKIN:
            self._transform.rotation = 0.0
            self._transform.opacity = 1.0

    @property
    def kind(self) -> LayerKind:
        return self._kind

    @property
    def image(self) -> Image.Image:
        """RGBA raster."""
        return self._image

    @property
    def transform(self) -> Transform:
        return self._transform

    @property
    def crop(self) -> Rect:
        """Crop rectangle in native pixel space."""
        return self._crop

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def width(self) -> int:
        """Native width."""
        return self._image.width

    @property
    def height(self) -> int:
        """Native height."""
        return self._image.height

    @property
    def size(self) -> tuple[int, int]:
        """Native (width, height) tuple."""
        return self.width, self.height

    @property
    def position(self) -> Point:
        return self._transform.position

    @property
    def scale(self) -> float:
        return self._transform.scale

    @property
    def rotation(self) -> float:
        return self._transform.rotation

    @property
    def opacity(self) -> float:
        return self._transform.opacity

    @property
    def min_crop_size(self) -> tuple[float, float]:
        """Smallest crop (width, height) in native pixels."""
        return (
            max(1.0, MIN_CROP_RATIO * self.width),
            max(1.0, MIN_CROP_RATIO * self.height),
        )

    def footprint(self) -> Footprint:
        return Footprint.of(self._transform, self._crop)

    def to_workspace(self, point: Point) -> Point:
        """Map a native pixel position to workspace space."""
        fp = self.footprint()
        scale = self._transform.scale
        return Point(
            fp.x + (point.x - self._crop.x) * scale,
            fp.y + (point.y - self._crop.y) * scale,
        )

    def to_native(self, point: Point) -> Point:
        """Map a workspace position to native pixel space."""
        fp = self.footprint()
        scale = safe_scale(self._transform.scale)
        return Point(
            self._crop.x + (point.x - fp.x) / scale,
            self._crop.y + (point.y - fp.y) / scale,
        )

    def set_position(self, x: float, y: float) -> None:
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.warning("Ignoring non-finite position (%r, %r)", x, y)
            return
        self._transform.x = x
        self._transform.y = y

    def set_scale(self, scale: float) -> float:
        self._transform.scale = scale
        return self._transform.scale

    def set_rotation(self, radians: float) -> bool:
        """Set rotation. The skin layer is never rotated."""
        if self._kind != LayerKind.INK or not math.isfinite(radians):
            return False
        self._transform.rotation = radians
        return True

    def set_opacity(self, opacity: float) -> bool:
        """Set opacity. The skin layer is always opaque."""
        if self._kind != LayerKind.INK:
            return False
        self._transform.opacity = opacity
        return True

    def clamp_crop(self, rect: Rect) -> Rect:
        """Clamp ``rect`` inside the image and above the minimum crop size."""
        min_w, min_h = self.min_crop_size
        left = clamp(rect.left, 0.0, self.width - min_w)
        top = clamp(rect.top, 0.0, self.height - min_h)
        right = clamp(rect.right, left + min_w, float(self.width))
        bottom = clamp(rect.bottom, top + min_h, float(self.height))
        return Rect.from_bbox(left, top, right, bottom)

    def set_crop(self, rect: Rect) -> Rect:
        """
        Crop to ``rect`` given in native pixels of the un-cropped image.

        The layer is re-centred on the workspace midpoint of the new crop so
        the footprint lands exactly where the rectangle was; scale is kept.
        """
        crop = self.clamp_crop(rect)
        if crop != rect:
            logger.debug("Crop %s clamped to %s", rect, crop)
        center = self.to_workspace(crop.center)
        self._crop = crop
        self._transform.x = center.x
        self._transform.y = center.y
        self._revision += 1
        return crop

    def __repr__(self) -> str:
        fp = self.footprint()
        return "%s(kind=%s size=%dx%d footprint=(%g,%g,%g,%g))" % (
            self.__class__.__name__,
            self._kind.value,
            self.width,
            self.height,
            fp.x,
            fp.y,
            fp.width,
            fp.height,
        )
