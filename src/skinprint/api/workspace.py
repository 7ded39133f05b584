"""
Workspace module.

The workspace is the shared coordinate space both layers render into. It owns
the two layer slots and all operations that change layer geometry. Every
operation is total: missing layers make it a no-op returning ``None`` or
``False`` and out-of-range values are clamped.

Example::

    from PIL import Image
    from skinprint.api.workspace import Workspace
    from skinprint.constants import LayerKind

    workspace = Workspace(800, 600)
    workspace.attach_skin(Image.open('arm.jpg'))
    workspace.attach_ink(Image.open('rose.png'))
    workspace.set_opacity(LayerKind.INK, 0.8)
    footprint = workspace.footprint(LayerKind.INK)
"""

import logging
import math
from typing import Iterator, Optional

from PIL import Image

from skinprint.api.geometry import Footprint, Point, Rect, safe_scale
from skinprint.api.layers import Layer
from skinprint.constants import INK_MIN_SCALE, INK_WIDTH_RATIO, LayerKind

logger = logging.getLogger(__name__)


class Workspace:
    """
    Layer container and geometry operations.

    :param width: workspace width, tracks the viewport
    :param height: workspace height, tracks the viewport
    """

    def __init__(self, width: float = 1024, height: float = 768):
        self._width = max(1.0, float(width))
        self._height = max(1.0, float(height))
        self._layers: dict[LayerKind, Layer] = {}
        self._generation = 0

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def size(self) -> tuple[float, float]:
        """(Width, Height) tuple."""
        return self._width, self._height

    @property
    def skin(self) -> Optional[Layer]:
        return self._layers.get(LayerKind.SKIN)

    @property
    def ink(self) -> Optional[Layer]:
        return self._layers.get(LayerKind.INK)

    @property
    def skin_token(self) -> Optional[tuple[int, int]]:
        """Identity of the current skin image and crop, None without skin."""
        skin = self.skin
        if skin is None:
            return None
        return self._generation, skin.revision

    def get(self, kind: Optional[LayerKind]) -> Optional[Layer]:
        if kind is None:
            return None
        return self._layers.get(kind)

    def has_content(self) -> bool:
        return LayerKind.SKIN in self._layers

    def has_ink(self) -> bool:
        return LayerKind.INK in self._layers

    def __iter__(self) -> Iterator[Layer]:
        """Iterate layers bottom to top."""
        for kind in (LayerKind.SKIN, LayerKind.INK):
            if kind in self._layers:
                yield self._layers[kind]

    def attach_skin(self, image: Image.Image) -> Layer:
        """
        Attach a background photo, replacing any previous skin.

        The skin is fitted inside the workspace and centred. Any ink layer is
        discarded since all sampling is skin-relative.
        """
        layer = Layer(LayerKind.SKIN, image)
        layer.set_scale(
            min(self._width / layer.width, self._height / layer.height)
        )
        layer.set_position(self._width / 2.0, self._height / 2.0)
        if self.has_ink():
            logger.debug("Discarding ink layer on skin change")
        self._layers = {LayerKind.SKIN: layer}
        self._generation += 1
        logger.debug("Attached %r", layer)
        return layer

    def attach_ink(self, image: Image.Image) -> Optional[Layer]:
        """
        Attach a foreground image at the centre of the skin footprint.

        Returns None when there is no skin to place it on.
        """
        skin = self.skin
        if skin is None:
            logger.debug("Ignoring ink without skin")
            return None
        layer = Layer(LayerKind.INK, image)
        skin_fp = skin.footprint()
        layer.set_scale(
            max(
                INK_MIN_SCALE,
                skin_fp.width * INK_WIDTH_RATIO / max(layer.width, layer.height),
            )
        )
        center = skin_fp.center
        layer.set_position(center.x, center.y)
        self._layers[LayerKind.INK] = layer
        logger.debug("Attached %r", layer)
        return layer

    def remove_ink(self) -> bool:
        return self._layers.pop(LayerKind.INK, None) is not None

    def clear(self) -> None:
        self._layers = {}
        self._generation += 1

    def footprint(self, kind: Optional[LayerKind]) -> Optional[Footprint]:
        layer = self.get(kind)
        return layer.footprint() if layer is not None else None

    def set_position(self, kind: LayerKind, x: float, y: float) -> bool:
        layer = self.get(kind)
        if layer is None:
            return False
        layer.set_position(x, y)
        return True

    def set_scale(self, kind: LayerKind, scale: float) -> Optional[float]:
        """Set the scale, clamped to [0.05, 8.0]. Returns the applied scale."""
        layer = self.get(kind)
        if layer is None:
            return None
        return layer.set_scale(scale)

    def set_rotation(self, kind: LayerKind, radians: float) -> bool:
        layer = self.get(kind)
        return layer.set_rotation(radians) if layer is not None else False

    def set_opacity(self, kind: LayerKind, opacity: float) -> bool:
        layer = self.get(kind)
        return layer.set_opacity(opacity) if layer is not None else False

    def set_crop(self, kind: LayerKind, rect: Rect) -> Optional[Rect]:
        """Crop a layer in native pixels. Returns the applied rectangle."""
        layer = self.get(kind)
        if layer is None:
            return None
        return layer.set_crop(rect)

    def layer_at(self, point: Point) -> Optional[LayerKind]:
        """Topmost layer whose footprint contains ``point``."""
        for kind in (LayerKind.INK, LayerKind.SKIN):
            layer = self._layers.get(kind)
            if layer is not None and layer.footprint().contains(point):
                return kind
        return None

    def resize(self, width: float, height: float) -> tuple[float, float]:
        """
        Resize the workspace and rescale attached layers to keep their
        relative placement.

        Positions scale component-wise by ``(rx, ry)`` and scales by
        ``min(rx, ry)``. Returns ``(rx, ry)``.
        """
        width, height = float(width), float(height)
        if not (math.isfinite(width) and math.isfinite(height)):
            logger.warning("Ignoring non-finite workspace size")
            return 1.0, 1.0
        width, height = max(1.0, width), max(1.0, height)
        rx = width / safe_scale(self._width)
        ry = height / safe_scale(self._height)
        adjust = min(rx, ry)
        for layer in self:
            transform = layer.transform
            layer.set_position(transform.x * rx, transform.y * ry)
            layer.set_scale(transform.scale * adjust)
        self._width, self._height = width, height
        logger.debug("Workspace resized to %gx%g (%g, %g)", width, height, rx, ry)
        return rx, ry

    def __repr__(self) -> str:
        return "%s(size=%gx%g layers=[%s])" % (
            self.__class__.__name__,
            self._width,
            self._height,
            ", ".join(layer.kind.value for layer in self),
        )
