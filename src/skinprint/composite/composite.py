"""Compositor: draws the skin and the tone-adaptive ink onto a surface."""

import logging
import math
from typing import Optional

import numpy as np
from attrs import define, field
from PIL import Image

from skinprint.api import pil_io
from skinprint.api.geometry import Rect
from skinprint.api.interaction import Interaction
from skinprint.api.layers import Layer
from skinprint.api.workspace import Workspace
from skinprint.composite import filters, paint, utils, vector
from skinprint.composite.blend import blend
from skinprint.composite.filters import Filters
from skinprint.composite.integration import IntegrationCache, IntegrationMap
from skinprint.composite.tone import Tone, derive_filters, sample_tone
from skinprint.constants import (
    TONE_SAMPLE_SIZE,
    WATERMARK_ALPHA,
    WATERMARK_MAX_WIDTH,
    WATERMARK_MIN_WIDTH,
    BlendMode,
)
from skinprint.validators import at_least, clamp, clamp_

logger = logging.getLogger(__name__)


@define
class RenderOptions:
    """
    Rendering knobs of a :py:class:`Compositor`.

    .. py:attribute:: feather_blur

        Gaussian sigma of the feather pass.

    .. py:attribute:: occlusion_blur

        Gaussian sigma of the occlusion pass.

    .. py:attribute:: handle_size

        Side of the handle squares drawn by the overlays.

    .. py:attribute:: resample

        Pillow filter used to scale layer rasters.
    """

    feather_blur: float = field(default=0.8, converter=at_least(0.0))
    occlusion_blur: float = field(default=1.2, converter=at_least(0.0))
    handle_size: float = field(default=12.0, converter=at_least(1.0))
    resample: Image.Resampling = Image.Resampling.BILINEAR
    watermark_ratio: float = field(default=0.16, converter=clamp_(0.0, 1.0))
    watermark_padding: float = field(default=16.0, converter=at_least(0.0))
    watermark_min_width: int = WATERMARK_MIN_WIDTH
    watermark_max_width: int = WATERMARK_MAX_WIDTH
    watermark_alpha: float = field(default=WATERMARK_ALPHA, converter=clamp_(0.0, 1.0))
    tone_sample_size: int = TONE_SAMPLE_SIZE


class Surface:
    """
    Float RGBA raster the compositor draws into.

    :param width: width in pixels
    :param height: height in pixels
    """

    def __init__(self, width: int, height: int):
        self._width = max(1, int(width))
        self._height = max(1, int(height))
        self.clear()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    @property
    def viewport(self) -> utils.Box:
        return (0, 0, self._width, self._height)

    @property
    def color(self) -> np.ndarray:
        return self._color

    @property
    def alpha(self) -> np.ndarray:
        return self._alpha

    def clear(self) -> None:
        self._color = np.zeros((self._height, self._width, 3), dtype=np.float32)
        self._alpha = np.zeros((self._height, self._width, 1), dtype=np.float32)

    def blend(
        self,
        bbox: utils.Box,
        color: np.ndarray,
        alpha: np.ndarray,
        mode: BlendMode = BlendMode.NORMAL,
        opacity: float = 1.0,
    ) -> None:
        """Blend ``color``/``alpha`` covering ``bbox`` onto the surface."""
        inter = utils.intersect(self.viewport, bbox)
        if inter == (0, 0, 0, 0) or opacity <= 0:
            return
        color = utils.paste(inter, bbox, color)
        alpha = utils.paste(inter, bbox, alpha) * opacity
        l, t, r, b = inter
        self._color[t:b, l:r], self._alpha[t:b, l:r] = blend(
            self._color[t:b, l:r], self._alpha[t:b, l:r], color, alpha, mode
        )

    def topil(self) -> Image.Image:
        return pil_io.from_arrays(self._color, self._alpha)

    def __repr__(self) -> str:
        return "%s(size=%dx%d)" % (self.__class__.__name__, self._width, self._height)


@define(frozen=True)
class LayerView:
    """Detached drawing state of a layer: what to draw and where."""

    image: Image.Image
    crop: Rect
    rect: Rect
    rotation: float = 0.0
    opacity: float = 1.0

    @classmethod
    def of(cls, layer: Layer) -> "LayerView":
        return cls(
            layer.image, layer.crop, layer.footprint().rect, layer.rotation, layer.opacity
        )


class Compositor:
    """
    Renders a workspace.

    Example::

        compositor = Compositor(workspace, interaction)
        surface = Surface(*map(round, workspace.size))
        compositor.render(surface)
        image = compositor.export_image()

    :param workspace: :py:class:`~skinprint.api.workspace.Workspace`
    :param interaction: optional state machine whose selection and crop
        session are drawn as overlays
    :param logo: watermark image for exports, drawn by default
    :param options: :py:class:`RenderOptions`
    :param cache: integration map cache, owned by this compositor
    """

    def __init__(
        self,
        workspace: Workspace,
        interaction: Optional[Interaction] = None,
        logo: Optional[Image.Image] = None,
        options: Optional[RenderOptions] = None,
        cache: Optional[IntegrationCache] = None,
    ):
        self._workspace = workspace
        self._interaction = interaction
        self._logo = pil_io.normalize(logo) if logo is not None else None
        self._options = options if options is not None else RenderOptions()
        self._cache = cache if cache is not None else IntegrationCache()

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def options(self) -> RenderOptions:
        return self._options

    @property
    def cache(self) -> IntegrationCache:
        return self._cache

    @property
    def logo(self) -> Image.Image:
        if self._logo is None:
            self._logo = vector.default_logo()
        return self._logo

    def tone(self) -> Tone:
        return sample_tone(self._workspace, self._options.tone_sample_size)

    def render(self, target: Surface) -> bool:
        """
        Render the workspace into ``target`` at workspace coordinates, with
        selection and crop overlays. Returns False when there is no skin.
        """
        target.clear()
        skin = self._workspace.skin
        if skin is None:
            return False
        self._draw_scene(target, LayerView.of(skin), self._ink_view())
        self._draw_overlays(target)
        return True

    def export_image(self) -> Optional[Image.Image]:
        """
        Render the skin crop at native resolution with the ink and a
        watermark. Layer and interaction state are left untouched.
        """
        skin = self._workspace.skin
        if skin is None:
            logger.debug("Nothing to export")
            return None
        crop = skin.crop
        width = max(1, int(round(crop.width)))
        height = max(1, int(round(crop.height)))
        target = Surface(width, height)
        skin_view = LayerView(skin.image, crop, Rect(0, 0, width, height))

        ink_view = self._ink_view()
        if ink_view is not None:
            origin = skin.footprint()
            scale = 1.0 / skin.scale if skin.scale > 0 else 1.0
            rect = ink_view.rect
            ink_view = LayerView(
                ink_view.image,
                ink_view.crop,
                Rect(
                    (rect.x - origin.x) * scale,
                    (rect.y - origin.y) * scale,
                    rect.width * scale,
                    rect.height * scale,
                ),
                ink_view.rotation,
                ink_view.opacity,
            )

        self._draw_scene(target, skin_view, ink_view)
        self._draw_watermark(target)
        logger.debug("Exported %dx%d", width, height)
        return target.topil()

    def _ink_view(self) -> Optional[LayerView]:
        ink = self._workspace.ink
        return LayerView.of(ink) if ink is not None else None

    def _draw_scene(
        self, target: Surface, skin: LayerView, ink: Optional[LayerView]
    ) -> None:
        placed = self._place(target, skin)
        if placed is not None:
            target.blend(*placed)
        if ink is None:
            return
        tone = self.tone()
        integration = self._cache.get(self._workspace)
        self._draw_ink(target, ink, derive_filters(tone), integration)

    def _place(
        self, target: Surface, view: LayerView, margin: int = 0
    ) -> Optional[tuple[utils.Box, np.ndarray, np.ndarray]]:
        """Crop, scale and rotate a layer raster into target coordinates."""
        rect = view.rect
        width = int(round(rect.width))
        height = int(round(rect.height))
        if width < 1 or height < 1:
            logger.debug("Skipping degenerate footprint %s", rect)
            return None
        region = view.image.crop(view.crop.to_box())
        if region.size != (width, height):
            region = region.resize((width, height), self._options.resample)
        if view.rotation:
            region = region.rotate(
                -math.degrees(view.rotation),
                resample=Image.Resampling.BICUBIC,
                expand=True,
            )
        color, alpha = pil_io.to_arrays(region)
        if margin > 0:
            padding = ((margin, margin), (margin, margin), (0, 0))
            color = np.pad(color, padding, mode="edge")
            alpha = np.pad(alpha, padding)
        center = rect.center
        left = int(round(center.x - color.shape[1] / 2.0))
        top = int(round(center.y - color.shape[0] / 2.0))
        bbox = (left, top, left + color.shape[1], top + color.shape[0])
        if utils.intersect(target.viewport, bbox) == (0, 0, 0, 0):
            return None
        return bbox, color, alpha

    def _draw_ink(
        self,
        target: Surface,
        view: LayerView,
        spec: Filters,
        integration: Optional[IntegrationMap],
    ) -> None:
        options = self._options
        margin = int(math.ceil(3 * max(options.feather_blur, options.occlusion_blur)))
        placed = self._place(target, view, margin)
        if placed is None:
            return
        bbox, color, alpha = placed
        opacity = view.opacity

        passes = (
            (
                "feather",
                BlendMode.MULTIPLY,
                opacity * 0.22,
                spec.replace(
                    brightness=spec.brightness * 1.02,
                    contrast=1.0,
                    saturation=spec.saturation * 0.95,
                    blur=options.feather_blur,
                ),
            ),
            ("ink", BlendMode.MULTIPLY, opacity * 0.9, spec),
            (
                "highlight",
                BlendMode.SOFT_LIGHT,
                opacity * 0.24,
                spec.replace(brightness=min(1.2, spec.brightness + 0.06)),
            ),
        )
        for name, mode, amount, params in passes:
            logger.debug("Pass %s: %s alpha=%.3f %s", name, mode.value, amount, params)
            target.blend(bbox, *filters.apply(color, alpha, params), mode, amount)

        if integration is None:
            return

        rect = view.rect
        center = rect.center
        half_extent = max(rect.width, rect.height) / 2.0
        light_color, light_alpha = paint.draw_light_gradient(
            bbox,
            (center.x, center.y),
            half_extent,
            integration.light_x,
            integration.light_y,
        )
        target.blend(
            bbox, light_color, light_alpha * alpha, BlendMode.SOFT_LIGHT, opacity * 0.28
        )

        width = int(round(rect.width))
        height = int(round(rect.height))
        raster = integration.raster.resize((width, height), self._options.resample)
        map_color, map_alpha = pil_io.to_arrays(raster)
        left = int(round(center.x - width / 2.0))
        top = int(round(center.y - height / 2.0))
        map_bbox = (left, top, left + width, top + height)
        occlusion_color = utils.paste(bbox, map_bbox, map_color)
        occlusion_alpha = utils.paste(bbox, map_bbox, map_alpha) * alpha
        occlusion_color, occlusion_alpha = filters.apply(
            occlusion_color, occlusion_alpha, Filters(blur=options.occlusion_blur)
        )
        target.blend(
            bbox, occlusion_color, occlusion_alpha, BlendMode.MULTIPLY, opacity * 0.22
        )

    def _draw_overlays(self, target: Surface) -> None:
        interaction = self._interaction
        if interaction is None:
            return
        handle_size = self._options.handle_size
        selected = interaction.selected
        if selected is not None and selected != interaction.crop_layer:
            footprint = self._workspace.footprint(selected)
            if footprint is not None:
                color, alpha = vector.draw_selection(
                    target.size, footprint.rect, handle_size
                )
                target.blend(target.viewport, color, alpha)
        pending = interaction.pending_crop_rect()
        if pending is not None:
            color, alpha = vector.draw_crop_overlay(target.size, pending, handle_size)
            target.blend(target.viewport, color, alpha)

    def _draw_watermark(self, target: Surface) -> None:
        options = self._options
        logo = self.logo
        width = int(
            round(
                clamp(
                    options.watermark_ratio * target.width,
                    options.watermark_min_width,
                    options.watermark_max_width,
                )
            )
        )
        height = max(1, int(round(width * logo.height / float(logo.width))))
        logo = logo.resize((width, height), Image.Resampling.LANCZOS)
        color, alpha = pil_io.to_arrays(logo)
        padding = int(round(options.watermark_padding))
        left = target.width - padding - width
        top = target.height - padding - height
        target.blend(
            (left, top, left + width, top + height),
            color,
            alpha,
            BlendMode.NORMAL,
            options.watermark_alpha,
        )
