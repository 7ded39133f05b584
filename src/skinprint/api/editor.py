"""
Editor context object.

:py:class:`Editor` wires a :py:class:`~skinprint.api.workspace.Workspace`,
the :py:class:`~skinprint.api.interaction.Interaction` state machine, a
:py:class:`~skinprint.composite.Compositor` and the observer channel
together. It is the object a user interface drives::

    from PIL import Image
    from skinprint import Editor, Point

    editor = Editor(1024, 768)
    editor.attach_skin(Image.open('arm.jpg'))
    editor.attach_ink(Image.open('rose.png'))
    editor.pointer_down(Point(512, 384))
    editor.pointer_move(Point(540, 360))
    editor.pointer_up()
    editor.set_opacity(80)
    png = editor.export()

Every state change re-renders the preview :py:attr:`Editor.surface` and
emits ``RENDERED`` unless ``auto_render`` is off.
"""

import logging
import math
from typing import Any, Callable, Optional

from PIL import Image

from skinprint.api import pil_io
from skinprint.api.geometry import Footprint, Point, Rect
from skinprint.api.interaction import Interaction
from skinprint.api.layers import Layer
from skinprint.api.observers import Observers
from skinprint.api.workspace import Workspace
from skinprint.composite.composite import Compositor, RenderOptions, Surface
from skinprint.composite.filters import Filters
from skinprint.composite.tone import Tone, derive_filters
from skinprint.constants import DEGREES, Event, LayerKind, Mode

logger = logging.getLogger(__name__)


class Editor:
    """
    Compositing session.

    :param width: workspace width
    :param height: workspace height
    :param logo: watermark image for exports
    :param options: :py:class:`~skinprint.composite.RenderOptions`
    :param auto_render: re-render the preview surface on every change
    """

    def __init__(
        self,
        width: float = 1024,
        height: float = 768,
        logo: Optional[Image.Image] = None,
        options: Optional[RenderOptions] = None,
        auto_render: bool = True,
    ):
        self._options = options if options is not None else RenderOptions()
        self._observers = Observers()
        self._workspace = Workspace(width, height)
        self._interaction = Interaction(
            self._workspace,
            self._observers,
            handle_size=self._options.handle_size,
            on_change=self.invalidate,
        )
        self._compositor = Compositor(
            self._workspace, self._interaction, logo=logo, options=self._options
        )
        self._auto_render = auto_render
        self._surface: Optional[Surface] = None

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def interaction(self) -> Interaction:
        return self._interaction

    @property
    def compositor(self) -> Compositor:
        return self._compositor

    @property
    def observers(self) -> Observers:
        return self._observers

    @property
    def surface(self) -> Optional[Surface]:
        """Last rendered preview, None before the first render."""
        return self._surface

    @property
    def skin(self) -> Optional[Layer]:
        return self._workspace.skin

    @property
    def ink(self) -> Optional[Layer]:
        return self._workspace.ink

    @property
    def selected(self) -> Optional[LayerKind]:
        return self._interaction.selected

    @property
    def mode(self) -> Mode:
        return self._interaction.mode

    def subscribe(self, event: Event, callback: Callable[..., Any]) -> Callable[[], None]:
        """Register the single subscriber of ``event``."""
        return self._observers.subscribe(event, callback)

    # Rendering.

    def invalidate(self) -> None:
        if self._auto_render:
            self.render()

    def render(self) -> Surface:
        """Render the preview at workspace size and emit ``RENDERED``."""
        width = max(1, int(round(self._workspace.width)))
        height = max(1, int(round(self._workspace.height)))
        if self._surface is None or self._surface.size != (width, height):
            self._surface = Surface(width, height)
        self._compositor.render(self._surface)
        self._observers.emit(Event.RENDERED, self._surface)
        return self._surface

    def tone(self) -> Tone:
        return self._compositor.tone()

    def filters(self) -> Filters:
        """Filter parameters the ink passes currently use."""
        return derive_filters(self.tone())

    # Layers.

    def attach_skin(self, image: Image.Image) -> Layer:
        """Replace the skin photo. Any ink layer is discarded."""
        had_ink = self._workspace.has_ink()
        with self._interaction.muted():
            self._interaction.reset()
        layer = self._workspace.attach_skin(image)
        self._compositor.cache.invalidate()
        if had_ink:
            self._observers.emit(Event.INK_REMOVED)
        self.invalidate()
        return layer

    def attach_ink(self, image: Image.Image) -> Optional[Layer]:
        """Place the ink image over the skin and select it.

        Returns None without a skin.
        """
        if not self._workspace.has_content():
            logger.debug("Attach a skin before the ink")
            return None
        with self._interaction.muted():
            self._interaction.forget(LayerKind.INK)
        layer = self._workspace.attach_ink(image)
        if layer is None:
            return None
        self._observers.emit(Event.INK_PLACED)
        if not self._interaction.select(LayerKind.INK):
            self.invalidate()
        return layer

    def remove_ink(self) -> bool:
        if not self._workspace.has_ink():
            return False
        with self._interaction.muted():
            self._interaction.forget(LayerKind.INK)
        self._workspace.remove_ink()
        self._observers.emit(Event.INK_REMOVED)
        self.invalidate()
        return True

    def clear(self) -> None:
        with self._interaction.muted():
            self._interaction.reset()
        self._workspace.clear()
        self._compositor.cache.invalidate()
        self.invalidate()

    def footprint(self, kind: LayerKind) -> Optional[Footprint]:
        return self._workspace.footprint(kind)

    # Sliders.

    def set_scale(self, percent: float, kind: LayerKind = LayerKind.INK) -> Optional[float]:
        """Set the scale of a layer in percent. Returns the applied scale."""
        scale = self._workspace.set_scale(kind, percent / 100.0)
        if scale is not None:
            self.invalidate()
        return scale

    def set_rotation(self, degrees: float) -> bool:
        """Rotate the ink layer, in degrees clockwise."""
        if not math.isfinite(degrees):
            return False
        changed = self._workspace.set_rotation(LayerKind.INK, degrees * DEGREES)
        if changed:
            self.invalidate()
        return changed

    def set_opacity(self, percent: float) -> bool:
        """Set the ink opacity in percent, clamped to [10, 100]."""
        changed = self._workspace.set_opacity(LayerKind.INK, percent / 100.0)
        if changed:
            self.invalidate()
        return changed

    def set_position(self, kind: LayerKind, x: float, y: float) -> bool:
        changed = self._workspace.set_position(kind, x, y)
        if changed:
            self.invalidate()
        return changed

    def set_crop(self, kind: LayerKind, rect: Rect) -> Optional[Rect]:
        """Crop a layer in native pixels, outside of the interactive crop mode."""
        if self._interaction.crop_layer == kind:
            self._interaction.cancel_crop()
        applied = self._workspace.set_crop(kind, rect)
        if applied is not None:
            self.invalidate()
        return applied

    def resize_workspace(self, width: float, height: float) -> tuple[float, float]:
        """End any gesture, then rescale the workspace and its layers."""
        self._interaction.pointer_up()
        ratios = self._workspace.resize(width, height)
        self.invalidate()
        return ratios

    # Pointer input and commands.

    def cursor_at(self, point: Point) -> str:
        return self._interaction.cursor_at(point)

    def pointer_down(self, point: Point) -> Mode:
        return self._interaction.pointer_down(point)

    def pointer_move(self, point: Point) -> bool:
        return self._interaction.pointer_move(point)

    def pointer_up(self) -> None:
        self._interaction.pointer_up()

    def select(self, kind: Optional[LayerKind]) -> bool:
        return self._interaction.select(kind)

    def delete_selected(self) -> bool:
        return self._interaction.delete_selected()

    def begin_crop(self, kind: Optional[LayerKind] = None) -> bool:
        return self._interaction.begin_crop(kind)

    def apply_crop(self) -> Optional[Rect]:
        return self._interaction.apply_crop()

    def cancel_crop(self) -> bool:
        return self._interaction.cancel_crop()

    def key(self, name: str) -> bool:
        return self._interaction.key(name)

    # Export.

    def export_image(self) -> Optional[Image.Image]:
        return self._compositor.export_image()

    def export(self, format: str = "PNG") -> Optional[bytes]:
        """Encode the watermarked export in memory. None without a skin."""
        image = self.export_image()
        if image is None:
            return None
        return pil_io.encode(image, format=format)

    def __repr__(self) -> str:
        return "%s(%r, %r)" % (
            self.__class__.__name__,
            self._workspace,
            self._interaction,
        )
