"""
Interaction state machine.

Pointer input, already converted to workspace coordinates by the caller, is
classified into select, drag, resize and crop-adjust gestures. States are
``idle``, ``dragging(layer)``, ``resizing(layer, handle)`` and
``cropping(layer, handle)``; crop mode itself is a separate session that
survives pointer-up until it is applied or cancelled.

Example::

    interaction = Interaction(workspace)
    interaction.pointer_down(Point(400, 300))   # selects and grabs the ink
    interaction.pointer_move(Point(450, 270))   # moves it by (+50, -30)
    interaction.pointer_up()

Hit-testing priority on pointer-down:

1. crop overlay handles, then the inside of the pending crop (move),
2. corner handles of the selected layer,
3. the ink footprint,
4. the skin footprint,
5. empty space, which deselects.
"""

import contextlib
import logging
import math
from typing import Callable, Iterator, Optional

from attrs import define, evolve

from skinprint.api.geometry import Point, Rect, Transform, handle_points, safe_scale
from skinprint.api.layers import Layer
from skinprint.api.observers import Observers
from skinprint.api.workspace import Workspace
from skinprint.constants import (
    MIN_CROP_VISIBLE,
    Event,
    Handle,
    LayerKind,
    Mode,
)
from skinprint.validators import clamp

logger = logging.getLogger(__name__)

CURSORS = {
    Handle.NW: "nwse-resize",
    Handle.SE: "nwse-resize",
    Handle.NE: "nesw-resize",
    Handle.SW: "nesw-resize",
    Handle.E: "ew-resize",
    Handle.W: "ew-resize",
    Handle.N: "ns-resize",
    Handle.S: "ns-resize",
    Handle.MOVE: "move",
}


@define
class Gesture:
    """Anchor data for one pointer gesture."""

    mode: Mode
    layer: LayerKind
    start: Point
    transform: Transform
    handle: Optional[Handle] = None
    rect: Optional[Rect] = None


@define
class CropSession:
    """Pending crop of ``layer``; ``rect`` is in native pixels of the
    un-cropped image."""

    layer: LayerKind
    rect: Rect


def adjust_crop_rect(
    rect: Rect,
    handle: Handle,
    dx: float,
    dy: float,
    bounds: Rect,
    min_width: float,
    min_height: float,
) -> Rect:
    """
    Move the edges of ``rect`` grabbed by ``handle`` by (dx, dy).

    The result stays inside ``bounds`` and never gets smaller than
    (min_width, min_height), limited by the bounds themselves.
    """
    min_width = min(min_width, bounds.width)
    min_height = min(min_height, bounds.height)
    left, top, right, bottom = rect.bbox
    if handle == Handle.MOVE:
        left = clamp(left + dx, bounds.left, bounds.right - rect.width)
        top = clamp(top + dy, bounds.top, bounds.bottom - rect.height)
        return Rect(left, top, rect.width, rect.height)

    move_left, move_top, move_right, move_bottom = handle.edges
    if move_left:
        left = clamp(left + dx, bounds.left, right - min_width)
    if move_right:
        right = clamp(right + dx, left + min_width, bounds.right)
    if move_top:
        top = clamp(top + dy, bounds.top, bottom - min_height)
    if move_bottom:
        bottom = clamp(bottom + dy, top + min_height, bounds.bottom)
    return Rect.from_bbox(left, top, right, bottom)


class Interaction:
    """
    Direct-manipulation state machine over a :py:class:`Workspace`.

    :param workspace: layers to manipulate
    :param observers: receives selection, crop and removal notifications
    :param handle_size: handle size in workspace units; the hit area extends
        1.5 times this value around each handle
    :param on_change: called after every visible change, typically to
        re-render
    """

    def __init__(
        self,
        workspace: Workspace,
        observers: Optional[Observers] = None,
        handle_size: float = 12.0,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._workspace = workspace
        self._observers = observers if observers is not None else Observers()
        self._handle_size = max(1.0, float(handle_size))
        self._on_change = on_change
        self._selected: Optional[LayerKind] = None
        self._gesture: Optional[Gesture] = None
        self._crop: Optional[CropSession] = None

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def observers(self) -> Observers:
        return self._observers

    @property
    def handle_size(self) -> float:
        return self._handle_size

    @property
    def selected(self) -> Optional[LayerKind]:
        return self._selected

    @property
    def mode(self) -> Mode:
        return self._gesture.mode if self._gesture is not None else Mode.IDLE

    @property
    def gesture(self) -> Optional[Gesture]:
        return self._gesture

    @property
    def is_busy(self) -> bool:
        return self._gesture is not None

    @property
    def crop_active(self) -> bool:
        return self._crop is not None

    @property
    def crop_layer(self) -> Optional[LayerKind]:
        return self._crop.layer if self._crop is not None else None

    @property
    def pending_crop(self) -> Optional[Rect]:
        """Pending crop rectangle in native pixels."""
        return self._crop.rect if self._crop is not None else None

    def pending_crop_rect(self) -> Optional[Rect]:
        """Pending crop rectangle in workspace space."""
        if self._crop is None:
            return None
        layer = self._workspace.get(self._crop.layer)
        if layer is None:
            return None
        rect = self._crop.rect
        top_left = layer.to_workspace(Point(rect.left, rect.top))
        bottom_right = layer.to_workspace(Point(rect.right, rect.bottom))
        return Rect.from_bbox(top_left.x, top_left.y, bottom_right.x, bottom_right.y)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    @contextlib.contextmanager
    def muted(self) -> Iterator[None]:
        """Suspend ``on_change`` calls; observers are still notified."""
        on_change, self._on_change = self._on_change, None
        try:
            yield
        finally:
            self._on_change = on_change

    # Selection.

    def select(self, kind: Optional[LayerKind]) -> bool:
        """Select a layer, or deselect with None. Returns True on change."""
        if kind is not None and self._workspace.get(kind) is None:
            return False
        if kind == self._selected:
            return False
        if self._crop is not None and kind is not None and kind != self._crop.layer:
            self.cancel_crop()
        self._selected = kind
        logger.debug("Selected %s", kind.value if kind else None)
        self._observers.emit(Event.SELECTION_CHANGED, kind)
        self._changed()
        return True

    def reset(self) -> None:
        """Drop the gesture, crop session and selection."""
        self._gesture = None
        self.cancel_crop()
        self.select(None)

    def forget(self, kind: LayerKind) -> None:
        """Drop state referring to a layer that no longer exists."""
        if self._gesture is not None and self._gesture.layer == kind:
            self._gesture = None
        if self._crop is not None and self._crop.layer == kind:
            self.cancel_crop()
        if self._selected == kind:
            self.select(None)

    # Hit-testing.

    def _near(self, point: Point, target: Point) -> bool:
        reach = self._handle_size * 1.5
        return abs(point.x - target.x) <= reach and abs(point.y - target.y) <= reach

    def handle_at(self, point: Point) -> Optional[Handle]:
        """Corner handle of the selected layer under ``point``."""
        if self._selected is None or self._selected == self.crop_layer:
            return None
        footprint = self._workspace.footprint(self._selected)
        if footprint is None:
            return None
        for corner in footprint.corners:
            if self._near(point, corner.point):
                return corner.handle
        return None

    def crop_handle_at(self, point: Point) -> Optional[Handle]:
        """Crop overlay handle under ``point``, MOVE inside the pending rect."""
        rect = self.pending_crop_rect()
        if rect is None:
            return None
        for handle, target in handle_points(rect).items():
            if self._near(point, target):
                return handle
        if rect.contains(point):
            return Handle.MOVE
        return None

    def cursor_at(self, point: Point) -> str:
        """Cursor hint for the pointer at ``point``."""
        gesture = self._gesture
        if gesture is not None:
            if gesture.mode == Mode.DRAGGING:
                return "grabbing"
            return CURSORS[gesture.handle] if gesture.handle else "default"
        if not self._workspace.has_content():
            return "default"
        handle = self.crop_handle_at(point) or self.handle_at(point)
        if handle is not None:
            return CURSORS[handle]
        if self._workspace.layer_at(point) is not None:
            return "grab"
        return "default"

    # Pointer events.

    def _begin(
        self,
        mode: Mode,
        layer: Layer,
        point: Point,
        handle: Optional[Handle] = None,
    ) -> Mode:
        self._gesture = Gesture(
            mode=mode,
            layer=layer.kind,
            start=point,
            transform=layer.transform.copy(),
            handle=handle,
            rect=self.pending_crop,
        )
        logger.debug("Begin %s on %s", mode.value, layer.kind.value)
        return mode

    def pointer_down(self, point: Point) -> Mode:
        """Start a gesture at ``point``. Returns the resulting mode."""
        if self._gesture is not None:
            self.pointer_up()
        if not self._workspace.has_content():
            return Mode.IDLE

        if self._crop is not None:
            handle = self.crop_handle_at(point)
            layer = self._workspace.get(self._crop.layer)
            if handle is not None and layer is not None:
                return self._begin(Mode.CROPPING, layer, point, handle)

        handle = self.handle_at(point)
        layer = self._workspace.get(self._selected)
        if handle is not None and layer is not None:
            return self._begin(Mode.RESIZING, layer, point, handle)

        kind = self._workspace.layer_at(point)
        layer = self._workspace.get(kind)
        if layer is not None:
            self.select(layer.kind)
            return self._begin(Mode.DRAGGING, layer, point)

        self.select(None)
        return Mode.IDLE

    def pointer_move(self, point: Point) -> bool:
        """Update the active gesture. Returns True when something changed."""
        gesture = self._gesture
        if gesture is None:
            return False
        if not (math.isfinite(point.x) and math.isfinite(point.y)):
            logger.warning("Ignoring non-finite pointer %s", point)
            return False
        layer = self._workspace.get(gesture.layer)
        if layer is None:
            self._gesture = None
            return False

        dx, dy = point.x - gesture.start.x, point.y - gesture.start.y
        snapshot = gesture.transform
        if gesture.mode == Mode.DRAGGING:
            layer.set_position(snapshot.x + dx, snapshot.y + dy)
        elif gesture.mode == Mode.RESIZING:
            center = snapshot.position
            start_distance = gesture.start.distance(center)
            if start_distance <= 0:
                return False
            ratio = point.distance(center) / start_distance
            layer.set_scale(snapshot.scale * ratio)
        elif gesture.mode == Mode.CROPPING:
            if self._crop is None or gesture.rect is None or gesture.handle is None:
                return False
            scale = safe_scale(layer.scale)
            self._crop = evolve(
                self._crop,
                rect=adjust_crop_rect(
                    gesture.rect,
                    gesture.handle,
                    dx / scale,
                    dy / scale,
                    Rect(0, 0, layer.width, layer.height),
                    max(MIN_CROP_VISIBLE / scale, layer.min_crop_size[0]),
                    max(MIN_CROP_VISIBLE / scale, layer.min_crop_size[1]),
                ),
            )
        self._changed()
        return True

    def pointer_up(self) -> None:
        """End the active gesture. Crop mode, if engaged, stays engaged."""
        if self._gesture is not None:
            logger.debug("End %s", self._gesture.mode.value)
        self._gesture = None

    # Commands.

    def delete_selected(self) -> bool:
        """Remove the selected ink layer and fall back to selecting skin."""
        if self._selected != LayerKind.INK or not self._workspace.has_ink():
            return False
        self._gesture = None
        if self.crop_layer == LayerKind.INK:
            self.cancel_crop()
        self._workspace.remove_ink()
        logger.debug("Removed ink layer")
        self._selected = None
        self._observers.emit(Event.INK_REMOVED)
        if not self.select(LayerKind.SKIN):
            self._observers.emit(Event.SELECTION_CHANGED, None)
            self._changed()
        return True

    def begin_crop(self, kind: Optional[LayerKind] = None) -> bool:
        """Engage crop mode on ``kind`` or on the selected layer."""
        kind = kind if kind is not None else self._selected
        layer = self._workspace.get(kind)
        if layer is None:
            return False
        self.pointer_up()
        if self._crop is not None:
            if self._crop.layer == layer.kind:
                return True
            self.cancel_crop()
        self.select(layer.kind)
        self._crop = CropSession(layer.kind, layer.crop)
        self._observers.emit(Event.CROP_CHANGED, True, layer.kind)
        self._changed()
        return True

    def apply_crop(self) -> Optional[Rect]:
        """Apply the pending crop. Returns the applied native rectangle."""
        session = self._crop
        if session is None:
            return None
        layer = self._workspace.get(session.layer)
        self._crop = None
        self.pointer_up()
        applied = None
        if layer is not None:
            applied = layer.set_crop(session.rect)
            logger.debug("Applied crop %s to %s", applied, layer.kind.value)
        self._observers.emit(Event.CROP_CHANGED, False, session.layer)
        self._changed()
        return applied

    def cancel_crop(self) -> bool:
        session = self._crop
        if session is None:
            return False
        self._crop = None
        if self._gesture is not None and self._gesture.mode == Mode.CROPPING:
            self._gesture = None
        self._observers.emit(Event.CROP_CHANGED, False, session.layer)
        self._changed()
        return True

    def key(self, name: str) -> bool:
        """Handle ``Delete``/``Backspace``, ``Enter`` and ``Escape``."""
        if name in ("Delete", "Backspace"):
            return self.delete_selected()
        if name == "Enter":
            return self.apply_crop() is not None
        if name == "Escape":
            return self.cancel_crop()
        return False

    def __repr__(self) -> str:
        return "%s(mode=%s selected=%s crop=%s)" % (
            self.__class__.__name__,
            self.mode.value,
            self._selected.value if self._selected else None,
            self.crop_layer.value if self.crop_layer else None,
        )
