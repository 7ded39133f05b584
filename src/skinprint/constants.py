"""
Various constants for skinprint
"""
import math
from enum import Enum


class LayerKind(Enum):
    """
    Layer kinds. There is never a third one.
    """
    SKIN = 'skin'
    INK = 'ink'


class Mode(Enum):
    """
    Interaction modes.
    """
    IDLE = 'idle'
    DRAGGING = 'dragging'
    RESIZING = 'resizing'
    CROPPING = 'cropping'


class Handle(Enum):
    """
    Handles of a footprint or a pending crop rectangle, by compass position.

    Corner handles resize a layer; all eight handles adjust a crop. ``MOVE``
    is the interior of a pending crop rectangle.
    """
    NW = 'nw'
    N = 'n'
    NE = 'ne'
    E = 'e'
    SE = 'se'
    S = 's'
    SW = 'sw'
    W = 'w'
    MOVE = 'move'

    @property
    def edges(self):
        """Tuple of (left, top, right, bottom) flags moved by this handle."""
        return {
            Handle.NW: (True, True, False, False),
            Handle.N: (False, True, False, False),
            Handle.NE: (False, True, True, False),
            Handle.E: (False, False, True, False),
            Handle.SE: (False, False, True, True),
            Handle.S: (False, False, False, True),
            Handle.SW: (True, False, False, True),
            Handle.W: (True, False, False, False),
            Handle.MOVE: (True, True, True, True),
        }[self]


CORNER_HANDLES = (Handle.NW, Handle.NE, Handle.SE, Handle.SW)


class Event(Enum):
    """
    Observer events.
    """
    SELECTION_CHANGED = 'selection-changed'
    CROP_CHANGED = 'crop-changed'
    INK_PLACED = 'ink-placed'
    INK_REMOVED = 'ink-removed'
    RENDERED = 'rendered'


class BlendMode(Enum):
    """
    Blend modes used by the ink passes.
    """
    NORMAL = 'source-over'
    MULTIPLY = 'multiply'
    SOFT_LIGHT = 'soft-light'


# Transform limits.
MIN_SCALE = 0.05
MAX_SCALE = 8.0
MIN_OPACITY = 0.1
MAX_OPACITY = 1.0

# Crop limits: native pixels as a fraction of the image dimension, and
# workspace units for the interactive overlay.
MIN_CROP_RATIO = 0.03
MIN_CROP_VISIBLE = 24.0

# Ink placement on attach.
INK_MIN_SCALE = 0.08
INK_WIDTH_RATIO = 0.28

# Tone sampler.
NEUTRAL_TONE = (0.58, 0.30, 0.08)
TONE_WINDOW_RATIO = 0.12
TONE_WINDOW_MIN = 36
TONE_WINDOW_MAX = 220
TONE_SAMPLE_SIZE = 32

# Integration map.
INTEGRATION_MAX_SIZE = 112
INTEGRATION_QUANTUM = 6
EDGE_GAIN = 2.4
SHADOW_THRESHOLD = 0.44
SHADOW_GAIN = 1.25
SHADOW_MAX = 0.65
EDGE_WEIGHT = 0.8
SHADOW_WEIGHT = 0.45
OCCLUSION_COLOR = (15, 23, 42)

# Directional light gradient stops: (location, (r, g, b), alpha).
LIGHT_GRADIENT_STOPS = (
    (0.0, (15, 23, 42), 0.44),
    (0.5, (128, 128, 128), 0.0),
    (1.0, (255, 255, 255), 0.36),
)

# Watermark.
WATERMARK_ALPHA = 0.7
WATERMARK_MIN_WIDTH = 72
WATERMARK_MAX_WIDTH = 150

DEGREES = math.pi / 180.0
