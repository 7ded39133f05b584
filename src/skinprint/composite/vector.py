"""Vector overlays: selection outline, crop overlay and the default logo."""

import logging
from typing import Iterable, Optional

import numpy as np
from PIL import Image

from skinprint.api import pil_io
from skinprint.api.geometry import Point, Rect, handle_points
from skinprint.composite._compat import require_aggdraw
from skinprint.composite.blend import blend
from skinprint.constants import CORNER_HANDLES, BlendMode

logger = logging.getLogger(__name__)

ACCENT = (59, 130, 246)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
SLATE = (15, 23, 42)

CROP_DIM = 0.5
LOGO_SIZE = (240, 64)


@require_aggdraw
def draw_selection(
    size: tuple[int, int], rect: Rect, handle_size: float
) -> tuple[np.ndarray, np.ndarray]:
    """
    Draw the selection outline of ``rect`` with its four corner handles.

    Requires aggdraw for antialiased rasterization.

    :return: (color, alpha) arrays of ``size``
    """
    width, height = size
    outline = _stroke_rect(width, height, rect, 2.0)
    corners = handle_points(rect)
    points = [corners[handle] for handle in CORNER_HANDLES]
    layers = [(ACCENT, outline)]
    layers.extend(_handles(width, height, points, handle_size))
    return _flatten(width, height, layers)


@require_aggdraw
def draw_crop_overlay(
    size: tuple[int, int], rect: Rect, handle_size: float
) -> tuple[np.ndarray, np.ndarray]:
    """
    Draw the crop overlay: everything outside ``rect`` is dimmed, the
    rectangle gets a white outline and eight handles.

    Requires aggdraw for antialiased rasterization.
    """
    width, height = size
    dim = np.full((height, width, 1), CROP_DIM, dtype=np.float32)
    inside = _fill_rect(width, height, rect)
    dim = dim * (1.0 - inside)
    outline = _stroke_rect(width, height, rect, 2.0)
    layers = [(BLACK, dim), (WHITE, outline)]
    layers.extend(_handles(width, height, handle_points(rect).values(), handle_size))
    return _flatten(width, height, layers)


@require_aggdraw
def default_logo(size: tuple[int, int] = LOGO_SIZE) -> Image.Image:
    """
    Draw the default watermark logo: a rounded slate badge carrying a white
    ink drop and three stripes.

    Requires aggdraw for bezier curve rasterization.
    """
    import aggdraw  # type: ignore[import-not-found]

    width, height = size
    r = min(width, height) * 0.25
    # Cubic segments only; straight edges are degenerate curves.
    k = r * 0.4477
    badge = " ".join(
        map(
            str,
            [
                "M", r, 0,
                "C", width - r, 0, width - r, 0, width - r, 0,
                "C", width - k, 0, width, k, width, r,
                "C", width, height - r, width, height - r, width, height - r,
                "C", width, height - k, width - k, height, width - r, height,
                "C", r, height, r, height, r, height,
                "C", k, height, 0, height - k, 0, height - r,
                "C", 0, r, 0, r, 0, r,
                "C", 0, k, k, 0, r, 0,
                "Z",
            ],
        )
    )
    cx, cy = height * 0.5, height * 0.55
    drop_r = height * 0.26
    drop = " ".join(
        map(
            str,
            [
                "M", cx, cy - drop_r * 1.6,
                "C", cx + drop_r * 0.4, cy - drop_r, cx + drop_r, cy - drop_r * 0.5,
                cx + drop_r, cy,
                "C", cx + drop_r, cy + drop_r * 0.6, cx + drop_r * 0.6, cy + drop_r,
                cx, cy + drop_r,
                "C", cx - drop_r * 0.6, cy + drop_r, cx - drop_r, cy + drop_r * 0.6,
                cx - drop_r, cy,
                "C", cx - drop_r, cy - drop_r * 0.5, cx - drop_r * 0.4, cy - drop_r,
                cx, cy - drop_r * 1.6,
                "Z",
            ],
        )
    )

    badge_mask = Image.new("L", (width, height), 0)
    draw = aggdraw.Draw(badge_mask)
    draw.symbol((0, 0), aggdraw.Symbol(badge), None, aggdraw.Brush(255))
    draw.flush()
    del draw

    mark_mask = Image.new("L", (width, height), 0)
    draw = aggdraw.Draw(mark_mask)
    draw.symbol((0, 0), aggdraw.Symbol(drop), None, aggdraw.Brush(255))
    pen = aggdraw.Pen(255, height * 0.09)
    left = height * 1.05
    for index, ratio in enumerate((0.72, 0.5, 0.6)):
        y = height * (0.3 + 0.2 * index)
        draw.line((left, y, left + (width - left - r) * ratio, y), pen)
    draw.flush()
    del draw

    color, alpha = _flatten(
        width,
        height,
        [(SLATE, _to_mask(badge_mask)), (WHITE, _to_mask(mark_mask))],
    )
    return pil_io.from_arrays(color, alpha)


def _to_mask(image: Image.Image) -> np.ndarray:
    return np.expand_dims(np.asarray(image, dtype=np.float32) / 255.0, 2)


def _fill_rect(width: int, height: int, rect: Rect) -> np.ndarray:
    """Coverage mask of ``rect``."""
    import aggdraw  # type: ignore[import-not-found]

    mask = Image.new("L", (width, height), 0)
    draw = aggdraw.Draw(mask)
    draw.rectangle(rect.bbox, aggdraw.Brush(255))
    draw.flush()
    del draw
    return _to_mask(mask)


def _stroke_rect(
    width: int, height: int, rect: Rect, line_width: float
) -> np.ndarray:
    import aggdraw  # type: ignore[import-not-found]

    mask = Image.new("L", (width, height), 0)
    draw = aggdraw.Draw(mask)
    draw.rectangle(rect.bbox, aggdraw.Pen(255, line_width))
    draw.flush()
    del draw
    return _to_mask(mask)


def _handles(
    width: int, height: int, points: Iterable[Point], handle_size: float
) -> list[tuple[tuple[int, int, int], np.ndarray]]:
    """White squares with an accent border centred at ``points``."""
    import aggdraw  # type: ignore[import-not-found]

    fill = Image.new("L", (width, height), 0)
    border = Image.new("L", (width, height), 0)
    fill_draw = aggdraw.Draw(fill)
    border_draw = aggdraw.Draw(border)
    brush = aggdraw.Brush(255)
    pen = aggdraw.Pen(255, 1.5)
    half = handle_size / 2.0
    for point in points:
        box = (point.x - half, point.y - half, point.x + half, point.y + half)
        fill_draw.rectangle(box, brush)
        border_draw.rectangle(box, pen)
    fill_draw.flush()
    border_draw.flush()
    del fill_draw, border_draw
    return [(WHITE, _to_mask(fill)), (ACCENT, _to_mask(border))]


def _flatten(
    width: int,
    height: int,
    layers: Iterable[tuple[tuple[int, int, int], Optional[np.ndarray]]],
) -> tuple[np.ndarray, np.ndarray]:
    """Composite solid-colored coverage masks in order."""
    color = np.zeros((height, width, 3), dtype=np.float32)
    alpha = np.zeros((height, width, 1), dtype=np.float32)
    for rgb, mask in layers:
        if mask is None:
            continue
        source = np.empty((height, width, 3), dtype=np.float32)
        source[:, :] = np.array(rgb, dtype=np.float32) / 255.0
        color, alpha = blend(color, alpha, source, mask, BlendMode.NORMAL)
    return color, alpha
