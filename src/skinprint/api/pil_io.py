"""
PIL IO module.

Conversion between Pillow images and the float arrays the compositor works on.
Colour arrays have shape ``(height, width, 3)`` and alpha arrays
``(height, width, 1)``, both float32 in [0, 1].
"""

import io
import logging
from typing import Optional

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def normalize(image: Image.Image) -> Image.Image:
    """Return an RGBA copy of ``image`` detached from any file handle.

    Palette images with transparency and grayscale images with alpha keep
    their transparency; everything else becomes fully opaque.
    """
    if image.mode == "RGBA":
        converted = image.copy()
    elif image.mode == "P" and "transparency" in image.info:
        converted = image.convert("RGBA")
    elif image.mode in ("LA", "La", "PA", "RGBa"):
        converted = image.convert("RGBA")
    else:
        converted = image.convert("RGB").convert("RGBA")
    converted.load()
    return converted


def to_arrays(image: Image.Image) -> tuple[np.ndarray, np.ndarray]:
    """Split an image into (color, alpha) float32 arrays."""
    if image.mode != "RGBA":
        image = normalize(image)
    pixels = np.asarray(image, dtype=np.float32) / 255.0
    return pixels[:, :, :3], pixels[:, :, 3:4]


def from_arrays(color: np.ndarray, alpha: Optional[np.ndarray] = None) -> Image.Image:
    """Merge float (color, alpha) arrays back to a PIL Image."""
    if alpha is None:
        pixels, mode = color, "RGB"
    else:
        pixels, mode = np.concatenate((color, alpha), axis=2), "RGBA"
    pixels = np.clip(np.round(pixels * 255.0), 0, 255).astype(np.uint8)
    image = Image.fromarray(pixels)
    assert image.mode == mode
    return image


def encode(image: Image.Image, format: str = "PNG", **kwargs) -> bytes:
    """Encode an image in memory. JPEG output drops the alpha channel."""
    if format.upper() in ("JPEG", "JPG") and image.mode != "RGB":
        image = image.convert("RGB")
    with io.BytesIO() as f:
        image.save(f, format=format, **kwargs)
        return f.getvalue()
