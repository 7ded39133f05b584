"""Pytest configuration for skinprint tests."""

from typing import Any

import numpy as np
import pytest
from PIL import Image

from skinprint.composite._compat import HAS_AGGDRAW, HAS_SCIPY, HAS_SKIMAGE

HAS_COMPOSITE = HAS_AGGDRAW and HAS_SCIPY and HAS_SKIMAGE


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "composite: mark test as requiring composite dependencies (aggdraw, scipy, scikit-image)",
    )


# Marker to skip tests that require composite dependencies
skip_without_composite = pytest.mark.skipif(
    not HAS_COMPOSITE,
    reason="Requires composite dependencies: aggdraw, scipy, scikit-image",
)


def pytest_collection_modifyitems(config: Any, items: list) -> None:
    for item in items:
        if item.get_closest_marker("composite") is not None:
            item.add_marker(skip_without_composite)


@pytest.fixture
def solid_image():
    """Factory of single-color images."""

    def make(size=(100, 100), color=(255, 255, 255, 255), mode="RGBA"):
        return Image.new(mode, size, color)

    return make


@pytest.fixture
def skin_image():
    """Warm, slightly textured skin-like photo, 400x300."""
    height, width = 300, 400
    y, x = np.mgrid[0:height, 0:width]
    base = np.array([224, 172, 140], dtype=np.float32)
    shade = 0.85 + 0.15 * (x / float(width))
    pixels = base[np.newaxis, np.newaxis, :] * shade[:, :, np.newaxis]
    return Image.fromarray(np.clip(pixels, 0, 255).astype(np.uint8))


@pytest.fixture
def ink_image():
    """Black disc on a transparent background, 80x60."""
    image = Image.new("RGBA", (80, 60), (0, 0, 0, 0))
    y, x = np.mgrid[0:60, 0:80]
    disc = ((x - 40) ** 2 + (y - 30) ** 2) <= 25**2
    pixels = np.asarray(image).copy()
    pixels[disc] = (20, 20, 20, 255)
    return Image.fromarray(pixels)
