import logging

import numpy as np
import pytest

from skinprint.composite import filters
from skinprint.composite.filters import Filters

logger = logging.getLogger(__name__)


@pytest.fixture
def color():
    values = np.array([[[0.8, 0.4, 0.2], [0.1, 0.5, 0.9]]], dtype=np.float32)
    return values


def test_filters_replace():
    spec = Filters(brightness=1.1)
    changed = spec.replace(blur=2)
    assert changed == Filters(brightness=1.1, blur=2.0)
    assert spec.blur == 0.0


def test_identity(color):
    alpha = np.ones(color.shape[:2] + (1,), dtype=np.float32)
    result, result_alpha = filters.apply(color, alpha, Filters())
    assert np.allclose(result, color)
    assert result_alpha is alpha


def test_brightness_clips(color):
    alpha = np.ones(color.shape[:2] + (1,), dtype=np.float32)
    result, _ = filters.apply(color, alpha, Filters(brightness=2.0))
    assert np.allclose(result[0, 0], (1.0, 0.8, 0.4))


def test_contrast():
    assert np.allclose(filters.contrast(np.array([0.5]), 3.0), 0.5)
    assert np.allclose(filters.contrast(np.array([0.75]), 2.0), 1.0)


def test_saturate(color):
    assert np.allclose(filters.saturate(color, 1.0), color, atol=1e-6)
    gray = filters.saturate(color, 0.0)
    assert np.allclose(gray[..., 0], gray[..., 1], atol=1e-6)
    assert np.allclose(gray[..., 1], gray[..., 2], atol=1e-6)


@pytest.mark.composite
def test_blur_is_premultiplied():
    color = np.zeros((21, 21, 3), dtype=np.float32)
    color[:, :, 0] = 1.0
    alpha = np.zeros((21, 21, 1), dtype=np.float32)
    alpha[5:16, 5:16] = 1.0
    blurred, blurred_alpha = filters.blur(color, alpha, 1.5)
    assert blurred.shape == color.shape
    assert 0 < blurred_alpha[10, 4, 0] < 1
    assert blurred_alpha[10, 10, 0] == pytest.approx(1.0, abs=1e-3)
    covered = blurred_alpha[..., 0] > 1e-3
    assert np.allclose(blurred[covered][:, 0], 1.0, atol=1e-3)
    assert np.allclose(blurred[covered][:, 1:], 0.0, atol=1e-3)


@pytest.mark.composite
def test_apply_with_blur():
    color = np.full((9, 9, 3), 0.5, dtype=np.float32)
    alpha = np.ones((9, 9, 1), dtype=np.float32)
    result, result_alpha = filters.apply(color, alpha, Filters(blur=1.0))
    assert np.allclose(result, 0.5, atol=1e-4)
    assert np.allclose(result_alpha, 1.0, atol=1e-4)
