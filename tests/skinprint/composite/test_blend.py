import logging

import numpy as np
import pytest

from skinprint.composite import blend as blend_module
from skinprint.composite.blend import BLEND_FUNC, blend
from skinprint.constants import BlendMode

logger = logging.getLogger(__name__)


def _pixel(value, channels=3):
    return np.full((1, 1, channels), value, dtype=np.float32)


@pytest.mark.parametrize(
    "func, backdrop, source, expected",
    [
        (blend_module.normal, 0.2, 0.7, 0.7),
        (blend_module.multiply, 0.5, 0.5, 0.25),
        (blend_module.soft_light, 0.3, 0.5, 0.3),
        (blend_module.soft_light, 0.64, 1.0, 0.8),
        (blend_module.soft_light, 0.5, 0.0, 0.25),
    ],
)
def test_blend_functions(func, backdrop, source, expected):
    result = func(_pixel(backdrop), _pixel(source))
    assert result[0, 0, 0] == pytest.approx(expected, abs=1e-6)


def test_blend_table():
    assert set(BLEND_FUNC) == set(BlendMode)


def test_blend_transparent_source_keeps_backdrop():
    color, alpha = blend(_pixel(0.4), _pixel(1.0, 1), _pixel(0.9), _pixel(0.0, 1))
    assert color[0, 0, 0] == pytest.approx(0.4)
    assert alpha[0, 0, 0] == pytest.approx(1.0)


def test_blend_onto_transparent_backdrop():
    color, alpha = blend(
        _pixel(0.0), _pixel(0.0, 1), _pixel(0.6), _pixel(0.5, 1), BlendMode.MULTIPLY
    )
    assert color[0, 0, 0] == pytest.approx(0.6)
    assert alpha[0, 0, 0] == pytest.approx(0.5)


@pytest.mark.parametrize(
    "mode, expected",
    [
        (BlendMode.NORMAL, 0.35),
        (BlendMode.MULTIPLY, 0.3),
        (BlendMode.SOFT_LIGHT, 0.425),
    ],
)
def test_blend_partial_source(mode, expected):
    color, alpha = blend(_pixel(0.5), _pixel(1.0, 1), _pixel(0.2), _pixel(0.5, 1), mode)
    assert color[0, 0, 0] == pytest.approx(expected)
    assert alpha[0, 0, 0] == pytest.approx(1.0)
