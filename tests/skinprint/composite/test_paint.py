import logging

import numpy as np
import pytest

from skinprint.composite.paint import draw_light_gradient

logger = logging.getLogger(__name__)


@pytest.mark.composite
def test_light_gradient_along_x():
    color, alpha = draw_light_gradient((0, 0, 10, 2), (5, 1), 5, 1.0, 0.0)
    assert color.shape == (2, 10, 3)
    assert alpha.shape == (2, 10, 1)
    # Location 0.05 on the dark side, 0.95 on the bright side.
    assert alpha[0, 0, 0] == pytest.approx(0.44 * 0.9, abs=1e-4)
    assert alpha[0, -1, 0] == pytest.approx(0.36 * 0.9, abs=1e-4)
    assert color[0, 0, 0] < 0.2
    assert color[0, -1, 0] > 0.9
    assert np.allclose(color[0], color[1])


@pytest.mark.composite
def test_light_gradient_offset_viewport():
    color, alpha = draw_light_gradient((100, 50, 104, 58), (102, 54), 4, 0.0, 1.0)
    assert alpha.shape == (8, 4, 1)
    assert alpha[0, 0, 0] > alpha[3, 0, 0]
    assert color[-1, 0, 0] > color[0, 0, 0]


@pytest.mark.composite
def test_light_gradient_without_direction():
    color, alpha = draw_light_gradient((0, 0, 6, 6), (3, 3), 3, 0.0, 0.0)
    assert np.allclose(alpha, 0.0)
    assert np.allclose(color, 128 / 255.0)


@pytest.mark.composite
def test_light_gradient_clamps_outside():
    _, alpha = draw_light_gradient((0, 0, 40, 1), (20, 0.5), 5, 1.0, 0.0)
    assert alpha[0, 0, 0] == pytest.approx(0.44)
    assert alpha[0, -1, 0] == pytest.approx(0.36)
