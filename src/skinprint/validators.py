"""
Clamping converters for attrs.

Geometry never rejects out-of-range input; it is clamped into range instead.
These are meant for ``field(converter=...)``.
"""
import math

from attrs import define

__all__ = ['clamp', 'clamp_', 'at_least']


def clamp(value, minimum, maximum):
    """Clamp ``value`` into ``[minimum, maximum]``; NaN becomes ``minimum``."""
    value = float(value)
    if math.isnan(value):
        return float(minimum)
    return max(minimum, min(maximum, value))


@define(repr=False, hash=True)
class _ClampConverter:
    minimum: float
    maximum: float

    def __call__(self, value):
        return clamp(value, self.minimum, self.maximum)

    def __repr__(self):
        return "<clamp_ converter to [{minimum!r}, {maximum!r}]>".format(
            minimum=self.minimum, maximum=self.maximum
        )


def clamp_(minimum, maximum):
    """
    A converter that clamps the value into the [minimum, maximum] range.
    Infinite values land on the nearest bound.
    """
    return _ClampConverter(minimum, maximum)


def at_least(minimum):
    """A converter that raises the value to ``minimum`` when below it."""
    return _ClampConverter(minimum, math.inf)
