"""Compatibility module for optional composite dependencies."""

import functools
from typing import Callable, TYPE_CHECKING, TypeVar

F = TypeVar("F", bound=Callable)

if TYPE_CHECKING:
    import aggdraw  # type: ignore[import-not-found]
    from scipy import interpolate  # type: ignore[import-untyped]
    from skimage import filters  # type: ignore[import-untyped]

try:
    import aggdraw  # noqa: F401  # type: ignore[import-not-found,no-redef]

    HAS_AGGDRAW = True
except ImportError:
    HAS_AGGDRAW = False

try:
    from scipy import interpolate  # noqa: F401  # type: ignore[import-untyped,no-redef]

    HAS_SCIPY = True
except ImportError:
    HAS_SCIPY = False

try:
    from skimage import filters  # noqa: F401  # type: ignore[import-untyped,no-redef]

    HAS_SKIMAGE = True
except ImportError:
    HAS_SKIMAGE = False


def _requires(available: bool, purpose: str, package: str) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not available:
                raise ImportError(
                    "%s requires: %s\n\n"
                    "Reinstall skinprint or install it with:\n"
                    "    pip install %s" % (purpose, package, package)
                )
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


require_aggdraw = _requires(HAS_AGGDRAW, "Overlay and logo drawing", "aggdraw")
require_aggdraw.__doc__ = """
Decorator to check if aggdraw is available before calling the function.

Required for selection outlines, crop overlays and the default logo.
"""

require_scipy = _requires(HAS_SCIPY, "Light gradients", "scipy")
require_scipy.__doc__ = """
Decorator to check if scipy is available before calling the function.

Required for gradient color interpolation.
"""

require_skimage = _requires(HAS_SKIMAGE, "Feather and occlusion blur", "scikit-image")
require_skimage.__doc__ = """
Decorator to check if scikit-image is available before calling the function.

Required for the blurred ink passes.
"""
