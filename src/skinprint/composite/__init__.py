"""
Composite module for tone-adaptive rendering.

This subpackage renders a workspace into raster images: the skin photo is
drawn into its footprint and the ink is blended over it in five passes whose
filter parameters follow the tone of the skin underneath.

Rendering depends on three libraries installed with the package:

- ``aggdraw``: For selection and crop overlays and the default logo
- ``scipy``: For light gradient interpolation
- ``scikit-image``: For the blurred feather and occlusion passes

Key modules:

- :py:mod:`skinprint.composite.composite`: Compositor and drawing surface
- :py:mod:`skinprint.composite.blend`: Blend mode implementations
- :py:mod:`skinprint.composite.filters`: Brightness, contrast, saturation, blur
- :py:mod:`skinprint.composite.tone`: Skin tone sampler
- :py:mod:`skinprint.composite.integration`: Lighting and occlusion estimate
- :py:mod:`skinprint.composite.paint`: Gradient fills
- :py:mod:`skinprint.composite.vector`: Overlays and logo

Example usage::

    from skinprint.composite import Compositor, Surface

    compositor = Compositor(workspace)
    surface = Surface(1024, 768)
    compositor.render(surface)
    surface.topil().save('preview.png')
"""

from skinprint.composite.composite import Compositor, RenderOptions, Surface

__all__ = [
    "Compositor",
    "RenderOptions",
    "Surface",
]
