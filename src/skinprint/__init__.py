"""
skinprint: tone-adaptive compositing of a tattoo design onto a skin photo.

Basic usage::

    from PIL import Image
    from skinprint import Editor

    editor = Editor(1024, 768)
    editor.attach_skin(Image.open('arm.jpg'))
    editor.attach_ink(Image.open('rose.png'))
    editor.set_scale(60)
    editor.set_rotation(15)
    with open('preview.png', 'wb') as f:
        f.write(editor.export())

Architecture:

- :py:mod:`skinprint.api`: Layers, workspace, interaction and the editor
- :py:mod:`skinprint.composite`: Tone sampling and the rendering passes
"""

from skinprint.api.editor import Editor
from skinprint.api.geometry import Point, Rect
from skinprint.constants import Event, LayerKind, Mode
from skinprint.version import __version__

__all__ = ["Editor", "Event", "LayerKind", "Mode", "Point", "Rect", "__version__"]
