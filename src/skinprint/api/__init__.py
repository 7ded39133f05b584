"""
High-level API for placing ink on skin.

This subpackage holds the layer model and the direct-manipulation state
machine. Rendering lives in :py:mod:`skinprint.composite`.

Key modules:

- :py:mod:`skinprint.api.editor`: Editor context object tying everything together
- :py:mod:`skinprint.api.workspace`: Workspace holding the skin and ink layers
- :py:mod:`skinprint.api.layers`: Layer with transform and crop
- :py:mod:`skinprint.api.geometry`: Point, Rect, Transform and Footprint records
- :py:mod:`skinprint.api.interaction`: Pointer gestures and crop sessions
- :py:mod:`skinprint.api.observers`: Event subscription
- :py:mod:`skinprint.api.pil_io`: PIL/Pillow image conversion

Example usage::

    from skinprint.api.workspace import Workspace

    workspace = Workspace(1024, 768)
    skin = workspace.attach_skin(Image.open('arm.jpg'))
    ink = workspace.attach_ink(Image.open('rose.png'))
    print(ink.footprint())
"""
