import io
import logging
import math

import pytest
from PIL import Image

from skinprint import Editor, Event, LayerKind, Mode, Point, Rect
from skinprint.composite.composite import Surface

logger = logging.getLogger(__name__)


@pytest.fixture
def editor(skin_image):
    editor = Editor(1000, 1000, auto_render=False)
    editor.attach_skin(skin_image)
    return editor


def test_attach_and_manipulate(editor, ink_image):
    placed = []
    editor.subscribe(Event.INK_PLACED, lambda: placed.append(True))
    ink = editor.attach_ink(ink_image)
    assert placed == [True]
    assert editor.selected == LayerKind.INK
    assert ink.position == Point(500, 500)

    assert editor.pointer_down(Point(500, 500)) == Mode.DRAGGING
    editor.pointer_move(Point(550, 470))
    editor.pointer_up()
    assert ink.position == Point(550, 470)

    assert editor.set_opacity(40)
    assert ink.opacity == pytest.approx(0.4)
    assert editor.set_rotation(90)
    assert ink.rotation == pytest.approx(math.pi / 2)
    assert editor.set_scale(50) == 0.5


def test_slider_limits(editor, ink_image):
    assert not editor.set_opacity(50)
    assert not editor.set_rotation(45)
    editor.attach_ink(ink_image)
    editor.set_opacity(5)
    assert editor.ink.opacity == 0.1
    assert not editor.set_rotation(float("nan"))
    assert editor.set_scale(1000) == 8.0
    assert editor.set_scale(50, LayerKind.SKIN) == 0.5


def test_attach_ink_requires_skin(ink_image):
    editor = Editor(auto_render=False)
    assert editor.attach_ink(ink_image) is None
    assert editor.export() is None
    assert editor.export_image() is None


def test_attach_skin_discards_ink(editor, skin_image, ink_image):
    removed = []
    editor.subscribe(Event.INK_REMOVED, lambda: removed.append(True))
    editor.attach_ink(ink_image)
    editor.attach_skin(skin_image)
    assert editor.ink is None
    assert editor.selected is None
    assert removed == [True]


def test_replace_ink(editor, ink_image):
    first = editor.attach_ink(ink_image)
    editor.begin_crop(LayerKind.INK)
    second = editor.attach_ink(ink_image)
    assert first is not second
    assert editor.ink is second
    assert not editor.interaction.crop_active
    assert editor.selected == LayerKind.INK


def test_remove_ink(editor, ink_image):
    assert not editor.remove_ink()
    editor.attach_ink(ink_image)
    assert editor.remove_ink()
    assert editor.ink is None
    assert editor.selected is None


def test_resize_workspace_ends_gesture(editor, ink_image):
    editor.attach_ink(ink_image)
    editor.pointer_down(Point(500, 500))
    assert editor.mode == Mode.DRAGGING
    assert editor.resize_workspace(2000, 2000) == (2.0, 2.0)
    assert editor.mode == Mode.IDLE
    assert editor.ink.position == Point(1000, 1000)
    assert not editor.pointer_move(Point(0, 0))


def test_delete_key(editor, ink_image):
    editor.attach_ink(ink_image)
    assert editor.key("Delete")
    assert editor.ink is None
    assert editor.selected == LayerKind.SKIN


def test_set_crop(editor):
    editor.begin_crop(LayerKind.SKIN)
    applied = editor.set_crop(LayerKind.SKIN, Rect(0, 0, 200, 150))
    assert applied == Rect(0, 0, 200, 150)
    assert not editor.interaction.crop_active
    assert editor.set_crop(LayerKind.INK, Rect(0, 0, 1, 1)) is None


def test_filters_follow_tone(editor, ink_image):
    editor.attach_ink(ink_image)
    tone = editor.tone()
    assert 0 < tone.luminance < 1
    filters = editor.filters()
    assert 0.78 <= filters.brightness <= 1.12
    assert 0.92 <= filters.contrast <= 1.18
    assert 0.58 <= filters.saturation <= 1.06


@pytest.mark.composite
def test_auto_render(skin_image, ink_image):
    surfaces = []
    editor = Editor(400, 300)
    editor.subscribe(Event.RENDERED, surfaces.append)
    editor.attach_skin(skin_image)
    assert isinstance(editor.surface, Surface)
    assert editor.surface.size == (400, 300)
    count = len(surfaces)
    editor.attach_ink(ink_image)
    editor.pointer_down(Point(200, 150))
    editor.pointer_move(Point(210, 150))
    assert len(surfaces) > count
    assert surfaces[-1] is editor.surface
    editor.resize_workspace(200, 150)
    assert editor.surface.size == (200, 150)


@pytest.mark.composite
def test_layer_changes_render_once(skin_image, ink_image):
    surfaces = []
    editor = Editor(400, 300)
    editor.attach_skin(skin_image)
    editor.attach_ink(ink_image)
    editor.begin_crop(LayerKind.INK)
    editor.subscribe(Event.RENDERED, surfaces.append)

    editor.attach_ink(ink_image)
    assert len(surfaces) == 1
    editor.begin_crop(LayerKind.INK)
    del surfaces[:]
    editor.attach_skin(skin_image)
    assert len(surfaces) == 1
    assert editor.ink is None
    assert editor.selected is None
    del surfaces[:]
    editor.attach_ink(ink_image)
    assert editor.remove_ink()
    assert len(surfaces) == 2


@pytest.mark.composite
@pytest.mark.parametrize("format", ["PNG", "JPEG"])
def test_export(editor, ink_image, format):
    editor.attach_ink(ink_image)
    data = editor.export(format)
    image = Image.open(io.BytesIO(data))
    assert image.format == format
    assert image.size == (400, 300)
