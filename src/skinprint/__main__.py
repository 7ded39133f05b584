import argparse
import logging
import os
from typing import Optional

from PIL import Image

from skinprint.api.editor import Editor
from skinprint.api.geometry import Rect
from skinprint.constants import LayerKind
from skinprint.version import __version__

logger = logging.getLogger(__name__)


def _numbers(count: int, name: str):
    def parse(value: str) -> tuple[float, ...]:
        try:
            numbers = tuple(float(x) for x in value.split(","))
        except ValueError:
            numbers = ()
        if len(numbers) != count:
            raise argparse.ArgumentTypeError(
                "%s expects %d comma-separated numbers: %r" % (name, count, value)
            )
        return numbers

    return parse


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="skinprint command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", required=True)

    composite_parser = subparsers.add_parser(
        "composite", help="Composite an ink image onto a skin photo"
    )
    composite_parser.add_argument("skin_file", help="Skin photo")
    composite_parser.add_argument("ink_file", help="Ink image, ideally with alpha")
    composite_parser.add_argument("output_file", help="Output image file")
    composite_parser.add_argument(
        "--opacity", type=float, default=100.0, help="Ink opacity in percent"
    )
    composite_parser.add_argument(
        "--rotation", type=float, default=0.0, help="Ink rotation in degrees"
    )
    composite_parser.add_argument(
        "--scale", type=float, default=None, help="Ink scale in percent"
    )
    composite_parser.add_argument(
        "--offset",
        type=_numbers(2, "--offset"),
        default=None,
        metavar="DX,DY",
        help="Move the ink from the skin centre, in workspace units",
    )
    composite_parser.add_argument(
        "--crop",
        type=_numbers(4, "--crop"),
        default=None,
        metavar="X,Y,W,H",
        help="Crop the skin in native pixels before placing the ink",
    )
    composite_parser.add_argument(
        "--size",
        type=_numbers(2, "--size"),
        default=None,
        metavar="W,H",
        help="Workspace size, defaults to the skin size",
    )

    tone_parser = subparsers.add_parser("tone", help="Show the skin tone statistics")
    tone_parser.add_argument("skin_file", help="Skin photo")
    tone_parser.add_argument(
        "--ink", dest="ink_file", default=None, help="Sample under this ink"
    )

    return parser.parse_args(argv)


def _open(path: str) -> Image.Image:
    with Image.open(path) as image:
        image.load()
        return image.copy()


def _format_for(path: str) -> str:
    extension = os.path.splitext(path)[1].lower()
    return Image.registered_extensions().get(extension, "PNG")


def composite(args: argparse.Namespace) -> Optional[int]:
    skin = _open(args.skin_file)
    ink = _open(args.ink_file)
    size = args.size if args.size else skin.size
    editor = Editor(size[0], size[1], auto_render=False)
    editor.attach_skin(skin)
    if args.crop:
        editor.set_crop(LayerKind.SKIN, Rect(*args.crop))
    editor.attach_ink(ink)
    if args.scale is not None:
        editor.set_scale(args.scale)
    editor.set_rotation(args.rotation)
    editor.set_opacity(args.opacity)
    if args.offset:
        position = editor.ink.position
        editor.set_position(
            LayerKind.INK, position.x + args.offset[0], position.y + args.offset[1]
        )
    logger.debug("%r", editor)
    data = editor.export(_format_for(args.output_file))
    if data is None:
        logger.error("Nothing to export")
        return 1
    with open(args.output_file, "wb") as f:
        f.write(data)
    return None


def tone(args: argparse.Namespace) -> Optional[int]:
    skin = _open(args.skin_file)
    editor = Editor(skin.width, skin.height, auto_render=False)
    editor.attach_skin(skin)
    if args.ink_file:
        editor.attach_ink(_open(args.ink_file))
    else:
        # Probe at the skin centre.
        editor.attach_ink(Image.new("RGBA", (1, 1)))
    tone = editor.tone()
    filters = editor.filters()
    print("luminance:  %.4f" % tone.luminance)
    print("saturation: %.4f" % tone.saturation)
    print("warmth:     %.4f" % tone.warmth)
    print("brightness: %.4f" % filters.brightness)
    print("contrast:   %.4f" % filters.contrast)
    print("saturate:   %.4f" % filters.saturation)
    return None


def main(argv: Optional[list[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    package_logger = logging.getLogger("skinprint")
    if args.verbose:
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(logging.INFO)

    try:
        if args.command == "composite":
            return composite(args)
        elif args.command == "tone":
            return tone(args)
    except (ImportError, OSError) as e:
        logger.error(str(e))
        return 1
    return None


if __name__ == "__main__":
    main()
