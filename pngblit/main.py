"""Точка входа: декодирует PNG, рисует кадр и сохраняет его."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from pngblit.app import PngblitApp
from pngblit.config import RenderSettings
from pngblit.errors import PngError
from pngblit.services.dither_service import ColorMetric
from pngblit.services.image_service import ImageService
from pngblit.services.texture_service import TextureService

logger = logging.getLogger("pngblit")


def non_negative(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pngblit",
        description="Decode an RGBA PNG and composite it onto a generated frame.",
    )
    parser.add_argument("texture", help="RGBA 8-bit non-interlaced PNG file")
    parser.add_argument("-o", "--output", help="save the rendered frame to this file")
    parser.add_argument("--size", nargs=2, type=non_negative, metavar=("W", "H"), default=None,
                        help="frame size (default: texture size)")
    parser.add_argument("--pos", nargs=2, type=non_negative, metavar=("X", "Y"), default=(0, 0),
                        help="texture position in the frame")
    parser.add_argument("--frames", type=non_negative, default=1, help="number of frames to render")
    parser.add_argument("--rect", nargs=4, type=non_negative, metavar=("X", "Y", "W", "H"), action="append",
                        default=[], help="fill a rectangle (repeatable)")
    parser.add_argument("--dither", action="store_true", help="quantize the whole frame to 8 colors")
    parser.add_argument("--metric", choices=[m.value for m in ColorMetric], default=ColorMetric.SATURATING.value,
                        help="palette distance metric for --dither")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        texture = TextureService().load_texture(args.texture)
    except PngError as err:
        logger.error("error: %s", err)
        return 1

    width, height = args.size or (texture.width + args.pos[0], texture.height + args.pos[1])
    app = PngblitApp(RenderSettings(width=width, height=height, dither_metric=ColorMetric(args.metric)))
    app.textures.add("texture", texture)
    app.context.textures.append(texture.placed_at(*args.pos))
    for x, y, w, h in args.rect:
        app.add_rect(x, y, w, h)
    if args.dither:
        app.context.dither_region = (0, 0, width, height)

    frame = app.run(max(1, args.frames))
    logger.info("Rendered %d frame(s) of %dx%d", max(1, args.frames), frame.width, frame.height)

    if args.output:
        try:
            path = ImageService().save_frame(frame, args.output)
        except OSError as err:
            logger.error("error: failed to save %s: %s", args.output, err)
            return 1
        logger.info("Saved %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
