#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Image -> text, using an installed font (or a saved mapping) to pick characters.

    img2ascii -s griffin.jpg -d griffin.txt -f "Anonymous Pro" -p 16

Reads the image from stdin and writes to stdout unless told otherwise.
"""

import argparse
import io
import logging
import sys

from .errors import AsciiArtError
from .fontconfig import read_font
from .fontdata import FontMapping, printable_ascii
from .image import Image
from .log import setup_logging
from .render import write, write_inverted

LOG = logging.getLogger("ascii_art.img2ascii")


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="img2ascii", description="Command-line utility to turn image files into ASCII art.")
    p.add_argument("-s", "--source", default=None, help="image path [default: read from stdin]")
    p.add_argument("-d", "--dest", default=None, help="output path [default: write to stdout]")
    p.add_argument("-f", "--font", default="mono", help="font name or font file to use (default: mono)")
    p.add_argument("-p", "--pixels", type=float, default=12.0, help="font size in pixels (default: 12.0)")
    p.add_argument("-m", "--mapping", default=None, help="use a saved font mapping (JSON) instead of a font")
    p.add_argument("--save-mapping", default=None, help="also write the font mapping used to this path")
    p.add_argument("--prune", type=int, default=None, help="drop chars unreachable with N intensity levels (e.g. 256)")
    p.add_argument("--invert", action="store_true", help="dark text on a light background")
    p.add_argument("--brightness", type=float, default=1.0, help="brightness multiplier (default=1.0)")
    p.add_argument("--contrast", type=float, default=1.0, help="contrast multiplier")
    p.add_argument("--auto", action="store_true", help="auto adjust shadows/highlights (avoid white clipping)")
    p.add_argument("--gamma", type=float, default=0.7, help="gamma used by --auto (default 0.7, <1 lifts shadows)")
    p.add_argument("--exposure", type=float, default=0.5, help="exposure-like parameter for --auto tone-mapping (default 0.5)")
    p.add_argument("--debug", action="store_true", help="verbose logging")
    p.add_argument("--log", default=None, help="also log to this file")
    return p.parse_args(argv)


def load_mapping(args):
    if args.mapping:
        with open(args.mapping, "rb") as f:
            mapping = FontMapping.deserialize(f)
    else:
        family, font_bytes = read_font(args.font)
        LOG.debug('using font "%s" for "%s"', family, args.font)
        mapping, rejected = FontMapping.from_font_bytes(font_bytes, args.pixels, printable_ascii())
        if rejected:
            LOG.warning("font has no glyphs for %r", "".join(rejected))
    if args.prune:
        mapping.prune_for_n_intensities(args.prune)
    return mapping


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.debug, args.log)

    try:
        mapping = load_mapping(args)
    except (AsciiArtError, OSError, ValueError) as e:
        print("Error: cannot load font:", e, file=sys.stderr)
        sys.exit(1)

    if args.save_mapping:
        try:
            with open(args.save_mapping, "wb") as f:
                mapping.serialize(f)
        except (AsciiArtError, OSError) as e:
            print("Error: cannot write mapping:", e, file=sys.stderr)
            sys.exit(1)

    try:
        if args.source:
            with open(args.source, "rb") as f:
                img = Image.auto(f)
        else:
            # stdin can't seek, so slurp it
            img = Image.auto(io.BytesIO(sys.stdin.buffer.read()))
    except (AsciiArtError, OSError) as e:
        print("Error: cannot open input:", e, file=sys.stderr)
        sys.exit(1)

    img = img.adjusted(
        brightness=args.brightness,
        contrast=args.contrast,
        auto=args.auto,
        gamma=args.gamma,
        exposure=args.exposure,
    )
    render = write_inverted if args.invert else write

    try:
        if args.dest:
            with open(args.dest, "wb") as f:
                render(img, mapping, f)
        else:
            render(img, mapping, sys.stdout.buffer)
    except (AsciiArtError, OSError) as e:
        print("Error: cannot write output:", e, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
