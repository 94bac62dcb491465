"""
Represent images with text.

Rendering an image as text takes three steps:

  1. Analyze a font at a given pixel size against an alphabet to get a
     FontMapping from pixel intensity to character::

        chars = ascii_art.printable_ascii()
        with open("LiberationMono-Regular.ttf", "rb") as f:
            font, rejected = ascii_art.build_mapping(f.read(), 12.0, chars)

  2. Load an image::

        with open("griffin.jpg", "rb") as f:
            image = ascii_art.Image.auto(f)

  3. Combine the two::

        ascii_art.write(image, font, sys.stdout.buffer)
"""

from .errors import AsciiArtError, ArtIOError, FontLookupError, InvalidFontData, NoUseableGlyphs
from .fontdata import PRINTABLE_ASCII, FontMapping, MapEntry, build_mapping, printable_ascii
from .glyphs import RawGlyph, analyze_glyphs
from .image import Image
from .library import (
    build_sized_mappings,
    list_library,
    load_library,
    parse_library_line,
    save_library,
)
from .render import grid_size, render_lines, render_text, write, write_inverted

__all__ = [
    "AsciiArtError",
    "ArtIOError",
    "FontLookupError",
    "InvalidFontData",
    "NoUseableGlyphs",
    "PRINTABLE_ASCII",
    "FontMapping",
    "MapEntry",
    "build_mapping",
    "printable_ascii",
    "RawGlyph",
    "analyze_glyphs",
    "Image",
    "build_sized_mappings",
    "list_library",
    "load_library",
    "parse_library_line",
    "save_library",
    "grid_size",
    "render_lines",
    "render_text",
    "write",
    "write_inverted",
]
