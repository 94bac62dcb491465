"""
Laying an Image out as text.

The output grid is sized from the image and the font's cell geometry, so
the text covers roughly the same area as the original image would.
How close that gets depends on the spacing of whatever displays the text.
"""

import logging

from .errors import ArtIOError

LOG = logging.getLogger(__name__)


def grid_size(image, mapping):
    """(cols, rows) of text needed to cover `image` with `mapping`'s cells."""
    img_w, img_h = image.geometry()
    font_w, font_h = mapping.geometry()
    return int(img_w / font_w), int(img_h / font_h)


def render_lines(image, mapping, inverted=False):
    """Yield the rendered text one row at a time, newline included."""
    cols, rows = grid_size(image, mapping)
    LOG.debug("rendering %dx%d image as %dx%d chars", *map(int, image.geometry()), cols, rows)
    if cols == 0 or rows == 0:
        return
    small = image.resize(cols, rows)
    mapped = mapping.pixels(small.pixels, inverted=inverted)
    for row in mapped:
        yield "".join(row.tolist()) + "\n"


def render_text(image, mapping, inverted=False):
    return "".join(render_lines(image, mapping, inverted=inverted))


def _write(image, mapping, writer, inverted):
    try:
        for line in render_lines(image, mapping, inverted=inverted):
            writer.write(line.encode("utf-8"))
        flush = getattr(writer, "flush", None)
        if flush is not None:
            flush()
    except (OSError, ValueError) as e:
        if isinstance(e, ArtIOError):
            raise
        raise ArtIOError(str(e)) from e


def write(image, mapping, writer):
    """
    Write `image` as text to the binary `writer`, for light text on a dark
    background (intensity goes up with luminosity).
    """
    _write(image, mapping, writer, inverted=False)


def write_inverted(image, mapping, writer):
    """
    Write `image` as text to the binary `writer`, for dark text on a light
    background (intensity goes down with luminosity).
    """
    _write(image, mapping, writer, inverted=True)
