"""
Glyph coverage analysis.

Loads a font from memory and measures, for each requested character, how
much "ink" its outline lays down at a given pixel size (the sum of the
partial coverage of every pixel the outline touches) and how far it
advances the pen horizontally. These raw numbers are normalized later by
FontMapping.
"""

import io
import logging
import struct
from dataclasses import dataclass

import numpy as np
from fontTools.pens.boundsPen import BoundsPen
from fontTools.ttLib import TTFont, TTLibError
from PIL import Image, ImageDraw, ImageFont

from .errors import InvalidFontData

LOG = logging.getLogger(__name__)

SPACE = " "
REPLACEMENT = 0xFFFD
USE_TYPO_METRICS = 1 << 7


@dataclass
class RawGlyph:
    char: str
    cov: float  # summed pixel coverage, unnormalized
    adv: float  # horizontal advance in pixels


@dataclass
class FontMetrics:
    units_per_em: int
    ascent: float
    descent: float
    line_gap: float
    size: float

    @property
    def unit_height(self):
        return self.ascent - self.descent

    @property
    def scale(self):
        """Font units -> pixels, treating `size` as the ascent-to-descent height."""
        if self.unit_height <= 0:
            return self.size / self.units_per_em
        return self.size / self.unit_height

    @property
    def em_px(self):
        return self.units_per_em * self.scale

    @property
    def height(self):
        return (self.unit_height + self.line_gap) * self.scale


def _open_font(font_bytes):
    font_number = 0 if font_bytes[:4] == b"ttcf" else -1
    try:
        tt = TTFont(io.BytesIO(font_bytes), fontNumber=font_number, lazy=True)
        # touch every table we rely on so that broken files fail here
        for tag in ("head", "hhea", "hmtx", "cmap"):
            tt[tag]
        tt.getGlyphOrder()
    except (TTLibError, KeyError, IndexError, struct.error, AssertionError, ValueError, EOFError) as e:
        raise InvalidFontData(str(e)) from e
    return tt


def _font_metrics(tt, size):
    hhea = tt["hhea"]
    ascent, descent, line_gap = hhea.ascent, hhea.descent, hhea.lineGap
    os2 = tt["OS/2"] if "OS/2" in tt else None
    if os2 is not None and (os2.fsSelection & USE_TYPO_METRICS or ascent - descent == 0):
        ascent, descent, line_gap = os2.sTypoAscender, os2.sTypoDescender, os2.sTypoLineGap
    return FontMetrics(
        units_per_em=tt["head"].unitsPerEm,
        ascent=float(ascent),
        descent=float(descent),
        line_gap=float(line_gap),
        size=float(size),
    )


def _has_outline(glyph_set, name):
    pen = BoundsPen(glyph_set)
    glyph_set[name].draw(pen)
    return pen.bounds is not None


def _coverage(pil_font, ch):
    left, top, right, bottom = pil_font.getbbox(ch)
    if right <= left or bottom <= top:
        return 0.0
    canvas = Image.new("L", (right - left, bottom - top), 0)
    ImageDraw.Draw(canvas).text((-left, -top), ch, fill=255, font=pil_font)
    return float(np.asarray(canvas, dtype=np.float64).sum() / 255.0)


def normalize_chars(chars):
    """Turn an alphabet (str, or iterable of chars/ints) into unique chars, order kept."""
    out = []
    for c in chars:
        if isinstance(c, int):
            c = chr(c)
        if len(c) != 1:
            raise ValueError(f"not a single code point: {c!r}")
        out.append(c)
    return list(dict.fromkeys(out))


def analyze_glyphs(font_bytes, size, chars):
    """
    Measure every character of `chars` in the font held by `font_bytes`.

    Returns (metrics, glyphs, rejected): the font's scaled metrics, a list of
    RawGlyph in input order, and the characters the font can't render.
    Raises InvalidFontData if the bytes aren't a usable font.
    """
    font_bytes = bytes(font_bytes)
    tt = _open_font(font_bytes)
    metrics = _font_metrics(tt, size)

    try:
        pil_font = ImageFont.truetype(
            io.BytesIO(font_bytes),
            metrics.em_px,
            layout_engine=ImageFont.Layout.BASIC,
        )
    except OSError as e:
        raise InvalidFontData(str(e)) from e

    glyph_order = tt.getGlyphOrder()
    notdef = glyph_order[0]
    cmap = tt.getBestCmap() or {}
    replacement = cmap.get(REPLACEMENT, notdef)
    hmtx = tt["hmtx"]
    glyph_set = tt.getGlyphSet()

    glyphs = []
    rejected = []
    for ch in normalize_chars(chars):
        name = cmap.get(ord(ch), notdef)
        if name == replacement:
            rejected.append(ch)
            continue
        adv = hmtx[name][0] * metrics.scale
        if _has_outline(glyph_set, name):
            glyphs.append(RawGlyph(ch, _coverage(pil_font, ch), adv))
        elif ch == SPACE:
            # nothing to draw, but a blank cell is still useful
            glyphs.append(RawGlyph(ch, 0.0, adv))
        else:
            rejected.append(ch)

    LOG.debug(
        "analyzed %d glyphs at %.2fpx (%d rejected)", len(glyphs), metrics.size, len(rejected)
    )
    return metrics, glyphs, rejected
