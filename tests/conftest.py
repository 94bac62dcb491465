import io

import numpy as np
import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from PIL import Image as PILImage

from ascii_art import FontMapping, MapEntry

# Font metrics (monospace, 1000 UPM).
UPM = 1000
ASCENT = 800
DESCENT = -200
LINE_GAP = 100
ADVANCE_WIDTH = 600

# glyphs drawn as filled rectangles (x, y, w, h), ink area strictly increasing
INKED = {
    ".": ("period", [(250, 0, 100, 100)]),
    "-": ("hyphen", [(100, 300, 400, 100)]),
    "=": ("equal", [(100, 200, 400, 100), (100, 450, 400, 100)]),
    "#": ("numbersign", [(100, 0, 400, 500)]),
    "@": ("at", [(50, -100, 500, 800)]),
}
FONT_CHARS = " .-=#@"  # darkness order
NBSP = "\u00a0"


def box_rect(pen, x, y, w, h):
    pen.moveTo((x, y))
    pen.lineTo((x, y + h))
    pen.lineTo((x + w, y + h))
    pen.lineTo((x + w, y))
    pen.closePath()


def build_test_font():
    """A tiny monospace TrueType font; no U+FFFD, so missing chars hit .notdef."""
    glyphs = {}
    pen = TTGlyphPen(None)
    box_rect(pen, 50, 0, 500, 700)
    box_rect(pen, 100, 50, 400, 600)
    glyphs[".notdef"] = pen.glyph()
    glyphs["space"] = TTGlyphPen(None).glyph()
    glyphs["nbspace"] = TTGlyphPen(None).glyph()

    cmap = {0x20: "space", 0xA0: "nbspace"}
    for ch, (name, rects) in INKED.items():
        pen = TTGlyphPen(None)
        for r in rects:
            box_rect(pen, *r)
        glyphs[name] = pen.glyph()
        cmap[ord(ch)] = name

    glyph_order = [".notdef", "space", "nbspace"] + [name for name, _ in INKED.values()]

    fb = FontBuilder(UPM, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf(glyphs)
    glyf = fb.font["glyf"]
    fb.setupHorizontalMetrics(
        {name: (ADVANCE_WIDTH, getattr(glyf[name], "xMin", 0)) for name in glyph_order}
    )
    fb.setupHorizontalHeader(ascent=ASCENT, descent=DESCENT, lineGap=LINE_GAP)
    fb.setupNameTable({"familyName": "Test Mono", "styleName": "Regular"})
    fb.setupOS2(
        sTypoAscender=ASCENT,
        sTypoDescender=DESCENT,
        sTypoLineGap=LINE_GAP,
        usWinAscent=ASCENT,
        usWinDescent=-DESCENT,
    )
    fb.setupPost(isFixedPitch=1)
    fb.setupMaxp()
    fb.setupHead(unitsPerEm=UPM)

    buf = io.BytesIO()
    fb.save(buf)
    return buf.getvalue()


@pytest.fixture(scope="session")
def font_bytes():
    return build_test_font()


@pytest.fixture(scope="session")
def font_path(tmp_path_factory, font_bytes):
    path = tmp_path_factory.mktemp("fonts") / "TestMono.ttf"
    path.write_bytes(font_bytes)
    return path


@pytest.fixture
def mapping(font_bytes):
    fd, rejected = FontMapping.from_font_bytes(font_bytes, 20.0, FONT_CHARS)
    assert rejected == []
    return fd


@pytest.fixture
def toy_mapping():
    """Hand-made mapping with values that are exact in binary."""
    return FontMapping(
        values=[MapEntry(" ", 0.0), MapEntry(".", 0.25), MapEntry("+", 0.5), MapEntry("#", 1.0)],
        width=2.0,
        height=4.0,
        fudge_factor=0.25,
    )


def gradient_bytes(width, height, fmt="PNG"):
    """Horizontal gray gradient, encoded."""
    row = np.linspace(0, 255, width).astype(np.uint8)
    arr = np.tile(row, (height, 1))
    buf = io.BytesIO()
    PILImage.fromarray(arr).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image_bytes():
    return gradient_bytes
