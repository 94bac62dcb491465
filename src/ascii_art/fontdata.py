"""
Intensity -> character mapping for a font at a given size.

A FontMapping holds the characters of an alphabet sorted by how much of
their cell they ink (normalized so the darkest glyph is 1.0), plus the
cell geometry needed to lay text over an image.
"""

import json
import logging
import math
from bisect import bisect_left
from dataclasses import dataclass, field
from operator import attrgetter
from typing import List, NamedTuple

import numpy as np

from .errors import ArtIOError, NoUseableGlyphs
from .glyphs import SPACE, analyze_glyphs

LOG = logging.getLogger(__name__)

PRINTABLE_ASCII = range(0x20, 0x7F)


def printable_ascii():
    """
    The printable ASCII characters, space (0x20) through tilde (0x7E).

    Almost any font aimed at Latin alphabets covers all of these, which
    makes them a solid default alphabet.
    """
    return [chr(n) for n in PRINTABLE_ASCII]


class MapEntry(NamedTuple):
    char: str
    val: float


_val = attrgetter("val")


@dataclass
class FontMapping:
    values: List[MapEntry]
    width: float
    height: float
    fudge_factor: float = field(default=0.0)

    def __post_init__(self):
        if not self.fudge_factor and self.values:
            self.fudge_factor = 1.0 / len(self.values)

    @classmethod
    def from_font_bytes(cls, font_bytes, size, chars):
        """
        Analyze the font in `font_bytes` (a .ttf/.otf file's contents) at
        `size` pixels and build a mapping over `chars`.

        Returns (mapping, rejected) where `rejected` lists the characters the
        font has no glyph for; it's empty when everything was usable.
        Raises InvalidFontData or NoUseableGlyphs.
        """
        if not size > 0:
            raise ValueError(f"font size must be positive, got {size!r}")
        metrics, glyphs, rejected = analyze_glyphs(font_bytes, size, chars)

        if not glyphs or (len(glyphs) == 1 and glyphs[0].char == SPACE):
            raise NoUseableGlyphs()

        glyphs.sort(key=attrgetter("cov"))
        max_cov = glyphs[-1].cov
        width = max(g.adv for g in glyphs)
        if width == 0.0 or max_cov <= 0.0:
            raise NoUseableGlyphs()

        values = [MapEntry(g.char, g.cov / max_cov) for g in glyphs]
        mapping = cls(
            values=values,
            width=width,
            height=metrics.height,
            fudge_factor=1.0 / len(values),
        )
        if rejected:
            LOG.debug("no coverage for %d chars: %r", len(rejected), "".join(rejected))
        return mapping, rejected

    def prune_for_n_intensities(self, n):
        """
        Keep only the characters reachable by `n` equally spaced intensities
        k/n, 0 <= k < n.

        Fonts have clusters of glyphs with nearly identical coverage
        (`O`/`0`, `1`/`l`/`I`/`|`); with a fixed number of input levels, such
        as 256 for 8-bit images, some of them can never be picked.
        The fudge factor is left alone.
        """
        if n < 1:
            raise ValueError(f"number of intensities must be positive, got {n!r}")
        used = {self.pixel(k / n) for k in range(n)}
        before = len(self.values)
        self.values = [e for e in self.values if e.char in used]
        LOG.debug("pruned mapping for %d intensities: %d -> %d chars", n, before, len(self.values))

    def _index(self, key):
        i = bisect_left(self.values, key, key=_val)
        return min(i, len(self.values) - 1)

    def pixel(self, val):
        """
        Character for intensity `val`, for light text on a dark background.
        Intensities outside [0, 1] clamp to the lightest/darkest character.
        """
        return self.values[self._index(val - self.fudge_factor)].char

    def pixel_inv(self, val):
        """Character for intensity `val`, for dark text on a light background."""
        return self.values[self._index(1.0 - (val + self.fudge_factor))].char

    def pixels(self, arr, inverted=False):
        """Vectorized pixel()/pixel_inv() over an array of intensities."""
        arr = np.asarray(arr, dtype=np.float64)
        if inverted:
            keys = 1.0 - (arr + self.fudge_factor)
        else:
            keys = arr - self.fudge_factor
        vals = np.fromiter((e.val for e in self.values), dtype=np.float64, count=len(self.values))
        chars = np.array([e.char for e in self.values], dtype=np.dtype("U1"))
        idx = np.searchsorted(vals, keys, side="left")
        idx = np.minimum(idx, len(vals) - 1)
        return chars[idx]

    def geometry(self):
        """(width, height) in pixels of one character cell."""
        return (self.width, self.height)

    @property
    def chars(self):
        return [e.char for e in self.values]

    # ---- serialization ----
    def to_dict(self):
        return {
            "values": [[e.char, e.val] for e in self.values],
            "width": self.width,
            "height": self.height,
            "fudge_factor": self.fudge_factor,
        }

    @classmethod
    def from_dict(cls, data):
        """Rebuild from to_dict() output, checking it rather than re-sorting it."""
        try:
            raw_values = data["values"]
            width = _finite(data["width"], "width")
            height = _finite(data["height"], "height")
            fudge_factor = _finite(data["fudge_factor"], "fudge_factor")
            values = [_entry(v) for v in raw_values]
        except (KeyError, TypeError) as e:
            raise ArtIOError(f"malformed font data: {e!r}") from e

        if not values:
            raise ArtIOError("font data has no characters")
        if width <= 0.0 or height <= 0.0:
            raise ArtIOError(f"bad cell geometry {width} x {height}")
        if not 0.0 < fudge_factor <= 1.0:
            raise ArtIOError(f"fudge factor out of range: {fudge_factor}")
        if any(a.val > b.val for a, b in zip(values, values[1:])):
            raise ArtIOError("font data values are not sorted")
        return cls(values=values, width=width, height=height, fudge_factor=fudge_factor)

    def to_json(self):
        try:
            return json.dumps(self.to_dict(), ensure_ascii=False, allow_nan=False)
        except ValueError as e:
            raise ArtIOError(str(e)) from e

    @classmethod
    def from_json(cls, text):
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ArtIOError(str(e)) from e
        if not isinstance(data, dict):
            raise ArtIOError("font data is not a JSON object")
        return cls.from_dict(data)

    def serialize(self, writer):
        """
        Write the mapping as a line of JSON to the binary `writer`.

        Meant for shipping font data to systems that don't have the font
        installed.
        """
        try:
            writer.write(self.to_json().encode("utf-8"))
        except OSError as e:
            raise ArtIOError(str(e)) from e

    @classmethod
    def deserialize(cls, reader):
        """Read a mapping written by serialize() from `reader`."""
        try:
            raw = reader.read()
        except OSError as e:
            raise ArtIOError(str(e)) from e
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ArtIOError(str(e)) from e
        return cls.from_json(raw)


def _finite(x, what):
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        raise ArtIOError(f"{what} is not a number: {x!r}")
    try:
        x = float(x)
    except OverflowError as e:
        raise ArtIOError(f"{what} is out of range") from e
    if not math.isfinite(x):
        raise ArtIOError(f"{what} is not finite")
    return x


def _entry(v):
    if not isinstance(v, (list, tuple)) or len(v) != 2:
        raise ArtIOError(f"map entry is not a (char, value) pair: {v!r}")
    char, val = v
    if not isinstance(char, str) or len(char) != 1:
        raise ArtIOError(f"map entry has a bad character: {char!r}")
    return MapEntry(char, _finite(val, "map entry value"))


def build_mapping(font_bytes, size, chars=None):
    """Shortcut for FontMapping.from_font_bytes(); `chars` defaults to printable ASCII."""
    if chars is None:
        chars = printable_ascii()
    return FontMapping.from_font_bytes(font_bytes, size, chars)
