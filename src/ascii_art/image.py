"""
Images as grids of normalized (0.0 <= x <= 1.0) luminance values.

Decoding goes through Pillow; resizing through OpenCV.
"""

import cv2
import numpy as np
from PIL import Image as PILImage

from .errors import ArtIOError

_DECODE_ERRORS = (OSError, ValueError, SyntaxError, PILImage.DecompressionBombError)


def _decode(reader, formats=None):
    try:
        with PILImage.open(reader, formats=formats) as img:
            img.load()
            return Image.from_pil(img)
    except _DECODE_ERRORS as e:
        raise ArtIOError(str(e)) from e


class Image:
    """Luminance image; `pixels` is a 2-D float32 array indexed [row, col]."""

    def __init__(self, pixels):
        pixels = np.asarray(pixels, dtype=np.float32)
        if pixels.ndim != 2:
            raise ValueError(f"expected a 2-D luminance array, got shape {pixels.shape}")
        self.pixels = pixels

    @classmethod
    def auto(cls, reader):
        """Decode image data from a seekable binary reader, guessing its format."""
        return _decode(reader)

    @classmethod
    def with_format(cls, reader, fmt):
        """Decode image data from `reader`, which must be in format `fmt` ("PNG", "JPEG", ...)."""
        fmt = fmt.upper()
        PILImage.init()
        if fmt not in PILImage.OPEN:
            raise ArtIOError(f"unsupported image format: {fmt}")
        return _decode(reader, formats=[fmt])

    @classmethod
    def from_pil(cls, img):
        """
        Luminance of a Pillow image. 16/32-bit integer modes are scaled by
        the 16-bit range, float modes are taken as already normalized.
        """
        if img.mode.startswith("I;16") or img.mode == "I":
            arr = np.asarray(img).astype(np.float32) / 65535.0
            return cls(np.clip(arr, 0.0, 1.0))
        if img.mode == "F":
            return cls(np.clip(np.asarray(img, dtype=np.float32), 0.0, 1.0))
        gray = img.convert("L")
        return cls(np.asarray(gray, dtype=np.float32) / 255.0)

    @classmethod
    def from_array(cls, arr):
        arr = np.asarray(arr)
        if arr.dtype == np.uint8:
            return cls(arr.astype(np.float32) / 255.0)
        return cls(np.clip(arr.astype(np.float32), 0.0, 1.0))

    def geometry(self):
        """(width, height) in pixels."""
        h, w = self.pixels.shape
        return (float(w), float(h))

    def resize(self, cols, rows):
        """Nearest-neighbour copy with `cols` x `rows` pixels, sampled at block centres."""
        if cols <= 0 or rows <= 0:
            return Image(np.zeros((max(rows, 0), max(cols, 0)), dtype=np.float32))
        try:
            small = cv2.resize(self.pixels, (cols, rows), interpolation=cv2.INTER_NEAREST_EXACT)
        except cv2.error as e:
            raise ArtIOError(str(e)) from e
        return Image(small.reshape(rows, cols))

    def adjusted(self, brightness=1.0, contrast=1.0, auto=False, gamma=0.7, exposure=0.5):
        """
        Tone-adjusted copy.
        - auto: lift shadows (gamma < 1) and compress highlights
          (v -> v / (v + exposure); 0.5 or so is a safe exposure)
        - brightness: multiplier
        - contrast: stretch around the mean
        """
        arr = self.pixels.astype(np.float32)
        if auto:
            arr = np.power(arr, gamma)
            arr = arr / (arr + exposure)
            arr = np.clip(arr, 0.0, 1.0)
        if brightness != 1.0:
            arr = np.clip(arr * brightness, 0.0, 1.0)
        if contrast != 1.0:
            mean = arr.mean()
            arr = (arr - mean) * contrast + mean
            arr = np.clip(arr, 0.0, 1.0)
        return Image(arr)

    def __eq__(self, other):
        if not isinstance(other, Image):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)
