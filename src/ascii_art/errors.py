"""Exceptions raised by the ascii_art package."""


class AsciiArtError(Exception):
    """Base class for every error this package raises."""


class InvalidFontData(AsciiArtError):
    """The font bytes can't be interpreted (most likely not a font file)."""

    def __init__(self, detail=None):
        super().__init__(detail)
        self.detail = detail

    def __str__(self):
        return "Supplied buffer does not contain valid or recognizable font data."


class NoUseableGlyphs(AsciiArtError):
    """The font covers none of the requested characters (or only the space)."""

    def __str__(self):
        return "FontData object contains no useable glyphs."


class ArtIOError(AsciiArtError, OSError):
    """Reading, writing, decoding or (de)serializing failed."""

    def __init__(self, message):
        super().__init__(message)
        self.message = str(message)

    def __str__(self):
        return f"I/O error: {self.message}"


class FontLookupError(AsciiArtError):
    """No font file could be found for a requested family name."""
