"""
Font libraries: prebuilt mappings for several families at several sizes,
for serving text renders from a machine that has none of the fonts.

On disk a library is JSON shaped like

    {"Inconsolata": {"8": {...}, "12": {...}}, "Liberation Mono": {...}}
"""

import json
import logging

from .errors import ArtIOError, AsciiArtError
from .fontdata import FontMapping

LOG = logging.getLogger(__name__)


def parse_library_line(line):
    """
    Parse "Font Name, 8 9 10 12" into ("Font Name", [8, 9, 10, 12]).
    Size tokens that aren't integers are skipped.
    """
    parts = line.split(",")
    if len(parts) != 2:
        raise ValueError("improper input format")
    name, size_string = parts[0].strip(), parts[1]
    if not name:
        raise ValueError("no valid font name")

    sizes = []
    for tok in size_string.split():
        try:
            n = int(tok)
        except ValueError:
            continue
        if n > 0:
            sizes.append(n)
    if not sizes:
        raise ValueError("no valid font sizes")
    return name, sizes


def build_sized_mappings(font_bytes, sizes, chars, prune=None, label="font"):
    """
    Build one mapping per size. Failures and uncovered characters come back
    as messages instead of exceptions, so one bad size doesn't sink the rest.
    """
    mappings = {}
    errs = []
    for size in sizes:
        try:
            mapping, bads = FontMapping.from_font_bytes(font_bytes, float(size), chars)
        except AsciiArtError as e:
            errs.append(f'"{label}" at size {size}: {e}')
            continue
        if bads:
            errs.append(f'"{label}" at size {size}: no coverage of {bads!r}')
        if prune:
            mapping.prune_for_n_intensities(prune)
        mappings[size] = mapping
    return mappings, errs


def list_library(lib):
    """{family: [sizes...]} for everything in `lib`."""
    return {name: sorted(sizes) for name, sizes in lib.items()}


def library_to_json(lib):
    data = {
        name: {str(size): mapping.to_dict() for size, mapping in sizes.items()}
        for name, sizes in lib.items()
    }
    try:
        return json.dumps(data, ensure_ascii=False, allow_nan=False)
    except ValueError as e:
        raise ArtIOError(str(e)) from e


def library_from_json(text):
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ArtIOError(f"error deserializing font lib: {e}") from e
    if not isinstance(data, dict):
        raise ArtIOError("font lib is not a JSON object")

    lib = {}
    for name, sizes in data.items():
        if not isinstance(sizes, dict):
            raise ArtIOError(f'font lib entry "{name}" is not an object')
        family = {}
        for size, mapping in sizes.items():
            try:
                size = int(size)
            except ValueError as e:
                raise ArtIOError(f'font lib entry "{name}" has bad size {size!r}') from e
            if not isinstance(mapping, dict):
                raise ArtIOError(f'font lib entry "{name}" size {size} is not an object')
            family[size] = FontMapping.from_dict(mapping)
        lib[name] = family
    LOG.debug("loaded font lib with %d families", len(lib))
    return lib


def save_library(lib, writer):
    try:
        writer.write(library_to_json(lib).encode("utf-8"))
        writer.flush()
    except OSError as e:
        if isinstance(e, ArtIOError):
            raise
        raise ArtIOError(str(e)) from e


def load_library(reader):
    try:
        raw = reader.read()
    except OSError as e:
        raise ArtIOError(f"unable to read font lib: {e}") from e
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ArtIOError(str(e)) from e
    return library_from_json(raw)
