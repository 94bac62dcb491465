"""Find a font file for a family name, the way the desktop would, via fc-match."""

import subprocess
from pathlib import Path

from .errors import FontLookupError

FC_MATCH = "fc-match"


def match_font(name):
    """
    Return (family, path) for fontconfig's best match for `name`.

    A `name` that is already a path to a font file is used as is. Note that
    fontconfig always matches *something*, so check the returned family if
    it matters which font you get.
    """
    p = Path(name)
    if p.is_file():
        return p.stem, str(p)

    try:
        proc = subprocess.run(
            [FC_MATCH, "--format=%{family}\n%{file}", name],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise FontLookupError(f"Unable to run {FC_MATCH}: {e}") from e
    if proc.returncode != 0:
        raise FontLookupError(f"{FC_MATCH} failed for \"{name}\": {proc.stderr.strip()}")

    lines = proc.stdout.splitlines()
    family = lines[0].split(",")[0].strip() if lines else ""
    path = lines[1].strip() if len(lines) > 1 else ""
    if not family:
        raise FontLookupError(f"no matching font name for \"{name}\"")
    if not path:
        raise FontLookupError(f"Unable to find matching font file for font \"{name}\".")
    return family, path


def read_font(name):
    """(family, font file bytes) for `name`."""
    family, path = match_font(name)
    try:
        return family, Path(path).read_bytes()
    except OSError as e:
        raise FontLookupError(f"Unable to open file \"{path}\": {e}") from e
