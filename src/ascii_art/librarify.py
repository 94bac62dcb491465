#!/usr/bin/env python3
"""
Build a font library file for machines that don't have the fonts installed.

Reads one font per line from stdin, a family name, a comma, then the pixel
sizes wanted:

    Inconsolata, 8 9 10 12 16 18 24
    Liberation Mono, 8 9 10 12 16 18 24

and writes the mappings as JSON ({family: {size: mapping}}). Fontconfig
always finds *some* match, so the family actually used is printed next to
each request.
"""

import argparse
import logging
import sys

from .errors import AsciiArtError, FontLookupError
from .fontconfig import read_font
from .fontdata import printable_ascii
from .library import build_sized_mappings, parse_library_line, save_library
from .log import setup_logging

DEFAULT_OUTFILE = "fonts.json"

LOG = logging.getLogger("ascii_art.librarify")


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="librarify", description="Generate a library file of font mappings.")
    p.add_argument("outfile", nargs="?", default=None, help=f"output path (default: {DEFAULT_OUTFILE})")
    p.add_argument("--prune", type=int, default=None, help="drop chars unreachable with N intensity levels")
    p.add_argument("--debug", action="store_true", help="verbose logging")
    p.add_argument("--log", default=None, help="also log to this file")
    return p.parse_args(argv)


def build_library(lines, chars, prune=None, lookup=None):
    """
    `lookup(name)` gives (actual family, font bytes); fontconfig by default.

    Returns (library, [(requested name, actual name), ...]). Problems with
    individual lines are logged and the line skipped.
    """
    lookup = lookup or read_font
    lib = {}
    name_pairs = []
    for line_n, line in enumerate(lines):
        line = line.strip()
        if not line:
            continue
        try:
            name, sizes = parse_library_line(line)
        except ValueError as e:
            LOG.error("Error in input line %d: %s", line_n, e)
            continue
        try:
            actual_name, font_bytes = lookup(name)
        except FontLookupError as e:
            LOG.error('Error from input line %d (font "%s"): %s', line_n, name, e)
            continue

        mappings, errs = build_sized_mappings(font_bytes, sizes, chars, prune=prune, label=actual_name)
        for err in errs:
            LOG.error("Error from input line %d: %s", line_n, err)
        if not mappings:
            LOG.error(
                'Error from input line %d: %s (from "%s") produced no useable data.',
                line_n, actual_name, name,
            )
            continue
        lib[actual_name] = mappings
        name_pairs.append((name, actual_name))
    return lib, name_pairs


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.debug, args.log)

    outfile = args.outfile
    if outfile is None:
        print(f'No filename specified, using default "{DEFAULT_OUTFILE}".')
        outfile = DEFAULT_OUTFILE

    lib, name_pairs = build_library(sys.stdin, printable_ascii(), prune=args.prune)
    if not lib:
        print("No useable data generated; no output file written.")
        return

    print()
    for user_name, fc_name in name_pairs:
        print(f'{fc_name} <= "{user_name}"')

    try:
        with open(outfile, "wb") as f:
            save_library(lib, f)
    except (AsciiArtError, OSError) as e:
        print("Error: cannot write output:", e, file=sys.stderr)
        sys.exit(1)
    print(f"\n[Done] {len(lib)} font(s) written to {outfile}")


if __name__ == "__main__":
    main()
