import io
import json

import pytest

from ascii_art import (
    ArtIOError,
    build_sized_mappings,
    list_library,
    load_library,
    parse_library_line,
    save_library,
)
from conftest import FONT_CHARS


# --------------------------------------------------------------------------- #
# input lines
# --------------------------------------------------------------------------- #
def test_parse_line():
    assert parse_library_line("Liberation Mono, 8 9 10 12") == ("Liberation Mono", [8, 9, 10, 12])


def test_parse_line_skips_bad_sizes():
    assert parse_library_line("  Inconsolata ,8 x 0 -3 16.5 24\n") == ("Inconsolata", [8, 24])


@pytest.mark.parametrize(
    "line, message",
    [
        ("Inconsolata 8 9 10", "improper input format"),
        ("Mono, Sans, 8", "improper input format"),
        ("  , 8 9", "no valid font name"),
        ("Inconsolata, big small", "no valid font sizes"),
        ("Inconsolata,", "no valid font sizes"),
    ],
)
def test_parse_line_errors(line, message):
    with pytest.raises(ValueError, match=message):
        parse_library_line(line)


# --------------------------------------------------------------------------- #
# building
# --------------------------------------------------------------------------- #
def test_build_sized(font_bytes):
    mappings, errs = build_sized_mappings(font_bytes, [8, 20], FONT_CHARS)
    assert errs == []
    assert sorted(mappings) == [8, 20]
    assert mappings[20].geometry()[0] > mappings[8].geometry()[0]


def test_build_sized_reports_uncovered(font_bytes):
    mappings, errs = build_sized_mappings(font_bytes, [10], FONT_CHARS + "xyz", label="Test Mono")
    assert list(mappings) == [10]
    assert len(errs) == 1
    assert errs[0].startswith('"Test Mono" at size 10:')


def test_build_sized_reports_failures(make_image_bytes):
    mappings, errs = build_sized_mappings(make_image_bytes(8, 8), [8, 10], FONT_CHARS)
    assert mappings == {}
    assert len(errs) == 2


def test_build_sized_prunes(font_bytes):
    mappings, _ = build_sized_mappings(font_bytes, [20], FONT_CHARS, prune=2)
    assert len(mappings[20].values) < len(FONT_CHARS)


# --------------------------------------------------------------------------- #
# files
# --------------------------------------------------------------------------- #
def test_round_trip(mapping, toy_mapping):
    lib = {"Test Mono": {20: mapping, 4: toy_mapping}, "Toy": {4: toy_mapping}}
    buf = io.BytesIO()
    save_library(lib, buf)

    on_disk = json.loads(buf.getvalue().decode("utf-8"))
    assert sorted(on_disk["Test Mono"]) == ["20", "4"]

    buf.seek(0)
    back = load_library(buf)
    assert back == lib
    assert list_library(back) == {"Test Mono": [4, 20], "Toy": [4]}


def test_load_text_stream(toy_mapping):
    buf = io.BytesIO()
    save_library({"Toy": {4: toy_mapping}}, buf)
    back = load_library(io.StringIO(buf.getvalue().decode("utf-8")))
    assert back["Toy"][4] == toy_mapping


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"\xff\xfe",
        b"[1, 2]",
        b'{"Toy": [1]}',
        b'{"Toy": {"big": {}}}',
        b'{"Toy": {"4": 7}}',
        b'{"Toy": {"4": {"values": []}}}',
    ],
)
def test_load_rejects_garbage(raw):
    with pytest.raises(ArtIOError):
        load_library(io.BytesIO(raw))


def test_load_read_failure():
    class Broken:
        def read(self):
            raise OSError("gone")

    with pytest.raises(ArtIOError):
        load_library(Broken())
