import io

import numpy as np
import pytest

from ascii_art import ArtIOError, Image, grid_size, render_text, write, write_inverted


def lines_of(buf):
    text = buf.getvalue().decode("utf-8")
    assert text.endswith("\n")
    return text.split("\n")[:-1]


def test_grid_truncates(toy_mapping):
    img = Image(np.zeros((9, 11)))
    assert grid_size(img, toy_mapping) == (5, 2)


def test_uniform_image(toy_mapping):
    img = Image(np.ones((9, 10)))
    buf = io.BytesIO()
    write(img, toy_mapping, buf)
    assert buf.getvalue() == b"#####\n#####\n"

    buf = io.BytesIO()
    write_inverted(img, toy_mapping, buf)
    assert buf.getvalue() == b"     \n     \n"


def test_row_major_order(toy_mapping):
    arr = np.zeros((8, 4), dtype=np.float32)
    arr[:4, 2:] = 1.0  # top right
    arr[4:, :2] = 0.5  # bottom left
    assert render_text(Image(arr), toy_mapping) == " #\n. \n"


def test_too_small_is_empty(toy_mapping):
    buf = io.BytesIO()
    write(Image(np.ones((3, 100))), toy_mapping, buf)
    assert buf.getvalue() == b""
    assert render_text(Image(np.ones((100, 1))), toy_mapping) == ""


def test_render_decoded_image(mapping, make_image_bytes):
    img = Image.auto(io.BytesIO(make_image_bytes(200, 120)))
    width, height = mapping.geometry()
    buf = io.BytesIO()
    write(img, mapping, buf)

    lines = lines_of(buf)
    assert len(lines) == int(120 / height)
    assert all(len(line) == int(200 / width) for line in lines)
    assert set("".join(lines)) <= set(mapping.chars)
    # left edge of the gradient is black, right edge white
    assert lines[0][0] == " "
    assert lines[0][-1] == "@"


def test_render_text_matches_write(mapping, make_image_bytes):
    img = Image.auto(io.BytesIO(make_image_bytes(200, 120)))
    for writer, inverted in ((write, False), (write_inverted, True)):
        buf = io.BytesIO()
        writer(img, mapping, buf)
        assert buf.getvalue().decode("utf-8") == render_text(img, mapping, inverted=inverted)

    inv = render_text(img, mapping, inverted=True).split("\n")
    assert inv[0][0] == "@"
    assert inv[0][-1] == " "


def test_write_failure_is_reported(toy_mapping):
    class Sink:
        def __init__(self):
            self.got = []

        def write(self, data):
            if self.got:
                raise OSError("pipe closed")
            self.got.append(data)

    sink = Sink()
    with pytest.raises(ArtIOError):
        write(Image(np.ones((8, 4))), toy_mapping, sink)
    assert sink.got == [b"##\n"]
