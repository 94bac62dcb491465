#!/usr/bin/env python3
"""
CGI endpoint turning uploaded images into text, using a prebuilt font
library (see librarify).

Requests:
  * `aa-action: list` (GET or POST): JSON map of font name -> available sizes
        {"Inconsolata": [8, 9, 10, 12], "Liberation Mono": [8, 12, 16]}
  * `aa-action: render` (POST, multipart/form-data) with fields
        font  - font family name
        size  - pixel size
        file  - the image to render
    answers with the rendered text.
  * OPTIONS: CORS preflight.

The library path comes from $AA_LIBRARY, an optional debug log from $AA_LOG.
"""

import io
import json
import logging
import os
from email.parser import BytesParser
from email.policy import HTTP
from wsgiref.handlers import CGIHandler

from .errors import AsciiArtError
from .image import Image
from .library import list_library, load_library
from .log import setup_logging
from .render import render_text

DEFAULT_LIB_PATH = "fonts.json"

LOG = logging.getLogger("ascii_art.aa_cgi")

STATUS = {
    200: "200 OK",
    204: "204 No Content",
    400: "400 Bad Request",
    500: "500 Internal Server Error",
}


class HTTPError(Exception):
    def __init__(self, code, message):
        super().__init__(message)
        self.code = code
        self.message = message


def _respond(start_response, code, body=b"", content_type="text/plain; charset=utf-8", extra=()):
    headers = [("Content-Type", content_type), ("Content-Length", str(len(body)))]
    headers.extend(extra)
    start_response(STATUS[code], headers)
    return [body]


def _read_body(environ):
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    if length <= 0:
        return b""
    return environ["wsgi.input"].read(length)


def parse_form(content_type, body):
    """Fields of a multipart/form-data body as {name: bytes}."""
    if not content_type.lower().startswith("multipart/form-data"):
        raise HTTPError(400, "Request is not multipart/form-data.")
    head = f"Content-Type: {content_type}\r\n\r\n".encode("latin-1")
    msg = BytesParser(policy=HTTP).parsebytes(head + body)
    if not msg.is_multipart():
        raise HTTPError(400, "Request is not multipart/form-data.")

    fields = {}
    for part in msg.iter_parts():
        name = part.get_param("name", header="content-disposition")
        LOG.debug("  part %r: %s", name, dict(part.items()))
        if name:
            fields[name] = part.get_payload(decode=True) or b""
    return fields


class App:
    """WSGI application answering list/render requests from a font library file."""

    def __init__(self, library_path):
        self.library_path = library_path

    def load_library(self):
        try:
            with open(self.library_path, "rb") as f:
                return load_library(f)
        except OSError as e:
            # ArtIOError is an OSError too, so unparseable files land here
            raise HTTPError(500, f"Unable to load font library: {e}") from e

    def list_response(self):
        lib = self.load_library()
        return json.dumps(list_library(lib), indent=4).encode("utf-8")

    def render_response(self, environ):
        fields = parse_form(environ.get("CONTENT_TYPE", ""), _read_body(environ))

        if "font" not in fields:
            raise HTTPError(400, 'Missing "font" value.')
        if "size" not in fields:
            raise HTTPError(400, 'Missing "size" value.')
        if "file" not in fields:
            raise HTTPError(400, 'Missing "file" value.')

        font = fields["font"].decode("utf-8", errors="replace").strip()
        try:
            size = int(fields["size"].decode("utf-8").strip())
        except UnicodeDecodeError as e:
            raise HTTPError(400, '"size" value not valid UTF-8.') from e
        except ValueError as e:
            raise HTTPError(400, 'Unparseable "size" value.') from e

        lib = self.load_library()
        if font not in lib:
            raise HTTPError(400, f'No font data matching "{font}".')
        mapping = lib[font].get(size)
        if mapping is None:
            raise HTTPError(400, f'No data for font "{font}" at size "{size}".')

        try:
            image = Image.auto(io.BytesIO(fields["file"]))
        except AsciiArtError as e:
            raise HTTPError(400, f"Error reading image data: {e}") from e
        try:
            text = render_text(image, mapping)
        except AsciiArtError as e:
            raise HTTPError(500, f"Error writing text image: {e}") from e
        return text.encode("utf-8")

    def __call__(self, environ, start_response):
        method = environ.get("REQUEST_METHOD", "GET").upper()
        LOG.debug("rec'd request: %s %s", method, environ.get("REQUEST_URI", "[ no URI ]"))

        if method == "OPTIONS":
            return _respond(
                start_response, 204,
                extra=[
                    ("Access-Control-Allow-Methods", "GET, POST, OPTIONS"),
                    ("Access-Control-Allow-Headers", "aa-action"),
                ],
            )

        action = environ.get("HTTP_AA_ACTION")
        try:
            if action is None:
                raise HTTPError(400, 'Missing "aa-action" header.')
            action = action.strip().lower()
            if action == "list":
                body = self.list_response()
                LOG.debug("sending list response: %d bytes", len(body))
                return _respond(start_response, 200, body, content_type="text/json")
            if action == "render":
                body = self.render_response(environ)
                LOG.debug("render response: 200 (OK): %d bytes of body.", len(body))
                return _respond(start_response, 200, body)
            raise HTTPError(400, 'aa-action header must be one of "list", "render".')
        except HTTPError as e:
            err = e
        LOG.debug("error response: %s: %s", STATUS[err.code], err.message)
        return _respond(start_response, err.code, err.message.encode("utf-8"))


def make_app(library_path=None):
    if library_path is None:
        library_path = os.environ.get("AA_LIBRARY", DEFAULT_LIB_PATH)
    return App(library_path)


def main():
    log_path = os.environ.get("AA_LOG")
    setup_logging(debug=bool(log_path), log_path=log_path)
    CGIHandler().run(make_app())


if __name__ == "__main__":
    main()
