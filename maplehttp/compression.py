"""
Content-coding removal for message bodies.

Handles the ``gzip``, ``deflate`` and ``br`` codings. A body that fails to
decode is passed through unchanged and a warning is logged.
"""

from __future__ import annotations

import gzip
import logging
import zlib
from typing import Callable

import brotli

from .stream import Stream

logger = logging.getLogger(__name__)


def _gunzip(body: bytes) -> bytes:
    try:
        return gzip.decompress(body)
    except (OSError, EOFError, zlib.error) as exc:
        logger.warning("Could not gunzip body: %s", exc)
        return body


def _inflate(body: bytes) -> bytes:
    # Servers send both raw deflate and zlib-wrapped streams as "deflate".
    for wbits in (-zlib.MAX_WBITS, zlib.MAX_WBITS):
        try:
            return zlib.decompress(body, wbits)
        except zlib.error as exc:
            error = exc
    logger.warning("Could not inflate body: %s", error)
    return body


def _unbrotli(body: bytes) -> bytes:
    try:
        return brotli.decompress(body)
    except brotli.error as exc:
        logger.warning("Could not brotli-decode body: %s", exc)
        return body


_DECODERS: dict[str, Callable[[bytes], bytes]] = {
    "gzip": _gunzip,
    "deflate": _inflate,
    "br": _unbrotli,
}

SUPPORTED_ENCODINGS = tuple(_DECODERS)


def _decode_single(body: bytes, encoding: str) -> bytes:
    decoder = _DECODERS.get(encoding)
    return body if decoder is None else decoder(body)


def decode_body(body: bytes, content_encoding: str) -> bytes:
    """
    Undo every coding listed in a Content-Encoding value.

    Codings are listed in the order they were applied (``"gzip, br"``), so
    they are removed last to first. Unknown codings are left in place.
    """
    if not content_encoding or not body:
        return body

    result = body
    for encoding in reversed(content_encoding.lower().split(",")):
        result = _decode_single(result, encoding.strip())
    return result


def decode_stream(body: Stream, content_encoding: str) -> Stream:
    """Read ``body`` from the start and return a new rewound TEMP stream holding the decoded bytes."""
    decoded = decode_body(bytes(body), content_encoding)
    stream = Stream(Stream.TEMP)
    stream.write(decoded)
    stream.rewind()
    logger.debug("Decoded %s body to %d bytes", content_encoding, len(decoded))
    return stream
