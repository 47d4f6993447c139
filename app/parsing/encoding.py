"""
app/parsing/encoding.py

Byte-level text decoding for uploaded order files.
"""

from __future__ import annotations

import codecs
import logging

logger = logging.getLogger(__name__)

REPLACEMENT_CHARACTER = "\ufffd"

BYTE_ORDER_MARKS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

LEGACY_FALLBACK_ENCODING = "cp1252"
C1_PASSTHROUGH_ERRORS = "order-import-c1-passthrough"


def _c1_passthrough(error: UnicodeError) -> tuple[str, int]:
    """
    Map bytes cp1252 leaves undefined (0x81, 0x8D, 0x8F, 0x90, 0x9D) to the
    C1 control with the same code point, as browsers do for windows-1252.
    """

    if not isinstance(error, UnicodeDecodeError):
        raise error
    undecoded = error.object[error.start:error.end]
    return "".join(chr(byte) for byte in undecoded), error.end


codecs.register_error(C1_PASSTHROUGH_ERRORS, _c1_passthrough)


def decode_bytes(raw: bytes) -> str:
    """
    Decode an uploaded file buffer into text.

    A byte-order mark decides the encoding when present and is dropped from
    the result. Otherwise the buffer is read as UTF-8; if that yields
    replacement characters the buffer is re-read as Windows-1252, which
    never yields them. Neither path raises.
    """

    for mark, encoding in BYTE_ORDER_MARKS:
        if raw.startswith(mark):
            return raw[len(mark):].decode(encoding, errors="replace")

    text = raw.decode("utf-8", errors="replace")
    if REPLACEMENT_CHARACTER in text:
        logger.info("Order file is not valid UTF-8; decoding as %s", LEGACY_FALLBACK_ENCODING)
        return raw.decode(LEGACY_FALLBACK_ENCODING, errors=C1_PASSTHROUGH_ERRORS)
    return text
