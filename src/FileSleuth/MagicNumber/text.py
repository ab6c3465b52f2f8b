"""Text and document classification.

Four tiers of "is this text" are offered, from strictest to loosest::

    ascii_text   7-bit printable plus a few control characters
    latin1       ascii plus 0xa0-0xff
    windows1252  latin1 plus 0x80-0x9f, except the five unassigned points
    txt          ascii plus every byte from 0x80

ANSI art detection looks for a handful of common escape sequences rather than
parsing the stream, so damaged art files are still recognised.
"""

from __future__ import annotations

from typing import FrozenSet

from .reader import CHUNK_SIZE, ByteWindow

__all__ = [
    "ascii_text",
    "txt",
    "txt_latin1",
    "txt_windows",
    "ansi",
    "hlp",
    "pdf",
    "rtf",
    "utf8",
    "utf16",
    "utf32",
]

# tab, LF, VT, FF, CR, BEL, BS, ESC and the MS-DOS end-of-file marker
_CONTROLS = frozenset({0x09, 0x0A, 0x0B, 0x0C, 0x0D, 0x07, 0x08, 0x1B, 0x1A})
_ASCII: FrozenSet[int] = _CONTROLS | frozenset(range(0x20, 0x80))
_PLAIN: FrozenSet[int] = _ASCII | frozenset(range(0x80, 0x100))
_LATIN1: FrozenSet[int] = _ASCII | frozenset(range(0xA0, 0x100))
_WINDOWS: FrozenSet[int] = _PLAIN - {0x81, 0x8D, 0x8F, 0x90, 0x9D}

_ANSI_SEQUENCES = (
    b"\x1b[0m",  # reset
    b"\x1b[2J",  # clear screen
    b"\x1b[1;",  # bold
    b"\x1b[0;",  # normal
)
_ANSI_OVERLAP = max(len(seq) for seq in _ANSI_SEQUENCES) - 1


def _only(r: ByteWindow, allowed: FrozenSet[int]) -> bool:
    seen = False
    for chunk in r.chunks(CHUNK_SIZE):
        seen = True
        if not set(chunk) <= allowed:
            return False
    return seen


def ascii_text(r: ByteWindow) -> bool:
    """True if every byte is 7-bit printable or a permitted control."""
    return _only(r, _ASCII)


def txt(r: ByteWindow) -> bool:
    """True if the content is ASCII text optionally using 8-bit characters."""
    return _only(r, _PLAIN)


def txt_latin1(r: ByteWindow) -> bool:
    """True if the content is ISO 8859-1 text."""
    return _only(r, _LATIN1)


def txt_windows(r: ByteWindow) -> bool:
    """True if the content is Windows-1252 text."""
    return _only(r, _WINDOWS)


def ansi(r: ByteWindow) -> bool:
    """True if the content contains a common ANSI escape sequence."""
    for chunk in r.chunks(CHUNK_SIZE, overlap=_ANSI_OVERLAP):
        if any(seq in chunk for seq in _ANSI_SEQUENCES):
            return True
    return False


def hlp(r: ByteWindow) -> bool:
    """Match a Windows Help or compiled HTML Help file."""
    if r.match(0, b"ITSF", b"LN\x02\x00", b"?_\x03\x00"):
        return True
    return r.match(6, b"\x00\x00\xff\xff\xff\xff")


_PDF_TRAILERS = (b"\n%%EOF", b"\n%%EOF\n", b"\r\n%%EOF\r\n", b"\r%%EOF\r")


def pdf(r: ByteWindow) -> bool:
    """Match a PDF with both the header and a final ``%%EOF`` marker."""
    if not r.match(0, b"%PDF"):
        return False
    return any(r.tail(len(trailer)) == trailer for trailer in _PDF_TRAILERS)


def rtf(r: ByteWindow) -> bool:
    """Match a Rich Text Format document closed by its final brace."""
    return r.match(0, b"{\\rtf") and r.tail(1) == b"}"


def utf8(r: ByteWindow) -> bool:
    """Match a UTF-8 byte order mark."""
    return r.match(0, b"\xef\xbb\xbf")


def utf16(r: ByteWindow) -> bool:
    """Match a UTF-16 byte order mark that is not a UTF-32 one."""
    return r.match(0, b"\xff\xfe", b"\xfe\xff") and not utf32(r)


def utf32(r: ByteWindow) -> bool:
    """Match a UTF-32 byte order mark."""
    return r.match(0, b"\xff\xfe\x00\x00", b"\x00\x00\xfe\xff")
