"""Matchers for image, audio and video formats.

Most formats are a literal prefix; RIFF and ISO base media containers are
told apart by the form type at offset 8 or the ``ftyp`` brand at offset 4.
"""

from __future__ import annotations

import struct
from typing import Tuple

from .reader import ByteWindow

__all__ = [
    "aac",
    "avi",
    "avif",
    "bmp",
    "flac",
    "flv",
    "gif",
    "ico",
    "iff",
    "ilbm",
    "ilbm_dimensions",
    "ivr",
    "jpeg",
    "jpeg_no_suffix",
    "jpeg2000",
    "m4v",
    "mp3",
    "mp4",
    "mpeg",
    "ogg",
    "pcx",
    "png",
    "qt_mov",
    "riff",
    "ripscrip",
    "tiff",
    "wave",
    "webp",
    "wmv",
]


def riff(r: ByteWindow) -> bool:
    """Match a Resource Interchange File Format container."""
    return r.match(0, b"RIFF")


def aac(r: ByteWindow) -> bool:
    """Match an MPEG-1 Layer III frame header used for AAC/MP3 streams."""
    p = r.window(0, 3)
    if p is None or p[:2] != b"\xff\xfb":
        return False
    return p[2] in (0x90, 0xB0, 0xE0)


def avi(r: ByteWindow) -> bool:
    return riff(r) and r.match(8, b"AVI LIST")


def avif(r: ByteWindow) -> bool:
    return r.match(4, b"ftypavif")


def bmp(r: ByteWindow) -> bool:
    return r.match(0, b"BM")


def flac(r: ByteWindow) -> bool:
    return r.match(0, b"fLaC\x00\x00\x00\x02")


def flv(r: ByteWindow) -> bool:
    """Match a Shockwave Flash Video."""
    return r.match(0, b"FLV\x01")


def gif(r: ByteWindow) -> bool:
    return r.match(0, b"GIF87a", b"GIF89a")


def ico(r: ByteWindow) -> bool:
    return r.match(0, b"\x00\x00\x01\x00")


def iff(r: ByteWindow) -> bool:
    """Match an Electronic Arts IFF concatenation."""
    return r.match(0, b"CAT ")


def ilbm(r: ByteWindow) -> bool:
    """Match an Interleaved Bitmap, the Amiga/Deluxe Paint image format."""
    return r.match(0, b"FORM") and r.match(8, b"ILBM")


def ilbm_dimensions(r: ByteWindow) -> Tuple[int, int]:
    """Return the ``(width, height)`` stored in an ILBM bitmap header."""
    p = r.window(20, 4)
    if p is None:
        return 0, 0
    width, height = struct.unpack(">HH", p)
    return width, height


def ivr(r: ByteWindow) -> bool:
    """Match a RealPlayer video or RealMedia file."""
    return r.match(0, b".REC", b".RMF")


def _jpeg(r: ByteWindow, suffix: bool) -> bool:
    p = r.window(0, 4)
    if p is None or p[:3] != b"\xff\xd8\xff" or p[3] not in (0xE0, 0xE1):
        return False
    if not r.match(6, b"JFIF\x00", b"Exif\x00"):
        return False
    if not suffix:
        return True
    return r.tail(2) == b"\xff\xd9"


def jpeg(r: ByteWindow) -> bool:
    """Match a JFIF or Exif JPEG that ends with an end-of-image marker."""
    return _jpeg(r, suffix=True)


def jpeg_no_suffix(r: ByteWindow) -> bool:
    """Match a JPEG header without checking the final bytes."""
    return _jpeg(r, suffix=False)


def jpeg2000(r: ByteWindow) -> bool:
    return r.match(0, b"\x00\x00\x00\x0cjP  \r\n")


def m4v(r: ByteWindow) -> bool:
    return r.match(4, b"ftypmp42")


def mp3(r: ByteWindow) -> bool:
    """Match an MP3 that opens with an ID3v2 tag."""
    return r.match(0, b"ID3")


def mp4(r: ByteWindow) -> bool:
    return r.match(4, b"ftypMSNV", b"ftypisom")


def mpeg(r: ByteWindow) -> bool:
    """Match an MPEG program stream pack or system header."""
    p = r.window(0, 4)
    if p is None:
        return False
    return p[:3] == b"\x00\x00\x01" and 0xBA <= p[3] <= 0xBF


def ogg(r: ByteWindow) -> bool:
    """Match the first page of an Ogg Vorbis stream."""
    return r.match(0, b"OggS\x00\x02" + b"\x00" * 8)


def pcx(r: ByteWindow) -> bool:
    """Match a ZSoft PCX image, versions 0 to 5."""
    p = r.window(0, 3)
    if p is None:
        return False
    return p[0] == 0x0A and p[1] <= 0x5 and p[2] in (0x0, 0x1)


def png(r: ByteWindow) -> bool:
    return r.match(0, b"\x89PNG\r\n\x1a\n")


def qt_mov(r: ByteWindow) -> bool:
    """Match a QuickTime movie."""
    return r.match(4, b"moov", b"ftypqt")


def ripscrip(r: ByteWindow) -> bool:
    """Match a RIPscrip BBS vector graphic, ``!|`` then a level digit."""
    p = r.window(0, 3)
    if p is None or p[:2] != b"!|":
        return False
    return 0x30 <= p[2] <= 0x39


def tiff(r: ByteWindow) -> bool:
    return r.match(0, b"II*\x00", b"MM\x00*")


def wave(r: ByteWindow) -> bool:
    return riff(r) and r.match(8, b"WAVEfmt ")


def webp(r: ByteWindow) -> bool:
    return riff(r) and r.match(8, b"WEBP")


def wmv(r: ByteWindow) -> bool:
    """Match the ASF header object GUID of Windows Media files."""
    return r.match(
        0,
        b"\x30\x26\xb2\x75\x8e\x66\xcf\x11\xa6\xd9\x00\xaa\x00\x62\xce\x6c",
    )
