"""Magic-number matchers for archive and compression containers.

All matchers take a :class:`~FileSleuth.MagicNumber.reader.ByteWindow` and
return ``False`` on truncated input.  The PKZIP family is split by the
compression method stored in the first local file header so that the
BBS-era Shrink, Reduce and Implode archives can be routed to tools that still
understand them.
"""

from __future__ import annotations

import struct
from enum import Enum
from typing import Optional

from .reader import ByteWindow

__all__ = [
    "ZipKind",
    "zip_kind",
    "pkzip",
    "pk_shrink",
    "pk_reduce",
    "pk_implode",
    "zip64",
    "pkzip_multi",
    "tar",
    "rar",
    "rar_v5",
    "gzip",
    "bzip2",
    "x7z",
    "xz",
    "zstd",
    "arc_free",
    "arc_sea",
    "lzh_lha",
    "zoo",
    "arj",
    "cab",
]

LOCAL_HEADER = b"PK\x03\x04"
LOCAL_HEADER_SIZE = 30
ZIP64_EXTRA_ID = 0x0001

_GENERIC_METHODS = frozenset(
    {0x0, 0x8, 0x9, 0xA, 0xC, 0xE, 0x10, 0x12, 0x13} | set(range(0x5D, 0x64))
)


class ZipKind(Enum):
    """Classification of the first PKZIP local file header."""

    ZIP = "zip"
    SHRINK = "shrink"
    REDUCE = "reduce"
    IMPLODE = "implode"


def zip_kind(r: ByteWindow) -> Optional[ZipKind]:
    """Classify a PKZIP local header by its compression method.

    Returns ``None`` when the buffer is not a PKZIP local header, including
    headers whose "version needed to extract" field is zero.
    """
    p = r.window(0, LOCAL_HEADER_SIZE)
    if p is None or p[:4] != LOCAL_HEADER:
        return None
    version_needed, method = struct.unpack_from("<H2xH", p, 4)
    if version_needed == 0:
        return None
    if method in _GENERIC_METHODS:
        return ZipKind.ZIP
    if method == 0x1:
        return ZipKind.SHRINK
    if 0x2 <= method <= 0x5:
        return ZipKind.REDUCE
    if method == 0x6:
        return ZipKind.IMPLODE
    return None


def zip64(r: ByteWindow) -> bool:
    """Match a local header carrying a Zip64 extended information field."""
    if zip_kind(r) is None:
        return False
    p = r.window(0, LOCAL_HEADER_SIZE)
    name_len, extra_len = struct.unpack_from("<HH", p, 26)
    extra = r.window(LOCAL_HEADER_SIZE + name_len, extra_len)
    if not extra:
        return False
    pos = 0
    while pos + 4 <= len(extra):
        header_id, size = struct.unpack_from("<HH", extra, pos)
        if header_id == ZIP64_EXTRA_ID:
            return True
        pos += 4 + size
    return False


def pkzip(r: ByteWindow) -> bool:
    """Match a PKZIP archive using a modern or uncompressed method."""
    return zip_kind(r) is ZipKind.ZIP and not zip64(r)


def pk_shrink(r: ByteWindow) -> bool:
    return zip_kind(r) is ZipKind.SHRINK


def pk_reduce(r: ByteWindow) -> bool:
    """Match PKZIP Reduce, compression factors 1 through 4."""
    return zip_kind(r) is ZipKind.REDUCE


def pk_implode(r: ByteWindow) -> bool:
    return zip_kind(r) is ZipKind.IMPLODE


def pkzip_multi(r: ByteWindow) -> bool:
    """Match the spanned/split archive marker that opens a multi-volume zip."""
    return r.match(0, b"PK\x07\x08")


def tar(r: ByteWindow) -> bool:
    return r.match(257, b"ustar")


def rar(r: ByteWindow) -> bool:
    """Match a Roshal Archive v1.5 to v4."""
    return r.match(0, b"Rar!\x1a\x07\x00")


def rar_v5(r: ByteWindow) -> bool:
    return r.match(0, b"Rar!\x1a\x07\x01\x00")


def gzip(r: ByteWindow) -> bool:
    """Match gzip at the start of the file or after a 512 byte SFX stub."""
    return r.match(0, b"\x1f\x8b\x08") or r.match(512, b"\x1f\x8b\x08")


def bzip2(r: ByteWindow) -> bool:
    return r.match(0, b"BZh")


def x7z(r: ByteWindow) -> bool:
    return r.match(0, b"7z\xbc\xaf\x27\x1c")


def xz(r: ByteWindow) -> bool:
    return r.match(0, b"\xfd7zXZ\x00")


def zstd(r: ByteWindow) -> bool:
    return r.match(0, b"\x28\xb5\x2f\xfd")


def arc_free(r: ByteWindow) -> bool:
    """Match FreeArc by Bulat Ziganshin."""
    return r.match(0, b"ArC\x01")


_ARC_MAX_METHOD = 0x11


def arc_sea(r: ByteWindow) -> bool:
    """Match ARC by System Enhancement Associates.

    The header is a 0x1a marker followed by a method byte; methods above
    0x11 were never issued.
    """
    p = r.window(0, 2)
    if p is None:
        return False
    return p[0] == 0x1A and p[1] <= _ARC_MAX_METHOD


def lzh_lha(r: ByteWindow) -> bool:
    """Match LHA/LHarc by Haruyasu Yoshizaki, any ``-lh?-`` method."""
    return r.match(2, b"-lh")


def zoo(r: ByteWindow) -> bool:
    return r.match(0, b"ZOO ")


def arj(r: ByteWindow) -> bool:
    """Match ARJ by Robert Jung.

    The main header opens with the 0x60 0xea id and carries the file type
    byte 2 ("comment header") at offset 10.
    """
    p = r.window(0, 11)
    if p is None:
        return False
    return p[0] == 0x60 and p[1] == 0xEA and p[10] == 0x02


def cab(r: ByteWindow) -> bool:
    """Match a Microsoft Cabinet."""
    return r.match(0, b"MSCF")
