"""PKZIP compression-method inspection.

Old BBS-era ZIP files were often written with methods (Shrink, Reduce,
Implode) that modern decoders, libarchive included, cannot expand.  These
helpers report the methods used inside an archive so callers can decide
whether the in-process reader or ``unzip`` should handle it.
"""

from __future__ import annotations

import zipfile
from enum import IntEnum
from pathlib import Path
from typing import List, Union

from ..errors import NotAnArchiveError

__all__ = ["Compression", "describe", "methods", "is_plain_zip"]


class Compression(IntEnum):
    """Compression method identifiers from the ZIP local file header."""

    STORED = 0
    SHRUNK = 1
    REDUCED_1 = 2
    REDUCED_2 = 3
    REDUCED_3 = 4
    REDUCED_4 = 5
    IMPLODED = 6
    DEFLATED = 8
    ENHANCED_DEFLATED = 9
    PKWARE_DCL_IMPLODED = 10
    BZIP2 = 12
    LZMA = 14
    IBM_TERSE = 18
    IBM_LZ77Z = 19
    PPMD = 98

    def __str__(self) -> str:
        return describe(int(self))


_NAMES = {
    0: "Stored",
    1: "Shrunk",
    2: "Reduced with factor 1",
    3: "Reduced with factor 2",
    4: "Reduced with factor 3",
    5: "Reduced with factor 4",
    6: "Imploded",
    8: "Deflated",
    9: "Enhanced Deflated",
    10: "PKWare Data Compression Library Imploded",
    12: "BZIP2",
    14: "LZMA",
    18: "IBM TERSE",
    19: "IBM LZ77z",
    98: "PPMd version I, Rev 1",
}


def describe(method: int) -> str:
    """Return the human name of a ZIP compression method number."""
    return _NAMES.get(method, "Reserved")


def _read_methods(src: Union[str, Path]) -> List[int]:
    try:
        with zipfile.ZipFile(src) as archive:
            return [info.compress_type for info in archive.infolist()]
    except (zipfile.BadZipFile, OSError) as exc:
        raise NotAnArchiveError(
            f"Cannot read zip directory: {exc}", source=src, fmt=".zip"
        ) from exc


def methods(src: Union[str, Path]) -> List[str]:
    """Return the sorted, de-duplicated method names used by members of ``src``.

    Raises:
        NotAnArchiveError: If ``src`` has no readable ZIP central directory.
    """
    found = sorted(set(_read_methods(src)))
    return [describe(method) for method in found]


def is_plain_zip(src: Union[str, Path]) -> bool:
    """True when every member of ``src`` is Stored or Deflated.

    An archive without members counts as plain.
    """
    plain = {int(Compression.STORED), int(Compression.DEFLATED)}
    return all(method in plain for method in _read_methods(src))
