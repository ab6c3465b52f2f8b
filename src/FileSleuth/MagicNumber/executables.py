# === NAVMAP v1 ===
# {
#   "module": "FileSleuth.MagicNumber.executables",
#   "purpose": "DOS/Windows executable matchers and NE/PE header decoding",
#   "sections": [
#     {"id": "machine", "name": "Machine", "anchor": "class-machine", "kind": "class"},
#     {"id": "nekind", "name": "NEKind", "anchor": "class-nekind", "kind": "class"},
#     {"id": "windowsheader", "name": "WindowsHeader", "anchor": "class-windowsheader", "kind": "class"},
#     {"id": "find-executable", "name": "find_executable", "anchor": "function-find-executable", "kind": "function"},
#     {"id": "new-executable", "name": "new_executable", "anchor": "function-new-executable", "kind": "function"},
#     {"id": "portable-executable", "name": "portable_executable", "anchor": "function-portable-executable", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""DOS and Windows program detection.

Responsibilities
----------------
- Match the MS-DOS ``MZ`` family along with the PKLITE/PKSFX wrappers that
  share its prefix, the KWAJ/SZDD ``COMPRESS.EXE`` formats and OLE compound
  files.
- Decode the New Executable (Windows 3.x, OS/2) and Portable Executable
  headers into an immutable :class:`WindowsHeader`.

Design Notes
------------
- NE and PE decoding are mutually exclusive outcomes for the same buffer:
  the pointer at ``0x3c`` names either an ``NE`` or a ``PE\\0\\0`` header.
- Every offset is bounds-checked against the buffer; truncated or corrupt
  headers produce :data:`NO_MATCH` instead of raising.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Dict, Optional, Tuple

from .reader import ByteWindow

__all__ = [
    "HeaderKind",
    "Machine",
    "NEKind",
    "WindowsHeader",
    "NO_MATCH",
    "WINDOWS_NAMES",
    "ms_exe",
    "ms_comp",
    "dos_kwaj",
    "dos_szdd",
    "pklite",
    "pksfx",
    "find_executable",
    "new_executable",
    "portable_executable",
]

HEADER_SCAN_SIZE = 3 * 1024
_POINTER_OFFSET = 0x3C
_MIN_MZ_SIZE = 64


def pklite(r: ByteWindow) -> bool:
    """Match an executable compressed by PKWARE's PKLITE."""
    return r.match(30, b"PKLITE")


def pksfx(r: ByteWindow) -> bool:
    """Match a PKWARE self-extracting zip program."""
    return r.match(526, b"PKSpX")


def ms_exe(r: ByteWindow) -> bool:
    """Match an MS-DOS or Windows executable not claimed by a PKWARE wrapper."""
    if not r.match(0, b"MZ", b"ZM"):
        return False
    return not (pklite(r) or pksfx(r))


def ms_comp(r: ByteWindow) -> bool:
    """Match an OLE2 compound file, used by installers and Office documents."""
    return r.match(0, b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1")


def dos_kwaj(r: ByteWindow) -> bool:
    """Match a KWAJ file compressed with MS-DOS ``COMPRESS.EXE``."""
    return r.match(0, b"KWAJ\x88\xf0\x27\xd1")


def dos_szdd(r: ByteWindow) -> bool:
    """Match an SZDD file compressed with MS-DOS ``COMPRESS.EXE``."""
    return r.match(0, b"SZDD\x88\xf0\x27\x33")


class Machine(IntEnum):
    """COFF machine types recognised in Portable Executables."""

    UNKNOWN = 0x0
    INTEL_386 = 0x14C
    ARM = 0x1C0
    ITANIUM = 0x200
    AMD64 = 0x8664
    ARM64 = 0xAA64

    @classmethod
    def parse(cls, value: int) -> "Machine":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class NEKind(IntEnum):
    """Target operating system byte of a New Executable."""

    NONE = -1
    UNKNOWN = 0
    OS2 = 1
    WINDOWS_286 = 2
    DOS_V4 = 3
    WINDOWS_386 = 4

    def __str__(self) -> str:
        return _NE_NAMES[self]


_NE_NAMES: Dict[NEKind, str] = {
    NEKind.NONE: "none",
    NEKind.UNKNOWN: "unknown",
    NEKind.OS2: "OS/2",
    NEKind.WINDOWS_286: "Windows for the 80286",
    NEKind.DOS_V4: "European MS-DOS 4.x",
    NEKind.WINDOWS_386: "Windows for the 80386",
}


class HeaderKind(str, Enum):
    NONE = "none"
    NE = "NE"
    PE = "PE"


WINDOWS_NAMES: Dict[Tuple[int, int], str] = {
    (5, 0): "Windows 2000",
    (5, 1): "Windows XP",
    (5, 2): "Windows XP Professional x64",
    (6, 0): "Windows Vista",
    (6, 1): "Windows 7",
    (6, 2): "Windows 8",
    (6, 3): "Windows 8.1",
    (10, 0): "Windows 10",
}


@dataclass(frozen=True)
class WindowsHeader:
    """Decoded NE or PE header.

    Attributes:
        kind: Which header family was found.
        major: Major version of the target operating system.
        minor: Minor version of the target operating system.
        machine: PE machine architecture; ``Machine.UNKNOWN`` for NE.
        pe64: True for PE32+ optional headers.
        timestamp: PE link time, ``None`` for NE or an empty stamp.
        ne: NE target type; ``NEKind.NONE`` for PE.
    """

    kind: HeaderKind = HeaderKind.NONE
    major: int = 0
    minor: int = 0
    machine: Machine = Machine.UNKNOWN
    pe64: bool = False
    timestamp: Optional[datetime] = None
    ne: NEKind = NEKind.NONE

    @property
    def found(self) -> bool:
        return self.kind is not HeaderKind.NONE

    def __str__(self) -> str:
        if self.kind is HeaderKind.NE:
            return self._ne_name()
        if self.kind is HeaderKind.PE:
            return self._pe_name()
        return ""

    def _version(self) -> str:
        return f"v{self.major}.{self.minor}"

    def _ne_name(self) -> str:
        if self.ne in (NEKind.DOS_V4, NEKind.OS2):
            return f"{str(self.ne)} {self._version()}"
        if self.ne is NEKind.WINDOWS_286:
            if self.major == 2:
                return f"Windows/286 {self._version()}"
            return f"Windows {self._version()} for 286"
        if self.ne is NEKind.WINDOWS_386:
            if self.major == 2:
                return f"Windows/386 {self._version()}"
            return f"Windows {self._version()} for 386+"
        return "Unknown NE executable"

    def _pe_name(self) -> str:
        if self.machine is Machine.UNKNOWN:
            return "Unknown PE+ executable" if self.pe64 else "Unknown PE executable"
        if self.machine is Machine.INTEL_386:
            if self.major < 3:
                return "Windows 95/98/ME"
            if self.major <= 4:
                return f"Windows NT {self._version()}"
        name = WINDOWS_NAMES.get((self.major, self.minor), f"Windows {self._version()}")
        suffix = {
            Machine.INTEL_386: " 32-bit",
            Machine.AMD64: " 64-bit",
            Machine.ARM: " for ARM",
            Machine.ARM64: " for ARM64",
            Machine.ITANIUM: " for Itanium",
        }[self.machine]
        return name + suffix


NO_MATCH = WindowsHeader()


def _header_offset(p: bytes) -> Optional[int]:
    if len(p) < _MIN_MZ_SIZE or p[:2] != b"MZ":
        return None
    (offset,) = struct.unpack_from("<H", p, _POINTER_OFFSET)
    return offset


def new_executable(p: bytes) -> WindowsHeader:
    """Decode a New Executable header from the start of a program."""
    offset = _header_offset(p)
    if offset is None or len(p) < offset + 0x40:
        return NO_MATCH
    if p[offset : offset + 2] != b"NE":
        return NO_MATCH
    try:
        kind = NEKind(p[offset + 0x36])
    except ValueError:
        kind = NEKind.UNKNOWN
    return WindowsHeader(
        kind=HeaderKind.NE,
        major=p[offset + 0x3F],
        minor=p[offset + 0x3E],
        ne=kind,
    )


def portable_executable(p: bytes) -> WindowsHeader:
    """Decode a Portable Executable COFF and optional header."""
    offset = _header_offset(p)
    if offset is None:
        return NO_MATCH
    if p[offset : offset + 4] != b"PE\x00\x00":
        return NO_MATCH
    coff = offset + 4
    optional = coff + 20
    if len(p) < optional + 44:
        return NO_MATCH
    machine, _sections, stamp = struct.unpack_from("<HHI", p, coff)
    major, minor = struct.unpack_from("<HH", p, optional + 40)
    timestamp = datetime.fromtimestamp(stamp, tz=timezone.utc) if stamp else None
    return WindowsHeader(
        kind=HeaderKind.PE,
        major=major,
        minor=minor,
        machine=Machine.parse(machine),
        pe64=p[optional : optional + 2] == b"\x0b\x02",
        timestamp=timestamp,
    )


def find_executable(r: ByteWindow) -> WindowsHeader:
    """Decode the Windows header of a program, trying NE before PE."""
    p = r.read_at(0, HEADER_SCAN_SIZE)
    header = new_executable(p)
    if header.found:
        return header
    return portable_executable(p)
