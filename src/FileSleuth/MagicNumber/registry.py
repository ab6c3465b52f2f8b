# === NAVMAP v1 ===
# {
#   "module": "FileSleuth.MagicNumber.registry",
#   "purpose": "Immutable signature registry and classifier entry points",
#   "sections": [
#     {"id": "finder", "name": "finder", "anchor": "function-finder", "kind": "function"},
#     {"id": "extension-table", "name": "extension_table", "anchor": "function-extension-table", "kind": "function"},
#     {"id": "find", "name": "find", "anchor": "function-find", "kind": "function"},
#     {"id": "match-ext", "name": "match_ext", "anchor": "function-match-ext", "kind": "function"},
#     {"id": "check-ext", "name": "check_ext", "anchor": "function-check-ext", "kind": "function"},
#     {"id": "identify", "name": "identify", "anchor": "function-identify", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Format registry and classifier dispatcher.

Responsibilities
----------------
- Hold the process-wide :func:`finder` mapping each :class:`Signature` to
  its matcher, and the derived extension → candidate signatures table.
- Offer :func:`find` and :func:`match_ext` plus category-scoped entry points
  (:func:`archive`, :func:`image`, :func:`program`, ...).
- Describe a whole file through :func:`identify`.

Design Notes
------------
- Both tables are built once, on first use, behind a lock and exposed as
  read-only mappings; lookups never rebuild them.
- Category views are fixed tuples rather than filters over the finder since
  one signature may belong to several reporting groups (the BBS-era archives
  are also archives).
- Matchers are designed to be mutually exclusive for well-formed input; the
  finder order (archives before programs) only decides genuinely ambiguous
  input such as a gzip payload behind a DOS stub.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from . import archives, discimages, executables, media, music, text
from .executables import WindowsHeader
from .id3 import id3_description
from .reader import ByteWindow, Source, open_window
from .signatures import EXTENSIONS, Signature

__all__ = [
    "Matcher",
    "ExtensionCheck",
    "Identification",
    "ARCHIVES",
    "ARCHIVES_BBS",
    "AUDIO",
    "DISC_IMAGES",
    "DOCUMENTS",
    "IMAGES",
    "MUSIC",
    "PROGRAMS",
    "TEXTS",
    "VIDEOS",
    "finder",
    "extension_table",
    "find",
    "match_ext",
    "check_ext",
    "archive",
    "disc_image",
    "document",
    "image",
    "program",
    "text_kind",
    "video",
    "audio",
    "identify",
]

Matcher = Callable[[ByteWindow], bool]

S = Signature

ARCHIVES: Tuple[Signature, ...] = (
    S.PKWARE_ZIP_SHRINK,
    S.PKWARE_ZIP_REDUCE,
    S.PKWARE_ZIP_IMPLODE,
    S.PKWARE_ZIP64,
    S.PKWARE_ZIP,
    S.PKWARE_MULTI_VOLUME,
    S.PKLITE,
    S.PKSFX,
    S.TAPE_ARCHIVE,
    S.ROSHAL_ARCHIVE,
    S.ROSHAL_ARCHIVE_V5,
    S.GZIP_COMPRESS_ARCHIVE,
    S.BZIP2_COMPRESS_ARCHIVE,
    S.X7Z_COMPRESS_ARCHIVE,
    S.XZ_COMPRESS_ARCHIVE,
    S.ZSTANDARD_ARCHIVE,
    S.FREEARC,
    S.ARCHIVE_SEA,
    S.YOSHI_LHA,
    S.ZOO_ARCHIVE,
    S.ARCHIVE_ROBERT_JUNG,
    S.MICROSOFT_CABINET,
)

ARCHIVES_BBS: Tuple[Signature, ...] = (
    S.PKWARE_ZIP_SHRINK,
    S.PKWARE_ZIP_REDUCE,
    S.PKWARE_ZIP_IMPLODE,
    S.ARCHIVE_SEA,
    S.YOSHI_LHA,
    S.ZOO_ARCHIVE,
    S.ARCHIVE_ROBERT_JUNG,
)

PROGRAMS: Tuple[Signature, ...] = (
    S.MICROSOFT_EXECUTABLE,
    S.MICROSOFT_DOS_KWAJ,
    S.MICROSOFT_DOS_SZDD,
    S.MICROSOFT_COMPOUND_FILE,
)

DISC_IMAGES: Tuple[Signature, ...] = (
    S.CD_ISO9660,
    S.CD_NERO,
    S.CD_POWERISO,
    S.CD_ALCOHOL120,
)

IMAGES: Tuple[Signature, ...] = (
    S.ELECTRONIC_ARTS_IFF,
    S.AV1_IMAGE_FILE,
    S.JPEG_FILE_INTERCHANGE_FORMAT,
    S.JPEG_2000,
    S.PORTABLE_NETWORK_GRAPHICS,
    S.GRAPHICS_INTERCHANGE_FORMAT,
    S.GOOGLE_WEBP,
    S.TAGGED_IMAGE_FILE_FORMAT,
    S.BMP_FILE_FORMAT,
    S.PERSONAL_COMPUTER_EXCHANGE,
    S.INTERLEAVED_BITMAP,
    S.MICROSOFT_ICON,
    S.RIPSCRIP,
)

VIDEOS: Tuple[Signature, ...] = (
    S.MPEG4,
    S.QUICKTIME_MOVIE,
    S.QUICKTIME_M4V,
    S.MICROSOFT_AUDIO_VIDEO_INTERLEAVE,
    S.MICROSOFT_WINDOWS_MEDIA,
    S.MPEG,
    S.FLASH_VIDEO,
    S.REALPLAYER,
)

AUDIO: Tuple[Signature, ...] = (
    S.MUSICAL_INSTRUMENT_DIGITAL_INTERFACE,
    S.MPEG1_AUDIO_LAYER3,
    S.MPEG_ADVANCED_AUDIO_CODING,
    S.OGG_VORBIS_CODEC,
    S.FREE_LOSSLESS_AUDIO_CODEC,
    S.WAVE_AUDIO_FOR_WINDOWS,
)

MUSIC: Tuple[Signature, ...] = (
    S.MUSIC_MULTITRACK_MODULE,
    S.MUSIC_IMPULSE_TRACKER,
    S.MUSIC_EXTENDED_MODULE,
    S.MUSIC_PROTRACKER,
    S.MUSIC_MODULE,
)

DOCUMENTS: Tuple[Signature, ...] = (
    S.WINDOWS_HELP_FILE,
    S.PORTABLE_DOCUMENT_FORMAT,
    S.RICH_TEXT_FORMAT,
    S.UTF8_TEXT,
    S.UTF16_TEXT,
    S.UTF32_TEXT,
)

TEXTS: Tuple[Signature, ...] = (
    S.UTF8_TEXT,
    S.UTF16_TEXT,
    S.UTF32_TEXT,
    S.ANSI_ESCAPE_TEXT,
    S.PLAIN_TEXT,
)

_MATCHERS: Dict[Signature, Matcher] = {
    S.ELECTRONIC_ARTS_IFF: media.iff,
    S.AV1_IMAGE_FILE: media.avif,
    S.JPEG_FILE_INTERCHANGE_FORMAT: media.jpeg,
    S.JPEG_2000: media.jpeg2000,
    S.PORTABLE_NETWORK_GRAPHICS: media.png,
    S.GRAPHICS_INTERCHANGE_FORMAT: media.gif,
    S.GOOGLE_WEBP: media.webp,
    S.TAGGED_IMAGE_FILE_FORMAT: media.tiff,
    S.BMP_FILE_FORMAT: media.bmp,
    S.PERSONAL_COMPUTER_EXCHANGE: media.pcx,
    S.INTERLEAVED_BITMAP: media.ilbm,
    S.MICROSOFT_ICON: media.ico,
    S.RIPSCRIP: media.ripscrip,
    S.MPEG4: media.mp4,
    S.QUICKTIME_MOVIE: media.qt_mov,
    S.QUICKTIME_M4V: media.m4v,
    S.MICROSOFT_AUDIO_VIDEO_INTERLEAVE: media.avi,
    S.MICROSOFT_WINDOWS_MEDIA: media.wmv,
    S.MPEG: media.mpeg,
    S.FLASH_VIDEO: media.flv,
    S.REALPLAYER: media.ivr,
    S.MUSICAL_INSTRUMENT_DIGITAL_INTERFACE: music.midi,
    S.MPEG1_AUDIO_LAYER3: media.mp3,
    S.MPEG_ADVANCED_AUDIO_CODING: media.aac,
    S.OGG_VORBIS_CODEC: media.ogg,
    S.FREE_LOSSLESS_AUDIO_CODEC: media.flac,
    S.WAVE_AUDIO_FOR_WINDOWS: media.wave,
    S.MUSIC_MODULE: music.mod,
    S.MUSIC_EXTENDED_MODULE: music.xm,
    S.MUSIC_MULTITRACK_MODULE: music.mtm,
    S.MUSIC_IMPULSE_TRACKER: music.it,
    S.MUSIC_PROTRACKER: music.mk,
    S.PKWARE_ZIP_SHRINK: archives.pk_shrink,
    S.PKWARE_ZIP_REDUCE: archives.pk_reduce,
    S.PKWARE_ZIP_IMPLODE: archives.pk_implode,
    S.PKWARE_ZIP64: archives.zip64,
    S.PKWARE_ZIP: archives.pkzip,
    S.PKWARE_MULTI_VOLUME: archives.pkzip_multi,
    S.PKLITE: executables.pklite,
    S.PKSFX: executables.pksfx,
    S.TAPE_ARCHIVE: archives.tar,
    S.ROSHAL_ARCHIVE: archives.rar,
    S.ROSHAL_ARCHIVE_V5: archives.rar_v5,
    S.GZIP_COMPRESS_ARCHIVE: archives.gzip,
    S.BZIP2_COMPRESS_ARCHIVE: archives.bzip2,
    S.X7Z_COMPRESS_ARCHIVE: archives.x7z,
    S.XZ_COMPRESS_ARCHIVE: archives.xz,
    S.ZSTANDARD_ARCHIVE: archives.zstd,
    S.FREEARC: archives.arc_free,
    S.ARCHIVE_SEA: archives.arc_sea,
    S.YOSHI_LHA: archives.lzh_lha,
    S.ZOO_ARCHIVE: archives.zoo,
    S.ARCHIVE_ROBERT_JUNG: archives.arj,
    S.MICROSOFT_CABINET: archives.cab,
    S.MICROSOFT_DOS_KWAJ: executables.dos_kwaj,
    S.MICROSOFT_DOS_SZDD: executables.dos_szdd,
    S.MICROSOFT_EXECUTABLE: executables.ms_exe,
    S.MICROSOFT_COMPOUND_FILE: executables.ms_comp,
    S.CD_ISO9660: discimages.iso,
    S.CD_NERO: discimages.nri,
    S.CD_POWERISO: discimages.daa,
    S.CD_ALCOHOL120: discimages.mdf,
    S.WINDOWS_HELP_FILE: text.hlp,
    S.PORTABLE_DOCUMENT_FORMAT: text.pdf,
    S.RICH_TEXT_FORMAT: text.rtf,
    S.UTF8_TEXT: text.utf8,
    S.UTF16_TEXT: text.utf16,
    S.UTF32_TEXT: text.utf32,
}

_PRIORITY: Tuple[Tuple[Signature, ...], ...] = (
    ARCHIVES,
    PROGRAMS,
    DISC_IMAGES,
    IMAGES,
    VIDEOS,
    AUDIO,
    MUSIC,
    DOCUMENTS,
)

_TABLE_LOCK = threading.Lock()
_FINDER: Optional[Mapping[Signature, Matcher]] = None
_EXTENSION_TABLE: Optional[Mapping[str, Tuple[Signature, ...]]] = None


def _build() -> None:
    global _FINDER, _EXTENSION_TABLE  # noqa: PLW0603

    ordered: Dict[Signature, Matcher] = {}
    for group in _PRIORITY:
        for sign in group:
            ordered.setdefault(sign, _MATCHERS[sign])
    missing = set(_MATCHERS) - set(ordered)
    if missing:
        raise RuntimeError(f"signatures missing from priority groups: {sorted(missing)}")

    by_ext: Dict[str, List[Signature]] = {}
    for sign, exts in EXTENSIONS.items():
        for ext in exts:
            by_ext.setdefault(ext, []).append(sign)

    _FINDER = MappingProxyType(ordered)
    _EXTENSION_TABLE = MappingProxyType({ext: tuple(signs) for ext, signs in by_ext.items()})


def finder() -> Mapping[Signature, Matcher]:
    """Return the read-only signature → matcher mapping in priority order."""
    if _FINDER is None:
        with _TABLE_LOCK:
            if _FINDER is None:
                _build()
    return _FINDER  # type: ignore[return-value]


def extension_table() -> Mapping[str, Tuple[Signature, ...]]:
    """Return the read-only lower-case extension → candidate signatures table."""
    if _EXTENSION_TABLE is None:
        finder()
    return _EXTENSION_TABLE  # type: ignore[return-value]


def _first_match(r: ByteWindow, group: Tuple[Signature, ...]) -> Signature:
    table = finder()
    for sign in group:
        matcher = table.get(sign)
        if matcher is not None and matcher(r):
            return sign
    return S.UNKNOWN


def _text_fallback(r: ByteWindow) -> Signature:
    if text.ansi(r):
        return S.ANSI_ESCAPE_TEXT
    if text.txt(r):
        return S.PLAIN_TEXT
    return S.UNKNOWN


def find(source: Source) -> Signature:
    """Identify ``source`` by content alone.

    Empty input is :attr:`Signature.ZERO_BYTE`; input that no binary matcher
    accepts is classified as ANSI or plain text, else
    :attr:`Signature.UNKNOWN`.
    """
    r = ByteWindow.wrap(source)
    if r.empty():
        return S.ZERO_BYTE
    for sign, matcher in finder().items():
        if matcher(r):
            return sign
    return _text_fallback(r)


def _extension(filename: str) -> str:
    return Path(filename).suffix.lower()


def match_ext(filename: str, source: Source) -> Tuple[bool, Signature]:
    """Check the content of ``source`` against the extension of ``filename``.

    Returns:
        ``(True, signature)`` when one of the signatures registered for the
        extension accepts the content. Otherwise the content signature from
        :func:`find`, paired with whether it is one of the candidates. Empty
        or unmatched content never raises.
    """
    r = ByteWindow.wrap(source)
    table = finder()
    candidates = extension_table().get(_extension(filename), ())
    for sign in candidates:
        matcher = table.get(sign)
        if matcher is not None and matcher(r):
            return True, sign
    found = find(r)
    # text signatures have no binary matcher and are only reached through find
    return found in candidates, found


class ExtensionCheck(str, Enum):
    """Outcome of comparing a filename extension with the content."""

    MATCHES = "matches"
    CONTRADICTS = "contradicts"
    UNDETERMINED = "undetermined"


def check_ext(filename: str, source: Source) -> Tuple[ExtensionCheck, Signature]:
    """Three-way variant of :func:`match_ext`.

    ``CONTRADICTS`` means the content was positively identified as something
    the extension does not allow; ``UNDETERMINED`` covers unknown, empty and
    plain text content as well as extensions absent from the table.
    """
    matched, sign = match_ext(filename, source)
    if matched:
        return ExtensionCheck.MATCHES, sign
    if sign in (S.UNKNOWN, S.ZERO_BYTE, S.PLAIN_TEXT):
        return ExtensionCheck.UNDETERMINED, sign
    if _extension(filename) not in extension_table():
        return ExtensionCheck.UNDETERMINED, sign
    return ExtensionCheck.CONTRADICTS, sign


def archive(source: Source) -> Signature:
    return _first_match(ByteWindow.wrap(source), ARCHIVES)


def disc_image(source: Source) -> Signature:
    return _first_match(ByteWindow.wrap(source), DISC_IMAGES)


def image(source: Source) -> Signature:
    return _first_match(ByteWindow.wrap(source), IMAGES)


def program(source: Source) -> Signature:
    return _first_match(ByteWindow.wrap(source), PROGRAMS)


def video(source: Source) -> Signature:
    return _first_match(ByteWindow.wrap(source), VIDEOS)


def audio(source: Source) -> Signature:
    """Return the audio or tracker music signature of ``source``."""
    r = ByteWindow.wrap(source)
    sign = _first_match(r, AUDIO)
    if sign is S.UNKNOWN:
        sign = _first_match(r, MUSIC)
    return sign


def document(source: Source) -> Signature:
    """Return the document signature, falling back to ANSI or plain text."""
    r = ByteWindow.wrap(source)
    sign = _first_match(r, DOCUMENTS)
    if sign is S.UNKNOWN:
        return _text_fallback(r)
    return sign


def text_kind(source: Source) -> Signature:
    """Return the text encoding signature, falling back to ANSI or plain text."""
    r = ByteWindow.wrap(source)
    sign = _first_match(r, TEXTS)
    if sign is S.UNKNOWN:
        return _text_fallback(r)
    return sign


@dataclass(frozen=True)
class Identification:
    """Result of :func:`identify`.

    Attributes:
        signature: Content signature.
        size: Byte length of the source.
        executable: Decoded Windows header for programs, else ``None``.
        description: ID3 or tracker song description where available.
        match: Outcome of checking the filename extension, when one was given.
    """

    signature: Signature
    size: int
    executable: Optional[WindowsHeader] = None
    description: Optional[str] = None
    match: Optional[ExtensionCheck] = None

    @property
    def label(self) -> str:
        return self.signature.label

    @property
    def title(self) -> str:
        return self.signature.title


def identify(source: Union[str, Path, Source], filename: Optional[str] = None) -> Identification:
    """Identify a path or byte source and collect the sub-parser details."""
    if isinstance(source, (str, Path)):
        with open_window(source) as r:
            name = filename if filename is not None else Path(source).name
            return _identify(r, name)
    return _identify(ByteWindow.wrap(source), filename)


def _identify(r: ByteWindow, filename: Optional[str]) -> Identification:
    sign = find(r)
    executable: Optional[WindowsHeader] = None
    description: Optional[str] = None
    if sign in (S.MICROSOFT_EXECUTABLE, S.PKLITE, S.PKSFX):
        header = executables.find_executable(r)
        executable = header if header.found else None
    elif sign in (S.MPEG1_AUDIO_LAYER3, S.MPEG_ADVANCED_AUDIO_CODING):
        description = id3_description(r)
    elif sign in MUSIC:
        description = music.tracker_description(r) or None
    match = check_ext(filename, r)[0] if filename else None
    return Identification(
        signature=sign,
        size=r.size,
        executable=executable,
        description=description,
        match=match,
    )
