"""Closed enumeration of recognised file-format variants.

Each :class:`Signature` names one specific variant rather than a broad family,
so the ZIP compression methods, both RAR generations and every text encoding
get their own value.  The short ``label``, descriptive ``title`` and the
expected filename ``extensions`` are looked up from the immutable tables below.
"""

from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Tuple

__all__ = ["Signature", "LABELS", "TITLES", "EXTENSIONS"]


class Signature(IntEnum):
    """A recognised file-format variant."""

    ZERO_BYTE = -2
    UNKNOWN = -1
    ELECTRONIC_ARTS_IFF = 0
    AV1_IMAGE_FILE = 1
    JPEG_FILE_INTERCHANGE_FORMAT = 2
    JPEG_2000 = 3
    PORTABLE_NETWORK_GRAPHICS = 4
    GRAPHICS_INTERCHANGE_FORMAT = 5
    GOOGLE_WEBP = 6
    TAGGED_IMAGE_FILE_FORMAT = 7
    BMP_FILE_FORMAT = 8
    PERSONAL_COMPUTER_EXCHANGE = 9
    INTERLEAVED_BITMAP = 10
    MICROSOFT_ICON = 11
    RIPSCRIP = 12
    MPEG4 = 13
    QUICKTIME_MOVIE = 14
    QUICKTIME_M4V = 15
    MICROSOFT_AUDIO_VIDEO_INTERLEAVE = 16
    MICROSOFT_WINDOWS_MEDIA = 17
    MPEG = 18
    FLASH_VIDEO = 19
    REALPLAYER = 20
    MUSICAL_INSTRUMENT_DIGITAL_INTERFACE = 21
    MPEG1_AUDIO_LAYER3 = 22
    MPEG_ADVANCED_AUDIO_CODING = 23
    OGG_VORBIS_CODEC = 24
    FREE_LOSSLESS_AUDIO_CODEC = 25
    WAVE_AUDIO_FOR_WINDOWS = 26
    MUSIC_MODULE = 27
    MUSIC_EXTENDED_MODULE = 28
    MUSIC_MULTITRACK_MODULE = 29
    MUSIC_IMPULSE_TRACKER = 30
    MUSIC_PROTRACKER = 31
    PKWARE_ZIP_SHRINK = 32
    PKWARE_ZIP_REDUCE = 33
    PKWARE_ZIP_IMPLODE = 34
    PKWARE_ZIP64 = 35
    PKWARE_ZIP = 36
    PKWARE_MULTI_VOLUME = 37
    PKLITE = 38
    PKSFX = 39
    TAPE_ARCHIVE = 40
    ROSHAL_ARCHIVE = 41
    ROSHAL_ARCHIVE_V5 = 42
    GZIP_COMPRESS_ARCHIVE = 43
    BZIP2_COMPRESS_ARCHIVE = 44
    X7Z_COMPRESS_ARCHIVE = 45
    XZ_COMPRESS_ARCHIVE = 46
    ZSTANDARD_ARCHIVE = 47
    FREEARC = 48
    ARCHIVE_SEA = 49
    YOSHI_LHA = 50
    ZOO_ARCHIVE = 51
    ARCHIVE_ROBERT_JUNG = 52
    MICROSOFT_CABINET = 53
    MICROSOFT_DOS_KWAJ = 54
    MICROSOFT_DOS_SZDD = 55
    MICROSOFT_EXECUTABLE = 56
    MICROSOFT_COMPOUND_FILE = 57
    CD_ISO9660 = 58
    CD_NERO = 59
    CD_POWERISO = 60
    CD_ALCOHOL120 = 61
    WINDOWS_HELP_FILE = 62
    PORTABLE_DOCUMENT_FORMAT = 63
    RICH_TEXT_FORMAT = 64
    UTF8_TEXT = 65
    UTF16_TEXT = 66
    UTF32_TEXT = 67
    ANSI_ESCAPE_TEXT = 68
    PLAIN_TEXT = 69

    @property
    def label(self) -> str:
        """Canonical short name, e.g. ``"pkzip shrunk archive"``."""

        return _describe(self, LABELS, "0-byte data", "binary data", "error")

    @property
    def title(self) -> str:
        """Descriptive title, e.g. ``"Shrunked pkzip archive"``."""

        return _describe(self, TITLES, "Zero-byte data", "Binary data", "Error")

    @property
    def extensions(self) -> Tuple[str, ...]:
        return EXTENSIONS.get(self, ())

    def __str__(self) -> str:
        return self.label


def _describe(
    sign: int, table: Mapping["Signature", str], zero: str, unknown: str, error: str
) -> str:
    if sign <= Signature.ZERO_BYTE:
        return zero
    if sign == Signature.UNKNOWN:
        return unknown
    try:
        return table[Signature(sign)]
    except (KeyError, ValueError):
        return error


_S = Signature

LABELS: Mapping[Signature, str] = MappingProxyType(
    {
        _S.ELECTRONIC_ARTS_IFF: "IFF image",
        _S.AV1_IMAGE_FILE: "AV1 image",
        _S.JPEG_FILE_INTERCHANGE_FORMAT: "JPEG image",
        _S.JPEG_2000: "JPEG 2000 image",
        _S.PORTABLE_NETWORK_GRAPHICS: "PNG image",
        _S.GRAPHICS_INTERCHANGE_FORMAT: "GIF image",
        _S.GOOGLE_WEBP: "WebP image",
        _S.TAGGED_IMAGE_FILE_FORMAT: "TIFF image",
        _S.BMP_FILE_FORMAT: "BMP image",
        _S.PERSONAL_COMPUTER_EXCHANGE: "PCX image",
        _S.INTERLEAVED_BITMAP: "ILBM image",
        _S.MICROSOFT_ICON: "Microsoft icon",
        _S.RIPSCRIP: "RIPscrip",
        _S.MPEG4: "MPEG-4 video",
        _S.QUICKTIME_MOVIE: "QuickTime video",
        _S.QUICKTIME_M4V: "QuickTime M4V video",
        _S.MICROSOFT_AUDIO_VIDEO_INTERLEAVE: "AVI video",
        _S.MICROSOFT_WINDOWS_MEDIA: "Windows Media video",
        _S.MPEG: "MPEG video",
        _S.FLASH_VIDEO: "Flash video",
        _S.REALPLAYER: "RealPlayer video",
        _S.MUSICAL_INSTRUMENT_DIGITAL_INTERFACE: "MIDI audio",
        _S.MPEG1_AUDIO_LAYER3: "MP3 audio",
        _S.MPEG_ADVANCED_AUDIO_CODING: "AAC audio",
        _S.OGG_VORBIS_CODEC: "Ogg audio",
        _S.FREE_LOSSLESS_AUDIO_CODEC: "FLAC audio",
        _S.WAVE_AUDIO_FOR_WINDOWS: "Wave audio",
        _S.MUSIC_MODULE: "Tracker music mod",
        _S.MUSIC_EXTENDED_MODULE: "Tracker music extended mod",
        _S.MUSIC_MULTITRACK_MODULE: "Tracker music multi-track mod",
        _S.MUSIC_IMPULSE_TRACKER: "Tracker music Impulse mod",
        _S.MUSIC_PROTRACKER: "Tracker music ProTracker mod",
        _S.PKWARE_ZIP_SHRINK: "pkzip shrunk archive",
        _S.PKWARE_ZIP_REDUCE: "pkzip reduced archive",
        _S.PKWARE_ZIP_IMPLODE: "pkzip imploded archive",
        _S.PKWARE_ZIP64: "zip64 archive",
        _S.PKWARE_ZIP: "zip archive",
        _S.PKWARE_MULTI_VOLUME: "multivolume zip",
        _S.PKLITE: "pklite compressed",
        _S.PKSFX: "self-extracting zip",
        _S.TAPE_ARCHIVE: "Tape archive",
        _S.ROSHAL_ARCHIVE: "RAR archive",
        _S.ROSHAL_ARCHIVE_V5: "RAR v5+ archive",
        _S.GZIP_COMPRESS_ARCHIVE: "Gzip archive",
        _S.BZIP2_COMPRESS_ARCHIVE: "Bzip2 archive",
        _S.X7Z_COMPRESS_ARCHIVE: "7z archive",
        _S.XZ_COMPRESS_ARCHIVE: "XZ archive",
        _S.ZSTANDARD_ARCHIVE: "ZST archive",
        _S.FREEARC: "FreeARC",
        _S.ARCHIVE_SEA: "ARC by SEA",
        _S.YOSHI_LHA: "LHA by Yoshi",
        _S.ZOO_ARCHIVE: "Zoo archive",
        _S.ARCHIVE_ROBERT_JUNG: "ARJ archive",
        _S.MICROSOFT_CABINET: "Microsoft cabinet",
        _S.MICROSOFT_DOS_KWAJ: "MS-DOS KWAJ",
        _S.MICROSOFT_DOS_SZDD: "MS-DOS SZDD",
        _S.MICROSOFT_EXECUTABLE: "MS-DOS executable",
        _S.MICROSOFT_COMPOUND_FILE: "Microsoft compound file",
        _S.CD_ISO9660: "CD, ISO 9660",
        _S.CD_NERO: "CD, Nero",
        _S.CD_POWERISO: "CD, PowerISO",
        _S.CD_ALCOHOL120: "CD, Alcohol 120",
        _S.WINDOWS_HELP_FILE: "Windows help",
        _S.PORTABLE_DOCUMENT_FORMAT: "PDF document",
        _S.RICH_TEXT_FORMAT: "rich text",
        _S.UTF8_TEXT: "UTF-8 text",
        _S.UTF16_TEXT: "UTF-16 text",
        _S.UTF32_TEXT: "UTF-32 text",
        _S.ANSI_ESCAPE_TEXT: "ANSI text",
        _S.PLAIN_TEXT: "plain text",
    }
)

TITLES: Mapping[Signature, str] = MappingProxyType(
    {
        _S.ELECTRONIC_ARTS_IFF: "Electronic Arts IFF",
        _S.AV1_IMAGE_FILE: "AV1 Image File",
        _S.JPEG_FILE_INTERCHANGE_FORMAT: "JPEG File Interchange Format",
        _S.JPEG_2000: "JPEG 2000",
        _S.PORTABLE_NETWORK_GRAPHICS: "Portable Network Graphics",
        _S.GRAPHICS_INTERCHANGE_FORMAT: "Graphics Interchange Format",
        _S.GOOGLE_WEBP: "Google WebP",
        _S.TAGGED_IMAGE_FILE_FORMAT: "Tagged Image File Format",
        _S.BMP_FILE_FORMAT: "Bitmap image file",
        _S.PERSONAL_COMPUTER_EXCHANGE: "Personal Computer eXchange",
        _S.INTERLEAVED_BITMAP: "Interleaved Bitmap",
        _S.MICROSOFT_ICON: "Microsoft Icon",
        _S.RIPSCRIP: "RIPscrip vector graphic",
        _S.MPEG4: "MPEG-4 video",
        _S.QUICKTIME_MOVIE: "QuickTime Movie",
        _S.QUICKTIME_M4V: "QuickTime M4V",
        _S.MICROSOFT_AUDIO_VIDEO_INTERLEAVE: "Microsoft Audio Video Interleave",
        _S.MICROSOFT_WINDOWS_MEDIA: "Microsoft Windows Media",
        _S.MPEG: "MPEG program stream",
        _S.FLASH_VIDEO: "Flash Video",
        _S.REALPLAYER: "RealPlayer",
        _S.MUSICAL_INSTRUMENT_DIGITAL_INTERFACE: "Musical Instrument Digital Interface",
        _S.MPEG1_AUDIO_LAYER3: "MPEG-1 Audio Layer 3",
        _S.MPEG_ADVANCED_AUDIO_CODING: "MPEG Advanced Audio Coding",
        _S.OGG_VORBIS_CODEC: "Ogg Vorbis Codec",
        _S.FREE_LOSSLESS_AUDIO_CODEC: "Free Lossless Audio Codec",
        _S.WAVE_AUDIO_FOR_WINDOWS: "Wave Audio for Windows",
        _S.MUSIC_MODULE: "Tracker music module",
        _S.MUSIC_EXTENDED_MODULE: "Tracker music extended module",
        _S.MUSIC_MULTITRACK_MODULE: "Tracker music multi-track module",
        _S.MUSIC_IMPULSE_TRACKER: "Tracker music Impulse module",
        _S.MUSIC_PROTRACKER: "Tracker music ProTracker module",
        _S.PKWARE_ZIP_SHRINK: "Shrunked pkzip archive",
        _S.PKWARE_ZIP_REDUCE: "Reduced pkzip archive",
        _S.PKWARE_ZIP_IMPLODE: "Imploded pkzip archive",
        _S.PKWARE_ZIP64: "PKWARE zip64 archive",
        _S.PKWARE_ZIP: "Zip archive",
        _S.PKWARE_MULTI_VOLUME: "Zip multi-volume archive",
        _S.PKLITE: "PKLITE compressed executable",
        _S.PKSFX: "PKSFX self-extracting archive",
        _S.TAPE_ARCHIVE: "Tape Archive",
        _S.ROSHAL_ARCHIVE: "Roshal Archive",
        _S.ROSHAL_ARCHIVE_V5: "Roshal Archive v5",
        _S.GZIP_COMPRESS_ARCHIVE: "Gzip compress archive",
        _S.BZIP2_COMPRESS_ARCHIVE: "Bzip2 compress archive",
        _S.X7Z_COMPRESS_ARCHIVE: "7z compress archive",
        _S.XZ_COMPRESS_ARCHIVE: "XZ compress archive",
        _S.ZSTANDARD_ARCHIVE: "ZStandard archive",
        _S.FREEARC: "FreeArc",
        _S.ARCHIVE_SEA: "Archive by SEA",
        _S.YOSHI_LHA: "Yoshi LHA",
        _S.ZOO_ARCHIVE: "Zoo Archive",
        _S.ARCHIVE_ROBERT_JUNG: "Archive by Robert Jung",
        _S.MICROSOFT_CABINET: "Microsoft Cabinet",
        _S.MICROSOFT_DOS_KWAJ: "Microsoft DOS KWAJ",
        _S.MICROSOFT_DOS_SZDD: "Microsoft DOS SZDD",
        _S.MICROSOFT_EXECUTABLE: "Microsoft executable",
        _S.MICROSOFT_COMPOUND_FILE: "Microsoft compound file",
        _S.CD_ISO9660: "CD ISO 9660",
        _S.CD_NERO: "CD Nero",
        _S.CD_POWERISO: "CD PowerISO",
        _S.CD_ALCOHOL120: "CD Alcohol 120",
        _S.WINDOWS_HELP_FILE: "Windows Help File",
        _S.PORTABLE_DOCUMENT_FORMAT: "Portable Document Format",
        _S.RICH_TEXT_FORMAT: "Rich Text Format",
        _S.UTF8_TEXT: "UTF-8 text",
        _S.UTF16_TEXT: "UTF-16 text",
        _S.UTF32_TEXT: "UTF-32 text",
        _S.ANSI_ESCAPE_TEXT: "ANSI escaped text",
        _S.PLAIN_TEXT: "Plain text",
    }
)

EXTENSIONS: Mapping[Signature, Tuple[str, ...]] = MappingProxyType(
    {
        _S.ELECTRONIC_ARTS_IFF: (".iff",),
        _S.AV1_IMAGE_FILE: (".avif",),
        _S.JPEG_FILE_INTERCHANGE_FORMAT: (".jpg", ".jpeg"),
        _S.JPEG_2000: (".jp2", ".j2k", ".jpf", ".jpx", ".jpm", ".mj2"),
        _S.PORTABLE_NETWORK_GRAPHICS: (".png",),
        _S.GRAPHICS_INTERCHANGE_FORMAT: (".gif",),
        _S.GOOGLE_WEBP: (".webp",),
        _S.TAGGED_IMAGE_FILE_FORMAT: (".tif", ".tiff"),
        _S.BMP_FILE_FORMAT: (".bmp",),
        _S.PERSONAL_COMPUTER_EXCHANGE: (".pcx",),
        _S.INTERLEAVED_BITMAP: (".ilbm", ".lbm"),
        _S.MICROSOFT_ICON: (".ico",),
        _S.RIPSCRIP: (".rip",),
        _S.MPEG4: (".mp4",),
        _S.QUICKTIME_MOVIE: (".mov",),
        _S.QUICKTIME_M4V: (".m4v",),
        _S.MICROSOFT_AUDIO_VIDEO_INTERLEAVE: (".avi",),
        _S.MICROSOFT_WINDOWS_MEDIA: (".wmv",),
        _S.MPEG: (".mpg", ".mpeg"),
        _S.FLASH_VIDEO: (".flv",),
        _S.REALPLAYER: (".rv", ".rm", ".rmvb"),
        _S.MUSICAL_INSTRUMENT_DIGITAL_INTERFACE: (".mid", ".midi"),
        _S.MPEG1_AUDIO_LAYER3: (".mp3",),
        _S.MPEG_ADVANCED_AUDIO_CODING: (".aac", ".mp3"),
        _S.OGG_VORBIS_CODEC: (".ogg",),
        _S.FREE_LOSSLESS_AUDIO_CODEC: (".flac",),
        _S.WAVE_AUDIO_FOR_WINDOWS: (".wav",),
        _S.MUSIC_MODULE: (".mod", ".s3m", ".mo3"),
        _S.MUSIC_EXTENDED_MODULE: (".xm",),
        _S.MUSIC_MULTITRACK_MODULE: (".mtm",),
        _S.MUSIC_IMPULSE_TRACKER: (".it",),
        _S.MUSIC_PROTRACKER: (".mod",),
        _S.PKWARE_ZIP_SHRINK: (".zip",),
        _S.PKWARE_ZIP_REDUCE: (".zip",),
        _S.PKWARE_ZIP_IMPLODE: (".zip",),
        _S.PKWARE_ZIP64: (".zip",),
        _S.PKWARE_ZIP: (".zip",),
        _S.PKWARE_MULTI_VOLUME: (".zip",),
        _S.PKLITE: (".zip", ".exe", ".com"),
        _S.PKSFX: (".zip", ".exe"),
        _S.TAPE_ARCHIVE: (".tar",),
        _S.ROSHAL_ARCHIVE: (".rar",),
        _S.ROSHAL_ARCHIVE_V5: (".rar",),
        _S.GZIP_COMPRESS_ARCHIVE: (".gz", ".tgz"),
        _S.BZIP2_COMPRESS_ARCHIVE: (".bz2", ".tbz2"),
        _S.X7Z_COMPRESS_ARCHIVE: (".7z",),
        _S.XZ_COMPRESS_ARCHIVE: (".xz", ".txz"),
        _S.ZSTANDARD_ARCHIVE: (".zst",),
        _S.FREEARC: (".arc",),
        _S.ARCHIVE_SEA: (".arc",),
        _S.YOSHI_LHA: (".lzh", ".lha"),
        _S.ZOO_ARCHIVE: (".zoo",),
        _S.ARCHIVE_ROBERT_JUNG: (".arj",),
        _S.MICROSOFT_CABINET: (".cab",),
        _S.MICROSOFT_DOS_KWAJ: (".com",),
        _S.MICROSOFT_DOS_SZDD: (".exe",),
        _S.MICROSOFT_EXECUTABLE: (".exe", ".com", ".dll"),
        _S.MICROSOFT_COMPOUND_FILE: (".exe", ".msi", ".doc", ".xls"),
        _S.CD_ISO9660: (".iso",),
        _S.CD_NERO: (".nri",),
        _S.CD_POWERISO: (".daa",),
        _S.CD_ALCOHOL120: (".mdf",),
        _S.WINDOWS_HELP_FILE: (".hlp",),
        _S.PORTABLE_DOCUMENT_FORMAT: (".pdf",),
        _S.RICH_TEXT_FORMAT: (".rtf",),
        _S.UTF8_TEXT: (".txt",),
        _S.UTF16_TEXT: (".txt",),
        _S.UTF32_TEXT: (".txt",),
        _S.ANSI_ESCAPE_TEXT: (".ans",),
        _S.PLAIN_TEXT: (".txt", ".nfo", ".diz"),
    }
)
