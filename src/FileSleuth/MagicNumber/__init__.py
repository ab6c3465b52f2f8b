"""Content-based file format identification.

Exports the :class:`Signature` enumeration, the :class:`ByteWindow` reader and
the classifier entry points from :mod:`FileSleuth.MagicNumber.registry`.
"""

from .executables import WindowsHeader, find_executable
from .id3 import id3_description, id3v1, id3v2
from .music import tracker_description
from .reader import ByteWindow, open_window
from .registry import (
    ARCHIVES,
    ARCHIVES_BBS,
    AUDIO,
    DISC_IMAGES,
    DOCUMENTS,
    IMAGES,
    MUSIC,
    PROGRAMS,
    TEXTS,
    VIDEOS,
    ExtensionCheck,
    Identification,
    archive,
    audio,
    check_ext,
    disc_image,
    document,
    extension_table,
    find,
    finder,
    identify,
    image,
    match_ext,
    program,
    text_kind,
    video,
)
from .signatures import Signature

__all__ = [
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
    "ByteWindow",
    "ExtensionCheck",
    "Identification",
    "Signature",
    "WindowsHeader",
    "archive",
    "audio",
    "check_ext",
    "disc_image",
    "document",
    "extension_table",
    "find",
    "find_executable",
    "finder",
    "id3_description",
    "id3v1",
    "id3v2",
    "identify",
    "image",
    "match_ext",
    "open_window",
    "program",
    "text_kind",
    "tracker_description",
    "video",
]
