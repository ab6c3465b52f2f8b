"""Archive listing, extraction and filename repair.

Listing and extraction read archives in process with libarchive and fall
back to the ``arj``, ``lha``, ``unrar`` and ``unzip`` programs for formats
or compression methods the library cannot handle. Filename repair and
README selection need only the standard library and are imported eagerly;
everything that loads libarchive is resolved on first access.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

from .naming import archive_extension, rename, repair_filename
from .readme import Usability, readme

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "COMPLETE_MARKER": ("FileSleuth.ArchiveContent.extractor", "COMPLETE_MARKER"),
    "content_dir_for": ("FileSleuth.ArchiveContent.extractor", "content_dir_for"),
    "extract": ("FileSleuth.ArchiveContent.extractor", "extract"),
    "extract_source": ("FileSleuth.ArchiveContent.extractor", "extract_source"),
    "read_marker": ("FileSleuth.ArchiveContent.extractor", "read_marker"),
    "Contents": ("FileSleuth.ArchiveContent.lister", "Contents"),
    "list_contents": ("FileSleuth.ArchiveContent.lister", "list_contents"),
    "list_or_empty": ("FileSleuth.ArchiveContent.lister", "list_or_empty"),
    "magic_ext": ("FileSleuth.ArchiveContent.magic", "magic_ext"),
}

__all__ = [
    "COMPLETE_MARKER",
    "Contents",
    "Usability",
    "archive_extension",
    "content_dir_for",
    "extract",
    "extract_source",
    "list_contents",
    "list_or_empty",
    "magic_ext",
    "pkzip",
    "read_marker",
    "readme",
    "rename",
    "repair_filename",
]


def __getattr__(name: str) -> Any:
    """Import libarchive-backed exports on first use."""

    if name == "pkzip":
        return import_module("FileSleuth.ArchiveContent.pkzip")
    target = _EXPORT_MAP.get(name)
    if target is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
    value = getattr(import_module(target[0]), target[1])
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
