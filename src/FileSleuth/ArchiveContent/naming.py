"""Filename helpers for archive handling.

Responsibilities
----------------
- Derive the archive extension of a claimed filename, treating the compound
  ``.tar.*`` suffixes as a single extension.
- Repair a filename's extension after the content contradicted it
  (:func:`rename`).
- Recover member names from legacy archives whose headers hold MS-DOS code
  page 437 bytes rather than UTF-8 (:func:`repair_filename`).
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Tuple, Union

__all__ = [
    "COMPOUND_EXTENSIONS",
    "archive_extension",
    "split_extension",
    "rename",
    "repair_filename",
    "member_basename",
]

COMPOUND_EXTENSIONS: Tuple[str, ...] = (
    ".tar.gz",
    ".tar.bz2",
    ".tar.xz",
    ".tar.zst",
    ".tar.lz",
    ".tar.z",
)

LEGACY_CODEPAGE = "cp437"


def split_extension(filename: str) -> Tuple[str, str]:
    """Split ``filename`` into ``(stem, extension)``.

    The extension keeps its case and leading dot. Dot-files and names ending
    in a dot have no extension.
    """
    head, sep, base = filename.rpartition("/")
    lower = base.lower()
    for compound in COMPOUND_EXTENSIONS:
        if lower.endswith(compound) and len(base) > len(compound):
            cut = len(base) - len(compound)
            return head + sep + base[:cut], base[cut:]
    index = base.rfind(".")
    if index <= 0 or index == len(base) - 1:
        return filename, ""
    return head + sep + base[:index], base[index:]


def archive_extension(filename: str) -> str:
    """Return the lower-cased, compound-aware extension of ``filename``."""
    return split_extension(filename)[1].lower()


def rename(new_ext: str, filename: str) -> str:
    """Replace the trailing extension of ``filename`` with ``new_ext``.

    The base name is preserved. An empty ``new_ext`` strips the trailing
    extension. A name without an extension behaves as if it carried a
    placeholder extension, so ``new_ext`` is appended. Applying the same non-empty
    extension twice gives the same result as applying it once.

    Examples:
        >>> rename(".lha", "release.zip")
        'release.lha'
        >>> rename(".zip", "README")
        'README.zip'
        >>> rename("", "archive.tar.gz")
        'archive'
    """
    body = new_ext.strip(".")
    stem = split_extension(filename)[0]
    if not body:
        return stem
    target = "." + body
    if filename.lower().endswith(target.lower()):
        return filename
    return stem + target


def repair_filename(name: Union[str, bytes]) -> str:
    """Return a readable member name.

    Strict UTF-8 is attempted first; anything else is reinterpreted as the
    MS-DOS code page 437 used by BBS-era archivers. Names that were decoded
    with ``surrogateescape`` are re-encoded and repaired the same way.
    """
    if isinstance(name, str):
        try:
            name.encode("utf-8")
            return name
        except UnicodeEncodeError:
            raw = name.encode("utf-8", "surrogateescape")
    else:
        raw = name
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode(LEGACY_CODEPAGE)


def member_basename(member: str) -> str:
    """Return the final path component of an archive member name."""
    return PurePosixPath(member.replace("\\", "/")).name
