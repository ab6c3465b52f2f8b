"""Pick the most useful README or NFO text from an archive's members."""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable, Optional, Tuple

from .naming import member_basename, split_extension

__all__ = ["Usability", "rank", "readme"]

_TEXT_EXTENSIONS = (".diz", ".nfo", ".txt")


class Usability(IntEnum):
    """Priority of a candidate text file; lower values are better."""

    BASE_NFO = 1  # <archive>.nfo
    BASE_TXT = 2  # <archive>.txt
    ANY_NFO = 3
    FILE_ID_DIZ = 4
    BASE_DIZ = 5  # <archive>.diz
    ANY_TXT = 6
    ANY_DIZ = 7


def rank(archive_name: str, member: str) -> Optional[Usability]:
    """Return the usability of ``member`` for an archive named ``archive_name``.

    Members without a ``.diz``, ``.nfo`` or ``.txt`` extension are ``None``.
    """
    name = member_basename(member).lower()
    stem, ext = split_extension(name)
    ext = ext.lower()
    if ext not in _TEXT_EXTENSIONS:
        return None
    base = split_extension(member_basename(archive_name))[0].lower()
    is_base = bool(base) and stem == base
    if ext == ".nfo":
        return Usability.BASE_NFO if is_base else Usability.ANY_NFO
    if ext == ".txt":
        return Usability.BASE_TXT if is_base else Usability.ANY_TXT
    if name == "file_id.diz":
        return Usability.FILE_ID_DIZ
    return Usability.BASE_DIZ if is_base else Usability.ANY_DIZ


def readme(archive_name: str, files: Iterable[str]) -> Optional[str]:
    """Return the best README/NFO member of ``files``, or ``None``.

    The winner is decided by :class:`Usability` and then by name, so the
    result never depends on the order of ``files``.
    """
    best: Optional[Tuple[Usability, str]] = None
    for member in files:
        level = rank(archive_name, member)
        if level is None:
            continue
        candidate = (level, member)
        if best is None or candidate < best:
            best = candidate
    return best[1] if best is not None else None
