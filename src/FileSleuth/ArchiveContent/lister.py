# === NAVMAP v1 ===
# {
#   "module": "FileSleuth.ArchiveContent.lister",
#   "purpose": "List archive members with libarchive and system-program fallbacks",
#   "sections": [
#     {"id": "contents", "name": "Contents", "anchor": "class-contents", "kind": "class"},
#     {"id": "normalise", "name": "Name Normalisation", "anchor": "NRM", "kind": "helpers"},
#     {"id": "list-contents", "name": "list_contents", "anchor": "function-list-contents", "kind": "function"},
#     {"id": "list-or-empty", "name": "list_or_empty", "anchor": "function-list-or-empty", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Archive content listing.

Responsibilities
----------------
- Validate the source, then check the claimed filename against the content
  and retry once under the probed extension when they disagree.
- Read the member list in process with libarchive and fall back to the
  matching system program when the library cannot.
- Normalise the names: blanks and directories dropped, legacy encodings
  repaired, archive order kept.

Design Notes
------------
- A failure is terminal only after both paths failed; the raised error
  carries the fallback failure as ``__cause__`` and the library failure as
  that error's ``__context__``.
- Every request gets a correlation id so the direct read, retry and fallback
  log records can be joined.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from ..errors import (
    ArchiveError,
    ExtensionMismatchError,
    FileSleuthError,
    NotAnArchiveError,
    UnsupportedFormatError,
)
from ..logging_config import generate_correlation_id
from ..MagicNumber import Signature, find, open_window
from ..settings import FileSleuthSettings
from . import library, tools
from .magic import verify_extension
from .naming import archive_extension, repair_filename

__all__ = ["Contents", "fallback_failure", "normalise_names", "list_contents", "list_or_empty"]

LOGGER = logging.getLogger("FileSleuth.ArchiveContent.lister")

LIBRARY_METHOD = "libarchive"


@dataclass(frozen=True)
class Contents:
    """Member listing of an archive.

    Attributes:
        files: Member names in archive order.
        signature: Content signature of the archive file.
        extension: Extension the archive was finally read as.
        method: ``"libarchive"`` or the name of the program that listed it.
    """

    files: Tuple[str, ...]
    signature: Signature
    extension: str
    method: str

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self):
        return iter(self.files)


def normalise_names(names: Iterable[str]) -> List[str]:
    """Drop blank and directory entries and repair names, keeping order."""
    result: List[str] = []
    for name in names:
        fixed = repair_filename(name).rstrip("\r\n")
        if not fixed.strip() or fixed.endswith(("/", "\\")):
            continue
        result.append(fixed)
    return result


def fallback_failure(
    path: Path, ext: str, library_exc: ArchiveError, fallback_exc: ArchiveError, action: str
) -> ArchiveError:
    """Build the terminal error raised once libarchive and the fallback both failed."""
    if isinstance(library_exc, UnsupportedFormatError) and isinstance(
        fallback_exc, UnsupportedFormatError
    ):
        return UnsupportedFormatError(
            f"Cannot {action}: extension is not a supported archive format",
            source=path,
            fmt=ext or None,
        )
    return NotAnArchiveError(
        f"Cannot {action}: libarchive failed ({library_exc.message}) "
        f"and the system fallback failed ({fallback_exc.message})",
        source=path,
        fmt=ext or None,
    )


def _list_with_fallback(
    path: Path, ext: str, correlation_id: str, settings: Optional[FileSleuthSettings]
) -> Tuple[List[str], str]:
    try:
        return library.list_members(path, ext), LIBRARY_METHOD
    except ArchiveError as library_exc:
        LOGGER.info(
            "direct read failed, trying system program: %s",
            library_exc.message,
            extra={
                "stage": "list",
                "source": str(path),
                "fmt": ext,
                "correlation_id": correlation_id,
            },
        )
        try:
            reader = tools.reader_for(ext, source=path, settings=settings)
            return reader.list(path), reader.program
        except ArchiveError as fallback_exc:
            failure = fallback_failure(path, ext, library_exc, fallback_exc, "list archive")
            raise failure from fallback_exc


def list_contents(
    src: Union[str, Path],
    filename: str,
    *,
    settings: Optional[FileSleuthSettings] = None,
) -> Contents:
    """List the members of the archive at ``src`` claimed to be ``filename``.

    Args:
        src: Path of the archive on disk.
        filename: Name the archive was submitted under; its extension picks
            the reader unless the content contradicts it.
        settings: Settings override, mainly for tests.

    Returns:
        The normalised member listing.

    Raises:
        SourceMissingError: If ``src`` does not exist.
        SourceIsDirectoryError: If ``src`` is a directory.
        UnsupportedFormatError: If neither path handles the extension.
        NotAnArchiveError: If both the library and the fallback failed.
    """
    path = library.validate_source(src)
    correlation_id = generate_correlation_id()
    with open_window(path) as r:
        signature = find(r)

    ext = archive_extension(filename)
    try:
        ext = verify_extension(path, filename, settings=settings)
    except ExtensionMismatchError as exc:
        LOGGER.info(
            "content contradicts %s, retrying as %s",
            filename,
            exc.corrected_ext,
            extra={
                "stage": "list",
                "source": str(path),
                "fmt": exc.corrected_ext,
                "correlation_id": correlation_id,
            },
        )
        ext = exc.corrected_ext

    files, method = _list_with_fallback(path, ext, correlation_id, settings)
    names = normalise_names(files)
    LOGGER.debug(
        "listed %d members",
        len(names),
        extra={
            "stage": "list",
            "source": str(path),
            "fmt": ext,
            "correlation_id": correlation_id,
        },
    )
    return Contents(files=tuple(names), signature=signature, extension=ext, method=method)


def list_or_empty(
    src: Union[str, Path],
    filename: str,
    *,
    settings: Optional[FileSleuthSettings] = None,
) -> Contents:
    """Like :func:`list_contents` but log failures and return an empty listing."""
    try:
        return list_contents(src, filename, settings=settings)
    except FileSleuthError as exc:
        LOGGER.warning(
            "cannot list %s: %s",
            filename,
            exc,
            extra={"stage": "list", "source": str(src)},
        )
    return Contents(
        files=(),
        signature=Signature.UNKNOWN,
        extension=archive_extension(filename),
        method="",
    )
