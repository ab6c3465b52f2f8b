# === NAVMAP v1 ===
# {
#   "module": "FileSleuth.ArchiveContent.library",
#   "purpose": "In-process archive listing and extraction through libarchive",
#   "sections": [
#     {"id": "extensions", "name": "Supported Extensions", "anchor": "EXT", "kind": "constants"},
#     {"id": "member-paths", "name": "Member Path Validation", "anchor": "SAN", "kind": "helpers"},
#     {"id": "list-members", "name": "list_members", "anchor": "function-list-members", "kind": "function"},
#     {"id": "extract-members", "name": "extract_members", "anchor": "function-extract-members", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Direct archive reads with libarchive.

libarchive detects the container format from the content, so the claimed
extension is only used to decide whether this path is attempted at all.
Every failure raised from inside the library is translated into the
:mod:`FileSleuth.errors` hierarchy: :class:`NotAnArchiveError` for reported
read errors and :class:`LibraryPanicError` for anything unexpected, so the
caller can fall back to the system programs.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, List, Optional, Tuple, Union

import libarchive

from ..errors import (
    ArchiveError,
    LibraryPanicError,
    MemberNotFoundError,
    NotAnArchiveError,
    SourceIsDirectoryError,
    SourceMissingError,
    UnsafeMemberError,
    UnsupportedFormatError,
)
from .naming import repair_filename

__all__ = [
    "LIBRARY_EXTENSIONS",
    "supports",
    "validate_source",
    "list_members",
    "extract_members",
]

LOGGER = logging.getLogger("FileSleuth.ArchiveContent.library")

LIBRARY_EXTENSIONS = frozenset(
    {
        ".zip",
        ".tar",
        ".tar.gz",
        ".tgz",
        ".tar.bz2",
        ".tbz2",
        ".tar.xz",
        ".txz",
        ".tar.zst",
        ".gz",
        ".bz2",
        ".xz",
        ".zst",
        ".rar",
        ".7z",
        ".lha",
        ".lzh",
        ".cab",
        ".iso",
    }
)


def supports(ext: str) -> bool:
    """True if archives claimed as ``ext`` are read with libarchive first."""
    return ext.lower() in LIBRARY_EXTENSIONS


def validate_source(src: Union[str, Path]) -> Path:
    """Return ``src`` as a path after checking it names an existing file.

    Raises:
        SourceMissingError: If nothing exists at ``src``.
        SourceIsDirectoryError: If ``src`` is a directory.
    """
    path = Path(src)
    if path.is_dir():
        raise SourceIsDirectoryError("Archive source is a directory", source=path)
    if not path.is_file():
        raise SourceMissingError("Archive source does not exist", source=path)
    return path


def _require_supported(path: Path, ext: str) -> None:
    if not supports(ext):
        raise UnsupportedFormatError(
            "Extension is not a supported archive format", source=path, fmt=ext or None
        )


def _entry_name(entry) -> Optional[str]:
    raw = entry.pathname
    if raw is None:
        return None
    return repair_filename(raw)


def _validate_member_path(member_name: str, *, source: Path, fmt: str) -> Path:
    """Validate archive member paths to prevent traversal attacks."""

    normalized = member_name.replace("\\", "/")
    relative = PurePosixPath(normalized)
    if relative.is_absolute():
        raise UnsafeMemberError(
            f"Unsafe absolute path in archive: {member_name}",
            member=member_name,
            source=source,
            fmt=fmt,
        )
    parts = [part for part in relative.parts if part not in {"", "."}]
    if not parts or ".." in parts:
        raise UnsafeMemberError(
            f"Unsafe path in archive: {member_name}", member=member_name, source=source, fmt=fmt
        )
    return Path(*parts)


def _iter_entries(path: Path) -> Iterator[Tuple[object, str]]:
    with libarchive.file_reader(str(path)) as archive:
        for entry in archive:
            name = _entry_name(entry)
            if name is None or not name.strip():
                continue
            yield entry, name


def _translate(exc: Exception, path: Path, ext: str, action: str) -> ArchiveError:
    if isinstance(exc, libarchive.ArchiveError):
        return NotAnArchiveError(f"libarchive cannot {action}: {exc}", source=path, fmt=ext)
    if isinstance(exc, OSError):
        return NotAnArchiveError(f"Cannot {action}: {exc}", source=path, fmt=ext)
    return LibraryPanicError(
        f"libarchive raised {type(exc).__name__} while trying to {action}: {exc}",
        source=path,
        fmt=ext,
    )


def list_members(path: Path, ext: str) -> List[str]:
    """Return the file members of ``path`` in archive order.

    Directory entries and blank names are skipped; names are repaired with
    :func:`~FileSleuth.ArchiveContent.naming.repair_filename`.

    Raises:
        UnsupportedFormatError: If ``ext`` is not handled in process.
        NotAnArchiveError: If libarchive reports a read error.
        LibraryPanicError: If libarchive fails unexpectedly.
    """
    _require_supported(path, ext)
    try:
        return [name for entry, name in _iter_entries(path) if not entry.isdir]
    except ArchiveError:
        raise
    except Exception as exc:  # noqa: BLE001 - every library failure enables the fallback
        raise _translate(exc, path, ext, "list the archive") from exc


def _wanted(name: str, targets: Iterable[str]) -> bool:
    parts = PurePosixPath(name.replace("\\", "/")).parts
    normalized = "/".join(part for part in parts if part != "/")
    for target in targets:
        if normalized == target or PurePosixPath(normalized).name == target:
            return True
    return False


def _write_atomic(entry, target_path: Path) -> int:
    target_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = target_path.with_name(
        f"{target_path.name}.tmp-{os.getpid()}-{uuid.uuid4().hex[:8]}"
    )
    written = 0
    try:
        with temp_path.open("wb") as temp_file:
            for block in entry.get_blocks():
                temp_file.write(block)
                written += len(block)
        temp_path.replace(target_path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise
    return written


def extract_members(
    path: Path,
    dest: Path,
    ext: str,
    targets: Iterable[str] = (),
) -> List[Path]:
    """Extract members of ``path`` into ``dest`` and return the written files.

    Only regular files are written; links and special entries are skipped.
    When ``targets`` is non-empty only members whose path or basename equals
    one of them are extracted. Files are written to a temporary sibling and
    then moved into place, so extracting twice overwrites cleanly.

    Raises:
        UnsupportedFormatError: If ``ext`` is not handled in process.
        UnsafeMemberError: If a selected member would escape ``dest``.
        MemberNotFoundError: If ``targets`` matched nothing.
        NotAnArchiveError: If libarchive reports a read error.
        LibraryPanicError: If libarchive fails unexpectedly.
    """
    _require_supported(path, ext)
    wanted = [target.replace("\\", "/") for target in targets if target.strip()]
    root = dest.resolve()
    extracted: List[Path] = []
    total_bytes = 0
    try:
        for entry, name in _iter_entries(path):
            if wanted and not _wanted(name, wanted):
                continue
            relative = _validate_member_path(name, source=path, fmt=ext)
            target_path = root / relative
            try:
                target_path.resolve().relative_to(root)
            except ValueError:
                raise UnsafeMemberError(
                    f"Path escapes extraction root: {name}", member=name, source=path, fmt=ext
                ) from None
            if entry.isdir:
                target_path.mkdir(parents=True, exist_ok=True)
                continue
            if not entry.isfile:
                LOGGER.debug(
                    "skipping non-regular member %s",
                    name,
                    extra={"stage": "extract", "source": str(path), "fmt": ext},
                )
                continue
            total_bytes += _write_atomic(entry, target_path)
            extracted.append(target_path)
    except ArchiveError:
        raise
    except Exception as exc:  # noqa: BLE001 - every library failure enables the fallback
        raise _translate(exc, path, ext, "extract the archive") from exc

    if wanted and not extracted:
        raise MemberNotFoundError(
            f"No members matched {', '.join(wanted)}", source=path, fmt=ext
        )
    LOGGER.info(
        "extracted archive",
        extra={
            "stage": "extract",
            "source": str(path),
            "fmt": ext,
            "files": len(extracted),
            "bytes": total_bytes,
        },
    )
    return extracted
