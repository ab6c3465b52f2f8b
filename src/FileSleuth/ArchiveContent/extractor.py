# === NAVMAP v1 ===
# {
#   "module": "FileSleuth.ArchiveContent.extractor",
#   "purpose": "Extract archives with libarchive or system programs and prepare content directories",
#   "sections": [
#     {"id": "extract", "name": "extract", "anchor": "function-extract", "kind": "function"},
#     {"id": "marker", "name": "Extraction-Complete Marker", "anchor": "MRK", "kind": "helpers"},
#     {"id": "extract-source", "name": "extract_source", "anchor": "function-extract-source", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Archive extraction.

Responsibilities
----------------
- :func:`extract` writes members into an existing directory, in process
  first and through ``arj``, ``lha`` or ``unzip`` when libarchive fails.
- :func:`extract_source` prepares the per-source content directory used to
  browse a record: extracted members for archives, a plain copy otherwise.

Design Notes
------------
- A content directory is reused only when it holds the completion marker,
  written last before the directory is moved into place, so a crashed or
  partial run is never mistaken for a finished one.
- The marker records the source size and modification time; a source
  rewritten in place no longer matches and its directory is rebuilt.
- Work on a source is serialised with :func:`FileSleuth.locks.source_lock`.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..errors import (
    ArchiveError,
    DestinationInvalidError,
    ExtensionMismatchError,
    MemberNotFoundError,
    NotAnArchiveError,
    SourceTooLargeError,
    UnsafeMemberError,
)
from ..locks import path_digest, source_lock
from ..MagicNumber import Signature, archive, open_window
from ..settings import FileSleuthSettings, get_settings
from . import library, pkzip, tools
from .lister import fallback_failure
from .magic import verify_extension
from .naming import archive_extension, member_basename

__all__ = ["COMPLETE_MARKER", "content_dir_for", "extract", "extract_source", "read_marker"]

LOGGER = logging.getLogger("FileSleuth.ArchiveContent.extractor")

COMPLETE_MARKER = ".filesleuth-complete"

# archive signatures that are extracted by neither libarchive nor a fallback
_COPY_ONLY = frozenset({Signature.PKLITE, Signature.PKWARE_MULTI_VOLUME})


def _require_directory(dest: Path, src: Path) -> Path:
    if not dest.is_dir():
        raise DestinationInvalidError(
            f"Extraction destination is not a directory: {dest}", source=src
        )
    return dest


def _needs_system_zip(path: Path, ext: str) -> bool:
    if ext != ".zip":
        return False
    try:
        return not pkzip.is_plain_zip(path)
    except NotAnArchiveError:
        return False


def extract(
    src: Union[str, Path],
    dest: Union[str, Path],
    filename: str,
    targets: Sequence[str] = (),
    *,
    settings: Optional[FileSleuthSettings] = None,
) -> str:
    """Extract ``targets`` (every member when empty) of ``src`` into ``dest``.

    Args:
        src: Archive on disk.
        dest: Existing directory receiving the members.
        filename: Name the archive was submitted under.
        targets: Member names to extract.
        settings: Settings override, mainly for tests.

    Returns:
        ``"libarchive"`` or the name of the program that did the work.

    Raises:
        SourceMissingError: If ``src`` does not exist.
        DestinationInvalidError: If ``dest`` is not an existing directory.
        UnsafeMemberError: If a member would be written outside ``dest``.
        MemberNotFoundError: If a readable archive holds none of ``targets``.
        UnsupportedFormatError: If no fallback exists for the extension.
        NotAnArchiveError: If both the library and the fallback failed.
    """
    path = library.validate_source(src)
    target_dir = _require_directory(Path(dest), path)
    try:
        ext = verify_extension(path, filename, settings=settings)
    except ExtensionMismatchError as exc:
        LOGGER.info(
            "content contradicts %s, extracting as %s",
            filename,
            exc.corrected_ext,
            extra={"stage": "extract", "source": str(path), "fmt": exc.corrected_ext},
        )
        ext = exc.corrected_ext

    try:
        if _needs_system_zip(path, ext):
            raise NotAnArchiveError(
                f"Zip uses {', '.join(pkzip.methods(path))} compression", source=path, fmt=ext
            )
        library.extract_members(path, target_dir, ext, targets)
        return "libarchive"
    except (UnsafeMemberError, MemberNotFoundError):
        raise
    except ArchiveError as library_exc:
        LOGGER.info(
            "direct extraction failed, trying system program: %s",
            library_exc.message,
            extra={"stage": "extract", "source": str(path), "fmt": ext},
        )
        try:
            extractor = tools.extractor_for(ext, source=path, settings=settings)
            extractor.extract(path, list(targets), target_dir)
        except ArchiveError as fallback_exc:
            failure = fallback_failure(path, ext, library_exc, fallback_exc, "extract archive")
            raise failure from fallback_exc
        return extractor.program


# --- Extraction-complete marker (MRK) ---


def content_dir_for(src: Path, *, settings: Optional[FileSleuthSettings] = None) -> Path:
    """Return the content directory reserved for ``src``."""
    cfg = settings or get_settings()
    resolved = Path(src).expanduser().resolve(strict=False)
    return cfg.content_root / path_digest(resolved)


def read_marker(directory: Path) -> Optional[dict]:
    """Return the completion record of ``directory``, or ``None`` if absent or unreadable."""
    marker = directory / COMPLETE_MARKER
    try:
        return json.loads(marker.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None


def _write_marker(
    directory: Path, src: Path, name: str, method: str, source_stat: os.stat_result
) -> None:
    files: List[str] = sorted(
        item.relative_to(directory).as_posix() for item in directory.rglob("*") if item.is_file()
    )
    payload = {
        "source": str(src),
        "name": name,
        "method": method,
        "size": source_stat.st_size,
        "mtime_ns": source_stat.st_mtime_ns,
        "files": files,
        "completed_at": datetime.now(timezone.utc).isoformat(),
    }
    (directory / COMPLETE_MARKER).write_text(
        json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
    )


def _matches_source(marker: Optional[dict], source_stat: os.stat_result) -> bool:
    if marker is None:
        return False
    return (
        marker.get("size") == source_stat.st_size
        and marker.get("mtime_ns") == source_stat.st_mtime_ns
    )


def _is_extractable(path: Path) -> bool:
    with open_window(path) as r:
        sign = archive(r)
    return sign is not Signature.UNKNOWN and sign not in _COPY_ONLY


def extract_source(
    src: Union[str, Path],
    name: str,
    *,
    settings: Optional[FileSleuthSettings] = None,
) -> Path:
    """Prepare and return the content directory for ``src``.

    Archives are extracted into the directory; any other file is copied in
    as ``name``. A directory completed by an earlier call is reused while the
    source keeps the size and modification time recorded in its marker.

    Raises:
        SourceMissingError: If ``src`` does not exist.
        SourceTooLargeError: If ``src`` exceeds ``max_source_bytes``.
        filelock.Timeout: If another process holds the source lock too long.
        ArchiveError: If extraction fails; nothing is left behind.
    """
    cfg = settings or get_settings()
    path = library.validate_source(src)
    source_stat = path.stat()
    size = source_stat.st_size
    if size > cfg.max_source_bytes:
        raise SourceTooLargeError(
            f"Will not decompress a {size} byte source",
            size=size,
            limit=cfg.max_source_bytes,
            source=path,
        )

    content_dir = content_dir_for(path, settings=cfg)
    cfg.content_root.mkdir(parents=True, exist_ok=True)
    with source_lock(path, category="extract", settings=cfg):
        if _matches_source(read_marker(content_dir), source_stat):
            LOGGER.debug(
                "reusing content directory %s",
                content_dir,
                extra={"stage": "extract", "source": str(path)},
            )
            return content_dir

        scratch = Path(tempfile.mkdtemp(prefix=".tmp-", dir=cfg.content_root))
        try:
            if _is_extractable(path):
                method = extract(path, scratch, name, settings=cfg)
            else:
                shutil.copy2(path, scratch / (member_basename(name) or path.name))
                method = "copy"
            _write_marker(scratch, path, name, method, source_stat)
            if content_dir.exists():
                shutil.rmtree(content_dir)
            os.replace(scratch, content_dir)
        except Exception:
            shutil.rmtree(scratch, ignore_errors=True)
            raise

    LOGGER.info(
        "prepared content directory",
        extra={
            "stage": "extract",
            "source": str(path),
            "fmt": archive_extension(name) or None,
        },
    )
    return content_dir
