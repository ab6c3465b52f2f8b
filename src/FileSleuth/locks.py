# === NAVMAP v1 ===
# {
#   "module": "FileSleuth.locks",
#   "purpose": "File locking helpers serialising work on the same archive source",
#   "sections": [
#     {"id": "lock-file-for", "name": "lock_file_for", "anchor": "function-lock-file-for", "kind": "function"},
#     {"id": "source-lock", "name": "source_lock", "anchor": "function-source-lock", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""File-based locking for content directories.

Design Notes
------------
- Locks are implemented with :mod:`filelock` and default to hard locks; set
  ``FILESLEUTH_SOFT_LOCKS=1`` to use :class:`filelock.SoftFileLock` on
  filesystems without ``fcntl`` support.
- Lock files live under ``<content_root>/locks`` and are named after a
  sha256 digest of the resolved source path, so two requests for the same
  archive always contend on the same file regardless of the claimed name.
"""

from __future__ import annotations

import contextlib
import hashlib
import logging
import time
from pathlib import Path
from typing import Iterator, Optional

from filelock import FileLock, SoftFileLock, Timeout

from .settings import FileSleuthSettings, get_settings

__all__ = ["Timeout", "lock_file_for", "path_digest", "source_lock"]

LOGGER = logging.getLogger("FileSleuth.locks")
logging.getLogger("filelock").setLevel(logging.INFO)

_POLL_INTERVAL = 0.05  # seconds


def path_digest(target: Path) -> str:
    """Return a short sha256 digest naming ``target`` on disk."""
    digest = hashlib.sha256(str(target).encode("utf-8")).hexdigest()
    return digest[:24]


def lock_file_for(
    category: str, target: Path, *, settings: Optional[FileSleuthSettings] = None
) -> Path:
    """Return the lock file path guarding ``target`` for ``category``."""

    cfg = settings or get_settings()
    lock_dir = cfg.lock_dir
    lock_dir.mkdir(parents=True, exist_ok=True)
    resolved = Path(target).expanduser().resolve(strict=False)
    return lock_dir / f"{category}.{path_digest(resolved)}.lock"


@contextlib.contextmanager
def source_lock(
    source: Path,
    *,
    category: str = "extract",
    timeout: Optional[float] = None,
    settings: Optional[FileSleuthSettings] = None,
) -> Iterator[Path]:
    """Hold an inter-process lock for work on ``source``.

    Yields:
        Path of the lock file being held.

    Raises:
        Timeout: If the lock cannot be acquired within the timeout.
    """

    cfg = settings or get_settings()
    lock_file = lock_file_for(category, source, settings=cfg)
    lock_cls = SoftFileLock if cfg.soft_locks else FileLock
    lock_timeout = cfg.lock_timeout_sec if timeout is None else float(timeout)
    lock = lock_cls(str(lock_file), timeout=lock_timeout, thread_local=False)

    start = time.monotonic()
    try:
        lock.acquire(timeout=lock_timeout, poll_interval=_POLL_INTERVAL)
    except Timeout:
        wait_ms = max((time.monotonic() - start) * 1000.0, 0.0)
        LOGGER.info(
            "lock-timeout category=%s wait_ms=%.3f lock_file=%s source=%s",
            category,
            wait_ms,
            lock_file,
            source,
        )
        raise

    wait_ms = max((time.monotonic() - start) * 1000.0, 0.0)
    LOGGER.debug(
        "lock-acquired category=%s wait_ms=%.3f lock_file=%s", category, wait_ms, lock_file
    )
    acquired_at = time.monotonic()
    try:
        yield lock_file
    finally:
        lock.release()
        hold_ms = max((time.monotonic() - acquired_at) * 1000.0, 0.0)
        LOGGER.debug("lock-release category=%s hold_ms=%.3f", category, hold_ms)
