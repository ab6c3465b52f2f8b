"""Probe the true archive format of a file whose name is misleading.

The registry signature is consulted first since it needs no external
program; the ``file`` utility is asked only when the content matched no
archive signature that maps to a handled extension.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from ..errors import ExtensionMismatchError, NotAnArchiveError, ToolError
from ..MagicNumber import ARCHIVES, ExtensionCheck, Signature, archive, check_ext, open_window
from ..settings import FileSleuthSettings, get_settings
from .naming import archive_extension
from .tools import run_tool

__all__ = [
    "corrected_extension",
    "describe_magic",
    "is_lha_magic",
    "magic_ext",
    "verify_extension",
]

LOGGER = logging.getLogger("FileSleuth.ArchiveContent.magic")

S = Signature

_CORRECTIONS: Mapping[Signature, str] = MappingProxyType(
    {
        S.PKWARE_ZIP_SHRINK: ".zip",
        S.PKWARE_ZIP_REDUCE: ".zip",
        S.PKWARE_ZIP_IMPLODE: ".zip",
        S.PKWARE_ZIP64: ".zip",
        S.PKWARE_ZIP: ".zip",
        S.TAPE_ARCHIVE: ".tar",
        S.ROSHAL_ARCHIVE: ".rar",
        S.ROSHAL_ARCHIVE_V5: ".rar",
        S.GZIP_COMPRESS_ARCHIVE: ".tar.gz",
        S.BZIP2_COMPRESS_ARCHIVE: ".tar.bz2",
        S.X7Z_COMPRESS_ARCHIVE: ".7z",
        S.XZ_COMPRESS_ARCHIVE: ".tar.xz",
        S.ZSTANDARD_ARCHIVE: ".tar.zst",
        S.YOSHI_LHA: ".lha",
        S.ARCHIVE_ROBERT_JUNG: ".arj",
        S.MICROSOFT_CABINET: ".cab",
    }
)

# first comma separated field of `file --brief`, lower-cased
_MAGIC_DESCRIPTIONS: Mapping[str, str] = MappingProxyType(
    {
        "7-zip archive data": ".7z",
        "arj archive data": ".arj",
        "bzip2 compressed data": ".tar.bz2",
        "gzip compressed data": ".tar.gz",
        "rar archive data": ".rar",
        "posix tar archive": ".tar",
        "zip archive data": ".zip",
    }
)


def corrected_extension(sign: Signature) -> Optional[str]:
    """Return the extension archives with signature ``sign`` should carry."""
    return _CORRECTIONS.get(sign)


def is_lha_magic(description: str) -> bool:
    """True if a lower-cased ``file`` description names an LHA archive.

    ``file`` reports these in several shapes, for example ``lharc archive
    data``, ``lha archive data`` and ``lha 2.x? archive data``.
    """
    words = description.split(" ")
    if words[0] == "lharc":
        return True
    if words[0] != "lha" or len(words) < 3:
        return False
    if " ".join(words[0:3]) == "lha archive data":
        return True
    return " ".join(words[2:4]) == "archive data"


def describe_magic(description: str) -> Optional[str]:
    """Map ``file --brief`` output to an archive extension, or ``None``."""
    magic = description.lower().split(",")[0].strip()
    if not magic:
        return None
    if is_lha_magic(magic):
        return ".lha"
    return _MAGIC_DESCRIPTIONS.get(magic)


def magic_ext(src: Path, *, settings: Optional[FileSleuthSettings] = None) -> str:
    """Return the archive extension that matches the content of ``src``.

    Raises:
        NotAnArchiveError: If the content is not a recognised archive.
        ToolError: If ``file`` is needed but missing or fails.
    """
    path = Path(src)
    with open_window(path) as r:
        sign = archive(r)
    ext = corrected_extension(sign)
    if ext is not None:
        return ext

    cfg = settings or get_settings()
    result = run_tool(
        "file",
        ["--brief", str(path)],
        source=path,
        fmt="",
        timeout=cfg.magic_timeout_sec,
        settings=cfg,
    )
    ext = describe_magic(result.stdout)
    if ext is None:
        raise NotAnArchiveError(
            f"file reports {result.stdout.strip()!r}, not a supported archive", source=path
        )
    return ext


def verify_extension(
    src: Path, filename: str, *, settings: Optional[FileSleuthSettings] = None
) -> str:
    """Return the archive extension of ``filename`` after checking the content.

    Raises:
        ExtensionMismatchError: When the bytes are a known archive the claimed
            extension does not allow, or the name carries no archive
            extension at all. ``corrected_ext`` holds the probed extension.
    """
    claimed = archive_extension(filename)
    with open_window(src) as r:
        check, sign = check_ext(filename, r)
    if check is ExtensionCheck.MATCHES or sign not in ARCHIVES:
        return claimed
    try:
        corrected = magic_ext(src, settings=settings)
    except (NotAnArchiveError, ToolError) as exc:
        LOGGER.debug(
            "format probe failed: %s",
            exc,
            extra={"stage": "probe", "source": str(src), "fmt": claimed},
        )
        return claimed
    if corrected == claimed:
        return claimed
    raise ExtensionMismatchError(
        f"{filename} holds {sign.label} content",
        corrected_ext=corrected,
        source=src,
        fmt=claimed,
    )
