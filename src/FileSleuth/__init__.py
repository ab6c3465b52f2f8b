# === NAVMAP v1 ===
# {
#   "module": "FileSleuth",
#   "purpose": "Package initialization for FileSleuth",
#   "sections": [
#     {"id": "getattr", "name": "__getattr__", "anchor": "function-getattr", "kind": "function"},
#     {"id": "dir", "name": "__dir__", "anchor": "function-dir", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Public API for FileSleuth file identification and archive inspection.

Signature detection lives in :mod:`FileSleuth.MagicNumber` and needs nothing
beyond the standard library. Archive listing and extraction live in
:mod:`FileSleuth.ArchiveContent`, which loads libarchive; those names are
imported lazily so identification works where the C library is missing.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

__version__ = "0.4.0"

_EXPORT_MAP: Dict[str, Tuple[str, str]] = {
    "Signature": ("FileSleuth.MagicNumber", "Signature"),
    "Identification": ("FileSleuth.MagicNumber", "Identification"),
    "find": ("FileSleuth.MagicNumber", "find"),
    "identify": ("FileSleuth.MagicNumber", "identify"),
    "match_ext": ("FileSleuth.MagicNumber", "match_ext"),
    "check_ext": ("FileSleuth.MagicNumber", "check_ext"),
    "Contents": ("FileSleuth.ArchiveContent", "Contents"),
    "list_contents": ("FileSleuth.ArchiveContent", "list_contents"),
    "list_or_empty": ("FileSleuth.ArchiveContent", "list_or_empty"),
    "extract": ("FileSleuth.ArchiveContent", "extract"),
    "extract_source": ("FileSleuth.ArchiveContent", "extract_source"),
    "magic_ext": ("FileSleuth.ArchiveContent", "magic_ext"),
    "readme": ("FileSleuth.ArchiveContent", "readme"),
    "rename": ("FileSleuth.ArchiveContent", "rename"),
    "get_settings": ("FileSleuth.settings", "get_settings"),
}

__all__ = ["__version__", *_EXPORT_MAP]


def __getattr__(name: str) -> Any:
    """Lazily import API exports to avoid loading libarchive at import time."""

    target = _EXPORT_MAP.get(name)
    if target is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
    module = import_module(target[0])
    value = getattr(module, target[1])
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    """Expose lazily-populated attributes in ``dir()`` results."""

    return sorted(set(globals()) | set(__all__))
