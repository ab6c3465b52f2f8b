# === NAVMAP v1 ===
# {
#   "module": "FileSleuth.settings",
#   "purpose": "Environment-driven configuration for archive tooling, locks, and logging",
#   "sections": [
#     {"id": "toolpaths", "name": "ToolPaths", "anchor": "class-toolpaths", "kind": "class"},
#     {"id": "filesleuthsettings", "name": "FileSleuthSettings", "anchor": "class-filesleuthsettings", "kind": "class"},
#     {"id": "get-settings", "name": "get_settings", "anchor": "function-get-settings", "kind": "function"},
#     {"id": "invalidate-settings-cache", "name": "invalidate_settings_cache", "anchor": "function-invalidate-settings-cache", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Configuration for FileSleuth.

Responsibilities
----------------
- Declare every tunable used by the archive layer (subprocess deadlines,
  source size caps, content/lock directories) and by logging setup.
- Read overrides from ``FILESLEUTH_*`` environment variables through
  :mod:`pydantic_settings`; nested tool names use ``__`` as delimiter, e.g.
  ``FILESLEUTH_TOOLS__UNZIP=/opt/bin/unzip``.
- Provide a memoised accessor (:func:`get_settings`) with an explicit
  invalidation hook so tests can swap the environment.
"""

from __future__ import annotations

import tempfile
import threading
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

__all__ = [
    "ToolPaths",
    "FileSleuthSettings",
    "get_settings",
    "invalidate_settings_cache",
]

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class ToolPaths(BaseModel):
    """Names (or absolute paths) of the external programs used for fallbacks."""

    file: str = "file"
    arj: str = "arj"
    lha: str = "lha"
    unrar: str = "unrar"
    unzip: str = "unzip"
    zipinfo: str = "zipinfo"

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True, extra="forbid")

    @field_validator("*")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("program name must not be empty")
        return value


class FileSleuthSettings(BaseSettings):
    """Resolved settings, defaults overridden by ``FILESLEUTH_`` variables."""

    tool_timeout_sec: float = Field(default=60.0, gt=0, le=3600)
    magic_timeout_sec: float = Field(default=10.0, gt=0, le=600)
    max_source_bytes: int = Field(default=150 * 1024 * 1024, gt=0)
    content_root: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "filesleuth-content"
    )
    lock_timeout_sec: float = Field(default=30.0, ge=0)
    soft_locks: bool = False
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    max_log_size_mb: float = Field(default=5.0, gt=0)
    retention_days: int = Field(default=30, ge=1)
    tools: ToolPaths = Field(default_factory=ToolPaths)

    model_config = SettingsConfigDict(
        env_prefix="FILESLEUTH_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        upper = value.strip().upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return upper

    @field_validator("content_root", "log_dir")
    @classmethod
    def _expand(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        return Path(value).expanduser()

    @property
    def lock_dir(self) -> Path:
        """Directory that holds per-source lock files."""

        return self.content_root / "locks"


_SETTINGS_CACHE: Optional[FileSleuthSettings] = None
_SETTINGS_LOCK = threading.Lock()


def get_settings(*, copy: bool = False) -> FileSleuthSettings:
    """Return memoised settings built from defaults and the environment.

    Raises:
        ConfigError: If an environment override fails validation.
    """

    global _SETTINGS_CACHE  # noqa: PLW0603

    with _SETTINGS_LOCK:
        if _SETTINGS_CACHE is None:
            try:
                _SETTINGS_CACHE = FileSleuthSettings()
            except ValidationError as exc:
                raise ConfigError(f"Invalid FileSleuth configuration: {exc}") from exc
        cached = _SETTINGS_CACHE
    if copy:
        return cached.model_copy(deep=True)
    return cached


def invalidate_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""

    global _SETTINGS_CACHE  # noqa: PLW0603

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None
