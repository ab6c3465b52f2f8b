"""
Structured Logging Utilities

This module centralizes structured logging setup for FileSleuth. It emits JSON
log records for archive listing and extraction, attaches correlation
identifiers, and rolls log files to maintain a clean retention window.
"""

from __future__ import annotations

import gzip
import json
import logging
import sys
import uuid
from datetime import datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .settings import FileSleuthSettings

LOGGER_NAME = "FileSleuth"
_MANAGED_ATTR = "_filesleuth_managed"


def generate_correlation_id() -> str:
    """Create a short-lived identifier that links related log entries.

    Returns:
        Twelve character hexadecimal identifier suitable for correlating the
        direct-read, retry and fallback events of a single request.

    Examples:
        >>> cid = generate_correlation_id()
        >>> len(cid)
        12
    """
    return uuid.uuid4().hex[:12]


class JSONFormatter(logging.Formatter):
    """Formatter emitting JSON structured logs.

    Examples:
        >>> formatter = JSONFormatter()
        >>> isinstance(formatter.format(logging.makeLogRecord({'msg': 'test'})), str)
        True
    """

    def format(self, record: logging.LogRecord) -> str:
        """Serialize a logging record into a JSON line.

        Args:
            record: Log record emitted by the FileSleuth components.

        Returns:
            JSON string carrying the stage, source and format context.
        """
        now = datetime.now(timezone.utc)
        log_obj = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", None),
            "stage": getattr(record, "stage", None),
            "source": getattr(record, "source", None),
            "fmt": getattr(record, "fmt", None),
        }
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            log_obj.update(record.extra_fields)
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


def _compress_old_log(path: Path) -> None:
    """Compress a log file in-place using gzip to reclaim disk space."""
    compressed_path = path.with_suffix(path.suffix + ".gz")
    with path.open("rb") as source, gzip.open(compressed_path, "wb") as target:
        target.write(source.read())
    path.unlink(missing_ok=True)


def _cleanup_logs(log_dir: Path, retention_days: int) -> None:
    """Compress logs older than the retention window and drop expired archives."""
    now = datetime.now(timezone.utc)
    retention_delta = timedelta(days=retention_days)
    for file in log_dir.glob("*.jsonl"):
        mtime = datetime.fromtimestamp(file.stat().st_mtime, tz=timezone.utc)
        if now - mtime > retention_delta:
            _compress_old_log(file)
    for file in log_dir.glob("*.jsonl.gz"):
        mtime = datetime.fromtimestamp(file.stat().st_mtime, tz=timezone.utc)
        if now - mtime > retention_delta * 2:
            file.unlink(missing_ok=True)


def setup_logging(
    settings: FileSleuthSettings, log_dir: Optional[Path] = None
) -> logging.Logger:
    """Configure console and rotating JSON file handlers.

    Args:
        settings: Settings providing level, rotation size and retention.
        log_dir: Optional directory override for log file placement. Without
            one, ``settings.log_dir`` is used; when both are unset only the
            console handler is attached.

    Returns:
        The ``FileSleuth`` package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, _MANAGED_ATTR, False):
            logger.removeHandler(handler)
            handler.close()

    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(console_formatter)
    setattr(stream_handler, _MANAGED_ATTR, True)
    logger.addHandler(stream_handler)

    target_dir = log_dir or settings.log_dir
    if target_dir is not None:
        target_dir = Path(target_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        _cleanup_logs(target_dir, settings.retention_days)
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        file_handler = RotatingFileHandler(
            target_dir / f"filesleuth-{today}.jsonl",
            maxBytes=int(settings.max_log_size_mb * 1024 * 1024),
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter())
        setattr(file_handler, _MANAGED_ATTR, True)
        logger.addHandler(file_handler)

    logger.propagate = True
    return logger


__all__ = ["LOGGER_NAME", "JSONFormatter", "setup_logging", "generate_correlation_id"]
