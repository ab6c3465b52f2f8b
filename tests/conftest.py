# === NAVMAP v1 ===
# {
#   "module": "tests.conftest",
#   "purpose": "Shared pytest fixtures for suite",
#   "sections": [
#     {"id": "settings", "name": "settings", "anchor": "function-settings", "kind": "function"},
#     {"id": "fake-tool", "name": "fake_tool", "anchor": "function-fake-tool", "kind": "function"},
#     {"id": "reset-settings-cache", "name": "_reset_settings_cache", "anchor": "function-reset-settings-cache", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
Pytest Configuration

This module configures shared pytest behaviour for the FileSleuth suite:
``src`` is put on ``sys.path`` so the package imports without installation,
settings are isolated per test, and fake archiver programs can be dropped
into a temporary directory to exercise the system-tool fallbacks without
the real ``arj``/``lha``/``unzip`` binaries.

Usage:
    pytest tests/archive_content -q
"""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path
from typing import Callable, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from FileSleuth.settings import FileSleuthSettings, invalidate_settings_cache  # noqa: E402

FakeTool = Callable[..., Path]


@pytest.fixture(autouse=True)
def _reset_settings_cache(monkeypatch: pytest.MonkeyPatch):
    """Drop cached settings and stray ``FILESLEUTH_*`` variables around each test."""

    for key in list(os.environ):
        if key.startswith("FILESLEUTH_"):
            monkeypatch.delenv(key, raising=False)
    invalidate_settings_cache()
    yield
    invalidate_settings_cache()


@pytest.fixture
def settings(tmp_path: Path) -> FileSleuthSettings:
    """Settings rooted in a per-test content directory with short deadlines."""

    return FileSleuthSettings(
        content_root=tmp_path / "content",
        tool_timeout_sec=10,
        magic_timeout_sec=5,
        lock_timeout_sec=5,
    )


@pytest.fixture
def fake_tool(tmp_path: Path, settings: FileSleuthSettings) -> FakeTool:
    """Return a factory writing shell scripts that impersonate archivers.

    Each script appends its arguments to ``<name>.args`` (one per line),
    prints the canned stdout/stderr and exits with ``exit_code``. A custom
    ``body`` runs before the canned output. The script path is assigned to
    ``settings.tools.<name>``.
    """

    if sys.platform.startswith("win"):
        pytest.skip("fake tools are POSIX shell scripts")
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(
        name: str,
        stdout: str = "",
        stderr: str = "",
        exit_code: int = 0,
        body: Optional[str] = None,
    ) -> Path:
        out_file = bin_dir / f"{name}.stdout"
        err_file = bin_dir / f"{name}.stderr"
        out_file.write_text(stdout, encoding="utf-8")
        err_file.write_text(stderr, encoding="utf-8")
        script = bin_dir / name
        script.write_text(
            "#!/bin/sh\n"
            f"printf '%s\\n' \"$@\" >> '{bin_dir / (name + '.args')}'\n"
            f"{body or ''}\n"
            f"cat '{out_file}'\n"
            f"cat '{err_file}' >&2\n"
            f"exit {exit_code}\n",
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        setattr(settings.tools, name, str(script))
        return script

    return _make


def tool_args(script: Path) -> list:
    """Return the arguments a fake tool was invoked with, across all runs."""

    log = script.with_name(script.name + ".args")
    if not log.exists():
        return []
    return log.read_text(encoding="utf-8").splitlines()


def lha_row(name: str, size: int) -> str:
    """Format one member row the way ``lha -l`` prints it."""

    return f"{'[generic]':<23}{size:>7} 100.0% Apr 10 17:03 {name}"
