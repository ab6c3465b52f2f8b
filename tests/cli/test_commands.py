"""Tests for the filesleuth command line interface.

Tests verify:
- version and help output
- identify, list, extract and readme commands
- Library errors exit with status 1 and a readable message
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import pytest

pytest.importorskip("libarchive")

from typer.testing import CliRunner

from FileSleuth import __version__
from FileSleuth.cli import app
from FileSleuth.logging_config import LOGGER_NAME

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("FILESLEUTH_CONTENT_ROOT", str(tmp_path / "content"))
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_filesleuth_managed", False):
            logger.removeHandler(handler)
            handler.close()


@pytest.fixture
def release_zip(tmp_path: Path) -> Path:
    target = tmp_path / "release.zip"
    with zipfile.ZipFile(target, "w") as zipf:
        zipf.writestr("release.nfo", "greets")
        zipf.writestr("setup.exe", "MZ")
    return target


class TestBasics:
    def test_help_without_command(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)
        assert "identify" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestIdentify:
    def test_identify_zip(self, release_zip: Path):
        result = runner.invoke(app, ["identify", str(release_zip)])
        assert result.exit_code == 0
        assert "release.zip" in result.output

    def test_identify_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["identify", str(tmp_path / "absent.bin")])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestArchiveCommands:
    def test_list(self, release_zip: Path):
        result = runner.invoke(app, ["list", str(release_zip)])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines.index("release.nfo") < lines.index("setup.exe")

    def test_list_garbage_fails(self, tmp_path: Path):
        bogus = tmp_path / "bogus.foo"
        bogus.write_bytes(b"\xde\xad\x00\xef" * 64)
        result = runner.invoke(app, ["list", str(bogus)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_extract(self, release_zip: Path, tmp_path: Path):
        dest = tmp_path / "out"
        dest.mkdir()
        result = runner.invoke(app, ["extract", str(release_zip), str(dest), "setup.exe"])
        assert result.exit_code == 0
        assert "libarchive" in result.output
        assert (dest / "setup.exe").exists()
        assert not (dest / "release.nfo").exists()

    def test_extract_into_missing_directory(self, release_zip: Path, tmp_path: Path):
        result = runner.invoke(app, ["extract", str(release_zip), str(tmp_path / "nowhere")])
        assert result.exit_code == 1

    def test_readme(self, release_zip: Path):
        result = runner.invoke(app, ["readme", str(release_zip)])
        assert result.exit_code == 0
        assert "release.nfo" in result.output.splitlines()

    def test_readme_without_candidates(self, tmp_path: Path):
        target = tmp_path / "tools.zip"
        with zipfile.ZipFile(target, "w") as zipf:
            zipf.writestr("tool.exe", "MZ")
        result = runner.invoke(app, ["readme", str(target)])
        assert result.exit_code == 1
        assert "No README" in result.output
