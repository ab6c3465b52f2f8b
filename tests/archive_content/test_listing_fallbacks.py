"""Content listing tests: extension repair, fallbacks and graceful degradation."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import pytest

pytest.importorskip("libarchive")

from conftest import lha_row, tool_args

from FileSleuth.ArchiveContent import Contents, list_contents, list_or_empty, magic_ext
from FileSleuth.ArchiveContent.lister import normalise_names
from FileSleuth.ArchiveContent.magic import describe_magic, is_lha_magic, verify_extension
from FileSleuth.errors import (
    ExtensionMismatchError,
    NotAnArchiveError,
    SourceIsDirectoryError,
    SourceMissingError,
    ToolNotFoundError,
    UnsupportedFormatError,
)
from FileSleuth.MagicNumber import Signature

# LHA level byte 9 is invalid, so libarchive refuses the header while the
# "-lh" signature still identifies the content.
LHA_BYTES = b"\x20\x7f-lh5-" + b"\x00" * 13 + b"\x09" + b"\x00" * 40
GARBAGE = b"\xde\xad\x00\xef" * 64


@pytest.fixture
def lha_as_zip(tmp_path: Path) -> Path:
    target = tmp_path / "release.zip"
    target.write_bytes(LHA_BYTES)
    return target


@pytest.fixture
def demo_zip(tmp_path: Path) -> Path:
    target = tmp_path / "demo.zip"
    with zipfile.ZipFile(target, "w") as zipf:
        zipf.writestr("FILE_ID.DIZ", "about")
        zipf.writestr("docs/", "")
        zipf.writestr("docs/readme.txt", "hello")
    return target


def test_list_zip_with_libarchive(demo_zip: Path, settings) -> None:
    contents = list_contents(demo_zip, "demo.zip", settings=settings)

    assert isinstance(contents, Contents)
    assert contents.files == ("FILE_ID.DIZ", "docs/readme.txt")
    assert contents.signature is Signature.PKWARE_ZIP
    assert contents.extension == ".zip"
    assert contents.method == "libarchive"
    assert len(contents) == 2
    assert list(contents) == ["FILE_ID.DIZ", "docs/readme.txt"]


def test_lha_claimed_as_zip_is_retried_as_lha(lha_as_zip: Path, settings, fake_tool) -> None:
    script = fake_tool(
        "lha", stdout="\n".join([lha_row("FILE_ID.DIZ", 99), lha_row("GAME.EXE", 4096)])
    )

    contents = list_contents(lha_as_zip, "release.zip", settings=settings)

    assert contents.files == ("FILE_ID.DIZ", "GAME.EXE")
    assert contents.signature is Signature.YOSHI_LHA
    assert contents.extension == ".lha"
    assert contents.method == "lha"
    assert tool_args(script) == ["-l", str(lha_as_zip)]


def test_retry_is_logged_with_a_correlation_id(
    lha_as_zip: Path, settings, fake_tool, caplog: pytest.LogCaptureFixture
) -> None:
    fake_tool("lha", stdout=lha_row("A.TXT", 1))
    with caplog.at_level(logging.INFO, logger="FileSleuth"):
        list_contents(lha_as_zip, "release.zip", settings=settings)

    list_records = [r for r in caplog.records if getattr(r, "stage", None) == "list"]
    assert list_records
    ids = {getattr(r, "correlation_id", None) for r in list_records}
    assert len(ids) == 1
    assert None not in ids


def test_fallback_to_system_program_when_library_fails(
    tmp_path: Path, settings, fake_tool
) -> None:
    source = tmp_path / "upload.rar"
    source.write_bytes(GARBAGE)
    fake_tool("unrar", stdout="setup.exe\n\nreadme.txt\n")

    contents = list_contents(source, "upload.rar", settings=settings)

    assert contents.files == ("setup.exe", "readme.txt")
    assert contents.method == "unrar"
    assert contents.extension == ".rar"


def test_both_paths_failing_keeps_the_error_chain(tmp_path: Path, settings) -> None:
    source = tmp_path / "upload.rar"
    source.write_bytes(GARBAGE)
    settings.tools.unrar = "filesleuth-no-such-program"

    with pytest.raises(NotAnArchiveError) as excinfo:
        list_contents(source, "upload.rar", settings=settings)

    fallback = excinfo.value.__cause__
    assert isinstance(fallback, ToolNotFoundError)
    assert isinstance(fallback.__context__, NotAnArchiveError)
    assert excinfo.value.fmt == ".rar"
    assert excinfo.value.source == source


def test_unknown_extension_is_unsupported(tmp_path: Path, settings) -> None:
    source = tmp_path / "upload.foo"
    source.write_bytes(GARBAGE)
    with pytest.raises(UnsupportedFormatError):
        list_contents(source, "upload.foo", settings=settings)


def test_missing_and_directory_sources(tmp_path: Path, settings) -> None:
    with pytest.raises(SourceMissingError):
        list_contents(tmp_path / "absent.zip", "absent.zip", settings=settings)
    with pytest.raises(SourceIsDirectoryError):
        list_contents(tmp_path, "dir.zip", settings=settings)


def test_list_or_empty_degrades_gracefully(
    tmp_path: Path, settings, caplog: pytest.LogCaptureFixture
) -> None:
    source = tmp_path / "upload.foo"
    source.write_bytes(GARBAGE)

    with caplog.at_level(logging.WARNING, logger="FileSleuth"):
        contents = list_or_empty(source, "upload.foo", settings=settings)

    assert contents.files == ()
    assert contents.signature is Signature.UNKNOWN
    assert contents.method == ""
    assert any("cannot list" in record.getMessage() for record in caplog.records)


def test_list_or_empty_returns_real_listing(demo_zip: Path, settings) -> None:
    assert list_or_empty(demo_zip, "demo.zip", settings=settings).files


def test_normalise_names_drops_blanks_and_directories() -> None:
    names = ["a.txt", "", "   ", "dir/", "DOS\\", "b.txt\r", b"\x80.NFO".decode("latin-1")]
    assert normalise_names(names) == ["a.txt", "b.txt", "\x80.NFO"]


def test_normalise_names_repairs_code_page_437() -> None:
    broken = b"\x80A.NFO".decode("utf-8", "surrogateescape")
    assert normalise_names([broken]) == ["ÇA.NFO"]


# --- Format probing ---


def test_verify_extension_reports_the_probed_extension(lha_as_zip: Path, settings) -> None:
    with pytest.raises(ExtensionMismatchError) as excinfo:
        verify_extension(lha_as_zip, "release.zip", settings=settings)
    assert excinfo.value.corrected_ext == ".lha"
    assert excinfo.value.fmt == ".zip"


def test_verify_extension_accepts_matching_content(demo_zip: Path, settings) -> None:
    assert verify_extension(demo_zip, "demo.zip", settings=settings) == ".zip"


def test_verify_extension_keeps_claim_for_non_archives(tmp_path: Path, settings) -> None:
    source = tmp_path / "notes.zip"
    source.write_bytes(b"just some text\n")
    assert verify_extension(source, "notes.zip", settings=settings) == ".zip"


def test_verify_extension_corrects_a_name_without_extension(demo_zip: Path, settings) -> None:
    with pytest.raises(ExtensionMismatchError) as excinfo:
        verify_extension(demo_zip, "DOWNLOAD", settings=settings)
    assert excinfo.value.corrected_ext == ".zip"


def test_magic_ext_prefers_the_registry(lha_as_zip: Path, settings) -> None:
    settings.tools.file = "filesleuth-no-such-program"
    assert magic_ext(lha_as_zip, settings=settings) == ".lha"


def test_magic_ext_asks_file_for_unmapped_archives(tmp_path: Path, settings, fake_tool) -> None:
    source = tmp_path / "span.bin"
    source.write_bytes(b"PK\x07\x08" + b"\x00" * 60)
    script = fake_tool("file", stdout="Zip archive data, at least v2.0 to extract\n")

    assert magic_ext(source, settings=settings) == ".zip"
    assert tool_args(script) == ["--brief", str(source)]


def test_magic_ext_rejects_unknown_descriptions(tmp_path: Path, settings, fake_tool) -> None:
    source = tmp_path / "old.zoo"
    source.write_bytes(b"ZOO 2.10 Archive.\x1a" + b"\x00" * 40)
    fake_tool("file", stdout="Zoo archive data, v2.10\n")
    with pytest.raises(NotAnArchiveError):
        magic_ext(source, settings=settings)


@pytest.mark.parametrize(
    "description,expected",
    [
        ("Zip archive data, at least v1.0 to extract", ".zip"),
        ("RAR archive data, v4, os: Win32", ".rar"),
        ("gzip compressed data, from Unix", ".tar.gz"),
        ("POSIX tar archive (GNU)", None),
        ("LHarc archive data", ".lha"),
        ("LHa 2.x? archive data [lh5]", ".lha"),
        ("LHa archive data [lh0]", ".lha"),
        ("ASCII text", None),
        ("", None),
    ],
)
def test_describe_magic(description: str, expected) -> None:
    assert describe_magic(description) == expected


def test_is_lha_magic_needs_archive_data() -> None:
    assert is_lha_magic("lha archive data")
    assert not is_lha_magic("lha")
    assert not is_lha_magic("lhasa utility")
