"""Filename repair, extension handling and README selection tests."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from FileSleuth.ArchiveContent.naming import (
    archive_extension,
    member_basename,
    rename,
    repair_filename,
    split_extension,
)
from FileSleuth.ArchiveContent.readme import Usability, rank, readme

# --- Extensions ---


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("release.zip", ".zip"),
        ("RELEASE.ZIP", ".zip"),
        ("backup.tar.gz", ".tar.gz"),
        ("backup.TAR.BZ2", ".tar.bz2"),
        ("notes", ""),
        (".profile", ""),
        ("trailing.", ""),
        ("dir.d/file", ""),
    ],
)
def test_archive_extension(filename: str, expected: str) -> None:
    assert archive_extension(filename) == expected


def test_split_extension_keeps_case_and_directories() -> None:
    assert split_extension("files/Release.LZH") == ("files/Release", ".LZH")


@pytest.mark.parametrize(
    "new_ext,filename,expected",
    [
        (".lha", "release.zip", "release.lha"),
        ("lha", "release.zip", "release.lha"),
        (".zip", "README", "README.zip"),
        ("", "archive.tar.gz", "archive"),
        ("", "plain", "plain"),
        (".tar.gz", "backup.tgz", "backup.tar.gz"),
        (".zip", "release.v1.arj", "release.v1.zip"),
    ],
)
def test_rename(new_ext: str, filename: str, expected: str) -> None:
    assert rename(new_ext, filename) == expected


_NAME = st.text(
    alphabet=st.characters(exclude_characters="/\\\x00", exclude_categories=("Cs",)),
    min_size=1,
    max_size=24,
)
_EXT = st.sampled_from([".zip", ".lha", ".arj", ".tar.gz", "rar", ".TXT"])


@given(_EXT, _NAME)
def test_rename_is_idempotent(new_ext: str, filename: str) -> None:
    once = rename(new_ext, filename)
    assert rename(new_ext, once) == once


# --- Charset repair ---


def test_repair_keeps_valid_utf8() -> None:
    assert repair_filename("café.txt") == "café.txt"
    assert repair_filename("café.txt".encode("utf-8")) == "café.txt"


def test_repair_reinterprets_dos_code_page() -> None:
    raw = "ÇA VA.TXT".encode("cp437")
    assert repair_filename(raw) == "ÇA VA.TXT"


def test_repair_recovers_surrogate_escaped_names() -> None:
    escaped = b"\x80DIR.NFO".decode("utf-8", "surrogateescape")
    assert repair_filename(escaped) == "ÇDIR.NFO"


def test_member_basename_handles_dos_separators() -> None:
    assert member_basename("DOCS\\FILE_ID.DIZ") == "FILE_ID.DIZ"
    assert member_basename("a/b/c.txt") == "c.txt"


# --- README selection ---


def test_rank_levels() -> None:
    assert rank("release.zip", "release.nfo") is Usability.BASE_NFO
    assert rank("release.zip", "RELEASE.TXT") is Usability.BASE_TXT
    assert rank("release.zip", "group.nfo") is Usability.ANY_NFO
    assert rank("release.zip", "FILE_ID.DIZ") is Usability.FILE_ID_DIZ
    assert rank("release.zip", "release.diz") is Usability.BASE_DIZ
    assert rank("release.zip", "readme.txt") is Usability.ANY_TXT
    assert rank("release.zip", "other.diz") is Usability.ANY_DIZ
    assert rank("release.zip", "setup.exe") is None


def test_readme_prefers_archive_named_nfo() -> None:
    files = ["readme.txt", "FILE_ID.DIZ", "group.nfo", "release.nfo", "setup.exe"]
    assert readme("release.zip", files) == "release.nfo"


def test_readme_winner_does_not_depend_on_order() -> None:
    files = ["b.nfo", "a.nfo", "readme.txt"]
    assert readme("x.zip", files) == "a.nfo"
    assert readme("x.zip", list(reversed(files))) == "a.nfo"


def test_readme_file_id_diz_beats_plain_text() -> None:
    assert readme("x.zip", ["readme.txt", "sub/file_id.diz"]) == "sub/file_id.diz"


def test_readme_none_without_text_members() -> None:
    assert readme("x.zip", ["a.exe", "b.com"]) is None
    assert readme("x.zip", []) is None
