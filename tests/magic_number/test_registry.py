"""Registry, extension checking and category entry point tests."""

from __future__ import annotations

import struct
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from FileSleuth.MagicNumber import (
    ARCHIVES,
    ARCHIVES_BBS,
    ExtensionCheck,
    Signature,
    archive,
    audio,
    check_ext,
    document,
    extension_table,
    find,
    identify,
    image,
    match_ext,
    program,
    text_kind,
    video,
)

S = Signature

SHRINK_ZIP = b"PK\x03\x04" + struct.pack("<HHH", 10, 0, 1) + b"\x00" * 20
LHA = b"\x20\x7f-lh5-" + b"\x00" * 40
FLV = b"FLV\x01\x05\x00\x00\x00\x09" + b"\x00" * 20


def test_extension_table_maps_zip_to_every_zip_variant() -> None:
    candidates = extension_table()[".zip"]
    for sign in (
        S.PKWARE_ZIP_SHRINK,
        S.PKWARE_ZIP_REDUCE,
        S.PKWARE_ZIP_IMPLODE,
        S.PKWARE_ZIP64,
        S.PKWARE_ZIP,
        S.PKWARE_MULTI_VOLUME,
    ):
        assert sign in candidates


def test_every_signature_has_label_and_title() -> None:
    for sign in Signature:
        assert sign.label
        assert sign.title
    assert S.ZERO_BYTE.label != S.UNKNOWN.label


def test_match_ext_accepts_content_of_a_candidate_signature() -> None:
    assert match_ext("release.zip", SHRINK_ZIP) == (True, S.PKWARE_ZIP_SHRINK)


def test_match_ext_is_case_insensitive() -> None:
    assert match_ext("RELEASE.ZIP", SHRINK_ZIP)[0] is True


def test_match_ext_reports_content_signature_on_disagreement() -> None:
    assert match_ext("release.zip", LHA) == (False, S.YOSHI_LHA)


def test_match_ext_never_raises_on_empty_or_unknown_content() -> None:
    assert match_ext("release.zip", b"") == (False, S.ZERO_BYTE)
    assert match_ext("noext", b"\x00\x01\x02") == (False, S.UNKNOWN)


def test_match_ext_accepts_text_reached_through_find() -> None:
    assert match_ext("readme.txt", b"Hello there\r\n") == (True, S.PLAIN_TEXT)


@settings(max_examples=200, deadline=None)
@given(
    st.binary(max_size=64),
    st.sampled_from(["a.zip", "a.lha", "a.exe", "a.txt", "a.flv", "a.unknown", "noext"]),
)
def test_match_ext_agrees_with_candidate_intersection(data: bytes, name: str) -> None:
    matched, sign = match_ext(name, data)
    candidates = extension_table().get(Path(name).suffix.lower(), ())
    if matched:
        assert sign in candidates
    else:
        assert find(data) not in candidates


def test_check_ext_three_way_outcome() -> None:
    assert check_ext("release.zip", SHRINK_ZIP) == (ExtensionCheck.MATCHES, S.PKWARE_ZIP_SHRINK)
    assert check_ext("release.zip", LHA) == (ExtensionCheck.CONTRADICTS, S.YOSHI_LHA)
    assert check_ext("release.zip", b"")[0] is ExtensionCheck.UNDETERMINED
    assert check_ext("release.zip", b"plain words")[0] is ExtensionCheck.UNDETERMINED
    assert check_ext("release.qqq", LHA)[0] is ExtensionCheck.UNDETERMINED


def test_category_views_are_fixed_tuples() -> None:
    assert isinstance(ARCHIVES, tuple)
    assert set(ARCHIVES_BBS) <= set(ARCHIVES)


def test_category_entry_points() -> None:
    assert archive(LHA) is S.YOSHI_LHA
    assert archive(FLV) is S.UNKNOWN
    assert video(FLV) is S.FLASH_VIDEO
    assert image(b"GIF89a" + b"\x00" * 10) is S.GRAPHICS_INTERCHANGE_FORMAT
    assert program(b"MZ" + b"\x00" * 62) is S.MICROSOFT_EXECUTABLE
    assert audio(b"MThd\x00\x00\x00\x06") is S.MUSICAL_INSTRUMENT_DIGITAL_INTERFACE
    assert audio(b"IMPM" + b"\x00" * 30) is S.MUSIC_IMPULSE_TRACKER


def test_document_and_text_fall_back_to_plain_text() -> None:
    assert document(b"just words\n") is S.PLAIN_TEXT
    assert text_kind(b"\x1b[2J art") is S.ANSI_ESCAPE_TEXT
    assert text_kind(b"\xef\xbb\xbfhi") is S.UTF8_TEXT


def test_identify_path_uses_its_own_name_for_the_extension_check(tmp_path: Path) -> None:
    target = tmp_path / "video.zip"
    target.write_bytes(FLV)

    found = identify(target)

    assert found.signature is S.FLASH_VIDEO
    assert found.label == S.FLASH_VIDEO.label
    assert found.size == len(FLV)
    assert found.match is ExtensionCheck.CONTRADICTS


def test_identify_bytes_without_a_name_skips_the_extension_check() -> None:
    found = identify(FLV)
    assert found.match is None
    assert found.executable is None
    assert found.description is None


def test_identify_reads_mp3_tags() -> None:
    tag = (
        b"TAG"
        + b"Title".ljust(30, b"\x00")
        + b"Artist".ljust(30, b"\x00")
        + b"Album".ljust(30, b"\x00")
        + b"2003"
        + b"\x00" * 31
    )
    data = b"ID3\x03\x00\x00\x00\x00\x00\x00" + b"\x00" * 64 + tag
    found = identify(data, "song.mp3")
    assert found.signature is S.MPEG1_AUDIO_LAYER3
    assert found.description == "Title by Artist (2003)"
    assert found.match is ExtensionCheck.MATCHES


def test_identify_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        identify(tmp_path / "absent.bin")
