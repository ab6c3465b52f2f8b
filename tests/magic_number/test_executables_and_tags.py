"""Windows header, ID3 tag and tracker music sub-parser tests."""

from __future__ import annotations

import struct
from datetime import datetime, timezone

import pytest

from FileSleuth.MagicNumber import ByteWindow, Signature, find, identify
from FileSleuth.MagicNumber.executables import (
    NO_MATCH,
    HeaderKind,
    Machine,
    NEKind,
    find_executable,
    new_executable,
    portable_executable,
)
from FileSleuth.MagicNumber.id3 import id3_description, id3v1, id3v2, synchsafe
from FileSleuth.MagicNumber.music import MOD_CHANNELS, tracker_description

PE_OFFSET = 0x80


def pe_bytes(machine: int, major: int, minor: int, *, pe64: bool = False, stamp: int = 0) -> bytes:
    data = bytearray(512)
    data[0:2] = b"MZ"
    struct.pack_into("<H", data, 0x3C, PE_OFFSET)
    data[PE_OFFSET : PE_OFFSET + 4] = b"PE\x00\x00"
    coff = PE_OFFSET + 4
    struct.pack_into("<HHI", data, coff, machine, 3, stamp)
    optional = coff + 20
    data[optional : optional + 2] = b"\x0b\x02" if pe64 else b"\x0b\x01"
    struct.pack_into("<HH", data, optional + 40, major, minor)
    return bytes(data)


def ne_bytes(kind: int, major: int, minor: int) -> bytes:
    data = bytearray(512)
    data[0:2] = b"MZ"
    struct.pack_into("<H", data, 0x3C, PE_OFFSET)
    data[PE_OFFSET : PE_OFFSET + 2] = b"NE"
    data[PE_OFFSET + 0x36] = kind
    data[PE_OFFSET + 0x3E] = minor
    data[PE_OFFSET + 0x3F] = major
    return bytes(data)


# --- Executables ---


def test_pe32_plus_amd64_header() -> None:
    header = portable_executable(pe_bytes(0x8664, 10, 0, pe64=True, stamp=1_600_000_000))
    assert header.kind is HeaderKind.PE
    assert header.machine is Machine.AMD64
    assert header.pe64 is True
    assert header.timestamp == datetime.fromtimestamp(1_600_000_000, tz=timezone.utc)
    assert str(header) == "Windows 10 64-bit"


def test_pe32_intel_nt4() -> None:
    header = portable_executable(pe_bytes(0x14C, 4, 0))
    assert header.pe64 is False
    assert header.timestamp is None
    assert str(header) == "Windows NT v4.0"


def test_pe_unknown_machine() -> None:
    assert str(portable_executable(pe_bytes(0x1234, 6, 1))) == "Unknown PE executable"


def test_ne_windows_286() -> None:
    header = new_executable(ne_bytes(2, 3, 10))
    assert header.kind is HeaderKind.NE
    assert header.ne is NEKind.WINDOWS_286
    assert header.machine is Machine.UNKNOWN
    assert str(header) == "Windows v3.10 for 286"


def test_ne_and_pe_are_mutually_exclusive() -> None:
    ne = ne_bytes(1, 1, 2)
    pe = pe_bytes(0x14C, 5, 1)
    assert new_executable(ne).found and not portable_executable(ne).found
    assert portable_executable(pe).found and not new_executable(pe).found
    assert find_executable(ByteWindow(ne)).kind is HeaderKind.NE
    assert find_executable(ByteWindow(pe)).kind is HeaderKind.PE


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"MZ",
        b"MZ" + b"\x00" * 40,
        # pointer beyond the buffer
        b"MZ" + b"\x00" * 58 + struct.pack("<H", 0x4000) + b"\x00" * 4,
        # PE signature present but optional header truncated
        pe_bytes(0x14C, 5, 1)[: PE_OFFSET + 30],
    ],
)
def test_truncated_headers_are_no_match(data: bytes) -> None:
    assert new_executable(data) is NO_MATCH
    assert portable_executable(data) is NO_MATCH
    assert not find_executable(ByteWindow(data)).found


def test_identify_decodes_program_header() -> None:
    found = identify(pe_bytes(0x14C, 5, 1), "setup.exe")
    assert found.signature is Signature.MICROSOFT_EXECUTABLE
    assert found.executable is not None
    assert str(found.executable) == "Windows XP 32-bit"


# --- ID3 ---


def v1_trailer(song: bytes, artist: bytes, year: bytes) -> bytes:
    return (
        b"TAG"
        + song.ljust(30, b"\x00")
        + artist.ljust(30, b"\x00")
        + b"".ljust(30, b"\x00")
        + year.ljust(4, b"\x00")
        + b"\x00" * 31
    )


def v23_frame(frame_id: bytes, text: bytes) -> bytes:
    payload = b"\x00" + text
    return frame_id + struct.pack(">I", len(payload)) + b"\x00\x00" + payload


def v22_frame(frame_id: bytes, text: bytes) -> bytes:
    payload = b"\x00" + text
    return frame_id + len(payload).to_bytes(3, "big") + payload


def v2_tag(major: int, frames: bytes, flags: int = 0) -> bytes:
    size = len(frames)
    synch = bytes([(size >> 21) & 0x7F, (size >> 14) & 0x7F, (size >> 7) & 0x7F, size & 0x7F])
    return b"ID3" + bytes([major, 0, flags]) + synch + frames


def test_id3v1_trailer() -> None:
    data = b"\x00" * 200 + v1_trailer(b"Title", b"Artist", b"2003")
    assert len(v1_trailer(b"", b"", b"")) == 128
    assert id3v1(ByteWindow(data)) == "Title by Artist (2003)"


def test_id3v1_trims_spaces_and_omits_missing_fields() -> None:
    data = v1_trailer(b"  Title  ", b"", b"")
    assert id3v1(ByteWindow(data)) == "Title"


def test_id3v1_absent() -> None:
    assert id3v1(ByteWindow(b"\x00" * 50)) == ""


def test_synchsafe_decoding() -> None:
    assert synchsafe(b"\x00\x00\x02\x01") == 257
    assert synchsafe(b"\x00\x00\x00\x7f") == 127
    assert synchsafe(b"\x00\x80\x00\x00") == 0


@pytest.mark.parametrize("major", [3, 4])
def test_id3v2_3_and_4_frames(major: int) -> None:
    frames = (
        v23_frame(b"TIT2", b"Song")
        + v23_frame(b"TPE2", b"Band")
        + v23_frame(b"TPE1", b"Singer")
        + v23_frame(b"TYER", b"1999")
    )
    assert id3v2(ByteWindow(v2_tag(major, frames))) == "Song by Singer (1999)"


def test_id3v2_2_falls_back_to_album_title() -> None:
    frames = v22_frame(b"TAL", b"Album") + v22_frame(b"TP1", b"Artist")
    assert id3v2(ByteWindow(v2_tag(2, frames))) == "Album by Artist"


def test_id3v2_ignores_non_numeric_year() -> None:
    frames = v23_frame(b"TIT2", b"Song") + v23_frame(b"TYER", b"soon")
    assert id3v2(ByteWindow(v2_tag(3, frames))) == "Song"


def test_id3v2_3_skips_extended_header() -> None:
    extended = struct.pack(">I", 6) + b"\x00\x00" + b"\x00\x00\x00\x00"
    frames = v23_frame(b"TIT2", b"Song") + v23_frame(b"TPE1", b"Singer")
    tag = v2_tag(3, extended + frames, flags=0x40)
    assert id3v2(ByteWindow(tag)) == "Song by Singer"


def test_id3v2_4_skips_synchsafe_extended_header() -> None:
    extended = b"\x00\x00\x00\x06" + b"\x01\x00"
    frames = v23_frame(b"TIT2", b"Song") + v23_frame(b"TYER", b"2004")
    tag = v2_tag(4, extended + frames, flags=0x40)
    assert id3v2(ByteWindow(tag)) == "Song (2004)"


def test_id3v2_2_flag_bit_is_not_an_extended_header() -> None:
    frames = v22_frame(b"TT2", b"Song")
    assert id3v2(ByteWindow(v2_tag(2, frames, flags=0x40))) == "Song"


def test_id3v2_unsupported_revision() -> None:
    assert id3v2(ByteWindow(v2_tag(9, v23_frame(b"TIT2", b"Song")))) == ""


def test_id3_description_prefers_v2_then_v1() -> None:
    v2 = v2_tag(3, v23_frame(b"TIT2", b"Newer"))
    v1 = v1_trailer(b"Older", b"", b"")
    assert id3_description(ByteWindow(v2 + b"\x00" * 16 + v1)) == "Newer"
    assert id3_description(ByteWindow(b"ID3\x03\x00\x00\x00\x00\x00\x00" + v1)) == "Older"
    assert id3_description(ByteWindow(b"ID3\x03\x00\x00\x00\x00\x00\x00")) is None


# --- Tracker music ---


def mod_bytes(tag: bytes, title: bytes = b"My Song") -> bytes:
    data = bytearray(1100)
    data[0 : len(title)] = title
    data[1080:1084] = tag
    return bytes(data)


@pytest.mark.parametrize(
    "tag,channels",
    [
        (b"M.K.", 4),
        (b"M!K!", 4),
        (b"4CHN", 4),
        (b"FLT4", 4),
        (b"6CHN", 6),
        (b"FLT8", 8),
        (b"OCTA", 8),
        (b"8CHN", 8),
        (b"2CHN", 2),
    ],
)
def test_mod_channel_count_from_tag_at_1080(tag: bytes, channels: int) -> None:
    assert MOD_CHANNELS[tag] == channels
    data = mod_bytes(tag)
    assert find(data) is Signature.MUSIC_PROTRACKER
    assert tracker_description(ByteWindow(data)) == (
        f'ProTracker {channels}-channel song, "My Song"'
    )


def test_mod_tag_near_start_is_not_a_module() -> None:
    data = b"M.K." + b"\x00" * 1200
    assert find(data) is not Signature.MUSIC_PROTRACKER


def test_impulse_tracker_title() -> None:
    data = b"IMPM" + b"Cool Tune".ljust(26, b"\x00") + b"\x00" * 32
    found = identify(data)
    assert found.signature is Signature.MUSIC_IMPULSE_TRACKER
    assert found.description == 'Impulse Tracker song, "Cool Tune"'


def test_scream_tracker_is_the_generic_module() -> None:
    data = bytearray(96)
    data[0:8] = b"Sk8 Tune"
    data[44:48] = b"SCRM"
    found = identify(bytes(data))
    assert found.signature is Signature.MUSIC_MODULE
    assert found.description == 'Scream Tracker 3 song, "Sk8 Tune"'
