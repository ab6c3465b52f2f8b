"""ID3 tag decoding for MP3 audio.

Produces a one line ``"song by artist (year)"`` description from either the
128 byte ID3v1 trailer or the frames of an ID3v2.2, v2.3 or v2.4 header.

ID3v2 sizes are "synch-safe": only the low seven bits of each byte are used
so that the size can never mimic an MPEG sync word.  A size byte with the
high bit set is malformed and reads as zero.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .reader import ByteWindow

__all__ = ["synchsafe", "id3v1", "id3v2", "id3_description"]

logger = logging.getLogger(__name__)

V1_SIZE = 128
V2_HEADER_SIZE = 10
EXTENDED_HEADER_FLAG = 0x40

# Frame ids per tag revision: (song, performers in preference order, album, years).
_V22_FRAMES = ("TT2", ("TP1", "TP2"), "TAL", ("TYE",))
_V23_FRAMES = ("TIT2", ("TPE1", "TPE2", "TIT1"), "TALB", ("TYER", "TDRC"))

_TEXT_CODECS = {0: "latin-1", 1: "utf-16", 2: "utf-16-be", 3: "utf-8"}


def synchsafe(p: bytes) -> int:
    """Decode a big-endian synch-safe integer, returning 0 if malformed."""
    value = 0
    for byte in p:
        if byte & 0x80:
            return 0
        value = (value << 7) | byte
    return value


def _clean(raw: bytes) -> str:
    return raw.strip(b"\x00").decode("latin-1").strip()


def id3v1(r: ByteWindow) -> str:
    """Describe the ID3v1 trailer of ``r`` or return ``""``."""
    tag = r.tail(V1_SIZE)
    if tag is None or tag[:3] != b"TAG":
        return ""
    song = _clean(tag[3:33])
    artist = _clean(tag[33:63])
    year = _clean(tag[93:97])
    return _compose(song, artist, year)


def _compose(song: str, artist: str, year: str) -> str:
    if not song:
        return ""
    text = song
    if artist:
        text += f" by {artist}"
    if year:
        text += f" ({year})"
    return text


def _decode_text(payload: bytes) -> str:
    if not payload:
        return ""
    codec = _TEXT_CODECS.get(payload[0])
    if codec is None:
        return _clean(payload)
    body = payload[1:]
    try:
        text = body.decode(codec)
    except UnicodeDecodeError:
        return _clean(body)
    return text.strip("\x00").strip()


def _frames(data: bytes, major: int) -> Dict[str, str]:
    """Walk the frames of an ID3v2 tag body into an id → text mapping."""
    id_size, size_size, header = (3, 3, 6) if major == 2 else (4, 4, 10)
    frames: Dict[str, str] = {}
    pos = 0
    while pos + header <= len(data):
        frame_id = data[pos : pos + id_size]
        if not frame_id.isalnum():
            break  # padding
        raw_size = data[pos + id_size : pos + id_size + size_size]
        if major == 4:
            size = synchsafe(raw_size)
        else:
            size = int.from_bytes(raw_size, "big")
        start = pos + header
        end = start + size
        if size == 0 or end > len(data):
            break
        key = frame_id.decode("ascii")
        if key.startswith("T") and key not in frames:
            frames[key] = _decode_text(data[start:end])
        pos = end
    return frames


def _skip_extended_header(data: bytes, major: int, flags: int) -> bytes:
    """Drop the optional extended header that precedes the frames.

    v2.3 stores its size big-endian, excluding the four size bytes; v2.4
    stores a synch-safe size that includes them.  In v2.2 the same flag bit
    means compression and carries no extended header.
    """
    if major == 2 or not flags & EXTENDED_HEADER_FLAG or len(data) < 4:
        return data
    if major == 4:
        return data[synchsafe(data[:4]) :]
    return data[int.from_bytes(data[:4], "big") + 4 :]


def _first(frames: Dict[str, str], *ids: str) -> str:
    for frame_id in ids:
        value = frames.get(frame_id, "")
        if value:
            return value
    return ""


def id3v2(r: ByteWindow) -> str:
    """Describe the ID3v2 header of ``r`` or return ``""``.

    The song name is preferred, falling back to the album title when no song
    frame exists; the lead performer is preferred over the band or group.
    The year is only appended when it is numeric.
    """
    header = r.window(0, V2_HEADER_SIZE)
    if header is None or header[:3] != b"ID3":
        return ""
    major = header[3]
    if major == 2:
        song_id, artist_ids, album_id, year_ids = _V22_FRAMES
    elif major in (3, 4):
        song_id, artist_ids, album_id, year_ids = _V23_FRAMES
    else:
        logger.debug("unsupported ID3v2 revision", extra={"stage": "id3", "version": major})
        return ""
    size = synchsafe(header[6:10])
    data = r.read_at(V2_HEADER_SIZE, size)
    data = _skip_extended_header(data, major, header[5])
    frames = _frames(data, major)
    song = frames.get(song_id, "") or frames.get(album_id, "")
    artist = _first(frames, *artist_ids)
    year = _first(frames, *year_ids)[:4]
    if not year.isdigit():
        year = ""
    return _compose(song, artist, year)


def id3_description(r: ByteWindow) -> Optional[str]:
    """Describe an MP3 using ID3v2, then ID3v1; ``None`` when neither is set."""
    return id3v2(r) or id3v1(r) or None
