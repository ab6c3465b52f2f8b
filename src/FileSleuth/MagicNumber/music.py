"""MIDI and tracker music detection.

Tracker modules are recognised by their identifiers and, where present, the
song title is pulled out for display.  ProTracker MODs have no leading magic;
their 4-byte format tag sits at the absolute offset 1080, after the 31 sample
headers, and encodes the channel count.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping, Tuple

from .reader import ByteWindow

__all__ = [
    "MOD_CHANNELS",
    "midi",
    "mod",
    "mtm",
    "it",
    "xm",
    "mk",
    "s3m",
    "music_mtm",
    "music_it",
    "music_xm",
    "music_mk",
    "music_s3m",
    "tracker_description",
]

MOD_TAG_OFFSET = 1080

MOD_CHANNELS: Mapping[bytes, int] = MappingProxyType(
    {
        b"2CHN": 2,
        b"M.K.": 4,
        b"M!K!": 4,
        b"4CHN": 4,
        b"FLT4": 4,
        b"6CHN": 6,
        b"FLT8": 8,
        b"OCTA": 8,
        b"8CHN": 8,
    }
)

_XM_ID = b"Extended Module: "


def _title(r: ByteWindow, offset: int, size: int) -> str:
    p = r.window(offset, size)
    if p is None:
        return ""
    return p.strip(b"\x00").decode("latin-1").strip()


def _describe(info: str, song: str) -> str:
    if song:
        return f'{info}, "{song}"'
    return info


def midi(r: ByteWindow) -> bool:
    return r.match(0, b"MThd")


def music_mtm(r: ByteWindow) -> str:
    """Describe a MultiTracker module, or return ``""``."""
    if not r.match(0, b"MTM"):
        return ""
    return _describe("MultiTrack song", _title(r, 4, 20))


def music_it(r: ByteWindow) -> str:
    """Describe an Impulse Tracker module, or return ``""``."""
    if not r.match(0, b"IMPM"):
        return ""
    return _describe("Impulse Tracker song", _title(r, 4, 26))


def music_xm(r: ByteWindow) -> str:
    """Describe a FastTracker 2 extended module, or return ``""``."""
    if not r.match(0, _XM_ID):
        return ""
    return _describe("extended module tracked music", _title(r, len(_XM_ID), 20))


def music_mk(r: ByteWindow) -> str:
    """Describe a ProTracker-style MOD by its channel tag, or return ``""``."""
    tag = r.window(MOD_TAG_OFFSET, 4)
    channels = MOD_CHANNELS.get(tag) if tag is not None else None
    if channels is None:
        return ""
    return _describe(f"ProTracker {channels}-channel song", _title(r, 0, 20))


def music_s3m(r: ByteWindow) -> str:
    """Describe a Scream Tracker 3 module, or return ``""``."""
    if not r.match(44, b"SCRM"):
        return ""
    return _describe("Scream Tracker 3 song", _title(r, 0, 28))


_DESCRIBERS: Tuple[Callable[[ByteWindow], str], ...] = (
    music_mtm,
    music_it,
    music_xm,
    music_mk,
    music_s3m,
)


def tracker_description(r: ByteWindow) -> str:
    """Return the first tracker description that applies, or ``""``."""
    for describe in _DESCRIBERS:
        text = describe(r)
        if text:
            return text
    return ""


def mtm(r: ByteWindow) -> bool:
    return music_mtm(r) != ""


def it(r: ByteWindow) -> bool:
    return music_it(r) != ""


def xm(r: ByteWindow) -> bool:
    return music_xm(r) != ""


def mk(r: ByteWindow) -> bool:
    return music_mk(r) != ""


def s3m(r: ByteWindow) -> bool:
    return music_s3m(r) != ""


def mod(r: ByteWindow) -> bool:
    """Match the generic module signature not claimed by a specific tracker."""
    return s3m(r) and not (mtm(r) or it(r) or xm(r) or mk(r))
