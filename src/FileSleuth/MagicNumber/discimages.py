"""Matchers for CD and DVD disc image formats."""

from __future__ import annotations

from .reader import ByteWindow

__all__ = ["iso", "nri", "daa", "mdf"]

# The ISO 9660 volume descriptor sits in sector 16; images carrying a
# descriptor set of several volumes repeat it every 2048 bytes.
_ISO_OFFSETS = (0, 32769, 34817, 36865)
_ISO_ID = b"CD001"


def iso(r: ByteWindow) -> bool:
    """Match an ISO 9660 CD image.

    Offsets are probed in order and a short read ends the probe.
    """
    for offset in _ISO_OFFSETS:
        p = r.window(offset, len(_ISO_ID))
        if p is None:
            return False
        if p == _ISO_ID:
            return True
    return False


def nri(r: ByteWindow) -> bool:
    """Match a Nero Burning ROM image."""
    return r.match(0, b"\x0eNeroISO")


def daa(r: ByteWindow) -> bool:
    """Match a PowerISO direct access archive."""
    return r.match(0, b"DAA\x00\x00\x00\x00\x00")


def mdf(r: ByteWindow) -> bool:
    """Match an Alcohol 120% media descriptor image."""
    return r.match(0, b"\x00" + b"\xff" * 10 + b"\x00\x00\x02\x00\x01")
