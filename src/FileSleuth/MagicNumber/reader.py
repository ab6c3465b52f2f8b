"""Random-access byte windows over seekable binary sources.

Every matcher in :mod:`FileSleuth.MagicNumber` reads through
:class:`ByteWindow`, which never raises on truncated input: a read that runs
past the end simply comes back short and the caller treats it as "no match".
"""

from __future__ import annotations

import contextlib
import io
import os
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

__all__ = ["ByteWindow", "Source", "open_window"]

Source = Union[bytes, bytearray, memoryview, BinaryIO, "ByteWindow"]

CHUNK_SIZE = 1024


class ByteWindow:
    """Read N bytes at offset O from a seekable source.

    A window is cheap to build and holds no state besides the wrapped stream,
    so create one per identification call rather than sharing between
    threads.
    """

    __slots__ = ("_stream", "_size")

    def __init__(self, source: Union[bytes, bytearray, memoryview, BinaryIO]) -> None:
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._stream = source
        self._size: Optional[int] = None

    @classmethod
    def wrap(cls, source: Source) -> "ByteWindow":
        """Return ``source`` unchanged if already a window, else wrap it."""

        if isinstance(source, ByteWindow):
            return source
        return cls(source)

    @property
    def size(self) -> int:
        if self._size is None:
            self._size = self._stream.seek(0, os.SEEK_END)
        return self._size

    def __len__(self) -> int:
        return self.size

    def empty(self) -> bool:
        return self.read_at(0, 1) == b""

    def read_at(self, offset: int, length: int) -> bytes:
        """Return up to ``length`` bytes starting at ``offset``."""

        if offset < 0 or length <= 0:
            return b""
        self._stream.seek(offset)
        return self._stream.read(length) or b""

    def window(self, offset: int, length: int) -> Optional[bytes]:
        """Return exactly ``length`` bytes at ``offset`` or ``None`` if short."""

        data = self.read_at(offset, length)
        if len(data) < length:
            return None
        return data

    def match(self, offset: int, *patterns: bytes) -> bool:
        """True if the bytes at ``offset`` equal any of ``patterns``."""

        for pattern in patterns:
            if self.window(offset, len(pattern)) == pattern:
                return True
        return False

    def tail(self, length: int) -> Optional[bytes]:
        """Return the final ``length`` bytes or ``None`` for shorter sources."""

        size = self.size
        if size < length:
            return None
        return self.window(size - length, length)

    def chunks(self, size: int = CHUNK_SIZE, overlap: int = 0) -> Iterator[bytes]:
        """Yield the whole source in ``size`` byte chunks.

        With ``overlap``, each chunk after the first is prefixed by the last
        ``overlap`` bytes of the previous one so substring searches can see
        patterns that straddle a boundary.
        """

        offset = 0
        carry = b""
        while True:
            data = self.read_at(offset, size)
            if not data:
                return
            yield carry + data
            offset += len(data)
            carry = data[-overlap:] if overlap else b""


@contextlib.contextmanager
def open_window(path: Union[str, Path]) -> Iterator[ByteWindow]:
    """Open ``path`` for binary reading and yield a :class:`ByteWindow`."""

    with open(path, "rb") as handle:
        yield ByteWindow(handle)
