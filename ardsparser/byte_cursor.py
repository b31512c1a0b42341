"""
Bounds-aware sequential reader over a ROM image.

The ARDS format references offsets absolutely, so a cursor always knows the
full length of its source. Two sources are supported:

    ByteCursor(data)      - any bytes-like object (bytes, bytearray, mmap)
    FileCursor(fileobj)   - a seekable binary file; size is taken at creation

Every read checks the remaining length first and raises EndOfDataError
instead of returning a short result. A failed read never moves the cursor.
"""

import os
import struct
from typing import BinaryIO, Tuple

from .errors import BoundsError, EndOfDataError

TEXT_ENCODING = 'latin-1'

_U16 = struct.Struct('<H')
_U32 = struct.Struct('<I')


class ByteCursor:
    """Sequential reader over an in-memory buffer."""

    FIND_CHUNK = 0x10000

    def __init__(self, data):
        self.data = memoryview(data).cast('B') if not isinstance(data, bytes) else data
        self.cursor = 0

    # --- Source access (overridden by FileCursor) ---

    @property
    def size(self) -> int:
        return len(self.data)

    def _fetch(self, pos: int, size: int) -> bytes:
        return bytes(self.data[pos:pos + size])

    def _find_zero(self, pos: int) -> int:
        """Absolute index of the next 0x00 at or after pos, or -1."""
        if isinstance(self.data, bytes):
            return self.data.find(b'\x00', pos)
        for i in range(pos, len(self.data)):
            if self.data[i] == 0:
                return i
        return -1

    def find(self, pattern: bytes, pos: int) -> int:
        """Absolute index of the next occurrence of pattern at or after pos, or -1."""
        if isinstance(self.data, bytes):
            return self.data.find(pattern, pos)
        return self._find_in_chunks(pattern, pos)

    def _find_in_chunks(self, pattern: bytes, pos: int) -> int:
        # Consecutive chunks overlap so a match may straddle the seam
        overlap = len(pattern) - 1
        while pos < self.size:
            chunk = self._fetch(pos, min(self.FIND_CHUNK, self.size - pos))
            idx = chunk.find(pattern)
            if idx >= 0:
                return pos + idx
            if pos + len(chunk) >= self.size:
                break
            pos += len(chunk) - overlap
        return -1

    # --- Position ---

    def position(self) -> int:
        return self.cursor

    def remaining(self) -> int:
        return self.size - self.cursor

    def seek_absolute(self, pos: int):
        """Moves the cursor to an absolute offset."""
        if not (0 <= pos <= self.size):
            raise BoundsError(pos, pos, self.size)
        self.cursor = pos

    def seek_relative(self, delta: int):
        """Moves the cursor forward (or backward) by delta bytes."""
        self.seek_absolute(self.cursor + delta)

    # --- Reads ---

    def _require(self, size: int):
        if size < 0 or self.cursor + size > self.size:
            raise EndOfDataError(self.cursor, size, self.remaining())

    def read_fixed(self, size: int) -> bytes:
        self._require(size)
        chunk = self._fetch(self.cursor, size)
        self.cursor += size
        return chunk

    def read_struct(self, fmt: struct.Struct) -> Tuple:
        return fmt.unpack(self.read_fixed(fmt.size))

    def read_u16(self) -> int:
        return self.read_struct(_U16)[0]

    def read_u32(self) -> int:
        return self.read_struct(_U32)[0]

    def peek_u16(self) -> int:
        self._require(2)
        return _U16.unpack(self._fetch(self.cursor, 2))[0]

    def read_cstring(self) -> str:
        """
        Reads through the next null terminator and returns the text before it.
        Raises EndOfDataError (cursor untouched) if the source ends first.
        """
        end = self._find_zero(self.cursor)
        if end < 0:
            raise EndOfDataError(self.cursor, self.remaining() + 1, self.remaining())
        raw = self._fetch(self.cursor, end - self.cursor)
        self.cursor = end + 1
        return raw.decode(TEXT_ENCODING)


class FileCursor(ByteCursor):
    """Sequential reader over a seekable binary file object."""

    CHUNK = 0x1000

    def __init__(self, fileobj: BinaryIO):
        self.file = fileobj
        self.file.seek(0, os.SEEK_END)
        self._size = self.file.tell()
        self.file.seek(0)
        self.cursor = 0

    @property
    def size(self) -> int:
        return self._size

    def _fetch(self, pos: int, size: int) -> bytes:
        self.file.seek(pos)
        chunk = self.file.read(size)
        if len(chunk) != size:
            # File shrank underneath us
            raise EndOfDataError(pos, size, len(chunk))
        return chunk

    def _find_zero(self, pos: int) -> int:
        while pos < self._size:
            chunk = self._fetch(pos, min(self.CHUNK, self._size - pos))
            idx = chunk.find(b'\x00')
            if idx >= 0:
                return pos + idx
            pos += len(chunk)
        return -1

    def find(self, pattern: bytes, pos: int) -> int:
        return self._find_in_chunks(pattern, pos)
