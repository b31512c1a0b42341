"""
Stateless check of a game's code section.

A brute-force scan finds plenty of byte runs that happen to start with the
header magic. Before anything builds a tree from such a run, validate_segment()
walks it as a flat list of (flag, count) headers and proves it is internally
consistent:

    - folders hold only codes (ARDS has no second level of folders)
    - the Terminate record arrives after exactly `declared_codes` codes,
      folder contents counted as individual codes
    - no header or payload reaches past the end of the buffer

It works on raw bytes only, never allocates nodes and never recurses. All
offsets in raised errors are relative to the start of `buffer`.
"""

import struct
from dataclasses import dataclass

from .errors import (BufferOverrunError, CountMismatchError,
                     FolderContainsNonCodeError)
from .records import (CODE_LINE_SIZE, RECORD_HEADER_SIZE, CodeFlag,
                      FlagEncoding, FlagKind)

_RECORD_HEADER = struct.Struct('<HH')


@dataclass(frozen=True)
class SegmentSummary:
    codes: int
    folders: int
    length: int

    @property
    def text_entries(self) -> int:
        """Name/description pairs that follow the game's own pair."""
        return self.codes + self.folders


def _read_record_header(buffer, pos: int, encoding: FlagEncoding):
    if pos + RECORD_HEADER_SIZE > len(buffer):
        raise BufferOverrunError(pos, RECORD_HEADER_SIZE, max(len(buffer) - pos, 0))
    raw_flag, count = _RECORD_HEADER.unpack_from(buffer, pos)
    return CodeFlag.decode(raw_flag, encoding, offset=pos), count


def _skip_lines(buffer, pos: int, count: int) -> int:
    """Returns the position after a code header at `pos` and its lines."""
    end = pos + RECORD_HEADER_SIZE + CODE_LINE_SIZE * count
    if end > len(buffer):
        raise BufferOverrunError(pos, end - pos, len(buffer) - pos)
    return end


def validate_segment(buffer, declared_codes: int,
                     encoding: FlagEncoding = FlagEncoding.CURRENT) -> SegmentSummary:
    """
    Validates a code section. Returns a SegmentSummary, or raises one of
    InvalidFlagError, FolderContainsNonCodeError, BufferOverrunError,
    CountMismatchError (all SegmentError).
    """
    pos = 0
    codes = 0
    folders = 0

    while True:
        if pos == len(buffer):
            # Clean end of input, but no terminator was seen
            if codes < declared_codes:
                raise CountMismatchError(pos, declared_codes, codes)
            raise BufferOverrunError(pos, RECORD_HEADER_SIZE, 0)

        flag, count = _read_record_header(buffer, pos, encoding)

        if flag.kind is FlagKind.TERMINATE:
            if codes != declared_codes:
                raise CountMismatchError(pos, declared_codes, codes)
            return SegmentSummary(codes, folders, pos + RECORD_HEADER_SIZE)

        if flag.kind is FlagKind.CODE:
            if codes == declared_codes:
                raise CountMismatchError(pos, declared_codes, codes + 1)
            pos = _skip_lines(buffer, pos, count)
            codes += 1
            continue

        # Folder: exactly `count` codes follow, with no terminator of their own
        pos += RECORD_HEADER_SIZE
        for _ in range(count):
            inner, inner_count = _read_record_header(buffer, pos, encoding)
            if inner.kind is not FlagKind.CODE:
                raise FolderContainsNonCodeError(pos, inner.raw)
            if codes == declared_codes:
                raise CountMismatchError(pos, declared_codes, codes + 1)
            pos = _skip_lines(buffer, pos, inner_count)
            codes += 1
        if count:
            folders += 1
