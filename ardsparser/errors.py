"""
Exception taxonomy for ARDS parsing.

Every error carries the byte offset it was detected at. Offsets produced by
the segment validator are relative to the buffer it was given; use rebase()
to turn them into absolute ROM offsets before reporting.
"""

from typing import Optional


class ArdsError(Exception):
    """Base class for all ARDS format errors."""
    offset: int = 0
    reason = "Undocumented error"

    def rebase(self, delta: int) -> "ArdsError":
        """Returns a copy of this error with its offset moved by delta bytes."""
        moved = self.__class__.__new__(self.__class__)
        moved.__dict__.update(self.__dict__)
        moved.offset = self.offset + delta
        moved.args = (moved.describe(),)
        return moved

    def describe(self) -> str:
        return f"{self.__class__.__name__} at 0x{self.offset:08x}"

    def __str__(self):
        return self.describe()


class SegmentError(ArdsError):
    """Raised by the segment validator. Common base for its four outcomes."""


# --- Bounds ---

class BoundsError(ArdsError):
    """A declared length runs past the bytes that are actually available."""
    reason = "Exceeded buffer size"

    def __init__(self, offset: int, needed: int = 0, available: int = 0):
        self.offset = offset
        self.needed = needed
        self.available = available
        super().__init__(self.describe())

    def describe(self) -> str:
        return (f"{self.reason} at 0x{self.offset:08x} "
                f"(needed {self.needed} bytes, {self.available} available)")


class EndOfDataError(BoundsError):
    """A cursor read would pass the end of its source."""
    reason = "Unexpected end of data"


class BufferOverrunError(BoundsError, SegmentError):
    reason = "Exceeded buffer size"


# --- Format ---

class FormatError(ArdsError):
    """Malformed structure. `value` is the offending raw value."""
    reason = "Malformed data"

    def __init__(self, offset: int, value: Optional[int] = None):
        self.offset = offset
        self.value = value
        super().__init__(self.describe())

    def describe(self) -> str:
        if self.value is None:
            return f"{self.reason} at 0x{self.offset:08x}"
        return f"{self.reason} at 0x{self.offset:08x} ({self.value} / 0x{self.value:x})"


class InvalidFlagError(FormatError, SegmentError):
    reason = "Invalid flag was found"


class FolderContainsNonCodeError(FormatError, SegmentError):
    reason = "Flag inside folder was not a code"


class BadHeaderError(FormatError):
    reason = "Game header magic mismatch"


class NestingTooDeepError(FormatError):
    """A folder header sits deeper than the parser is willing to follow."""
    reason = "Folders nested too deeply"


# --- Counts ---

class CountMismatchError(SegmentError):
    """Declared and actual number of codes disagree."""
    reason = "Code count does not match header"

    def __init__(self, offset: int, expected: int, found: int):
        self.offset = offset
        self.expected = expected
        self.found = found
        super().__init__(self.describe())

    def describe(self) -> str:
        return (f"{self.reason} at 0x{self.offset:08x} "
                f"(header says {self.expected}, found {self.found})")
