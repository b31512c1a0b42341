"""
Data model for ARDS game records.

Layout of one game inside the ROM:

    +0x00  GameHeader (32 bytes)
    +0x20  code section: (flag, count) records, folders nested one level,
           ended by a Terminate record
    +text_offset + 1
           text block: game name, game description, then name/description
           for every code and folder in depth-first order

Flag values are decoded exactly once, at read time, into a CodeFlag. The two
encodings seen in the wild are both supported (see FlagEncoding).
"""

import struct
from dataclasses import dataclass, field
from enum import Enum, IntEnum, IntFlag
from typing import List, Optional, Tuple, Union

from .errors import InvalidFlagError

GAME_MAGIC = 0x001C0001
GAME_SENTINEL = 0x0020
HEADER_SIZE = 32
RECORD_HEADER_SIZE = 4
CODE_LINE_SIZE = 8
TEXT_PAD = 1

HEADER_STRUCT = struct.Struct('<IHHIIHH4sII')
RECORD_HEADER_STRUCT = struct.Struct('<HH')
CODE_LINE_STRUCT = struct.Struct('<II')


def format_int(value): return f"{value} (0x{value:x})"


# --- Flags ---

class FlagEncoding(Enum):
    """
    CURRENT: kind in bits 0-1, modifiers in higher bits (canonical).
    LEGACY:  low byte compared against raw values 0, 1, 2 and 6.
    """
    CURRENT = 'current'
    LEGACY = 'legacy'


class FlagKind(IntEnum):
    TERMINATE = 0
    CODE = 1
    FOLDER = 2


class Modifier(IntFlag):
    NONE = 0
    ONLY_ONE = 0x04
    MASTER = 0x08
    ALWAYS_ON = 0x10
    ON_BY_DEFAULT = 0x20


KIND_MASK = 0x03
MODIFIER_MASK = int(Modifier.ONLY_ONE | Modifier.MASTER | Modifier.ALWAYS_ON | Modifier.ON_BY_DEFAULT)

_LEGACY_FLAGS = {
    0: (FlagKind.TERMINATE, Modifier.NONE),
    1: (FlagKind.CODE, Modifier.NONE),
    2: (FlagKind.FOLDER, Modifier.NONE),
    6: (FlagKind.FOLDER, Modifier.ONLY_ONE),
}


@dataclass(frozen=True)
class CodeFlag:
    kind: FlagKind
    modifiers: Modifier = Modifier.NONE
    raw: int = 0

    @classmethod
    def decode(cls, raw: int, encoding: FlagEncoding = FlagEncoding.CURRENT,
               offset: int = 0) -> "CodeFlag":
        """Decodes a raw 16-bit flag, raising InvalidFlagError at `offset`."""
        if encoding is FlagEncoding.LEGACY:
            try:
                kind, modifiers = _LEGACY_FLAGS[raw & 0xFF]
            except KeyError:
                raise InvalidFlagError(offset, raw) from None
            return cls(kind, modifiers, raw)

        kind_bits = raw & KIND_MASK
        extra = raw & ~(KIND_MASK | MODIFIER_MASK)
        if kind_bits == 0b11 or extra:
            raise InvalidFlagError(offset, raw)
        kind = FlagKind(kind_bits)
        modifiers = Modifier(raw & MODIFIER_MASK)
        if kind is FlagKind.TERMINATE and modifiers:
            raise InvalidFlagError(offset, raw)
        return cls(kind, modifiers, raw)

    @property
    def is_master(self) -> bool:
        return bool(self.modifiers & Modifier.MASTER)

    @property
    def only_one(self) -> bool:
        return bool(self.modifiers & Modifier.ONLY_ONE)

    def __str__(self):
        names = [m.name for m in Modifier if m and self.modifiers & m]
        suffix = f" [{', '.join(names)}]" if names else ""
        return f"{self.kind.name}{suffix} (raw 0x{self.raw:04x})"


TERMINATE = CodeFlag(FlagKind.TERMINATE)


# --- Header ---

@dataclass(frozen=True)
class GameHeader:
    magic: int
    num_codes: int
    sentinel: int
    text_offset: int
    alt_offset: int
    dos_date: int
    dos_time: int
    game_id: bytes
    reserved: int
    checksum: int

    @classmethod
    def unpack(cls, raw: bytes) -> "GameHeader":
        return cls(*HEADER_STRUCT.unpack(raw))

    def pack(self) -> bytes:
        return HEADER_STRUCT.pack(
            self.magic, self.num_codes, self.sentinel, self.text_offset,
            self.alt_offset, self.dos_date, self.dos_time, self.game_id,
            self.reserved, self.checksum)

    @property
    def is_trusted(self) -> bool:
        return self.magic == GAME_MAGIC and self.sentinel == GAME_SENTINEL

    @property
    def id_text(self) -> str:
        return self.game_id.decode('latin-1')

    @property
    def code_section_size(self) -> int:
        return self.text_offset - HEADER_SIZE

    @property
    def has_timestamp(self) -> bool:
        return self.dos_date != 0 and self.dos_time != 0

    @property
    def date(self) -> Tuple[int, int, int]:
        return ((self.dos_date >> 9) + 1980, (self.dos_date >> 5) & 0xF, self.dos_date & 0x1F)

    @property
    def time(self) -> Tuple[int, int]:
        return (self.dos_time >> 11, (self.dos_time >> 5) & 0x3F)

    def __str__(self):
        lines = [
            f"Magic: 0x{self.magic:08x} {'(validated)' if self.magic == GAME_MAGIC else '(MISMATCH)'}",
            f"Codes: {format_int(self.num_codes)}",
            f"Sentinel: 0x{self.sentinel:04x} {'(validated)' if self.sentinel == GAME_SENTINEL else '(MISMATCH)'}",
            f"Text Offset: {format_int(self.text_offset)}",
            f"Alt Offset: {format_int(self.alt_offset)}",
            f"DOS Date/Time: 0x{self.dos_date:04x} 0x{self.dos_time:04x}",
            f"ID: {self.id_text!r}",
            f"Reserved: 0x{self.reserved:08x}",
            f"Checksum: 0x{self.checksum:08X}",
        ]
        if self.has_timestamp:
            lines.append("Date: %04d/%02d/%02d %02d:%02d" % (self.date + self.time))
        return "\n".join(lines)


# --- Tree ---

@dataclass(frozen=True)
class CodeLine:
    memory_location: int
    value: int

    def __str__(self):
        return f"{self.memory_location:08X} {self.value:08X}"


@dataclass
class TreeNode:
    """Common part of codes and folders. Never instantiated directly."""
    flag: CodeFlag
    declared_count: int
    offset: int = 0
    name: str = ""
    description: str = ""
    name_offset: Optional[int] = None

    KIND = None

    def __post_init__(self):
        if self.flag.kind is not self.KIND:
            raise ValueError(f"{self.__class__.__name__} cannot carry a {self.flag.kind.name} flag")

    @property
    def entry_count(self) -> int:
        raise NotImplementedError


@dataclass
class CheatCode(TreeNode):
    lines: List[CodeLine] = field(default_factory=list)

    KIND = FlagKind.CODE

    @property
    def entry_count(self) -> int:
        return len(self.lines)


@dataclass
class CheatFolder(TreeNode):
    children: List[TreeNode] = field(default_factory=list)

    KIND = FlagKind.FOLDER

    @property
    def entry_count(self) -> int:
        return len(self.children)


Node = Union[CheatCode, CheatFolder]


def iter_nodes(nodes: List[Node]):
    """Depth-first, pre-order walk. This is the order of the text block."""
    for node in nodes:
        yield node
        if isinstance(node, CheatFolder):
            yield from iter_nodes(node.children)


@dataclass(frozen=True)
class GameRecord:
    header: GameHeader
    nodes: Tuple[Node, ...]
    name: str
    description: str
    offset: int
    end_offset: int = 0

    @property
    def identifier(self) -> str:
        from .gameid import game_identifier
        return game_identifier(self.header)

    @property
    def code_count(self) -> int:
        return sum(1 for node in iter_nodes(list(self.nodes)) if isinstance(node, CheatCode))
