"""
Game identifiers and duplicate tracking.

An identifier is the 4-character cartridge ID plus the complemented CRC-32 of
the first 512 bytes of the cartridge ROM, e.g. "ASME-5C2C3B1A". The ARDS
stores the checksum half in every game header, so the identifier of a game
record can be formed without the cartridge.
"""

from enum import Enum
from typing import Dict, Optional

from .checksum import game_identifier_checksum

NDS_GAME_CODE_OFFSET = 0x0C


def format_identifier(game_id: bytes, checksum: int) -> str:
    return "%.4s-%08X" % (game_id.decode('latin-1'), checksum & 0xFFFFFFFF)


def game_identifier(header) -> str:
    """Identifier of a GameHeader."""
    return format_identifier(header.game_id, header.checksum)


def rom_game_identifier(rom_bytes: bytes) -> str:
    """Identifier computed straight from an NDS cartridge ROM image."""
    if len(rom_bytes) < NDS_GAME_CODE_OFFSET + 4:
        raise ValueError(f"ROM too small for a game code ({len(rom_bytes)} bytes)")
    code = rom_bytes[NDS_GAME_CODE_OFFSET:NDS_GAME_CODE_OFFSET + 4]
    return format_identifier(code, game_identifier_checksum(rom_bytes))


class Registration(Enum):
    INSERTED = 'inserted'
    ALREADY_PRESENT = 'already_present'


class Deduplicator:
    """Remembers where each identifier was first seen during one scan."""

    def __init__(self):
        self._seen: Dict[str, int] = {}

    def register(self, identifier: str, offset: int) -> Registration:
        if identifier in self._seen:
            return Registration.ALREADY_PRESENT
        self._seen[identifier] = offset
        return Registration.INSERTED

    def first_seen(self, identifier: str) -> Optional[int]:
        return self._seen.get(identifier)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._seen

    def __len__(self) -> int:
        return len(self._seen)
