"""
ARDS Parser - Reading Action Replay DS code lists out of cartridge dumps
"""

from .byte_cursor import ByteCursor, FileCursor
from .checksum import crc16, crc32, game_identifier_checksum
from .errors import (ArdsError, BadHeaderError, BoundsError, BufferOverrunError,
                     CountMismatchError, EndOfDataError, FolderContainsNonCodeError,
                     FormatError, InvalidFlagError, NestingTooDeepError, SegmentError)
from .gameid import Deduplicator, Registration, game_identifier, rom_game_identifier
from .records import (CheatCode, CheatFolder, CodeFlag, CodeLine, FlagEncoding,
                      FlagKind, GameHeader, GameRecord, Modifier)
from .rescue_scanner import RescueScanner, ScanHit, ScanPolicy, scan_rom
from .segment_validator import SegmentSummary, validate_segment
from .tree_parser import TreeParser

__all__ = [
    'ByteCursor',
    'FileCursor',
    'crc16',
    'crc32',
    'game_identifier_checksum',
    'ArdsError',
    'BadHeaderError',
    'BoundsError',
    'BufferOverrunError',
    'CountMismatchError',
    'EndOfDataError',
    'FolderContainsNonCodeError',
    'FormatError',
    'InvalidFlagError',
    'NestingTooDeepError',
    'SegmentError',
    'Deduplicator',
    'Registration',
    'game_identifier',
    'rom_game_identifier',
    'CheatCode',
    'CheatFolder',
    'CodeFlag',
    'CodeLine',
    'FlagEncoding',
    'FlagKind',
    'GameHeader',
    'GameRecord',
    'Modifier',
    'RescueScanner',
    'ScanHit',
    'ScanPolicy',
    'scan_rom',
    'SegmentSummary',
    'validate_segment',
    'TreeParser',
]
