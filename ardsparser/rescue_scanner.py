"""
Brute-force search for game records in an ARDS ROM dump.

The scanner ignores the device's own game lists and looks straight at the
bytes. At every candidate position it reads a header; if the magic and the
sentinel match, the declared code section is run through validate_segment()
before anything else is trusted. Verified games are identified, checked
against the identifiers already seen, and reported. Positions the step would
visit but which do not start with the header magic are searched past in one
go rather than read one at a time.

Resynchronisation is heuristic. After a game the scanner carries on from
wherever its text reads left the cursor, and (by default) snaps any position
that falls below `base_offset` within its 1 MiB region forward to that
offset, because the dumps mirror one game area per region. Games that sit
next to other kinds of lists can still be skipped or seen twice; ScanPolicy
exposes every knob of this.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .byte_cursor import ByteCursor
from .errors import ArdsError, BoundsError, EndOfDataError, SegmentError
from .gameid import Deduplicator, Registration, game_identifier
from .records import GAME_MAGIC, HEADER_SIZE, TEXT_PAD, FlagEncoding, GameHeader
from .segment_validator import SegmentSummary, validate_segment
from .tree_parser import read_header

logger = logging.getLogger(__name__)

GAME_AREA_OFFSET = 0x54000
REGION_SIZE = 0x100000
ALIGNED_STEP = 4

# The first four bytes of every header
MAGIC_BYTES = struct.pack('<I', GAME_MAGIC)


@dataclass
class ScanPolicy:
    base_offset: int = GAME_AREA_OFFSET
    region_size: int = REGION_SIZE
    snap_to_region: bool = True
    step: int = 1
    allow_duplicates: bool = False
    skip_names: bool = False
    encoding: FlagEncoding = FlagEncoding.CURRENT

    def __post_init__(self):
        if self.step < 1:
            raise ValueError(f"Scan step must be at least 1 (got {self.step})")
        if self.region_size < 1:
            raise ValueError(f"Region size must be at least 1 (got {self.region_size})")
        if self.snap_to_region and self.base_offset >= self.region_size:
            raise ValueError(f"Base offset 0x{self.base_offset:x} lies outside a 0x{self.region_size:x} region")


@dataclass(frozen=True)
class ScanHit:
    offset: int
    identifier: str
    name: str
    description: str
    header: GameHeader
    summary: SegmentSummary
    duplicate_of: Optional[int] = None

    @property
    def is_duplicate(self) -> bool:
        return self.duplicate_of is not None


class RescueScanner:
    """
    Scans a ROM image for games. Subclass and override the on_* hooks to
    report events; the defaults log through this module's logger.
    """

    def __init__(self, cursor: ByteCursor, policy: Optional[ScanPolicy] = None):
        self.cursor = cursor
        self.policy = policy or ScanPolicy()
        self.dedup = Deduplicator()

    # --- Hooks ---

    def on_game_found(self, hit: ScanHit):
        logger.info("0x%08x - %s (%s)", hit.offset, hit.name, hit.identifier)

    def on_candidate_rejected(self, offset: int, error: ArdsError):
        logger.debug("Error 0x%08x + 0x%08x: %s", offset, error.offset - offset, error.reason)

    def on_duplicate(self, hit: ScanHit):
        logger.warning("0x%08x - %s is a duplicate of 0x%08x (%s)",
                       hit.offset, hit.name, hit.duplicate_of, hit.identifier)

    # --- Scan ---

    def _snap(self, pos: int) -> int:
        policy = self.policy
        if policy.snap_to_region and pos % policy.region_size < policy.base_offset:
            return pos - pos % policy.region_size + policy.base_offset
        return pos

    def _advance(self, pos: int):
        self.cursor.seek_absolute(min(pos + self.policy.step, self.cursor.size))

    def _next_candidate(self, pos: int) -> Optional[int]:
        """
        First position at or after `pos` that stepping from `pos` would visit
        and that starts with the header magic, or None. Positions without the
        magic can never pass the header check, so they are jumped over.
        """
        policy = self.policy
        while True:
            found = self.cursor.find(MAGIC_BYTES, pos)
            if found < 0:
                return None

            boundary = pos - pos % policy.region_size + policy.region_size
            if policy.snap_to_region and found >= boundary:
                # First step into the next region, then snap
                pos = self._snap(pos + -(-(boundary - pos) // policy.step) * policy.step)
                continue

            skew = (found - pos) % policy.step
            if skew == 0:
                return found
            pos = found + policy.step - skew

    def _check_section(self, pos: int, header: GameHeader) -> SegmentSummary:
        """Bounds-checks and validates the code section of a candidate."""
        text_start = pos + header.text_offset + TEXT_PAD
        if header.text_offset < HEADER_SIZE or text_start > self.cursor.size:
            raise BoundsError(pos + 8, header.text_offset + TEXT_PAD, self.cursor.size - pos)
        section = self.cursor.read_fixed(header.code_section_size)
        try:
            return validate_segment(section, header.num_codes, self.policy.encoding)
        except SegmentError as e:
            raise e.rebase(pos + HEADER_SIZE) from None

    def _skip_text(self, entries: int):
        """Consumes `entries` name/description pairs."""
        try:
            for _ in range(entries):
                self.cursor.read_cstring()
                self.cursor.read_cstring()
        except EndOfDataError:
            # Nothing terminated before EOF, so nothing else can be found
            self.cursor.seek_absolute(self.cursor.size)

    def scan(self) -> Iterator[ScanHit]:
        cursor = self.cursor
        cursor.seek_absolute(min(self.policy.base_offset, cursor.size))

        while True:
            pos = self._next_candidate(self._snap(cursor.position()))
            if pos is None or pos + HEADER_SIZE > cursor.size:
                break
            cursor.seek_absolute(pos)

            header = read_header(cursor)
            if not header.is_trusted:
                self._advance(pos)
                continue

            try:
                summary = self._check_section(pos, header)
                cursor.seek_absolute(pos + header.text_offset + TEXT_PAD)
                name = cursor.read_cstring()
                description = cursor.read_cstring()
            except (SegmentError, BoundsError) as e:
                self.on_candidate_rejected(pos, e)
                self._advance(pos)
                continue

            identifier = game_identifier(header)
            duplicate_of = None
            if self.dedup.register(identifier, pos) is Registration.ALREADY_PRESENT:
                duplicate_of = self.dedup.first_seen(identifier)

            hit = ScanHit(pos, identifier, name, description, header, summary, duplicate_of)

            if not self.policy.skip_names:
                self._skip_text(summary.text_entries)

            if hit.is_duplicate:
                self.on_duplicate(hit)
                if not self.policy.allow_duplicates:
                    continue

            self.on_game_found(hit)
            yield hit


def scan_rom(data, policy: Optional[ScanPolicy] = None) -> List[ScanHit]:
    """Runs a full scan over an in-memory ROM image."""
    return list(RescueScanner(ByteCursor(data), policy).scan())
