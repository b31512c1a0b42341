#!/usr/bin/env python3
"""
Tests for the brute-force game scanner.
"""

import io
import os
import struct
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ardsparser.byte_cursor import ByteCursor, FileCursor
from ardsparser.errors import BoundsError, CountMismatchError, EndOfDataError
from ardsparser.records import HEADER_STRUCT
from ardsparser.rescue_scanner import MAGIC_BYTES, RescueScanner, ScanPolicy, scan_rom
from rom_builder import code, game_record, place_games, sample_game

FLAT = dict(base_offset=0, snap_to_region=False)


class RecordingScanner(RescueScanner):
    """Keeps every hook call instead of logging it."""

    def __init__(self, cursor, policy):
        super().__init__(cursor, policy)
        self.found = []
        self.rejected = []
        self.duplicates = []

    def on_game_found(self, hit):
        self.found.append(hit)

    def on_candidate_rejected(self, offset, error):
        self.rejected.append((offset, error))

    def on_duplicate(self, hit):
        self.duplicates.append(hit)


class PositionScanner(RescueScanner):
    """Notes where the cursor stands whenever a game is reported."""

    def __init__(self, cursor, policy):
        super().__init__(cursor, policy)
        self.stops = []

    def on_game_found(self, hit):
        self.stops.append(('found', hit.offset, self.cursor.position()))

    def on_duplicate(self, hit):
        self.stops.append(('duplicate', hit.offset, self.cursor.position()))


class CountingCursor(ByteCursor):
    def __init__(self, data):
        super().__init__(data)
        self.header_reads = 0

    def read_struct(self, fmt):
        if fmt is HEADER_STRUCT:
            self.header_reads += 1
        return super().read_struct(fmt)


def run(rom, **policy):
    scanner = RecordingScanner(ByteCursor(rom), ScanPolicy(**policy))
    hits = list(scanner.scan())
    return hits, scanner


def tiny_game(game_id, name="X"):
    return game_record([], num_codes=0, name=name, game_id=game_id)


def test_finds_games():
    print("Testing a plain scan...")
    other = game_record([code([(0x02000000, 5)])], num_codes=1, name="Other",
                        texts=[("Code", "")], game_id=b'BXYZ', checksum=0x01020304)
    rom = place_games({0x40: sample_game(), 0x200: other}, 0x400)

    hits, scanner = run(rom, **FLAT)
    assert [h.offset for h in hits] == [0x40, 0x200], f"Got {[hex(h.offset) for h in hits]}"
    assert [h.name for h in hits] == ["Sample Quest", "Other"]
    assert hits[0].identifier == "ASME-5C2C3B1A"
    assert hits[1].identifier == "BXYZ-01020304"
    assert (hits[0].summary.codes, hits[0].summary.folders) == (4, 1)
    assert scanner.found == hits, "on_game_found is called for every yielded hit"
    print("  ✓ every valid game is reported once, in ROM order")


def test_duplicates():
    print("Testing duplicate games...")
    rom = place_games({0x40: sample_game(), 0x200: sample_game()}, 0x400)

    hits, scanner = run(rom, **FLAT)
    assert [h.offset for h in hits] == [0x40]
    assert [d.offset for d in scanner.duplicates] == [0x200]
    assert scanner.duplicates[0].duplicate_of == 0x40

    hits, _ = run(rom, allow_duplicates=True, **FLAT)
    assert [h.offset for h in hits] == [0x40, 0x200]
    assert not hits[0].is_duplicate and hits[1].is_duplicate
    print("  ✓ repeated identifiers are suppressed unless allowed")


def test_rejected_candidate():
    print("Testing a candidate with a wrong code count...")
    broken = sample_game(game_id=b'BRKN')
    broken = broken[:4] + struct.pack('<H', 3) + broken[6:]
    rom = place_games({0x40: broken, 0x200: tiny_game(b'GOOD')}, 0x400)

    hits, scanner = run(rom, **FLAT)
    assert [h.offset for h in hits] == [0x200]
    assert len(scanner.rejected) == 1, f"Got {scanner.rejected}"
    offset, error = scanner.rejected[0]
    assert offset == 0x40 and isinstance(error, CountMismatchError), f"Got {error!r}"
    assert error.offset > 0x40 + 32, "Offsets are absolute"
    print("  ✓ a failing candidate is reported and the scan moves on")


def test_step():
    print("Testing the scan step...")
    rom = place_games({0x42: tiny_game(b'ODD1')}, 0x100)
    hits, _ = run(rom, step=4, **FLAT)
    assert hits == [], "Unaligned games are invisible in aligned mode"
    hits, _ = run(rom, step=1, **FLAT)
    assert [h.offset for h in hits] == [0x42]
    print("  ✓ rescue mode finds games at any byte offset")


def test_region_snapping():
    print("Testing region snapping...")
    games = {
        0x10: tiny_game(b'AAAA'),
        0x40: tiny_game(b'BBBB'),
        0x110: tiny_game(b'CCCC'),
        0x140: tiny_game(b'DDDD'),
    }
    rom = place_games(games, 0x200)

    hits, _ = run(rom, base_offset=0x40, region_size=0x100)
    assert [h.offset for h in hits] == [0x40, 0x140], f"Got {[hex(h.offset) for h in hits]}"

    hits, _ = run(rom, base_offset=0x40, region_size=0x100, snap_to_region=False)
    assert [h.offset for h in hits] == [0x40, 0x110, 0x140]
    print("  ✓ positions below the game area of a region jump forward")


def test_truncated_name():
    print("Testing a game name cut off by EOF...")
    game = tiny_game(b'TRNC', name="Trunc")[:-2]
    rom = place_games({0x20: game}, 0x20 + len(game))

    hits, scanner = run(rom, **FLAT)
    assert hits == []
    assert len(scanner.rejected) == 1
    assert isinstance(scanner.rejected[0][1], EndOfDataError)
    print("  ✓ unterminated names reject the candidate without crashing")


def test_truncated_code_text():
    print("Testing code names cut off by EOF...")
    game = game_record([code([(0x02000000, 1)])], num_codes=1, name="G", game_id=b'CUTS')
    rom = place_games({0x20: game}, 0x20 + len(game))
    hits, _ = run(rom, **FLAT)
    assert [h.offset for h in hits] == [0x20]
    print("  ✓ the game is still reported and the scan ends at EOF")


def test_bad_text_offset():
    print("Testing a text offset past EOF...")
    game = bytearray(tiny_game(b'FARX'))
    game[8:12] = struct.pack('<I', 0x7FFF0000)
    rom = place_games({0: bytes(game)}, 0x80)

    hits, scanner = run(rom, **FLAT)
    assert hits == []
    assert isinstance(scanner.rejected[0][1], BoundsError)
    print("  ✓ impossible sections are rejected before reading them")


def test_header_at_eof():
    print("Testing a header cut off by EOF...")
    game = tiny_game(b'HALF')
    rom = place_games({0x60: game[:20]}, 0x74)
    assert scan_rom(rom, ScanPolicy(**FLAT)) == []
    print("  ✓ partial headers at the end are ignored")


def test_skip_names():
    print("Testing skip_names...")
    rom = place_games({0x40: sample_game(), 0x200: tiny_game(b'NEXT')}, 0x400)
    hits, _ = run(rom, skip_names=True, **FLAT)
    assert [h.offset for h in hits] == [0x40, 0x200]
    print("  ✓ scanning through the string section finds the same games")


def test_file_cursor_scan():
    print("Testing a scan over a file...")
    rom = place_games({0x40: sample_game(), 0x200: tiny_game(b'FILE')}, 0x400)
    scanner = RescueScanner(FileCursor(io.BytesIO(rom)), ScanPolicy(**FLAT))
    offsets = [h.offset for h in scanner.scan()]
    assert offsets == [0x40, 0x200], f"Got {offsets}"
    print("  ✓ file-backed scans match in-memory scans")


def test_back_to_back_games():
    print("Testing games packed back to back...")
    first, copy, last = sample_game(), sample_game(), tiny_game(b'NEXT', name="Next")
    a = 0x10
    b = a + len(first)
    c = b + len(copy)
    rom = place_games({a: first, b: copy, c: last}, c + len(last) + 0x10)

    scanner = PositionScanner(ByteCursor(rom), ScanPolicy(**FLAT))
    hits = list(scanner.scan())
    assert [h.offset for h in hits] == [a, c], f"Got {[hex(h.offset) for h in hits]}"
    assert scanner.stops == [
        ('found', a, b),
        ('duplicate', b, c),
        ('found', c, c + len(last)),
    ], f"Got {scanner.stops}"
    print("  ✓ each game's text is consumed up to the next header exactly")


def test_magic_search():
    print("Testing candidate search on a mostly empty image...")
    rom = bytearray(place_games({0x80001: tiny_game(b'FAR1')}, 0x100000, fill=0))
    # Magic without the sentinel
    rom[0x40000:0x40004] = MAGIC_BYTES
    rom = bytes(rom)

    cursor = CountingCursor(rom)
    hits = list(RescueScanner(cursor, ScanPolicy(**FLAT)).scan())
    assert [h.offset for h in hits] == [0x80001]
    assert cursor.header_reads == 2, f"Read {cursor.header_reads} headers"

    cursor = CountingCursor(rom)
    hits = list(RescueScanner(cursor, ScanPolicy(step=4, **FLAT)).scan())
    assert hits == [] and cursor.header_reads == 1, f"Read {cursor.header_reads} headers"
    print("  ✓ only positions holding the magic are read as headers")


def test_candidates_follow_step_and_regions():
    print("Testing candidate search against step and region snapping...")
    games = {
        0x10: tiny_game(b'LOW0'),
        0x42: tiny_game(b'ODD0'),
        0x80: tiny_game(b'MID0'),
        0x120: tiny_game(b'LOW1'),
        0x14C: tiny_game(b'TOP1'),
    }
    rom = place_games(games, 0x200)
    policy = dict(base_offset=0x40, region_size=0x100)

    hits, _ = run(rom, step=4, **policy)
    assert [h.offset for h in hits] == [0x80, 0x14C], f"Got {[hex(h.offset) for h in hits]}"

    hits, _ = run(rom, step=1, **policy)
    assert [h.offset for h in hits] == [0x42, 0x80, 0x14C], f"Got {[hex(h.offset) for h in hits]}"

    hits, _ = run(rom, step=4, snap_to_region=False, **policy)
    assert [h.offset for h in hits] == [0x80, 0x120, 0x14C], f"Got {[hex(h.offset) for h in hits]}"
    print("  ✓ the search lands where stepping one position at a time would")


def test_policy_checks():
    print("Testing ScanPolicy checks...")
    for kwargs in (dict(step=0), dict(region_size=0), dict(base_offset=0x100, region_size=0x100)):
        try:
            ScanPolicy(**kwargs)
        except ValueError:
            pass
        else:
            assert False, f"{kwargs} should be rejected"
    ScanPolicy(base_offset=0x200, region_size=0x100, snap_to_region=False)
    print("  ✓ impossible policies are refused")


def main():
    tests = [
        test_finds_games,
        test_duplicates,
        test_rejected_candidate,
        test_step,
        test_region_snapping,
        test_truncated_name,
        test_truncated_code_text,
        test_bad_text_offset,
        test_header_at_eof,
        test_skip_names,
        test_back_to_back_games,
        test_magic_search,
        test_candidates_follow_step_and_regions,
        test_file_cursor_scan,
        test_policy_checks,
    ]

    print("=" * 60)
    print("Running scanner tests")
    print("=" * 60)

    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            print(f"  ✗ {test.__name__} failed: {e}")
            failed += 1

    print("=" * 60)
    print(f"Results: {len(tests) - failed} passed, {failed} failed")
    print("=" * 60)
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
