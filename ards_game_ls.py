#!/usr/bin/env python3
"""
ARDS game listing.

Lists the offsets of every game found in an Action Replay DS ROM dump. The
offsets can be fed into ards_game_to_xml.py to export a code list.

The device's own game lists are skipped; the scanner looks directly at the
bytes for game headers and proves each one by validating its code section.
"""

import argparse
import logging
import sys

from ardsparser import FileCursor, FlagEncoding, InvalidFlagError, RescueScanner, ScanPolicy
from ardsparser.rescue_scanner import ALIGNED_STEP, GAME_AREA_OFFSET, REGION_SIZE


class ListingScanner(RescueScanner):
    """Prints games to stdout, errors and warnings to stderr."""

    def __init__(self, cursor, policy, show_errors=False, show_warnings=False, out=None):
        super().__init__(cursor, policy)
        self.show_errors = show_errors
        self.show_warnings = show_warnings
        self.out = out or sys.stdout

    def on_game_found(self, hit):
        print(f"0x{hit.offset:08x} - {hit.name}", file=self.out)

    def on_candidate_rejected(self, offset, error):
        if not self.show_errors:
            return
        message = f"Error 0x{offset:08x} + 0x{error.offset - offset:08x}: {error.reason}"
        if isinstance(error, InvalidFlagError):
            message += f" ({error.value})"
        print(message, file=sys.stderr)

    def on_duplicate(self, hit):
        if self.show_warnings:
            print(f"Warning 0x{hit.offset:08x}: {hit.identifier} already seen at "
                  f"0x{hit.duplicate_of:08x}", file=sys.stderr)


def hex_int(text):
    return int(text, 16)


def build_arg_parser():
    parser = argparse.ArgumentParser(
        description="Listing utility for game addresses in an Action Replay DS ROM dump.")
    parser.add_argument('rom', help="ARDS ROM dump")
    parser.add_argument('-d', dest='allow_duplicates', action='store_true',
                        help="Allow duplicate games (same ID and checksum) in the listing")
    parser.add_argument('-e', dest='show_errors', action='store_true',
                        help="Print why each candidate header was rejected to stderr")
    parser.add_argument('-n', dest='skip_names', action='store_true',
                        help="Skip reading the code names after each game and scan "
                             "through the string section instead")
    parser.add_argument('-r', dest='rescue', action='store_true',
                        help="Rescue mode: advance one byte at a time instead of four")
    parser.add_argument('-w', dest='show_warnings', action='store_true',
                        help="Print warnings (duplicate games) to stderr")
    parser.add_argument('-v', '--verbose', action='store_true', help="Debug logging")
    parser.add_argument('--base-offset', type=hex_int, default=GAME_AREA_OFFSET,
                        help=f"Offset of the game area inside each region (hex, default {GAME_AREA_OFFSET:x})")
    parser.add_argument('--region-size', type=hex_int, default=REGION_SIZE,
                        help=f"Size of one mirrored region (hex, default {REGION_SIZE:x})")
    parser.add_argument('--no-snap', action='store_true',
                        help="Do not snap positions forward to the game area of their region")
    parser.add_argument('--legacy-flags', action='store_true',
                        help="Decode flags with the legacy raw-value encoding")
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.ERROR,
                        format="%(levelname)s: %(message)s")

    try:
        policy = ScanPolicy(
            base_offset=args.base_offset,
            region_size=args.region_size,
            snap_to_region=not args.no_snap,
            step=1 if args.rescue else ALIGNED_STEP,
            allow_duplicates=args.allow_duplicates,
            skip_names=args.skip_names,
            encoding=FlagEncoding.LEGACY if args.legacy_flags else FlagEncoding.CURRENT,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        with open(args.rom, 'rb') as f:
            scanner = ListingScanner(FileCursor(f), policy, args.show_errors, args.show_warnings)
            for _ in scanner.scan():
                pass
    except OSError as e:
        print(f"Error: Failed to open file: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
