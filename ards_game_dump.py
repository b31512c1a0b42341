#!/usr/bin/env python3
"""
Game analyser: prints one game's tree and a byte-accurate region map of its
record (header, code records, strings, and any unclaimed bytes in between).
"""

import argparse
import sys

from ardsparser import ArdsError, ByteCursor, FlagEncoding, TreeParser
from ardsparser.ards_renderer import hex_context, render_record, render_regions_to_string
from ardsparser.layout import record_layout


def dump_game(rom, offset, encoding=FlagEncoding.CURRENT):
    record = TreeParser(ByteCursor(rom), encoding).read_game(offset)
    report = [render_record(record)]
    report.append(render_regions_to_string(record_layout(rom, record),
                                           f"Layout of game at 0x{offset:08x}"))
    return "\n".join(report)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Show the structure of one ARDS game record.")
    parser.add_argument('rom', help="ARDS ROM dump")
    parser.add_argument('offset', type=lambda s: int(s, 16), help="Hex offset of the game header")
    parser.add_argument('--legacy-flags', action='store_true',
                        help="Decode flags with the legacy raw-value encoding")
    args = parser.parse_args(argv)

    try:
        with open(args.rom, 'rb') as f:
            rom = f.read()
    except OSError as e:
        print(f"Error: Failed to open file: {e}", file=sys.stderr)
        return 1

    encoding = FlagEncoding.LEGACY if args.legacy_flags else FlagEncoding.CURRENT
    try:
        print(dump_game(rom, args.offset, encoding))
    except ArdsError as e:
        print(f"Error: {e}", file=sys.stderr)
        if 0 <= e.offset < len(rom):
            print(hex_context(rom, e.offset), file=sys.stderr)
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())
