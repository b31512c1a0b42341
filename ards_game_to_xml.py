#!/usr/bin/env python3
"""
ARDS game-to-XML exporter.

Given one or more game offsets in an Action Replay DS ROM dump, reads every
code and folder of those games and writes a single XML code list.

The offset to give is the one of the "01 00 1C 00" magic, 20 bytes before
the cartridge ID and 32 bytes before the game's code section. Ask
ards_game_ls.py for them.
"""

import argparse
import logging
import sys

from ardsparser import ArdsError, ByteCursor, FlagEncoding, TreeParser
from ardsparser.ards_renderer import hex_context
from ardsparser.xml_export import export_xml


def read_games(rom, offsets, encoding=FlagEncoding.CURRENT, validate=True):
    parser = TreeParser(ByteCursor(rom), encoding)
    return [parser.read_game(offset, validate=validate) for offset in offsets]


def build_arg_parser():
    parser = argparse.ArgumentParser(
        description="Export games from an Action Replay DS ROM dump as an XML code list.")
    parser.add_argument('rom', help="ARDS ROM dump")
    parser.add_argument('offsets', nargs='+', type=lambda s: int(s, 16),
                        help="Hex offsets of game headers")
    parser.add_argument('-o', '--output', help="Write XML here instead of stdout")
    parser.add_argument('--legacy-flags', action='store_true',
                        help="Decode flags with the legacy raw-value encoding")
    parser.add_argument('--no-validate', action='store_true',
                        help="Parse without validating the code section first")
    parser.add_argument('-v', '--verbose', action='store_true', help="Debug logging")
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s: %(message)s")
    encoding = FlagEncoding.LEGACY if args.legacy_flags else FlagEncoding.CURRENT

    try:
        with open(args.rom, 'rb') as f:
            rom = f.read()
    except OSError as e:
        print(f"Error: Failed to open file: {e}", file=sys.stderr)
        return 1

    try:
        records = read_games(rom, args.offsets, encoding, validate=not args.no_validate)
    except ArdsError as e:
        print(f"Error: {e}", file=sys.stderr)
        if 0 <= e.offset < len(rom):
            print(hex_context(rom, e.offset), file=sys.stderr)
        return 2

    document = export_xml(records)
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as out:
            out.write(document)
    else:
        sys.stdout.write(document)
    return 0


if __name__ == '__main__':
    sys.exit(main())
