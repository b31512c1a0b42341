#!/usr/bin/env python3
"""
Prints the long Game ID (XXXX-XXXXXXXX) of an NDS game.

The first 4 characters are bytes 0x0C-0x0F of the ROM; the rest is the
bitwise NOT of the CRC-32 of the first 512 bytes.
"""

import sys

from ardsparser.checksum import GAME_ID_SPAN
from ardsparser.gameid import rom_game_identifier


def get_gameid(filepath):
    with open(filepath, 'rb') as f:
        return rom_game_identifier(f.read(GAME_ID_SPAN))


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print(f"Usage: python3 {sys.argv[0]} <nds_rom>", file=sys.stderr)
        return 1
    try:
        print(get_gameid(argv[0]))
    except OSError as e:
        print(f"Error: Failed to open file: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())
