#!/usr/bin/env python3
"""
Computes the CRC-16 stored in bytes 4-5 of an ARDS firmware file (everything
after the first 8 bytes is covered).
"""

import argparse
import sys

from ardsparser.firmware import check_firmware_file


def main(argv=None):
    parser = argparse.ArgumentParser(description="ARDS firmware checksum.")
    parser.add_argument('firmware', help="Firmware file (FIRM header + payload)")
    parser.add_argument('--verify', action='store_true',
                        help="Compare with the stored checksum; exit 2 on mismatch")
    args = parser.parse_args(argv)

    try:
        with open(args.firmware, 'rb') as f:
            data = f.read()
    except OSError as e:
        print(f"Error: Failed to open file: {e}", file=sys.stderr)
        return 1

    try:
        result = check_firmware_file(data)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(f"{result.computed:04X}")
    if args.verify and not result.ok:
        print(f"Mismatch: stored {result.stored:04X}", file=sys.stderr)
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())
