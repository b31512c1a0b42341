#!/usr/bin/env python3
"""
Extracts the firmware of an ARDS ROM dump into a standalone FIRM file.
"""

import argparse
import sys

from ardsparser.firmware import extract_firmware


def main(argv=None):
    parser = argparse.ArgumentParser(description="Extract the firmware from an ARDS ROM dump.")
    parser.add_argument('rom', help="ARDS ROM dump")
    parser.add_argument('-o', '--output', help="Output file (default: stdout)")
    args = parser.parse_args(argv)

    try:
        with open(args.rom, 'rb') as f:
            rom = f.read()
    except OSError as e:
        print(f"Error: Failed to open file: {e}", file=sys.stderr)
        return 1

    try:
        image = extract_firmware(rom)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.output:
        with open(args.output, 'wb') as out:
            out.write(image.to_bytes())
    else:
        sys.stdout.buffer.write(image.to_bytes())
    print(f"Firmware: {len(image.payload)} bytes, checksum {image.checksum:04X}", file=sys.stderr)
    return 0


if __name__ == '__main__':
    sys.exit(main())
