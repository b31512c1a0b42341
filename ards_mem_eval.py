#!/usr/bin/env python3
"""
Checks that all sixteen 1 MiB mirrors of a 16 MiB ARDS dump are identical.

Exit status: 0 all chunks equal, 1 differences found, 2 wrong file size,
3 file could not be read.
"""

import argparse
import sys

from ardsparser.mem_eval import DUMP_SIZE, linear_check, render_table, split_chunks, square_check


def main(argv=None):
    parser = argparse.ArgumentParser(description="Memory evaluation utility for an ARDS ROM dump.")
    parser.add_argument('rom', help="16 MiB ARDS ROM dump")
    parser.add_argument('-q', dest='quick', action='store_true',
                        help="Quick and quiet: compare neighbours only and stop at the first difference")
    args = parser.parse_args(argv)

    try:
        with open(args.rom, 'rb') as f:
            data = f.read()
    except OSError as e:
        print(f"Error: Failed to open file: {e}", file=sys.stderr)
        return 3

    if len(data) != DUMP_SIZE:
        print(f"Error: File size is not {DUMP_SIZE} bytes (got {len(data)} bytes instead)",
              file=sys.stderr)
        return 2

    segments = split_chunks(data)
    if args.quick:
        return 1 if linear_check(segments) else 0

    table = square_check(segments)
    print(render_table(table))
    return 1 if any(any(row) for row in table) else 0


if __name__ == '__main__':
    sys.exit(main())
