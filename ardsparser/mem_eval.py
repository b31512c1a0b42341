"""
Mirror check for 16 MiB ARDS dumps.

The cartridge repeats the same 1 MiB image sixteen times. A good dump has all
chunks identical; a bad read shows up as a chunk that differs from the rest.
"""

from typing import List

CHUNKS = 16
CHUNK_SIZE = 0x00100000
DUMP_SIZE = CHUNKS * CHUNK_SIZE


def _cmp(a: bytes, b: bytes) -> int:
    """memcmp-style sign of the first differing byte."""
    for x, y in zip(a, b):
        if x != y:
            return -1 if x < y else 1
    return (len(a) > len(b)) - (len(a) < len(b))


def split_chunks(data: bytes, chunks: int = CHUNKS) -> List[bytes]:
    if len(data) % chunks:
        raise ValueError(f"Dump size {len(data)} is not a multiple of {chunks}")
    size = len(data) // chunks
    return [data[i * size:(i + 1) * size] for i in range(chunks)]


def linear_check(segments: List[bytes]) -> int:
    """Compares each chunk with the one before it. 0 means all equal."""
    for prev, cur in zip(segments, segments[1:]):
        if prev != cur:
            return _cmp(prev, cur)
    return 0


def square_check(segments: List[bytes]) -> List[List[int]]:
    """Full pairwise comparison table; table[i][j] == -table[j][i]."""
    n = len(segments)
    table = [[0] * n for _ in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            if segments[i] != segments[j]:
                table[i][j] = _cmp(segments[i], segments[j])
                table[j][i] = -table[i][j]
    return table


def render_table(table: List[List[int]]) -> str:
    n = len(table)
    lines = ["    | " + " ".join(f"  {i:2d}" for i in range(n))]
    lines.append("----+-" + "-" * (5 * n - 1))
    for i, row in enumerate(table):
        lines.append(f" {i:2d} | " + " ".join(f"{v:4d}" for v in row))
    return "\n".join(lines)
