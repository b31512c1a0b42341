"""
Text rendering for records, scan results and region maps.

This module is the "View" layer: everything here turns already-parsed data
into lines of text and never reads from a cursor itself.
"""

from typing import List

from .layout import ClaimedRegion, Region, UnclaimedRegion
from .records import CheatCode, CheatFolder, GameRecord, Node

# A run is "long" if it's more than 2 full lines (32 bytes)
LONG_RUN_THRESHOLD = 32


def summarized_hex_dump(data: bytes, indent: str = "  ", base: int = 0) -> List[str]:
    """
    Hex dump lines that collapse long runs of identical bytes.

    Args:
        data: The byte data to dump
        indent: Indentation string for each line
        base: Offset printed for the first byte
    """
    lines = []
    i = 0
    while i < len(data):
        byte_val = data[i]
        run_length = 1
        while i + run_length < len(data) and data[i + run_length] == byte_val:
            run_length += 1

        if run_length >= LONG_RUN_THRESHOLD:
            lines.append(f"{indent}[... {run_length} bytes of 0x{byte_val:02x} ...]")
            i += run_length
        else:
            end = min(i + 16, len(data))
            chunk = data[i:end]
            hex_part = ' '.join(f'{b:02x}' for b in chunk)
            ascii_part = ''.join(chr(b) if 32 <= b <= 126 else '.' for b in chunk)
            lines.append(f"{indent}{base + i:08x}: {hex_part:<48} |{ascii_part}|")
            i += 16
    return lines


def hex_context(data: bytes, offset: int, before: int = 16, after: int = 32) -> str:
    """Hex dump around an error offset, lined up on 16-byte rows."""
    start = max(0, (offset - before) & ~0xF)
    end = min(len(data), offset + after)
    return "\n".join(summarized_hex_dump(data[start:end], base=start))


def render_regions_to_string(regions: List[Region], title: str = "Game Record Layout") -> str:
    """
    Walks a region list. Claimed regions render through the __str__ of their
    parsed value; unclaimed regions get a hex dump.
    """
    lines = [f"\n{title}"]

    for region in regions:
        if isinstance(region, UnclaimedRegion):
            lines.append(f"[UNCLAIMED DATA]  Offset: 0x{region.start:x}, Size: {region.size} bytes")
            lines.extend(summarized_hex_dump(region.raw_data, base=region.start))

        elif isinstance(region, ClaimedRegion):
            parsed_str = str(region.parsed_value) if region.parsed_value is not None else ""
            head = f"[{region.name}]  Offset: 0x{region.start:x}, Size: {region.size} bytes"
            if "\n" in parsed_str:
                lines.append(head)
                lines.extend(f"  {line}" for line in parsed_str.split("\n"))
            else:
                lines.append(f"{head}  {parsed_str}".rstrip())

    return "\n".join(lines)


def _render_note(node: Node, pad: str, lines: List[str]):
    if node.description:
        lines.append(f"{pad}    note: {node.description}")


def _render_nodes(nodes: List[Node], depth: int, lines: List[str]):
    pad = "  " * depth
    for node in nodes:
        if isinstance(node, CheatCode):
            marker = " (master)" if node.flag.is_master else ""
            lines.append(f"{pad}- {node.name}{marker} [{node.entry_count} lines]")
            _render_note(node, pad, lines)
            for line in node.lines:
                lines.append(f"{pad}    {line}")
        elif isinstance(node, CheatFolder):
            marker = " (one only)" if node.flag.only_one else ""
            lines.append(f"{pad}+ {node.name}{marker}")
            _render_note(node, pad, lines)
            _render_nodes(node.children, depth + 1, lines)


def render_record(record: GameRecord) -> str:
    """Tree listing of one game."""
    header = record.header
    lines = [f"0x{record.offset:08x} - {record.name} ({record.identifier})"]
    if record.description:
        lines.append(f"  {record.description}")
    if header.has_timestamp:
        lines.append("  Date: %04d/%02d/%02d %02d:%02d" % (header.date + header.time))
    lines.append(f"  Codes: {record.code_count} (header says {header.num_codes})")
    _render_nodes(list(record.nodes), 1, lines)
    return "\n".join(lines)
