"""
Region map of a game record, for checking the format by eye.

The idea is the same as curating a hex dump by hand: claim every structure
you understand, and let get_regions() report everything in between as
unclaimed, so no byte inside the record is ever hidden.

Every claimed region must render all of the bytes it claims (all lines of a
code, the full text of a string). A region that claims bytes and only prints
a count defeats the purpose of the map.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from .records import (CODE_LINE_SIZE, HEADER_SIZE, RECORD_HEADER_SIZE,
                      TEXT_PAD, CheatCode, CheatFolder, GameRecord, Node)
from .byte_cursor import TEXT_ENCODING


# --- Base Region Class ---
@dataclass
class Region:
    """Base class for all regions in a binary block."""
    start: int
    size: int
    raw_data: bytes

    @property
    def end(self) -> int:
        return self.start + self.size


@dataclass
class UnclaimedRegion(Region):
    """A block of data that no known structure accounts for."""
    pass


@dataclass
class ClaimedRegion(Region):
    """A block of data that has been identified."""
    name: str
    parsed_value: Optional[Any] = None


class RegionMap:
    """
    Tracks claimed regions over a window [base, base + len(data)) of a ROM.
    Offsets passed to claim() are absolute ROM offsets.
    """
    def __init__(self, data: bytes, base: int = 0):
        self.data = data
        self.base = base
        self.regions: List[ClaimedRegion] = []

    def claim(self, name: str, start: int, size: int, parsed_value: Any = None):
        rel = start - self.base
        if rel < 0 or rel + size > len(self.data):
            raise ValueError(f"Cannot claim {size} bytes at 0x{start:x}; outside the mapped window.")
        self.regions.append(ClaimedRegion(
            start=start,
            size=size,
            raw_data=self.data[rel:rel + size],
            name=name,
            parsed_value=parsed_value
        ))

    def get_regions(self) -> List[Region]:
        """
        Sorted claimed regions with UnclaimedRegion filling every gap, so the
        result covers the whole window.
        """
        result: List[Region] = []
        last_end = self.base
        for claimed in sorted(self.regions, key=lambda r: r.start):
            if claimed.start > last_end:
                result.append(UnclaimedRegion(
                    start=last_end,
                    size=claimed.start - last_end,
                    raw_data=self.data[last_end - self.base:claimed.start - self.base]
                ))
            result.append(claimed)
            last_end = max(last_end, claimed.end)

        window_end = self.base + len(self.data)
        if last_end < window_end:
            result.append(UnclaimedRegion(
                start=last_end,
                size=window_end - last_end,
                raw_data=self.data[last_end - self.base:]
            ))
        return result


# --- Record layout ---

@dataclass
class TextEntry:
    label: str
    text: str

    def __str__(self):
        return f"{self.label}: {self.text!r}"


def _text_size(text: str) -> int:
    return len(text.encode(TEXT_ENCODING)) + 1


def _claim_nodes(regions: RegionMap, nodes: List[Node], path: str) -> int:
    """Claims code/folder headers and lines. Returns the end of the last one."""
    end = 0
    for i, node in enumerate(nodes):
        label = f"{path}[{i}]"
        if isinstance(node, CheatCode):
            size = RECORD_HEADER_SIZE + CODE_LINE_SIZE * len(node.lines)
            body = [str(node.flag)] + [f"  {line}" for line in node.lines]
            regions.claim(f"Code {label}", node.offset, size, "\n".join(body))
            end = max(end, node.offset + size)
        elif isinstance(node, CheatFolder):
            regions.claim(f"Folder {label}", node.offset, RECORD_HEADER_SIZE,
                          f"{node.flag}, {node.declared_count} entries")
            end = max(end, node.offset + RECORD_HEADER_SIZE,
                      _claim_nodes(regions, node.children, label))
    return end


def _claim_text(regions: RegionMap, nodes: List[Node], path: str):
    for i, node in enumerate(nodes):
        label = f"{path}[{i}]"
        if node.name_offset is not None:
            name_size = _text_size(node.name)
            regions.claim(f"Name {label}", node.name_offset, name_size, TextEntry("name", node.name))
            regions.claim(f"Note {label}", node.name_offset + name_size,
                          _text_size(node.description), TextEntry("note", node.description))
        if isinstance(node, CheatFolder):
            _claim_text(regions, node.children, label)


def record_layout(rom: bytes, record: GameRecord) -> List[Region]:
    """Region list covering one game record from its header to its last string."""
    start = record.offset
    end = max(record.end_offset, start + HEADER_SIZE)
    regions = RegionMap(rom[start:end], base=start)

    regions.claim("Game Header", start, HEADER_SIZE, record.header)

    nodes = list(record.nodes)
    structure_end = max(_claim_nodes(regions, nodes, "code"), start + HEADER_SIZE)
    text_start = start + record.header.text_offset
    if structure_end + RECORD_HEADER_SIZE <= text_start and rom[structure_end] == 0:
        regions.claim("Terminator", structure_end, RECORD_HEADER_SIZE, "TERMINATE")

    if text_start + TEXT_PAD <= end:
        regions.claim("Text Pad", text_start, TEXT_PAD, f"0x{rom[text_start]:02x}")
        name_at = text_start + TEXT_PAD
        name_size = _text_size(record.name)
        regions.claim("Game Name", name_at, name_size, TextEntry("name", record.name))
        regions.claim("Game Note", name_at + name_size, _text_size(record.description),
                      TextEntry("note", record.description))
        _claim_text(regions, nodes, "code")

    return regions.get_regions()
