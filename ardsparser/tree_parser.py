"""
Builds the code/folder tree of one game record.

Pass 1 (structure) reads (flag, count) records starting right after the
header. Pass 2 (text) reads the name/description pairs from the text block in
the same depth-first order the structure was built in.

A Terminate record closes the list being read and every list enclosing it.
Folders carry no terminator of their own: they hold exactly `count` entries.
When a terminator shows up inside a folder, the folder hands that fact back to
its caller instead of rewinding the cursor.

The parser is permissive by default: a flag it cannot decode ends the current
list early and is logged, nothing more. A folder that would open a list
deeper than MAX_DEPTH ends the whole structure pass, as a terminator would.
Callers that need proof of a well-formed section run validate_segment() first
(read_game does), or pass strict=True.
"""

import logging
from typing import List, Tuple

from .byte_cursor import ByteCursor
from .errors import (BadHeaderError, CountMismatchError, InvalidFlagError,
                     NestingTooDeepError, SegmentError)
from .records import (CODE_LINE_STRUCT, HEADER_SIZE, HEADER_STRUCT,
                      RECORD_HEADER_STRUCT, TEXT_PAD, CheatCode, CheatFolder,
                      CodeFlag, CodeLine, FlagEncoding, FlagKind, GameHeader,
                      GameRecord, Node)
from .segment_validator import validate_segment

logger = logging.getLogger(__name__)

# Deepest list a folder may open. Valid games nest one level.
MAX_DEPTH = 16


def read_header(cursor: ByteCursor) -> GameHeader:
    return GameHeader(*cursor.read_struct(HEADER_STRUCT))


class TreeParser:
    def __init__(self, cursor: ByteCursor, encoding: FlagEncoding = FlagEncoding.CURRENT,
                 strict: bool = False):
        self.cursor = cursor
        self.encoding = encoding
        self.strict = strict

    # --- Pass 1 ---

    def read_structure(self) -> List[Node]:
        """Reads the top-level list up to and including its terminator."""
        nodes, _ = self._read_list(depth=0, expected=None)
        return nodes

    def _read_list(self, depth: int, expected) -> Tuple[List[Node], bool]:
        """
        Reads one list. `expected` is None for the top level (read until a
        terminator), otherwise the folder's entry count.

        Returns the nodes and whether a terminator was consumed.
        """
        nodes: List[Node] = []
        seen = 0
        while expected is None or seen < expected:
            offset = self.cursor.position()
            raw_flag, count = self.cursor.read_struct(RECORD_HEADER_STRUCT)
            try:
                flag = CodeFlag.decode(raw_flag, self.encoding, offset=offset)
            except InvalidFlagError:
                if self.strict:
                    raise
                logger.warning("Unrecognized flag 0x%04x at 0x%08x (depth %d), ending list early",
                               raw_flag, offset, depth)
                return nodes, False
            seen += 1

            if flag.kind is FlagKind.TERMINATE:
                if expected is not None and self.strict:
                    raise CountMismatchError(offset, expected, seen - 1)
                return nodes, True

            if flag.kind is FlagKind.CODE:
                lines = [CodeLine(*self.cursor.read_struct(CODE_LINE_STRUCT)) for _ in range(count)]
                nodes.append(CheatCode(flag, count, offset, lines=lines))
                continue

            if count == 0:
                # Empty folders are not materialized
                continue

            if depth + 1 > MAX_DEPTH:
                if self.strict:
                    raise NestingTooDeepError(offset, depth + 1)
                logger.warning("Folder at 0x%08x would open depth %d, ending structure",
                               offset, depth + 1)
                return nodes, True

            children, terminated = self._read_list(depth + 1, count)
            nodes.append(CheatFolder(flag, count, offset, children=children))
            if terminated:
                if expected is not None and self.strict:
                    raise CountMismatchError(offset, expected, seen)
                return nodes, True

        return nodes, False

    # --- Pass 2 ---

    def read_text(self, nodes: List[Node]):
        """Assigns name and description to every node, in pre-order."""
        for node in nodes:
            node.name_offset = self.cursor.position()
            node.name = self.cursor.read_cstring()
            node.description = self.cursor.read_cstring()
            if isinstance(node, CheatFolder):
                self.read_text(node.children)

    # --- Whole record ---

    def read_game(self, offset: int, validate: bool = True) -> GameRecord:
        """
        Reads the game whose header starts at `offset`. With validate=True the
        code section is checked first and any SegmentError is raised with an
        absolute offset.
        """
        self.cursor.seek_absolute(offset)
        header = read_header(self.cursor)
        if not header.is_trusted:
            raise BadHeaderError(offset, header.magic)

        if validate:
            section_start = offset + HEADER_SIZE
            section = self.cursor.read_fixed(max(header.code_section_size, 0))
            try:
                validate_segment(section, header.num_codes, self.encoding)
            except SegmentError as e:
                raise e.rebase(section_start) from None
            self.cursor.seek_absolute(section_start)

        nodes = self.read_structure()

        self.cursor.seek_absolute(offset + header.text_offset + TEXT_PAD)
        name = self.cursor.read_cstring()
        description = self.cursor.read_cstring()
        self.read_text(nodes)

        return GameRecord(header, tuple(nodes), name, description, offset,
                          end_offset=self.cursor.position())
