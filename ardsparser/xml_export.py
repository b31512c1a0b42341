"""
Exports parsed game records as an ARDS XML code list.

    <codelist>
        <name>...</name>
        <game>
            <name/> <gameid>ASME 5C2C3B1A</gameid> <date>?</date>
            <cheat><name/><note/>?<codes>HEX HEX ...</codes></cheat>
            <folder><name/><note/>?<allowedon>1</allowedon>? ...</folder>
        </game>
    </codelist>
"""

import xml.etree.ElementTree as ET
from typing import Iterable, List

from .records import CheatCode, CheatFolder, GameRecord, Node

CODELIST_TITLE = "Extracted via ardsparser - ards_game_to_xml"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _add_text(parent: ET.Element, tag: str, text: str) -> ET.Element:
    child = ET.SubElement(parent, tag)
    child.text = text
    return child


def _add_name_and_note(parent: ET.Element, node: Node):
    _add_text(parent, 'name', node.name)
    if node.description:
        _add_text(parent, 'note', node.description)


def format_codes(code: CheatCode) -> str:
    return ' '.join(str(line) for line in code.lines)


def _add_nodes(parent: ET.Element, nodes: Iterable[Node]):
    for node in nodes:
        if isinstance(node, CheatCode):
            cheat = ET.SubElement(parent, 'cheat')
            _add_name_and_note(cheat, node)
            _add_text(cheat, 'codes', format_codes(node))
        elif isinstance(node, CheatFolder):
            folder = ET.SubElement(parent, 'folder')
            _add_name_and_note(folder, node)
            if node.flag.only_one:
                _add_text(folder, 'allowedon', '1')
            _add_nodes(folder, node.children)


def game_to_element(record: GameRecord) -> ET.Element:
    header = record.header
    game = ET.Element('game')
    _add_text(game, 'name', record.name)
    _add_text(game, 'gameid', "%.4s %08X" % (header.id_text, header.checksum))
    if header.has_timestamp:
        _add_text(game, 'date', "%04d/%02d/%02d %02d:%02d" % (header.date + header.time))
    _add_nodes(game, record.nodes)
    return game


def build_codelist(records: List[GameRecord], title: str = CODELIST_TITLE) -> ET.Element:
    root = ET.Element('codelist')
    _add_text(root, 'name', title)
    for record in records:
        root.append(game_to_element(record))
    return root


def export_xml(records: List[GameRecord], title: str = CODELIST_TITLE) -> str:
    """Returns the whole code list as an indented XML document."""
    root = build_codelist(records, title)
    ET.indent(root, space='\t')
    return XML_DECLARATION + ET.tostring(root, encoding='unicode') + '\n'
