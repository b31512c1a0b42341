#!/usr/bin/env python3
"""
Tests for the XML code list exporter.
"""

import os
import sys
import xml.etree.ElementTree as ET

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ardsparser.byte_cursor import ByteCursor
from ardsparser.tree_parser import TreeParser
from ardsparser.xml_export import CODELIST_TITLE, export_xml
from rom_builder import place_games, sample_game


def read_sample(**kwargs):
    rom = place_games({0x40: sample_game(**kwargs)}, 0x200)
    return TreeParser(ByteCursor(rom)).read_game(0x40)


def parse_document(document):
    assert document.startswith('<?xml version="1.0" encoding="UTF-8"?>\n'), document[:60]
    return ET.fromstring(document.encode('utf-8'))


def test_codelist_structure():
    print("Testing code list structure...")
    root = parse_document(export_xml([read_sample()]))
    assert root.tag == 'codelist'
    assert root.findtext('name') == CODELIST_TITLE
    game = root.find('game')
    assert game.findtext('name') == "Sample Quest"
    assert game.findtext('gameid') == "ASME 5C2C3B1A"
    assert game.find('date') is None, "No date without a DOS timestamp"
    assert [child.tag for child in game][2:] == ['cheat', 'cheat', 'folder']
    print("  ✓ one game element per record with cheats and folders in order")


def test_cheat_elements():
    print("Testing cheat elements...")
    game = parse_document(export_xml([read_sample()])).find('game')
    money, master = game.findall('cheat')
    assert money.findtext('name') == "Max Money"
    assert money.findtext('note') == "Press L+R"
    assert money.findtext('codes') == "02000000 0000270F"
    assert master.find('note') is None, "Empty descriptions produce no note"
    assert master.findtext('codes') == "12000010 00000063 22000014 00000001"
    print("  ✓ code lines are written as uppercase hex pairs")


def test_folder_elements():
    print("Testing folder elements...")
    folder = parse_document(export_xml([read_sample()])).find('game/folder')
    assert folder.findtext('name') == "Difficulty"
    assert folder.findtext('note') == "Pick one"
    assert folder.findtext('allowedon') == "1"
    assert [c.findtext('name') for c in folder.findall('cheat')] == ["Easy", "Hard"]
    print("  ✓ one-only folders carry allowedon")


def test_date_and_title():
    print("Testing date and title...")
    record = read_sample(dos_date=(29 << 9) | (3 << 5) | 15, dos_time=(13 << 11) | (45 << 5))
    root = parse_document(export_xml([record, record], title="Backup"))
    assert root.findtext('name') == "Backup"
    assert len(root.findall('game')) == 2
    assert root.find('game').findtext('date') == "2009/03/15 13:45"
    print("  ✓ timestamps and custom titles are exported")


def main():
    tests = [
        test_codelist_structure,
        test_cheat_elements,
        test_folder_elements,
        test_date_and_title,
    ]

    print("=" * 60)
    print("Running XML export tests")
    print("=" * 60)

    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            print(f"  ✗ {test.__name__} failed: {e}")
            failed += 1

    print("=" * 60)
    print(f"Results: {len(tests) - failed} passed, {failed} failed")
    print("=" * 60)
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
