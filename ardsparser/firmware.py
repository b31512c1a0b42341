"""
ARDS firmware images.

The firmware lives at 0x100000 in a cartridge dump, padded with 0xFF up to
0x40000 bytes. A standalone firmware file is:

    "FIRM" | u32 CRC-16 of the payload | payload (padding stripped)

The checksum tool computes the same CRC-16 over everything after the first
8 bytes of such a file.
"""

import struct
from dataclasses import dataclass

from .checksum import crc16

FIRMWARE_START = 0x00100000
FIRMWARE_MAX = 0x00040000
FIRMWARE_MAGIC = b'FIRM'
FIRMWARE_HEADER = struct.Struct('<4sI')
CRC16_SEED = 0xFFFF


def trim_padding(data: bytes, pad: int = 0xFF) -> bytes:
    """Strips trailing `pad` bytes. An all-padding buffer becomes empty."""
    return data.rstrip(bytes([pad]))


def firmware_checksum(payload: bytes) -> int:
    return crc16(CRC16_SEED, payload)


@dataclass(frozen=True)
class FirmwareImage:
    payload: bytes

    @property
    def checksum(self) -> int:
        return firmware_checksum(self.payload)

    def to_bytes(self) -> bytes:
        return FIRMWARE_HEADER.pack(FIRMWARE_MAGIC, self.checksum) + self.payload


def extract_firmware(rom: bytes) -> FirmwareImage:
    """Pulls the firmware out of a cartridge dump."""
    end = FIRMWARE_START + FIRMWARE_MAX
    if len(rom) < end:
        raise ValueError(f"ROM must be at least {end} bytes (is {len(rom)})")
    return FirmwareImage(trim_padding(rom[FIRMWARE_START:end]))


@dataclass(frozen=True)
class FirmwareCheck:
    stored: int
    computed: int

    @property
    def ok(self) -> bool:
        return self.stored == self.computed


def check_firmware_file(data: bytes) -> FirmwareCheck:
    """
    Computes the CRC-16 over everything after the 8-byte header and compares
    it with the value stored in bytes 4-5.
    """
    if len(data) <= FIRMWARE_HEADER.size:
        raise ValueError(f"File must be larger than {FIRMWARE_HEADER.size} bytes (is {len(data)})")
    _, stored = FIRMWARE_HEADER.unpack_from(data)
    return FirmwareCheck(stored & 0xFFFF, firmware_checksum(data[FIRMWARE_HEADER.size:]))
