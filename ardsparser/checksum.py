"""
Checksum primitives used by the ARDS.

crc32() is the table-free division the device tools use: unreflected
polynomial 0x04C11DB7 fed with bit-reversed input bytes, result complemented
and reversed. The output matches the common reflected CRC-32.

crc16() covers firmware images. The polynomial is a parameter; the default is
the reflected 0xA001 form used by the Nintendo DS BIOS.
"""

POLY_CRC32 = 0x04C11DB7
POLY_CRC16 = 0xA001
GAME_ID_SPAN = 0x200


def reverse_bits(value: int, width: int = 32) -> int:
    """Flips the bit order of an unsigned integer of `width` bits."""
    result = 0
    for _ in range(width):
        result = (result << 1) | (value & 1)
        value >>= 1
    return result


# Byte-sized lookup so the inner loop doesn't pay for reverse_bits per byte
_REVERSED_BYTES = bytes(reverse_bits(b, 8) for b in range(256))


def crc32(buffer: bytes) -> int:
    """
    CRC-32 over `buffer`.

    Each byte is reversed and shifted into the top of the accumulator one bit
    at a time; the polynomial is XORed in whenever the outgoing bit is set.
    An empty buffer yields 0.
    """
    crc = 0xFFFFFFFF
    for byte in buffer:
        crc ^= _REVERSED_BYTES[byte] << 24
        for _ in range(8):
            if crc & 0x80000000:
                crc = ((crc << 1) ^ POLY_CRC32) & 0xFFFFFFFF
            else:
                crc = (crc << 1) & 0xFFFFFFFF
    return reverse_bits(~crc & 0xFFFFFFFF)


def crc16(initial: int, buffer: bytes, poly: int = POLY_CRC16) -> int:
    """Reflected CRC-16 seeded with `initial` (the firmware tools use 0xFFFF)."""
    crc = initial & 0xFFFF
    for byte in buffer:
        crc ^= byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ poly
            else:
                crc >>= 1
    return crc & 0xFFFF


def game_identifier_checksum(rom_bytes: bytes) -> int:
    """~crc32 of the first 512 bytes of a cartridge ROM."""
    return ~crc32(rom_bytes[:GAME_ID_SPAN]) & 0xFFFFFFFF
