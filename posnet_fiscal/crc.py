"""
CRC16 CCITT Calculation for POSNET frames.

Polynomial 0x1021, initial value 0x0000, no input/output reflection and
no final XOR. The checksum travels as 4 uppercase hex digits after '#'.
"""

from .constants import CRC_HEX_LENGTH, CRC_INITIAL, CRC_POLYNOMIAL


def calculate_crc16(data: bytes) -> int:
    """
    Calculate CRC16-CCITT checksum of a frame payload.

    Args:
        data: Payload bytes (without STX, '#', checksum and ETX).

    Returns:
        16-bit checksum.

    Example:
        >>> hex(calculate_crc16(b"123456789"))
        '0x31c3'
    """
    crc: int = CRC_INITIAL

    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ CRC_POLYNOMIAL) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF

    return crc


def format_crc16(crc: int) -> bytes:
    """Format checksum as 4 uppercase hex digits (big-endian)."""
    return f"{crc:0{CRC_HEX_LENGTH}X}".encode("ascii")


def crc16_hex(data: bytes) -> bytes:
    """Calculate and format the checksum of a payload."""
    return format_crc16(calculate_crc16(data))
