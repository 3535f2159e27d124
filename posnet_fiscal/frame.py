"""
POSNET Frame Codec.

Pure functions that wrap a payload into a frame and unwrap it again.
No I/O happens here.

Frame Structure:
    STX (0x02) | PAYLOAD | '#' | CRC (4 hex digits, sent uppercase) | ETX (0x03)

Where:
    - PAYLOAD: command, TAB and TAB-terminated mnemonic fields
    - CRC: CRC16-CCITT of PAYLOAD, big-endian hex
"""

from .constants import CRC_HEX_LENGTH, CRC_PREFIX, CRC_SUFFIX_LENGTH, ETX, STX
from .crc import calculate_crc16, format_crc16
from .exceptions import (
    ChecksumDecodeError,
    ChecksumMismatchError,
    FrameTooShortError,
    MissingChecksumMarkerError,
    MissingFrameDelimiterError,
)


_HEX_DIGITS = frozenset(b"0123456789ABCDEFabcdef")


def encode_frame(payload: bytes) -> bytes:
    """
    Build a complete frame from a payload.

    Args:
        payload: Payload bytes. Must not contain STX or ETX.

    Returns:
        Frame bytes ready to send.

    Example:
        >>> encode_frame(b"123456789")
        b'\\x02123456789#31C3\\x03'
    """
    crc = format_crc16(calculate_crc16(payload))
    return bytes([STX]) + payload + bytes([CRC_PREFIX]) + crc + bytes([ETX])


def decode_frame(raw: bytes) -> bytes:
    """
    Extract and verify the payload of a received frame.

    Bytes before the first STX are discarded, the body ends at the first
    following ETX.

    Args:
        raw: Received bytes containing one frame.

    Returns:
        Payload bytes without the checksum suffix.

    Raises:
        MissingFrameDelimiterError: No STX, or no ETX after it.
        FrameTooShortError: Body shorter than the checksum suffix.
        MissingChecksumMarkerError: No '#' before the checksum digits.
        ChecksumDecodeError: Checksum digits are not hex.
        ChecksumMismatchError: Checksum does not match the payload.
    """
    start = raw.find(STX)
    if start < 0:
        raise MissingFrameDelimiterError("STX not found")

    end = raw.find(ETX, start + 1)
    if end < 0:
        raise MissingFrameDelimiterError("ETX not found")

    body = raw[start + 1:end]
    if len(body) < CRC_SUFFIX_LENGTH:
        raise FrameTooShortError(
            f"frame too short: {len(body)} bytes",
            details={"length": len(body)},
        )

    marker_pos = len(body) - CRC_SUFFIX_LENGTH
    if body[marker_pos] != CRC_PREFIX:
        raise MissingChecksumMarkerError("CRC prefix not found at expected position")

    payload = body[:marker_pos]
    crc_hex = body[marker_pos + 1:]

    if len(crc_hex) != CRC_HEX_LENGTH or not set(crc_hex) <= _HEX_DIGITS:
        raise ChecksumDecodeError(
            f"CRC decode failed: {crc_hex!r}",
            details={"checksum": crc_hex.decode("ascii", errors="replace")},
        )

    got = int(crc_hex, 16)
    want = calculate_crc16(payload)
    if got != want:
        raise ChecksumMismatchError(got, want)

    return payload
