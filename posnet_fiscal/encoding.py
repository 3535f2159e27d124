"""
Text encodings supported by the printer.

Only text values (product names, form lines, masks) are encoded with the
selected codepage; commands and mnemonics are always ASCII.
"""

from enum import Enum
from typing import Final

from .exceptions import ConfigError, NonAsciiCharacterError, UnencodableCharacterError


class TextEncoding(Enum):
    """Codepage selected for a printer session."""

    CP1250 = "cp1250"
    ISO_8859_2 = "iso8859_2"
    MAZOVIA = "mazovia"
    ASCII = "ascii"


ENCODING_ALIASES: Final[dict[str, TextEncoding]] = {
    "cp1250": TextEncoding.CP1250,
    "windows-1250": TextEncoding.CP1250,
    "win1250": TextEncoding.CP1250,
    "latin2": TextEncoding.ISO_8859_2,
    "latin-2": TextEncoding.ISO_8859_2,
    "iso-8859-2": TextEncoding.ISO_8859_2,
    "iso8859-2": TextEncoding.ISO_8859_2,
    "mazovia": TextEncoding.MAZOVIA,
    "ascii": TextEncoding.ASCII,
}

# Polish diacritics in the Mazovia codepage
MAZOVIA_TABLE: Final[dict[str, int]] = {
    "Ą": 0x8F, "Ć": 0x95, "Ę": 0x90, "Ł": 0x9C, "Ń": 0xA5,
    "Ó": 0xA0, "Ś": 0x98, "Ź": 0xA3, "Ż": 0xA1,
    "ą": 0x86, "ć": 0x8D, "ę": 0x91, "ł": 0x92, "ń": 0xA4,
    "ó": 0xA2, "ś": 0x9E, "ź": 0xA6, "ż": 0xA7,
}

MAZOVIA_FALLBACK: Final[int] = ord(" ")


def parse_encoding(name: str) -> TextEncoding:
    """
    Resolve an encoding name from configuration.

    Args:
        name: Encoding name, case-insensitive (cp1250, latin2, mazovia, ascii
            and their aliases).

    Returns:
        Matching TextEncoding.

    Raises:
        ConfigError: Unknown encoding name.
    """
    key = name.strip().lower()
    try:
        return ENCODING_ALIASES[key]
    except KeyError:
        raise ConfigError(
            f"unknown encoding: {name!r} (use: cp1250|latin2|mazovia|ascii)",
            details={"encoding": name},
        ) from None


def encode_mazovia(text: str) -> bytes:
    """Encode Polish text with the Mazovia table, unknown characters become spaces."""
    out = bytearray()
    for char in text:
        code = ord(char)
        if code <= 0x7F:
            out.append(code)
        else:
            out.append(MAZOVIA_TABLE.get(char, MAZOVIA_FALLBACK))
    return bytes(out)


def encode_text(encoding: TextEncoding, text: str) -> bytes:
    """
    Encode a text value for the printer.

    Args:
        encoding: Session encoding.
        text: Text to encode.

    Returns:
        Encoded bytes.

    Raises:
        NonAsciiCharacterError: ASCII mode and a character above 0x7F.
        UnencodableCharacterError: Character missing from CP1250/ISO-8859-2.
    """
    if encoding is TextEncoding.ASCII:
        for char in text:
            if ord(char) > 0x7F:
                raise NonAsciiCharacterError(char, text)
        return text.encode("ascii")

    if encoding is TextEncoding.MAZOVIA:
        return encode_mazovia(text)

    try:
        return text.encode(encoding.value)
    except UnicodeEncodeError as e:
        raise UnencodableCharacterError(
            text[e.start], text, encoding.name
        ) from e
