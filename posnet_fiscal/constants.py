"""
POSNET Protocol Constants and Enumerations.

Frame layout, field mnemonics and timing values used by the fiscal
printer protocol. Commands and mnemonics are plain ASCII strings.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Frame Constants
# =============================================================================

STX: Final[int] = 0x02  # Start of frame
ETX: Final[int] = 0x03  # End of frame
TAB: Final[int] = 0x09  # Field terminator
LF: Final[int] = 0x0A

CRC_PREFIX: Final[int] = ord("#")  # Marker before the 4 hex checksum digits
CRC_POLYNOMIAL: Final[int] = 0x1021  # CCITT polynomial, not reflected
CRC_INITIAL: Final[int] = 0x0000
CRC_HEX_LENGTH: Final[int] = 4
CRC_SUFFIX_LENGTH: Final[int] = 1 + CRC_HEX_LENGTH  # '#' + 4 hex digits

# CRC16-CCITT of b"123456789"
CRC_CHECK_VALUE: Final[int] = 0x31C3


# =============================================================================
# Timing Constants
# =============================================================================

DEFAULT_TIMEOUT_S: Final[float] = 5.0  # Connect / write / read deadline
RESPONSE_TIMEOUT_S: Final[float] = 3.0  # Transaction command response
REPORT_TIMEOUT_S: Final[float] = 10.0  # Daily / monthly report response


# =============================================================================
# Fiscal Constants
# =============================================================================

MAX_LINE_NAME_LENGTH: Final[int] = 80
MIN_VAT_RATE: Final[int] = 0
MAX_VAT_RATE: Final[int] = 6
VALID_PAYMENT_TYPES: Final[frozenset[int]] = frozenset({0, 2, 3, 4, 5, 6, 7, 8})
FORM_NUMBER: Final[int] = 200  # Non-fiscal form used for free text printouts


class Command(str, Enum):
    """
    Device commands.

    Each command is the first TAB-terminated token of a request payload.
    """
    TRINIT = "trinit"        # Open transaction
    TRLINE = "trline"        # Receipt line
    TRPAYMENT = "trpayment"  # Payment form
    TREND = "trend"          # Close transaction
    DAILYREP = "dailyrep"    # Daily report
    MONTHREP = "monthrep"    # Monthly report
    FORMSTART = "formstart"
    FORMFORMATTEDLINE = "formformattedline"
    FORMTINYLINE = "formtinyline"
    FORMCMD = "formcmd"
    FORMEND = "formend"

    def __str__(self) -> str:
        return self.value


class Field(str, Enum):
    """Two-letter field mnemonics."""
    NAME = "na"
    VAT_RATE = "vt"
    PRICE = "pr"
    QUANTITY = "il"
    VALUE = "wa"
    PAYMENT_TYPE = "ty"
    TOTAL = "to"
    PAYMENT_FORMS = "fp"
    CHANGE = "re"
    FOOTER_END = "fe"
    BUFFER_MODE = "bm"
    DATE = "da"
    SUMMARY = "su"
    FORM_COMMAND = "cm"
    FORM_HEADER = "fh"
    FORM_TEXT = "al"
    MASK = "ma"
    LINE_TEXT = "s1"
    FORM_NUMBER = "fn"

    def __str__(self) -> str:
        return self.value


# Fields whose values carry codepage-encoded text
TEXT_FIELDS: Final[frozenset[Field]] = frozenset({
    Field.NAME,
    Field.FORM_TEXT,
    Field.LINE_TEXT,
    Field.MASK,
})

# Response markers
ERROR_MARKER: Final[bytes] = b"ERR"
QUERY_MARKER: Final[bytes] = b"?"
