"""
Custom exceptions for the fiscal printer client.

Provides a hierarchy of typed exceptions for transport, framing, text
encoding, fiscal protocol, product selection and stock errors.
"""

from typing import Any, Optional


class PosnetError(Exception):
    """Base exception for all fiscal printer client errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            code: Optional error code for programmatic handling.
            details: Optional additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for reports."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(PosnetError):
    """Invalid configuration, catalog or encoding name."""

    pass


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(PosnetError):
    """Base exception for socket-level errors."""

    pass


class ConnectError(TransportError):
    """Error connecting to the printer."""

    pass


class WriteError(TransportError):
    """Error or timeout while writing a frame."""

    pass


class ReadError(TransportError):
    """Error, EOF or timeout while reading a frame."""

    pass


# =============================================================================
# Framing Errors
# =============================================================================


class FrameError(PosnetError):
    """Base exception for malformed frames."""

    pass


class MissingFrameDelimiterError(FrameError):
    """No STX or no ETX found in the received bytes."""

    pass


class FrameTooShortError(FrameError):
    """Frame body is shorter than the checksum suffix."""

    pass


class MissingChecksumMarkerError(FrameError):
    """The '#' marker is not where the checksum suffix starts."""

    pass


class ChecksumError(FrameError):
    """Base exception for checksum suffix errors."""

    pass


class ChecksumDecodeError(ChecksumError):
    """Checksum suffix is not 4 hex digits."""

    pass


class ChecksumMismatchError(ChecksumError):
    """Received checksum differs from the computed one."""

    def __init__(self, got: int, want: int, **kwargs: Any) -> None:
        super().__init__(f"CRC mismatch: got {got:04X} want {want:04X}", **kwargs)
        self.got = got
        self.want = want
        self.details["got"] = got
        self.details["want"] = want


# =============================================================================
# Text Encoding Errors
# =============================================================================


class TextEncodingError(PosnetError):
    """Base exception for text that cannot be sent to the printer."""

    pass


class NonAsciiCharacterError(TextEncodingError):
    """Character above 0x7F in strict ASCII mode."""

    def __init__(self, char: str, text: str, **kwargs: Any) -> None:
        super().__init__(f"non-ascii character {char!r} in {text!r}", **kwargs)
        self.char = char
        self.text = text
        self.details["char"] = char
        self.details["text"] = text


class UnencodableCharacterError(TextEncodingError):
    """Character missing from the selected codepage table."""

    def __init__(self, char: str, text: str, encoding: str, **kwargs: Any) -> None:
        super().__init__(
            f"character {char!r} in {text!r} has no {encoding} representation",
            **kwargs,
        )
        self.char = char
        self.text = text
        self.encoding = encoding
        self.details.update({"char": char, "text": text, "encoding": encoding})


# =============================================================================
# Fiscal Errors
# =============================================================================


class FiscalError(PosnetError):
    """Base exception for fiscal protocol errors."""

    pass


class DeviceResponseError(FiscalError):
    """Device answered a command with an error."""

    def __init__(self, command: str, response: bytes, **kwargs: Any) -> None:
        text = response.decode("ascii", errors="replace")
        super().__init__(f"{command} failed: {text}", **kwargs)
        self.command = command
        self.response = response
        self.details["command"] = command
        self.details["response"] = text


class TransactionStateError(FiscalError):
    """Operation not allowed in the current transaction phase."""

    def __init__(self, operation: str, phase: str, **kwargs: Any) -> None:
        super().__init__(f"{operation} not allowed in phase {phase}", **kwargs)
        self.operation = operation
        self.phase = phase
        self.details["operation"] = operation
        self.details["phase"] = phase


class ReceiptError(FiscalError):
    """Receipt data is invalid."""

    pass


class ReceiptTotalMismatchError(ReceiptError):
    """Receipt total differs from the sum of its line values."""

    def __init__(self, expected: int, actual: int, **kwargs: Any) -> None:
        super().__init__(
            f"receipt total {expected} does not match sum of lines {actual}",
            **kwargs,
        )
        self.expected = expected
        self.actual = actual
        self.details["expected"] = expected
        self.details["actual"] = actual


# =============================================================================
# Product Selection Errors
# =============================================================================


class DecompositionError(PosnetError):
    """Base exception for amount decomposition errors."""

    pass


class NoCombinationFoundError(DecompositionError):
    """No product combination found within the attempt budget."""

    def __init__(self, amount: int, attempts: int, **kwargs: Any) -> None:
        super().__init__(
            f"no product combination for {amount / 100:.2f} after {attempts} attempts",
            **kwargs,
        )
        self.amount = amount
        self.attempts = attempts
        self.details["amount"] = amount
        self.details["attempts"] = attempts


class AmountMismatchError(DecompositionError):
    """Selected products do not sum to the requested amount."""

    def __init__(self, expected: int, actual: int, **kwargs: Any) -> None:
        super().__init__(
            f"selected products sum to {actual} instead of {expected}",
            **kwargs,
        )
        self.expected = expected
        self.actual = actual
        self.details["expected"] = expected
        self.details["actual"] = actual


# =============================================================================
# Stock Errors
# =============================================================================


class StockError(PosnetError):
    """Base exception for stock bookkeeping errors."""

    def __init__(self, message: str, name: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.name = name
        self.details["product"] = name


class ProductNotFoundError(StockError):
    """Product is not in the catalog."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(f"product {name!r} not found", name, **kwargs)


class OutOfStockError(StockError):
    """Product has no stock left."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(f"product {name!r} is out of stock", name, **kwargs)
