"""
Ordered command builders.

Every request payload is ``command<TAB>`` followed by ``mnemonic value<TAB>``
pairs. Field order is fixed per command, so each builder lists its fields
explicitly and a single routine serializes them.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .constants import TAB, TEXT_FIELDS, Command, Field
from .exceptions import NonAsciiCharacterError


FieldValue = Union[bytes, str, int]


def format_quantity(quantity: float) -> str:
    """
    Format a quantity with up to 3 decimals, trailing zeros stripped.

    Example:
        >>> format_quantity(1.0), format_quantity(2.5), format_quantity(0.125)
        ('1', '2.5', '0.125')
    """
    return f"{quantity:.3f}".rstrip("0").rstrip(".")


def _require_ascii(mnemonic: Field, text: str) -> None:
    for char in text:
        if ord(char) > 0x7F:
            raise NonAsciiCharacterError(char, text, details={"field": mnemonic.value})


@dataclass
class DeviceCommand:
    """
    Command with an ordered list of (mnemonic, value) fields.

    Attributes:
        command: Command name.
        fields: Fields in wire order, values already encoded.
    """

    command: Command
    fields: list[tuple[Field, bytes]] = field(default_factory=list)

    def add(self, mnemonic: Field, value: FieldValue) -> "DeviceCommand":
        """
        Append a field; str and int values are sent as ASCII.

        Raises:
            NonAsciiCharacterError: A str value is not ASCII, or a bytes
                value holds bytes above 0x7F outside the text fields.
        """
        if isinstance(value, int):
            value = str(value)
        if isinstance(value, str):
            _require_ascii(mnemonic, value)
            value = value.encode("ascii")
        elif mnemonic not in TEXT_FIELDS:
            _require_ascii(mnemonic, value.decode("latin-1"))
        self.fields.append((mnemonic, value))
        return self

    def to_bytes(self) -> bytes:
        """Serialize to a payload."""
        tab = bytes([TAB])
        parts = [self.command.value.encode("ascii"), tab]
        for mnemonic, value in self.fields:
            parts.extend((mnemonic.value.encode("ascii"), value, tab))
        return b"".join(parts)

    @property
    def name(self) -> str:
        """Command name as echoed by the device."""
        return self.command.value


# =============================================================================
# Transaction Commands
# =============================================================================


def trinit() -> DeviceCommand:
    """Open a transaction in online mode."""
    return DeviceCommand(Command.TRINIT).add(Field.BUFFER_MODE, 0)


def trline(
    name: bytes,
    vat_rate: int,
    price: int,
    quantity: float,
    value: int,
) -> DeviceCommand:
    """Receipt line: na, vt, pr, il, wa."""
    return (
        DeviceCommand(Command.TRLINE)
        .add(Field.NAME, name)
        .add(Field.VAT_RATE, vat_rate)
        .add(Field.PRICE, price)
        .add(Field.QUANTITY, format_quantity(quantity))
        .add(Field.VALUE, value)
    )


def trpayment(payment_type: int, amount: int) -> DeviceCommand:
    """Payment with no change due."""
    return (
        DeviceCommand(Command.TRPAYMENT)
        .add(Field.PAYMENT_TYPE, payment_type)
        .add(Field.VALUE, amount)
        .add(Field.CHANGE, 0)
    )


def trend(total: int) -> DeviceCommand:
    """Close the transaction with a single payment form and auto footer."""
    return (
        DeviceCommand(Command.TREND)
        .add(Field.TOTAL, total)
        .add(Field.PAYMENT_FORMS, total)
        .add(Field.CHANGE, 0)
        .add(Field.FOOTER_END, 1)
    )


# =============================================================================
# Report Commands
# =============================================================================


def dailyrep(date: Optional[str] = None) -> DeviceCommand:
    """Daily report, optionally for a given date."""
    command = DeviceCommand(Command.DAILYREP)
    if date:
        command.add(Field.DATE, date)
    return command


def monthrep(date: Optional[str] = None, summary: bool = False) -> DeviceCommand:
    """
    Monthly report, full or summary.

    The summary variant sends ``su1``. That mnemonic is unconfirmed against
    device documentation, so it is only sent when ``summary`` is requested.
    """
    command = DeviceCommand(Command.MONTHREP)
    if date:
        command.add(Field.DATE, date)
    if summary:
        command.add(Field.SUMMARY, 1)
    return command


# =============================================================================
# Non-fiscal Form Commands
# =============================================================================


def formstart(form: int, header: Optional[int] = None, text: Optional[bytes] = None) -> DeviceCommand:
    """Start a non-fiscal form with optional header number and title."""
    command = DeviceCommand(Command.FORMSTART).add(Field.FORM_NUMBER, form)
    if header is not None and header >= 0:
        command.add(Field.FORM_HEADER, header)
    if text:
        command.add(Field.FORM_TEXT, text)
    return command


def formformattedline(form: int, line: bytes, mask: Optional[bytes] = None) -> DeviceCommand:
    """Formatted form line: s1, fn and optional mask."""
    command = (
        DeviceCommand(Command.FORMFORMATTEDLINE)
        .add(Field.LINE_TEXT, line)
        .add(Field.FORM_NUMBER, form)
    )
    if mask:
        command.add(Field.MASK, mask)
    return command


def formtinyline(form: int, line: bytes) -> DeviceCommand:
    """Small font form line."""
    return (
        DeviceCommand(Command.FORMTINYLINE)
        .add(Field.FORM_NUMBER, form)
        .add(Field.LINE_TEXT, line)
    )


def formcmd(form: int, code: int) -> DeviceCommand:
    """Form control command (separator, feed, ...)."""
    return (
        DeviceCommand(Command.FORMCMD)
        .add(Field.FORM_NUMBER, form)
        .add(Field.FORM_COMMAND, code)
    )


def formend(form: int) -> DeviceCommand:
    """End a non-fiscal form."""
    return DeviceCommand(Command.FORMEND).add(Field.FORM_NUMBER, form)
