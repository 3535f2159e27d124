"""
Fiscal Session.

Sequences device commands for one printer connection:

    IDLE -> TRANSACTION_OPEN -> (LINE_ADDED)* -> PAYMENT_RECORDED -> CLOSED

Reports are one-shot exchanges allowed only when no transaction is open.
Every command is sent and its response read before the next one goes out.
Device state is authoritative: a failed receipt is never rolled back here.
"""

import logging
from enum import Enum, auto
from typing import Optional

from . import commands
from .commands import DeviceCommand
from .constants import ERROR_MARKER, QUERY_MARKER, REPORT_TIMEOUT_S, RESPONSE_TIMEOUT_S
from .encoding import TextEncoding, encode_text
from .exceptions import DeviceResponseError, TransactionStateError
from .transport import PosnetTransport
from .value_objects import Receipt, ReceiptLine


logger = logging.getLogger(__name__)


class TransactionPhase(Enum):
    """Phases of a fiscal transaction."""

    IDLE = auto()              # No transaction
    TRANSACTION_OPEN = auto()  # trinit accepted
    LINE_ADDED = auto()        # At least one trline accepted
    PAYMENT_RECORDED = auto()  # trpayment accepted
    CLOSED = auto()            # trend accepted, ready for a new transaction


# Phases where no transaction is open on the device
READY_PHASES = frozenset({TransactionPhase.IDLE, TransactionPhase.CLOSED})


def is_error_response(command: str, response: bytes) -> bool:
    """
    Classify a transaction command response.

    A response fails when it contains ERR, or contains '?' without echoing
    the command name.
    """
    if ERROR_MARKER in response:
        return True
    return QUERY_MARKER in response and command.encode("ascii") not in response


def is_report_error(response: bytes) -> bool:
    """Classify a report response: any ERR or '?' fails."""
    return ERROR_MARKER in response or QUERY_MARKER in response


class FiscalSession:
    """
    Fiscal command layer on top of a transport.

    Attributes:
        transport: Underlying transport layer.
        encoding: Codepage for text fields.
        vat_rate: Default VAT rate index for lines without their own rate.
        payment_type: Payment type code used for trpayment.
        phase: Current transaction phase.
    """

    def __init__(
        self,
        transport: PosnetTransport,
        encoding: TextEncoding = TextEncoding.CP1250,
        vat_rate: int = 0,
        payment_type: int = 0,
        response_timeout: float = RESPONSE_TIMEOUT_S,
        report_timeout: float = REPORT_TIMEOUT_S,
    ) -> None:
        """
        Initialize the session.

        Args:
            transport: Connected transport.
            encoding: Text encoding, fixed for the session lifetime.
            vat_rate: Default VAT rate index (0-6).
            payment_type: Payment type code.
            response_timeout: Deadline for transaction command responses.
            report_timeout: Deadline for report responses.
        """
        self._transport = transport
        self._encoding = encoding
        self._vat_rate = vat_rate
        self._payment_type = payment_type
        self._response_timeout = response_timeout
        self._report_timeout = report_timeout
        self._phase = TransactionPhase.IDLE

    @property
    def transport(self) -> PosnetTransport:
        """Get transport layer."""
        return self._transport

    @property
    def encoding(self) -> TextEncoding:
        """Get session text encoding."""
        return self._encoding

    @property
    def phase(self) -> TransactionPhase:
        """Get current transaction phase."""
        return self._phase

    def encode(self, text: str) -> bytes:
        """Encode a text value with the session encoding."""
        return encode_text(self._encoding, text)

    def reset(self) -> None:
        """Forget local transaction state without talking to the device."""
        if self._phase not in READY_PHASES:
            logger.warning(f"Abandoning transaction in phase {self._phase.name}")
        self._phase = TransactionPhase.IDLE

    def _require(self, operation: str, *phases: TransactionPhase) -> None:
        if self._phase not in phases:
            raise TransactionStateError(operation, self._phase.name)

    async def execute(
        self,
        command: DeviceCommand,
        timeout: Optional[float] = None,
        report: bool = False,
    ) -> bytes:
        """
        Send a command and validate its response.

        Args:
            command: Command to send.
            timeout: Response deadline, defaults to the command kind deadline.
            report: Apply the report response rule.

        Returns:
            Response payload.

        Raises:
            TransportError: Send or receive failed.
            FrameError: Response frame is malformed.
            DeviceResponseError: Device reported an error.
        """
        if timeout is None:
            timeout = self._report_timeout if report else self._response_timeout

        await self._transport.send_bytes(command.to_bytes())
        response = await self._transport.receive(timeout=timeout)

        failed = is_report_error(response) if report else is_error_response(command.name, response)
        if failed:
            raise DeviceResponseError(command.name, response)
        return response

    # =========================================================================
    # Transaction
    # =========================================================================

    async def open_transaction(self) -> None:
        """Send trinit and open a transaction."""
        self._require("open_transaction", *READY_PHASES)
        await self.execute(commands.trinit())
        self._phase = TransactionPhase.TRANSACTION_OPEN

    async def add_line(self, line: ReceiptLine) -> None:
        """
        Send trline for a receipt line.

        Args:
            line: Receipt line.

        Raises:
            TextEncodingError: Name cannot be encoded, nothing is sent.
        """
        self._require(
            "add_line",
            TransactionPhase.TRANSACTION_OPEN,
            TransactionPhase.LINE_ADDED,
        )
        command = commands.trline(
            name=self.encode(line.name),
            vat_rate=line.effective_vat_rate(self._vat_rate),
            price=line.price,
            quantity=line.quantity,
            value=line.value,
        )
        await self.execute(command)
        self._phase = TransactionPhase.LINE_ADDED

    async def record_payment(self, total: int) -> None:
        """Send trpayment for the whole amount."""
        self._require("record_payment", TransactionPhase.LINE_ADDED)
        await self.execute(commands.trpayment(self._payment_type, total))
        self._phase = TransactionPhase.PAYMENT_RECORDED

    async def close_transaction(self, total: int) -> None:
        """Send trend and close the transaction."""
        self._require("close_transaction", TransactionPhase.PAYMENT_RECORDED)
        await self.execute(commands.trend(total))
        self._phase = TransactionPhase.CLOSED

    async def print_receipt(self, receipt: Receipt) -> None:
        """
        Print a complete receipt.

        Runs open, add_line for every line, record_payment and close. Stops
        at the first failing step. Steps already accepted by the device are
        not undone; local state returns to IDLE so the next receipt can start.

        Args:
            receipt: Receipt to print, validated before anything is sent.

        Raises:
            TransactionStateError: A transaction is already open; the
                session phase is left untouched.
        """
        receipt.validate()
        self._require("print_receipt", *READY_PHASES)

        try:
            await self.open_transaction()
            for index, line in enumerate(receipt.lines):
                logger.debug(f"Line #{index}: {line.name} {line.price} x {line.quantity}")
                await self.add_line(line)
            await self.record_payment(receipt.total)
            await self.close_transaction(receipt.total)
        except Exception:
            self.reset()
            raise

        logger.info(f"Receipt printed: {len(receipt.lines)} lines, total {receipt.total}")

    # =========================================================================
    # Reports
    # =========================================================================

    async def daily_report(self, date: Optional[str] = None) -> None:
        """Print the daily report."""
        self._require("daily_report", *READY_PHASES)
        logger.info("Printing daily report")
        await self.execute(commands.dailyrep(date), report=True)

    async def monthly_report(self, date: Optional[str] = None, summary: bool = False) -> None:
        """
        Print the monthly report.

        Args:
            date: Any day of the reported month (YYYY-MM-DD), None for current.
            summary: Print the summary variant.
        """
        self._require("monthly_report", *READY_PHASES)
        logger.info(f"Printing monthly report ({'summary' if summary else 'full'})")
        await self.execute(commands.monthrep(date, summary), report=True)

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()
