"""
Receipt run orchestration.

For every bank transaction: select products for the exact amount, print
the receipt and book the sold stock. Transactions are processed day by
day, optionally followed by a daily report.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .exceptions import PosnetError, StockError
from .fiscal import FiscalSession
from .selector import ProductSelector
from .transactions import Transaction, group_by_date, unique_dates
from .value_objects import Receipt


logger = logging.getLogger(__name__)


RECEIPT_DELAY_S = 0.5
REPORT_DELAY_S = 2.0

# Asked after each day: returns True to print the daily report
ConfirmCallback = Callable[[str], Awaitable[bool]]


@dataclass
class RunSummary:
    """Counters for a finished run."""

    printed: int = 0
    errors: int = 0
    days: int = 0

    @property
    def ok(self) -> bool:
        return self.errors == 0


class ReceiptRunner:
    """
    Drives product selection and printing for a list of transactions.

    Without a session the run is a dry run: receipts are selected and
    stock is booked, nothing is sent to a printer.
    """

    def __init__(
        self,
        selector: ProductSelector,
        session: Optional[FiscalSession] = None,
        vat_rate: Optional[int] = None,
        confirm_daily_report: Optional[ConfirmCallback] = None,
        receipt_delay: float = RECEIPT_DELAY_S,
        report_delay: float = REPORT_DELAY_S,
    ) -> None:
        """
        Initialize the runner.

        Args:
            selector: Product selector bound to the run catalog.
            session: Fiscal session, None for a dry run.
            vat_rate: VAT rate for receipt lines, None for the session default.
            confirm_daily_report: Asked after each day; no callback means
                no daily reports.
            receipt_delay: Pause after each printed receipt, in seconds.
            report_delay: Pause after a daily report, in seconds.
        """
        self._selector = selector
        self._session = session
        self._vat_rate = vat_rate
        self._confirm_daily_report = confirm_daily_report
        self._receipt_delay = receipt_delay
        self._report_delay = report_delay

    @property
    def dry_run(self) -> bool:
        return self._session is None

    async def run(self, transactions: list[Transaction]) -> RunSummary:
        """Process all transactions, grouped by date in date order."""
        summary = RunSummary()
        grouped = group_by_date(transactions)

        for date in unique_dates(transactions):
            await self.process_day(date, grouped[date], summary)
            summary.days += 1

        return summary

    async def process_day(
        self,
        date: str,
        transactions: list[Transaction],
        summary: RunSummary,
    ) -> None:
        """Print all receipts of one day, then the optional daily report."""
        logger.info(f"Date {date}: {len(transactions)} receipts")

        for index, transaction in enumerate(transactions, start=1):
            logger.info(
                f"[{index}/{len(transactions)}] Receipt {transaction.amount / 100:.2f}"
            )
            try:
                await self.process_transaction(transaction)
            except PosnetError as e:
                logger.error(f"Receipt {transaction.amount / 100:.2f} failed: {e}")
                summary.errors += 1
                continue
            summary.printed += 1

        if self.dry_run or self._confirm_daily_report is None:
            return

        if not await self._confirm_daily_report(date):
            logger.info(f"Daily report for {date} skipped")
            return

        try:
            await self._session.daily_report()
        except PosnetError as e:
            logger.error(f"Daily report failed: {e}")
            summary.errors += 1
        else:
            logger.info("Daily report printed")
        await asyncio.sleep(self._report_delay)

    async def process_transaction(self, transaction: Transaction) -> Receipt:
        """
        Select, print and book one receipt.

        Raises:
            PosnetError: Selection or printing failed. Stock errors after a
                successful print are logged, not raised.
        """
        products = self._selector.select_products(transaction.amount)
        receipt = Receipt.from_products(products, vat_rate=self._vat_rate)
        receipt.validate()

        for line in receipt.lines:
            logger.info(f"  - {line.name}: {line.price / 100:.2f}")

        if self._session is not None:
            await self._session.print_receipt(receipt)

        try:
            self._selector.commit(products)
        except StockError as e:
            logger.warning(f"Stock update failed: {e}")

        if self._session is not None:
            await asyncio.sleep(self._receipt_delay)

        return receipt
