"""
Tests for the receipt run orchestration.
"""

import random
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from posnet_fiscal.exceptions import DeviceResponseError
from posnet_fiscal.runner import ReceiptRunner, RunSummary
from posnet_fiscal.selector import ProductSelector
from posnet_fiscal.transactions import Transaction


TRANSACTIONS = [
    Transaction("2025-12-02", 4550),
    Transaction("2025-12-01", 1999),
    Transaction("2025-12-02", 12345),
]


def make_runner(catalog, session=None, **kwargs):
    selector = ProductSelector(catalog, random.Random(3))
    kwargs.setdefault("receipt_delay", 0)
    kwargs.setdefault("report_delay", 0)
    return ReceiptRunner(selector, session=session, **kwargs)


def mock_session():
    session = MagicMock()
    session.print_receipt = AsyncMock()
    session.daily_report = AsyncMock()
    return session


class TestRunSummary:
    """Tests for run counters."""

    def test_ok(self):
        assert RunSummary(printed=2).ok
        assert not RunSummary(printed=2, errors=1).ok


class TestDryRun:
    """Tests for runs without a printer."""

    @pytest.mark.asyncio
    async def test_books_stock(self, catalog):
        before = sum(catalog.stock_snapshot().values())
        runner = make_runner(catalog)

        summary = await runner.run(TRANSACTIONS)

        assert runner.dry_run
        assert (summary.printed, summary.errors, summary.days) == (3, 0, 2)
        sold = sum(p.used for p in catalog.products)
        assert sold >= 3
        assert before - sum(catalog.stock_snapshot().values()) == sold

    @pytest.mark.asyncio
    async def test_failed_selection_counted(self, catalog):
        runner = make_runner(catalog)

        summary = await runner.run([Transaction("2025-12-01", 0), Transaction("2025-12-01", 1999)])

        assert summary.printed == 1
        assert summary.errors == 1
        assert not summary.ok

    @pytest.mark.asyncio
    async def test_no_report_without_printer(self, catalog):
        confirm = AsyncMock(return_value=True)
        runner = make_runner(catalog, confirm_daily_report=confirm)

        await runner.run(TRANSACTIONS)

        confirm.assert_not_awaited()


class TestPrintedRun:
    """Tests for runs with a fiscal session."""

    @pytest.mark.asyncio
    async def test_receipts_and_daily_reports(self, catalog, session, transport):
        confirm = AsyncMock(return_value=True)
        runner = make_runner(catalog, session=session, confirm_daily_report=confirm)

        summary = await runner.run(TRANSACTIONS)

        assert summary.ok
        assert summary.printed == 3
        assert transport.commands.count(b"trinit") == 3
        assert transport.commands.count(b"trend") == 3
        assert transport.commands.count(b"dailyrep") == 2
        assert transport.commands[-1] == b"dailyrep"
        assert confirm.await_args_list == [call("2025-12-01"), call("2025-12-02")]

    @pytest.mark.asyncio
    async def test_first_day_printed_first(self, catalog, session, transport):
        runner = make_runner(catalog, session=session)

        await runner.run(TRANSACTIONS)

        payments = [p for p in transport.sent if p.startswith(b"trpayment")]
        assert payments[0] == b"trpayment\tty8\twa1999\tre0\t"

    @pytest.mark.asyncio
    async def test_report_declined(self, catalog, session, transport):
        runner = make_runner(
            catalog,
            session=session,
            confirm_daily_report=AsyncMock(return_value=False),
        )

        await runner.run(TRANSACTIONS)

        assert b"dailyrep" not in transport.commands

    @pytest.mark.asyncio
    async def test_print_failure_keeps_stock(self, catalog):
        session = mock_session()
        session.print_receipt.side_effect = DeviceResponseError("trinit", b"ERR")
        before = catalog.stock_snapshot()
        runner = make_runner(catalog, session=session)

        summary = await runner.run([Transaction("2025-12-01", 1999)])

        assert summary.printed == 0
        assert summary.errors == 1
        assert catalog.stock_snapshot() == before

    @pytest.mark.asyncio
    async def test_report_failure_counted(self, catalog):
        session = mock_session()
        session.daily_report.side_effect = DeviceResponseError("dailyrep", b"ERR")
        runner = make_runner(
            catalog,
            session=session,
            confirm_daily_report=AsyncMock(return_value=True),
        )

        summary = await runner.run([Transaction("2025-12-01", 1999)])

        assert summary.printed == 1
        assert summary.errors == 1
        session.daily_report.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_line_vat_rate(self, catalog, session, transport):
        runner = make_runner(catalog, session=session, vat_rate=3)

        await runner.run([Transaction("2025-12-01", 1999)])

        lines = [p for p in transport.sent if p.startswith(b"trline")]
        assert lines
        assert all(b"\tvt3\t" in line for line in lines)
