#!/usr/bin/env python3
"""
Fiscal receipt printer - command line entry point.

Prints fiscal receipts matching bank transaction totals on a POSNET
printer connected over TCP.

Usage:
    posnet-fiscal --csv reports/01.csv [--config config.json] [--data data.json]
    posnet-fiscal --create-config
    posnet-fiscal --daily-report [YYYY-MM-DD]
    posnet-fiscal --monthly-report [YYYY-MM-DD] [--monthly-report-summary]

Features:
    - Exact product selection for every transaction amount
    - Dry run mode without a printer
    - Stock bookkeeping saved after the run
    - Debug mode with HEX frame logging
"""

import argparse
import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import Optional

from .catalog import example_catalog, load_catalog, save_catalog
from .exceptions import PosnetError
from .fiscal import FiscalSession
from .loggers import get_logger
from .runner import ReceiptRunner, RunSummary
from .selector import ProductSelector
from .settings import Settings, example_settings, load_settings, save_settings
from .transactions import load_transactions
from .transport import PosnetTransport


logger = logging.getLogger("posnet_fiscal")


async def ask_daily_report(date: str) -> bool:
    """Ask on the console whether to print the daily report."""
    answer = await asyncio.to_thread(input, f"Print daily report for {date}? [t/N]: ")
    return answer.strip().lower() in ("t", "tak", "y", "yes")


async def always_print(date: str) -> bool:
    return True


async def open_session(settings: Settings) -> FiscalSession:
    """Connect to the configured printer."""
    printer = settings.printer
    print(f"→ Connecting to printer {printer.address}...")
    transport = await PosnetTransport.connect(
        printer.host,
        printer.port,
        timeout=printer.timeout,
        log_tx=printer.log_tx,
        log_rx=printer.log_rx,
    )
    print("✓ Connected")
    return FiscalSession(
        transport,
        encoding=settings.text_encoding,
        vat_rate=settings.fiscal.vat_rate,
        payment_type=settings.fiscal.payment_type,
    )


def create_config(config_path: str, data_path: str) -> int:
    """Write example configuration and catalog files."""
    for path in (config_path, data_path):
        if Path(path).exists():
            print(f"❌ {path} already exists, not overwriting", file=sys.stderr)
            return 1

    save_settings(example_settings(), config_path)
    print(f"✓ Example configuration written: {config_path}")
    save_catalog(example_catalog(), data_path)
    print(f"✓ Example product data written: {data_path}")
    print("Edit both files before use.")
    return 0


async def print_reports(args: argparse.Namespace, settings: Settings) -> int:
    """Print the requested daily and/or monthly report."""
    if args.dry_run:
        print("⚠ Dry run - no printer")
        if args.daily_report is not None:
            print("✓ [DRY RUN] Daily report")
        if args.monthly_report is not None:
            print("✓ [DRY RUN] Monthly report")
        return 0

    session = await open_session(settings)
    try:
        if args.daily_report is not None:
            print("→ Printing daily report...")
            await session.daily_report(args.daily_report or None)
            print("✓ Daily report printed")

        if args.monthly_report is not None:
            kind = "summary" if args.monthly_report_summary else "full"
            print(f"→ Printing monthly report ({kind})...")
            await session.monthly_report(
                args.monthly_report or None,
                summary=args.monthly_report_summary,
            )
            print("✓ Monthly report printed")
    finally:
        await session.close()
    return 0


def print_summary(summary: RunSummary, selector: ProductSelector) -> None:
    print("\n═══════════════════════════════════════")
    print("📊 SUMMARY")
    print("═══════════════════════════════════════")
    print(f"Receipts printed: {summary.printed}")
    print(f"Errors: {summary.errors}")
    print(f"Days processed: {summary.days}")

    print("\n📦 STOCK:")
    for p in selector.catalog.products:
        status = "⚠" if p.stock == 0 else "✓"
        print(f"  {status} {p.name:<15}: {p.stock} pcs (used: {p.used})")


async def print_receipts(args: argparse.Namespace, settings: Settings) -> int:
    """Print receipts for every transaction in the CSV input."""
    catalog = load_catalog(args.data)
    print(f"✓ Product data loaded ({len(catalog)} products)")

    transactions = load_transactions(args.csv)
    if not transactions:
        print("❌ No transactions in CSV input", file=sys.stderr)
        return 1
    print(f"✓ Loaded {len(transactions)} transactions")

    fiscal = settings.fiscal
    selector = ProductSelector(
        catalog,
        random.Random(args.seed),
        shipping_chance=fiscal.shipping_chance,
        shipping_price=fiscal.shipping_price,
        shipping_name=fiscal.shipping_name,
    )

    session: Optional[FiscalSession] = None
    if args.dry_run:
        print("⚠ Dry run - no printer")
    else:
        session = await open_session(settings)

    runner = ReceiptRunner(
        selector,
        session=session,
        vat_rate=fiscal.vat_rate,
        confirm_daily_report=always_print if args.yes else ask_daily_report,
    )

    try:
        summary = await runner.run(transactions)
    finally:
        if session is not None:
            await session.close()
        print("\n→ Saving stock...")
        save_catalog(catalog, args.data)
        print("✓ Stock saved")

    print_summary(summary, selector)
    if not summary.ok:
        print("\n⚠ Finished with errors")
        return 1
    print("\n✓ Finished successfully")
    return 0


async def main(args: argparse.Namespace) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    if args.create_config:
        return create_config(args.config, args.data)

    reports = args.daily_report is not None or args.monthly_report is not None
    if not reports and not args.csv:
        print("❌ --csv is required (or --create-config / --daily-report / --monthly-report)",
              file=sys.stderr)
        return 1

    try:
        print(f"→ Loading configuration from {args.config}...")
        settings = load_settings(args.config)
        get_logger(
            "posnet_fiscal",
            log_file=settings.logging.log_file,
            level=logging.DEBUG if args.debug else getattr(
                logging, settings.logging.level.upper(), logging.INFO
            ),
            loki_url=settings.logging.loki_url,
        )
        print("✓ Configuration loaded")

        if reports:
            return await print_reports(args, settings)
        return await print_receipts(args, settings)
    except PosnetError as e:
        logger.debug(f"Error details: {e.to_dict()}")
        print(f"❌ {e}", file=sys.stderr)
        return 1


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Fiscal receipts for bank transactions (POSNET over TCP)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", default="config.json", help="Configuration file")
    parser.add_argument("--data", default="data.json", help="Product data file (stock)")
    parser.add_argument("--csv", help="CSV file or directory of CSV files")
    parser.add_argument(
        "--create-config",
        action="store_true",
        help="Write example configuration and product data, then exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Do not connect to the printer, only show what would be printed",
    )
    parser.add_argument(
        "--daily-report",
        nargs="?",
        const="",
        metavar="DATE",
        help="Print the daily report (optionally for YYYY-MM-DD)",
    )
    parser.add_argument(
        "--monthly-report",
        nargs="?",
        const="",
        metavar="DATE",
        help="Print the monthly report for the month of YYYY-MM-DD (default current)",
    )
    parser.add_argument(
        "--monthly-report-summary",
        action="store_true",
        help="Print the summary variant of the monthly report",
    )
    parser.add_argument("--seed", type=int, help="Random seed for product selection")
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Print the daily report after each day without asking",
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging (shows HEX dump of all TX/RX frames)",
    )
    return parser.parse_args(argv)


def run(argv: Optional[list[str]] = None) -> None:
    """Console script entry point."""
    args = parse_args(argv)
    try:
        sys.exit(asyncio.run(main(args)))
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)


if __name__ == "__main__":
    run()
