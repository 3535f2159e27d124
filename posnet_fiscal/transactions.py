"""
Bank transaction CSV input.

Each line holds a date and an amount separated by a semicolon, e.g.
``2025-12-01; 197,99``. Amounts are converted exactly to minor units.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Union

from .exceptions import ConfigError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transaction:
    """Bank transaction: date (YYYY-MM-DD) and amount in minor units."""

    date: str
    amount: int


def parse_amount(text: str) -> int:
    """
    Parse "197,99" or "197.99" into minor units, rounding half up.

    Raises:
        ValueError: Not a number.
    """
    try:
        value = Decimal(text.strip().replace(",", "."))
    except InvalidOperation as e:
        raise ValueError(f"invalid amount: {text!r}") from e
    if not value.is_finite():
        raise ValueError(f"invalid amount: {text!r}")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_csv_file(path: Union[str, Path]) -> list[Transaction]:
    """
    Parse one CSV file.

    Malformed lines are skipped with a warning.

    Raises:
        ConfigError: File cannot be read.
    """
    try:
        content = Path(path).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"cannot open file {path}: {e}") from e

    transactions: list[Transaction] = []
    for line_num, raw_line in enumerate(content.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue

        parts = line.split(";")
        if len(parts) != 2:
            logger.warning(f"{path}:{line_num}: expected 'date; amount', skipping: {line}")
            continue

        date = parts[0].strip()
        try:
            amount = parse_amount(parts[1])
        except ValueError:
            logger.warning(f"{path}:{line_num}: cannot parse amount, skipping: {line}")
            continue

        transactions.append(Transaction(date=date, amount=amount))

    return transactions


def parse_csv_directory(path: Union[str, Path]) -> list[Transaction]:
    """
    Parse every *.csv file in a directory, in name order.

    Raises:
        ConfigError: No CSV files in the directory.
    """
    files = sorted(Path(path).glob("*.csv"))
    if not files:
        raise ConfigError(f"no CSV files found in directory {path}")

    transactions: list[Transaction] = []
    for file in files:
        try:
            transactions.extend(parse_csv_file(file))
        except ConfigError as e:
            logger.warning(f"Skipping {file}: {e}")
    return transactions


def load_transactions(path: Union[str, Path]) -> list[Transaction]:
    """Parse a CSV file or a directory of CSV files."""
    target = Path(path)
    if not target.exists():
        raise ConfigError(f"cannot access {path}")
    if target.is_dir():
        return parse_csv_directory(target)
    return parse_csv_file(target)


def group_by_date(transactions: list[Transaction]) -> dict[str, list[Transaction]]:
    """Group transactions by date, keeping input order within a day."""
    grouped: dict[str, list[Transaction]] = {}
    for t in transactions:
        grouped.setdefault(t.date, []).append(t)
    return grouped


def unique_dates(transactions: list[Transaction]) -> list[str]:
    """Sorted unique dates."""
    return sorted({t.date for t in transactions})
