"""
Value Objects for receipts and product selection.

All amounts are integers in minor currency units (grosze).
"""

from dataclasses import dataclass, field
from typing import Optional

from .constants import MAX_LINE_NAME_LENGTH, MAX_VAT_RATE, MIN_VAT_RATE
from .exceptions import ReceiptError, ReceiptTotalMismatchError


# =============================================================================
# Product Selection
# =============================================================================


@dataclass(frozen=True)
class SelectedProduct:
    """
    Product chosen by the selector with a single resolved price.

    Attributes:
        name: Product name printed on the receipt.
        price: Price in minor units.
        is_shipping: True for the synthetic shipping line (consumes no stock).
    """

    name: str
    price: int
    is_shipping: bool = False


def total_price(products: list[SelectedProduct]) -> int:
    """Sum of selected product prices in minor units."""
    return sum(p.price for p in products)


# =============================================================================
# Receipt
# =============================================================================


@dataclass(frozen=True)
class ReceiptLine:
    """
    Single receipt line.

    Attributes:
        name: Product name, at most 80 characters.
        price: Unit price in minor units.
        quantity: Quantity, printed with up to 3 decimal places.
        vat_rate: VAT rate index 0-6, None or negative for the session default.
    """

    name: str
    price: int
    quantity: float = 1.0
    vat_rate: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate the line."""
        if not self.name:
            raise ReceiptError("receipt line name is empty")
        if len(self.name) > MAX_LINE_NAME_LENGTH:
            raise ReceiptError(
                f"receipt line name longer than {MAX_LINE_NAME_LENGTH} characters: "
                f"{self.name!r}"
            )
        if self.price < 0:
            raise ReceiptError(f"negative price for {self.name!r}: {self.price}")
        if self.quantity <= 0:
            raise ReceiptError(f"quantity must be positive for {self.name!r}")
        if float(f"{self.quantity:.3f}") == 0:
            raise ReceiptError(
                f"quantity rounds to zero at 3 decimals for {self.name!r}: {self.quantity}"
            )
        if self.vat_rate is not None and self.vat_rate > MAX_VAT_RATE:
            raise ReceiptError(f"invalid VAT rate for {self.name!r}: {self.vat_rate}")

    @property
    def value(self) -> int:
        """Line value: price x quantity truncated toward zero."""
        return int(self.price * self.quantity)

    def effective_vat_rate(self, default: int) -> int:
        """Line VAT rate, or the default when unset."""
        if self.vat_rate is None or self.vat_rate < MIN_VAT_RATE:
            return default
        return self.vat_rate


@dataclass(frozen=True)
class Receipt:
    """
    Complete receipt.

    Attributes:
        lines: Ordered receipt lines.
        total: Receipt total in minor units.
    """

    lines: tuple[ReceiptLine, ...] = field(default_factory=tuple)
    total: int = 0

    @classmethod
    def from_products(
        cls,
        products: list[SelectedProduct],
        vat_rate: Optional[int] = None,
    ) -> "Receipt":
        """
        Build a receipt with one line per selected product.

        Args:
            products: Selected products.
            vat_rate: VAT rate for every line, None for the session default.

        Returns:
            Receipt whose total is the sum of product prices.
        """
        lines = tuple(
            ReceiptLine(name=p.name, price=p.price, quantity=1.0, vat_rate=vat_rate)
            for p in products
        )
        return cls(lines=lines, total=total_price(products))

    @property
    def lines_total(self) -> int:
        """Sum of line values."""
        return sum(line.value for line in self.lines)

    def validate(self) -> None:
        """
        Check the receipt before anything is sent.

        Raises:
            ReceiptError: Receipt has no lines.
            ReceiptTotalMismatchError: Total differs from the sum of lines.
        """
        if not self.lines:
            raise ReceiptError("receipt has no lines")
        actual = self.lines_total
        if actual != self.total:
            raise ReceiptTotalMismatchError(self.total, actual)
