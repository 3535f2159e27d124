"""
Product catalog and stock bookkeeping.

Prices in the catalog are major units (zł) with a min/max range; the
selector resolves a single price in minor units. Stock is decremented
temporarily while searching and permanently after a printed receipt.
"""

import json
import logging
from collections import Counter
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterator, Union

from .exceptions import ConfigError, OutOfStockError, ProductNotFoundError
from .value_objects import SelectedProduct


logger = logging.getLogger(__name__)


def to_minor(amount: float) -> int:
    """Convert a major-unit amount to minor units."""
    return int(round(amount * 100))


@dataclass
class Product:
    """
    Catalog product.

    Attributes:
        name: Name printed on receipts.
        min_price: Lowest price in major units.
        max_price: Highest price in major units.
        stock: Remaining units.
        used: Units sold so far.
    """

    name: str
    min_price: float
    max_price: float
    stock: int
    used: int = 0

    @property
    def min_price_minor(self) -> int:
        return to_minor(self.min_price)

    @property
    def max_price_minor(self) -> int:
        return to_minor(self.max_price)

    def accepts_price(self, price: int) -> bool:
        """Check if a minor-unit price lies within the product range."""
        return self.min_price_minor <= price <= self.max_price_minor

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        try:
            return cls(
                name=str(data["name"]),
                min_price=float(data["min_price"]),
                max_price=float(data["max_price"]),
                stock=int(data["stock"]),
                used=int(data.get("used", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"invalid product entry {data!r}: {e}") from e


class ProductCatalog:
    """
    Mutable product catalog.

    Owned by the run; the selector borrows it for temporary reservations.
    """

    def __init__(self, products: list[Product]) -> None:
        self._products = list(products)

    @property
    def products(self) -> list[Product]:
        """Get all products in catalog order."""
        return self._products

    def __len__(self) -> int:
        return len(self._products)

    def available(self) -> list[Product]:
        """Products with stock left, as a new list."""
        return [p for p in self._products if p.stock > 0]

    def find(self, name: str) -> Product:
        """
        Find a product by name.

        Raises:
            ProductNotFoundError: No product with that name.
        """
        for product in self._products:
            if product.name == name:
                return product
        raise ProductNotFoundError(name)

    def stock_snapshot(self) -> dict[str, int]:
        """Current stock per product name."""
        return {p.name: p.stock for p in self._products}

    @contextmanager
    def reserve(self, product: Product) -> Iterator[Product]:
        """
        Temporarily take one unit of a product.

        The unit is returned when the block exits, on every exit path.
        """
        product.stock -= 1
        try:
            yield product
        finally:
            product.stock += 1

    def apply_sale(self, selected: list[SelectedProduct]) -> None:
        """
        Permanently decrement stock for a printed receipt.

        Shipping lines are skipped. Every product is checked before any
        stock changes.

        Raises:
            ProductNotFoundError: Selected product is not in the catalog.
            OutOfStockError: Not enough stock for all selected units.
        """
        counts = Counter(p.name for p in selected if not p.is_shipping)

        for name, count in counts.items():
            if self.find(name).stock < count:
                raise OutOfStockError(name)

        for name, count in counts.items():
            product = self.find(name)
            product.stock -= count
            product.used += count

    def validate(self) -> None:
        """
        Validate catalog data.

        Raises:
            ConfigError: Empty catalog or invalid product.
        """
        if not self._products:
            raise ConfigError("no products in catalog")

        seen: set[str] = set()
        for index, p in enumerate(self._products):
            if not p.name:
                raise ConfigError(f"product #{index}: missing name")
            if p.name in seen:
                raise ConfigError(f"product {p.name}: duplicate name")
            seen.add(p.name)
            if p.min_price < 0 or p.max_price < 0:
                raise ConfigError(f"product {p.name}: negative price")
            if p.min_price > p.max_price:
                raise ConfigError(f"product {p.name}: min_price > max_price")
            if p.stock < 0:
                raise ConfigError(f"product {p.name}: negative stock")

    def to_dict(self) -> dict[str, Any]:
        return {"products": [asdict(p) for p in self._products]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductCatalog":
        products = data.get("products") if isinstance(data, dict) else None
        if not isinstance(products, list):
            raise ConfigError("catalog must contain a 'products' list")
        return cls([Product.from_dict(item) for item in products])


# =============================================================================
# Persistence
# =============================================================================


def load_catalog(path: Union[str, Path]) -> ProductCatalog:
    """
    Load and validate a catalog JSON file.

    Raises:
        ConfigError: File missing, unreadable or invalid.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read catalog file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in catalog file {path}: {e}") from e

    catalog = ProductCatalog.from_dict(data)
    catalog.validate()
    logger.debug(f"Loaded {len(catalog)} products from {path}")
    return catalog


def save_catalog(catalog: ProductCatalog, path: Union[str, Path]) -> None:
    """Write the catalog with current stock and usage counters."""
    text = json.dumps(catalog.to_dict(), indent=2, ensure_ascii=False)
    Path(path).write_text(text + "\n", encoding="utf-8")
    logger.debug(f"Saved {len(catalog)} products to {path}")


def example_catalog() -> ProductCatalog:
    """Example catalog for a clothing shop."""
    return ProductCatalog([
        Product("Spodnie", 50, 90, 100),
        Product("Sukienka", 90, 150, 80),
        Product("Kombinezon", 150, 250, 50),
        Product("Kurtka", 250, 400, 40),
        Product("Bluzka", 0, 60, 150),
        Product("Perfumy", 50, 150, 60),
        Product("Majtki", 20, 50, 200),
        Product("Leginsy", 40, 60, 120),
        Product("Sweter", 90, 200, 70),
        Product("Akcesoria kosmetyczne", 0, 10, 228),
    ])
