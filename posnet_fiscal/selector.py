"""
Amount decomposition.

Chooses catalog products whose prices add up exactly to a target amount
(a bank transaction total). The search is a randomized recursive
backtracking over in-stock products, repeated up to a fixed number of
attempts. All amounts are integers in minor units.
"""

import logging
import random
from typing import Final, Optional

from .catalog import ProductCatalog
from .exceptions import AmountMismatchError, NoCombinationFoundError
from .value_objects import SelectedProduct, total_price


logger = logging.getLogger(__name__)


MAX_ATTEMPTS: Final[int] = 1000
MAX_DEPTH: Final[int] = 10  # Max products per receipt (without shipping)

EXACT_RESIDUAL_LIMIT: Final[int] = 150  # Below 1.50 zł price the remainder exactly
ADJUST_RESIDUAL_LIMIT: Final[int] = 500  # Avoid trailing lines under 5.00 zł
PRICE_RANGE_FLOOR: Final[float] = 0.7  # Draw prices from the top 30% of the range

DEFAULT_SHIPPING_NAME: Final[str] = "Wysyłka"


class ProductSelector:
    """
    Selects products for an exact amount.

    Attributes:
        catalog: Product catalog, borrowed for temporary stock reservations.
        rng: Random source for shipping, shuffling and price draws.
        shipping_chance: Probability of a shipping line, in percent.
        shipping_price: Shipping price in minor units.
    """

    def __init__(
        self,
        catalog: ProductCatalog,
        rng: random.Random,
        shipping_chance: int = 0,
        shipping_price: int = 0,
        shipping_name: str = DEFAULT_SHIPPING_NAME,
        max_attempts: int = MAX_ATTEMPTS,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self._catalog = catalog
        self._rng = rng
        self._shipping_chance = shipping_chance
        self._shipping_price = shipping_price
        self._shipping_name = shipping_name
        self._max_attempts = max_attempts
        self._max_depth = max_depth

    @property
    def catalog(self) -> ProductCatalog:
        """Get product catalog."""
        return self._catalog

    def select_products(self, amount: int) -> list[SelectedProduct]:
        """
        Select products summing exactly to an amount.

        Args:
            amount: Target amount in minor units.

        Returns:
            Selected products, shipping first when drawn.

        Raises:
            NoCombinationFoundError: No combination within the attempt budget.
            AmountMismatchError: Result does not sum to the amount.
        """
        selected: list[SelectedProduct] = []
        remaining = amount

        if self._rng.randrange(100) < self._shipping_chance and remaining >= self._shipping_price:
            selected.append(SelectedProduct(
                name=self._shipping_name,
                price=self._shipping_price,
                is_shipping=True,
            ))
            remaining -= self._shipping_price

        selected.extend(self.find_combination(remaining))

        actual = total_price(selected)
        if actual != amount:
            raise AmountMismatchError(amount, actual)

        logger.debug(f"Selected {len(selected)} products for {amount / 100:.2f}")
        return selected

    def find_combination(self, amount: int) -> list[SelectedProduct]:
        """
        Run independent search attempts until one sums exactly to the amount.

        Raises:
            NoCombinationFoundError: All attempts failed.
        """
        if amount <= 0:
            return []

        for attempt in range(self._max_attempts):
            result = self.search(amount, self._max_depth)
            if result is not None and total_price(result) == amount:
                if attempt:
                    logger.debug(f"Combination for {amount} found on attempt {attempt + 1}")
                return result

        raise NoCombinationFoundError(amount, self._max_attempts)

    def search(self, remaining: int, max_depth: int) -> Optional[list[SelectedProduct]]:
        """
        Randomized recursive search for one combination.

        Stock of every product is the same before and after the call.

        Args:
            remaining: Amount left to cover, in minor units.
            max_depth: Products still allowed on this path.

        Returns:
            Products covering the amount, or None when this path fails.
        """
        if remaining <= 0:
            return []
        if max_depth <= 0:
            return None

        candidates = self._catalog.available()
        self._rng.shuffle(candidates)

        for product in candidates:
            min_price = product.min_price_minor
            if min_price > remaining or product.stock <= 0:
                continue

            price = self._draw_price(min_price, product.max_price_minor, remaining)
            if price is None:
                continue

            residual = remaining - price

            # Close out with the current product instead of a tiny extra line
            if 0 < residual < ADJUST_RESIDUAL_LIMIT and product.accepts_price(remaining):
                return [SelectedProduct(product.name, remaining)]

            chosen = SelectedProduct(product.name, price)
            if residual <= 0:
                return [chosen]

            with self._catalog.reserve(product):
                rest = self.search(residual, max_depth - 1)
            if rest is None:
                continue
            return [chosen] + rest

        return None

    def _draw_price(self, min_price: int, max_price: int, remaining: int) -> Optional[int]:
        """
        Pick a price for a product, or None when it cannot fit.

        Small remainders inside the range are taken exactly; otherwise the
        price comes from the top 30% of [min, min(max, remaining)].
        """
        if remaining < EXACT_RESIDUAL_LIMIT and min_price <= remaining <= max_price:
            return remaining

        upper = min(max_price, remaining)
        if upper < min_price:
            return None

        lower = min_price + int((upper - min_price) * PRICE_RANGE_FLOOR)
        if lower >= upper:
            return upper
        return self._rng.randint(lower, upper)

    def commit(self, selected: list[SelectedProduct]) -> None:
        """Apply the permanent stock decrement for a printed receipt."""
        self._catalog.apply_sale(selected)
