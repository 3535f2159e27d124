"""
Tests for amount decomposition.
"""

import random

import pytest

from posnet_fiscal.catalog import Product, ProductCatalog, example_catalog
from posnet_fiscal.exceptions import NoCombinationFoundError, OutOfStockError
from posnet_fiscal.selector import ProductSelector
from posnet_fiscal.value_objects import total_price


class TestSelectProducts:
    """Tests for exact selection."""

    @pytest.mark.parametrize("seed", range(10))
    @pytest.mark.parametrize("amount", [1, 101, 1999, 4550, 12345, 35000])
    def test_sum_is_exact(self, seed, amount):
        catalog = example_catalog()
        before = catalog.stock_snapshot()
        selector = ProductSelector(catalog, random.Random(seed))

        products = selector.select_products(amount)

        assert total_price(products) == amount
        assert 1 <= len(products) <= 10
        assert all(p.price > 0 for p in products)
        assert all(catalog.find(p.name).accepts_price(p.price) for p in products)
        assert catalog.stock_snapshot() == before

    def test_amount_1999_without_shipping(self, catalog, rng):
        selector = ProductSelector(catalog, rng, shipping_chance=0)

        products = selector.select_products(1999)

        assert total_price(products) == 1999
        assert not any(p.is_shipping for p in products)

    def test_same_seed_same_selection(self):
        first = ProductSelector(example_catalog(), random.Random(7)).select_products(24999)
        second = ProductSelector(example_catalog(), random.Random(7)).select_products(24999)

        assert first == second

    def test_zero_amount(self, catalog, rng):
        assert ProductSelector(catalog, rng).select_products(0) == []

    def test_impossible_amount(self, rng, single_product_catalog):
        """Test amount below every product minimum."""
        catalog = single_product_catalog(50, 60, stock=5)
        selector = ProductSelector(catalog, rng)

        with pytest.raises(NoCombinationFoundError) as exc_info:
            selector.select_products(1000)

        assert exc_info.value.amount == 1000
        assert exc_info.value.attempts == 1000
        assert catalog.stock_snapshot() == {"Towar": 5}


class TestShipping:
    """Tests for the shipping line."""

    def test_shipping_first(self, catalog, rng):
        selector = ProductSelector(catalog, rng, shipping_chance=100, shipping_price=1999)

        products = selector.select_products(5000)

        assert products[0].is_shipping
        assert products[0].name == "Wysyłka"
        assert products[0].price == 1999
        assert total_price(products) == 5000
        assert not any(p.is_shipping for p in products[1:])

    def test_shipping_exactly_amount(self, catalog, rng):
        selector = ProductSelector(catalog, rng, shipping_chance=100, shipping_price=1999)

        products = selector.select_products(1999)

        assert len(products) == 1
        assert products[0].is_shipping

    def test_no_shipping_below_price(self, catalog, rng):
        selector = ProductSelector(catalog, rng, shipping_chance=100, shipping_price=1999)

        products = selector.select_products(1000)

        assert not any(p.is_shipping for p in products)
        assert total_price(products) == 1000

    def test_shipping_never_drawn(self, catalog, rng):
        selector = ProductSelector(catalog, rng, shipping_chance=0, shipping_price=1)

        for _ in range(20):
            assert not any(p.is_shipping for p in selector.select_products(3000))


class TestSearch:
    """Tests for the recursive search."""

    def test_small_remainder_taken_exactly(self, rng, single_product_catalog):
        catalog = single_product_catalog(0, 60, stock=1)
        selector = ProductSelector(catalog, rng)

        result = selector.search(149, max_depth=10)

        assert [(p.name, p.price) for p in result] == [("Towar", 149)]

    def test_residual_folded_into_current_product(self, single_product_catalog):
        """Test a remainder under 5.00 zł is absorbed when the range allows it."""
        catalog = single_product_catalog(10, 30, stock=1)

        for seed in range(20):
            selector = ProductSelector(catalog, random.Random(seed))
            result = selector.search(2500, max_depth=10)
            assert [(p.name, p.price) for p in result] == [("Towar", 2500)]

    def test_stock_limits_units(self, rng, single_product_catalog):
        """Test fixed 10.00 zł product needs three units for 30.00 zł."""
        catalog = single_product_catalog(10, 10, stock=3)
        selector = ProductSelector(catalog, rng)

        result = selector.search(3000, max_depth=10)

        assert [p.price for p in result] == [1000, 1000, 1000]
        assert catalog.stock_snapshot() == {"Towar": 3}

    def test_insufficient_stock(self, rng, single_product_catalog):
        catalog = single_product_catalog(10, 10, stock=2)
        selector = ProductSelector(catalog, rng, max_attempts=20)

        assert selector.search(3000, max_depth=10) is None
        assert catalog.stock_snapshot() == {"Towar": 2}
        with pytest.raises(NoCombinationFoundError):
            selector.find_combination(3000)

    def test_depth_limit(self, rng, single_product_catalog):
        catalog = single_product_catalog(10, 10, stock=10)
        selector = ProductSelector(catalog, rng, max_attempts=5, max_depth=2)

        with pytest.raises(NoCombinationFoundError):
            selector.find_combination(3000)

    def test_failed_search_restores_stock(self, rng):
        catalog = ProductCatalog([
            Product("A", 30, 30, 2),
            Product("B", 45, 45, 1),
        ])
        selector = ProductSelector(catalog, rng)

        assert selector.search(10000, max_depth=10) is None
        assert catalog.stock_snapshot() == {"A": 2, "B": 1}

    def test_out_of_stock_skipped(self, rng):
        catalog = ProductCatalog([
            Product("Pusty", 0, 100, 0),
            Product("Pelny", 0, 100, 1),
        ])
        selector = ProductSelector(catalog, rng)

        result = selector.search(100, max_depth=10)

        assert [p.name for p in result] == ["Pelny"]


class TestCommit:
    """Tests for permanent stock updates."""

    def test_commit_books_sale(self, catalog, rng):
        selector = ProductSelector(catalog, rng, shipping_chance=100, shipping_price=1999)
        before = catalog.stock_snapshot()

        products = selector.select_products(15000)
        selector.commit(products)

        sold = [p for p in products if not p.is_shipping]
        after = catalog.stock_snapshot()
        assert sum(before.values()) - sum(after.values()) == len(sold)
        assert sum(p.used for p in catalog.products) == len(sold)

    def test_commit_out_of_stock(self, rng, single_product_catalog):
        catalog = single_product_catalog(10, 10, stock=1)
        selector = ProductSelector(catalog, rng)
        products = selector.select_products(1000)
        catalog.find("Towar").stock = 0

        with pytest.raises(OutOfStockError):
            selector.commit(products)
