"""
Unit tests for receipt value objects.
"""

import pytest

from posnet_fiscal.exceptions import ReceiptError, ReceiptTotalMismatchError
from posnet_fiscal.value_objects import Receipt, ReceiptLine, SelectedProduct, total_price


class TestReceiptLine:
    """Tests for line validation and value."""

    def test_value_truncated(self):
        assert ReceiptLine("Majtki", 999, quantity=2.5).value == 2497
        assert ReceiptLine("Spodnie", 5999).value == 5999

    @pytest.mark.parametrize("kwargs", [
        {"name": "", "price": 100},
        {"name": "x" * 81, "price": 100},
        {"name": "Spodnie", "price": -1},
        {"name": "Spodnie", "price": 100, "quantity": 0},
        {"name": "Spodnie", "price": 100, "quantity": 0.0004},
        {"name": "Spodnie", "price": 100, "vat_rate": 7},
    ])
    def test_invalid_line(self, kwargs):
        with pytest.raises(ReceiptError):
            ReceiptLine(**kwargs)

    def test_name_at_limit(self):
        assert ReceiptLine("x" * 80, 100).name == "x" * 80

    def test_smallest_quantity(self):
        assert ReceiptLine("Guzik", 100000, quantity=0.001).value == 100

    def test_effective_vat_rate(self):
        assert ReceiptLine("a", 1).effective_vat_rate(2) == 2
        assert ReceiptLine("a", 1, vat_rate=-1).effective_vat_rate(2) == 2
        assert ReceiptLine("a", 1, vat_rate=4).effective_vat_rate(2) == 4


class TestReceipt:
    """Tests for receipt construction and validation."""

    def test_from_products(self):
        products = [
            SelectedProduct("Wysyłka", 1999, is_shipping=True),
            SelectedProduct("Spodnie", 5999),
        ]

        receipt = Receipt.from_products(products, vat_rate=1)

        assert receipt.total == 7998 == total_price(products)
        assert [line.name for line in receipt.lines] == ["Wysyłka", "Spodnie"]
        assert all(line.vat_rate == 1 for line in receipt.lines)
        receipt.validate()

    def test_empty(self):
        with pytest.raises(ReceiptError):
            Receipt.from_products([]).validate()

    def test_total_mismatch(self):
        receipt = Receipt(lines=(ReceiptLine("Majtki", 999, quantity=2.5),), total=2498)

        with pytest.raises(ReceiptTotalMismatchError):
            receipt.validate()
