"""Unit tests for InventoryRecord and the availability check."""

import pytest

from grocer.domain.exceptions import ValidationError
from grocer.domain.model.inventory import (
    InventoryRecord,
    StockAvailability,
    require_positive_quantity,
)


class TestInventoryRecord:

    def test_available_is_quantity_minus_reserved(self):
        record = InventoryRecord("s1", "v1", quantity=10, reserved=4)
        assert record.available == 6

    def test_new_record_is_empty(self):
        record = InventoryRecord("s1", "v1")
        assert record.quantity == 0
        assert record.reserved == 0
        assert record.available == 0

    def test_can_supply_exact_available(self):
        record = InventoryRecord("s1", "v1", quantity=5, reserved=2)
        assert record.can_supply(3)
        assert not record.can_supply(4)


class TestStockAvailability:

    def test_missing_record(self):
        result = StockAvailability.evaluate(None, 1)
        assert result.available is False
        assert result.reason == "Product not available in this store"
        assert result.inventory is None

    def test_insufficient_stock_reports_numbers(self):
        record = InventoryRecord("s1", "v1", quantity=5, reserved=3)
        result = StockAvailability.evaluate(record, 3)
        assert result.available is False
        assert result.reason == "Insufficient stock. Available: 2, Requested: 3"
        assert result.inventory is record

    def test_enough_stock(self):
        record = InventoryRecord("s1", "v1", quantity=5, reserved=3)
        result = StockAvailability.evaluate(record, 2)
        assert result.available is True
        assert result.reason == "Stock available"


class TestRequirePositiveQuantity:

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_rejected(self, value):
        with pytest.raises(ValidationError, match="greater than 0"):
            require_positive_quantity(value)

    @pytest.mark.parametrize("value", [1.5, "3", True])
    def test_non_integer_rejected(self, value):
        with pytest.raises(ValidationError, match="must be an integer"):
            require_positive_quantity(value)
