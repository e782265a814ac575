"""Unit tests for InventoryGuard.

Covers the fixed evaluation order (not found, inactive, invalid
quantity, insufficient stock), cumulative reservations and the error
each outcome raises.
"""

from __future__ import annotations

import uuid

import pytest

from modules.core.exceptions import ErrorCategory
from modules.core.repositories.unit_of_work import DjangoUnitOfWork
from modules.orders.exceptions import (
    InactiveProduct,
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
)
from modules.orders.inventory import InventoryGuard, StockOutcome

pytestmark = pytest.mark.unit


@pytest.fixture()
def guard():
    with DjangoUnitOfWork() as uow:
        yield InventoryGuard(uow.products)


class TestInventoryGuard:
    def test_available_returns_product(self, guard, make_product):
        product = make_product(stock=5)
        result = guard.check(product.id, 5)
        assert result.ok
        assert result.outcome == StockOutcome.AVAILABLE
        assert result.available == 5
        assert result.raise_for_status() == product

    def test_unknown_product(self, guard):
        missing = uuid.uuid4()
        result = guard.check(missing, 1)
        assert result.outcome == StockOutcome.PRODUCT_NOT_FOUND
        with pytest.raises(ProductNotFound, match=str(missing)):
            result.raise_for_status()

    def test_malformed_id_is_not_found(self, guard):
        result = guard.check("not-a-uuid", 1)
        assert result.outcome == StockOutcome.PRODUCT_NOT_FOUND

    def test_inactive_product(self, guard, make_product):
        product = make_product(name="Retired", stock=10, is_active=False)
        result = guard.check(product.id, 1)
        assert result.outcome == StockOutcome.PRODUCT_INACTIVE
        with pytest.raises(InactiveProduct, match="'Retired' is not available"):
            result.raise_for_status()

    def test_inactive_wins_over_bad_quantity(self, guard, make_product):
        product = make_product(stock=10, is_active=False)
        assert guard.check(product.id, 0).outcome == StockOutcome.PRODUCT_INACTIVE

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity(self, guard, make_product, quantity):
        product = make_product(stock=10)
        result = guard.check(product.id, quantity)
        assert result.outcome == StockOutcome.INVALID_QUANTITY
        with pytest.raises(InvalidQuantity) as exc_info:
            result.raise_for_status()
        assert exc_info.value.category == ErrorCategory.VALIDATION

    def test_insufficient_stock_reports_numbers(self, guard, make_product):
        product = make_product(name="Monitor", stock=3)
        result = guard.check(product.id, 4)
        assert result.outcome == StockOutcome.INSUFFICIENT_STOCK
        with pytest.raises(InsufficientStock) as exc_info:
            result.raise_for_status()
        assert exc_info.value.available == 3
        assert exc_info.value.requested == 4
        assert str(exc_info.value) == (
            "Insufficient stock for product 'Monitor'. Available: 3, Requested: 4."
        )

    def test_reserved_quantity_counts_against_stock(self, guard, make_product):
        product = make_product(stock=5)
        assert guard.check(product.id, 2, reserved=3).ok
        result = guard.check(product.id, 3, reserved=3)
        assert result.outcome == StockOutcome.INSUFFICIENT_STOCK
        assert result.available == 2

    def test_check_does_not_touch_stock(self, guard, make_product):
        product = make_product(stock=5)
        guard.check(product.id, 5)
        product.refresh_from_db()
        assert product.stock_quantity == 5
