"""Inventory guard.

The single safety check every cart line passes before stock is claimed.
``InventoryGuard.check`` reads the product row with ``for_update=True``
inside the caller's unit of work, so the stock it validates is the stock
the subsequent guarded decrement will see.  Read-only availability
queries build the guard with ``lock=False``.

Outcomes are evaluated in a fixed order and the first match wins:

1. ``PRODUCT_NOT_FOUND``
2. ``PRODUCT_INACTIVE``
3. ``INVALID_QUANTITY``  (requested quantity <= 0)
4. ``INSUFFICIENT_STOCK`` (requested + already reserved > stock)
5. ``AVAILABLE``
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Optional

import structlog

from modules.orders.exceptions import (
    InactiveProduct,
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
)

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class StockOutcome(StrEnum):
    AVAILABLE = "available"
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_INACTIVE = "product_inactive"
    INVALID_QUANTITY = "invalid_quantity"
    INSUFFICIENT_STOCK = "insufficient_stock"


@dataclass(frozen=True)
class StockCheck:
    """Result of a single guard evaluation."""

    outcome: StockOutcome
    product_id: Any
    requested: int
    available: int = 0
    product: Optional[Product] = None

    @property
    def ok(self) -> bool:
        return self.outcome == StockOutcome.AVAILABLE

    @property
    def message(self) -> str:
        name = self.product.name if self.product is not None else str(self.product_id)
        if self.outcome == StockOutcome.PRODUCT_NOT_FOUND:
            return f"Product with ID {self.product_id} not found."
        if self.outcome == StockOutcome.PRODUCT_INACTIVE:
            return f"Product '{name}' is not available."
        if self.outcome == StockOutcome.INVALID_QUANTITY:
            return f"Quantity for product '{name}' must be greater than zero."
        if self.outcome == StockOutcome.INSUFFICIENT_STOCK:
            return (
                f"Insufficient stock for product '{name}'. "
                f"Available: {self.available}, Requested: {self.requested}."
            )
        return f"{self.requested} x '{name}' available."

    def raise_for_status(self) -> Product:
        """Return the product when available, otherwise raise the matching error."""
        if self.outcome == StockOutcome.PRODUCT_NOT_FOUND:
            raise ProductNotFound(self.message)
        if self.outcome == StockOutcome.PRODUCT_INACTIVE:
            raise InactiveProduct(self.message)
        if self.outcome == StockOutcome.INVALID_QUANTITY:
            raise InvalidQuantity(self.message)
        if self.outcome == StockOutcome.INSUFFICIENT_STOCK:
            raise InsufficientStock(
                self.message, available=self.available, requested=self.requested
            )
        return self.product


class InventoryGuard:
    """Validates requested quantities against locked, current stock."""

    def __init__(self, products: IProductRepository, lock: bool = True) -> None:
        self._products = products
        self._lock = lock

    def check(self, product_id: Any, quantity: int, reserved: int = 0) -> StockCheck:
        """Evaluate one cart line.

        ``reserved`` is the quantity earlier lines of the same cart already
        claim from this product; it counts against the available stock.
        """
        product = self._products.find_one(id=product_id, for_update=self._lock)
        if product is None:
            result = StockCheck(StockOutcome.PRODUCT_NOT_FOUND, product_id, quantity)
        elif not product.is_active:
            result = StockCheck(
                StockOutcome.PRODUCT_INACTIVE, product_id, quantity, product=product
            )
        elif quantity <= 0:
            result = StockCheck(
                StockOutcome.INVALID_QUANTITY, product_id, quantity, product=product
            )
        else:
            available = max(product.stock_quantity - reserved, 0)
            outcome = (
                StockOutcome.AVAILABLE
                if quantity <= available
                else StockOutcome.INSUFFICIENT_STOCK
            )
            result = StockCheck(outcome, product_id, quantity, available, product)

        if not result.ok:
            logger.info(
                "inventory.rejected",
                product_id=str(product_id),
                outcome=result.outcome.value,
                requested=quantity,
                available=result.available,
            )
        return result
