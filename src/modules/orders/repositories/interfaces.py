"""Order repository interfaces.

Extend ``IRepository`` with the look-ups the order number generator
needs.  The Service Layer depends exclusively on these contracts (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Set

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    @abstractmethod
    def order_number_exists(self, order_number: str) -> bool:
        """Return ``True`` if any order already carries ``order_number``."""

    @abstractmethod
    def order_numbers_with_prefix(self, prefix: str) -> Set[str]:
        """Return every stored order number starting with ``prefix``."""


class IOrderItemRepository(IRepository["OrderItem"]):
    """Repository contract for order lines (always staged with their order)."""
