"""Product repository interface.

Extends ``IRepository[Product]`` with the name look-up required by the
uniqueness rule and with the guarded stock adjustment used by the order
lifecycle.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Product]:
        """Retrieve a product by name (trimmed, case-insensitive)."""

    @abstractmethod
    def adjust_stock(self, product_id: Any, delta: int) -> None:
        """Stage ``stock_quantity += delta``.

        Negative deltas are applied only while ``stock_quantity >= -delta``
        at flush time; when no row matches, ``commit`` raises
        ``ConcurrencyConflict`` and nothing in the unit of work persists.
        Positive deltas (restocks) are unconditional.
        """

    @abstractmethod
    def is_referenced(self, product_id: Any) -> bool:
        """Return ``True`` when any order item points at the product."""
