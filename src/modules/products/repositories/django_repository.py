"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` on top of ``DjangoRepository``.  Stock
changes are relative ``F()`` updates staged on the unit of work; the
decrement carries its own ``stock_quantity >= n`` guard so an over-claim
cannot slip through even where ``SELECT ... FOR UPDATE`` is a no-op.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from django.db.models import F
from django.utils import timezone

from modules.core.exceptions import ConcurrencyConflict
from modules.core.repositories.django_repository import DjangoRepository, StagedChange
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(DjangoRepository[Product], IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    model = Product

    def get_by_name(self, name: str) -> Optional[Product]:
        return self.find_one(name__iexact=(name or "").strip())

    def is_referenced(self, product_id: Any) -> bool:
        return self.exists(id=product_id, order_items__isnull=False)

    def adjust_stock(self, product_id: Any, delta: int) -> None:
        if delta == 0:
            return

        def apply() -> None:
            queryset = Product.objects.filter(id=product_id)
            if delta < 0:
                queryset = queryset.filter(stock_quantity__gte=-delta)
            updated = queryset.update(
                stock_quantity=F("stock_quantity") + delta,
                updated_at=timezone.now(),
            )
            if not updated:
                logger.warning(
                    "product.stock_conflict",
                    product_id=str(product_id),
                    delta=delta,
                )
                raise ConcurrencyConflict(
                    f"Stock for product {product_id} changed concurrently."
                )
            logger.info(
                "product.stock_adjusted",
                product_id=str(product_id),
                delta=delta,
            )

        self._uow.stage(
            StagedChange(action="stock", label="product.stock_adjusted", apply=apply)
        )
