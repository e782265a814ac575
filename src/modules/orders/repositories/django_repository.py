"""Django ORM implementations of the Order repositories.

Orders and their items are staged on the unit of work like any other
entity; ``DjangoUnitOfWork.commit`` persists the order before its items
because they are added in that order.
"""

from __future__ import annotations

from typing import Set

from modules.core.repositories.django_repository import DjangoRepository
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import (
    IOrderItemRepository,
    IOrderRepository,
)


class OrderDjangoRepository(DjangoRepository[Order], IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    model = Order

    def order_number_exists(self, order_number: str) -> bool:
        return self.exists(order_number=order_number)

    def order_numbers_with_prefix(self, prefix: str) -> Set[str]:
        return set(
            Order.objects.filter(order_number__startswith=prefix).values_list(
                "order_number", flat=True
            )
        )


class OrderItemDjangoRepository(DjangoRepository[OrderItem], IOrderItemRepository):
    """Concrete OrderItem repository backed by Django ORM."""

    model = OrderItem
