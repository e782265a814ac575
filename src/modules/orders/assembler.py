"""Order assembler.

Turns a cart into a priced, unpersisted ``Order`` with ``OrderItem``
snapshots.  Fail-fast and all-or-nothing: the first rejected line raises
and nothing has been staged on the unit of work at that point.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Sequence

import structlog

from modules.core.models import parse_uuid
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import EmptyOrder
from modules.orders.models import Order, OrderItem

if TYPE_CHECKING:
    from modules.core.repositories.interfaces import IUnitOfWork
    from modules.orders.inventory import InventoryGuard

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    product_id: Any
    quantity: int


@dataclass
class AssembledOrder:
    """Unsaved order aggregate plus the stock each product must give up."""

    order: Order
    items: List[OrderItem]
    reservations: Dict[Any, int] = field(default_factory=dict)


class OrderAssembler:
    def __init__(self, uow: IUnitOfWork, guard: InventoryGuard) -> None:
        self._uow = uow
        self._guard = guard

    def assemble(self, user: Any, lines: Sequence[CartLine]) -> AssembledOrder:
        """Validate and price ``lines`` in input order.

        Every distinct product row is locked up front in ascending primary
        key order so that two carts sharing products always acquire their
        locks in the same sequence.

        Raises:
            EmptyOrder: the cart has no lines.
            ProductNotFound, InactiveProduct, InvalidQuantity,
            InsufficientStock: from the first rejected line.
        """
        if not lines:
            raise EmptyOrder("Order must contain at least one item.")

        keys = [parse_uuid(line.product_id) or line.product_id for line in lines]
        lockable = sorted({key for key in keys if parse_uuid(key)}, key=str)
        if lockable:
            self._uow.products.find_many(
                order_by=("id",), for_update=True, id__in=lockable
            )

        order = Order(user=user, status=OrderStatus.PENDING)
        items: List[OrderItem] = []
        reserved: Dict[Any, int] = defaultdict(int)
        total = Decimal("0.00")

        for key, line in zip(keys, lines):
            product = self._guard.check(
                key, line.quantity, reserved=reserved[key]
            ).raise_for_status()

            line_total = product.price * line.quantity
            items.append(
                OrderItem(
                    order=order,
                    product=product,
                    product_name=product.name,
                    quantity=line.quantity,
                    unit_price=product.price,
                    total_price=line_total,
                )
            )
            reserved[key] += line.quantity
            total += line_total

        order.total_amount = total
        logger.debug(
            "order.assembled",
            lines=len(items),
            products=len(reserved),
            total=str(total),
        )
        return AssembledOrder(order=order, items=items, reservations=dict(reserved))
