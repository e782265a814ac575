"""Order service layer (Use Cases).

Orchestrates order creation, retrieval, cancellation and the
administrative status change.  Every write runs inside one
``IUnitOfWork`` and ends in exactly one ``commit``.

Business rules enforced:
- Products must exist, be active and have enough stock for every line
  (``InventoryGuard``); the first failing line aborts the order.
- Stock is decremented by guarded relative updates staged with the
  order, so an order and its decrements land together or not at all.
- Only the owner may read or cancel an order.
- Only ``PENDING`` orders can be cancelled; cancelling restores exactly
  the quantity of every line.
- Administrative status changes follow ``VALID_TRANSITIONS`` and never
  target ``CANCELLED``.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

import structlog
from django.conf import settings

from modules.core.exceptions import (
    ConcurrencyConflict,
    IntegrityConflict,
    TransientStoreError,
)
from modules.core.models import parse_uuid
from modules.core.repositories.interfaces import IUnitOfWork
from modules.core.repositories.unit_of_work import DjangoUnitOfWork
from modules.orders.assembler import CartLine, OrderAssembler
from modules.orders.constants import ORDER_CREATE_MAX_ATTEMPTS, OrderStatus
from modules.orders.dtos import OrderListDTO, OrderOutputDTO, OrderSummaryDTO
from modules.orders.exceptions import (
    InvalidOrderStatus,
    InvalidStatusTransition,
    OrderAccessDenied,
    OrderAlreadyCancelled,
    OrderNotCancellable,
    OrderNotFound,
    UserNotFound,
)
from modules.orders.inventory import InventoryGuard
from modules.orders.numbering import OrderNumberGenerator

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)

ORDER_DETAIL_INCLUDES = ("user", "items")


class OrderService:
    """Application service for Order use-cases.

    Receives a unit-of-work factory and an order number generator via
    constructor injection (DIP).  Each operation builds a fresh unit of
    work, so one service instance can be shared by concurrent requests.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork] = DjangoUnitOfWork,
        number_generator: Optional[OrderNumberGenerator] = None,
        max_create_attempts: Optional[int] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._numbers = number_generator or OrderNumberGenerator()
        self._max_create_attempts = max(
            1,
            max_create_attempts
            if max_create_attempts is not None
            else getattr(settings, "ORDER_CREATE_MAX_ATTEMPTS", ORDER_CREATE_MAX_ATTEMPTS),
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, user_id: Any, lines: Sequence[CartLine]) -> OrderOutputDTO:
        """Create an order and decrement stock for every line atomically.

        A lost race on stock (``ConcurrencyConflict``) or on the order
        number (``IntegrityConflict``) rolls the attempt back and starts
        over; the retry re-runs the guard, so an order that no longer fits
        fails with ``InsufficientStock``.

        Raises:
            UserNotFound: the user does not exist.
            EmptyOrder: the cart is empty.
            ProductNotFound, InactiveProduct, InvalidQuantity,
            InsufficientStock: a line was rejected.
            TransientStoreError: every attempt lost a race.
        """
        log = logger.bind(user_id=str(user_id), lines=len(lines))
        log.info("order.creation_started")

        attempt = 1
        while True:
            try:
                return self._create_once(user_id, lines, log)
            except (ConcurrencyConflict, IntegrityConflict) as exc:
                if attempt >= self._max_create_attempts:
                    log.error(
                        "order.creation_exhausted",
                        attempts=attempt,
                        reason=type(exc).__name__,
                    )
                    raise TransientStoreError(
                        "The order could not be placed because of concurrent "
                        "updates. Please retry."
                    ) from exc
                log.warning(
                    "order.creation_retry",
                    attempt=attempt,
                    reason=type(exc).__name__,
                )
                attempt += 1

    def _create_once(
        self, user_id: Any, lines: Sequence[CartLine], log: Any
    ) -> OrderOutputDTO:
        with self._uow_factory() as uow:
            user = uow.users.find_one(pk=user_id)
            if user is None:
                raise UserNotFound(f"User {user_id} not found.")

            assembled = OrderAssembler(uow, InventoryGuard(uow.products)).assemble(
                user, lines
            )
            order = assembled.order
            order.order_number = self._numbers.generate(uow.orders)

            uow.orders.add(order)
            for item in assembled.items:
                uow.order_items.add(item)
            for product_id, quantity in sorted(
                assembled.reservations.items(), key=lambda pair: str(pair[0])
            ):
                uow.products.adjust_stock(product_id, -quantity)
            uow.commit()

            created = uow.orders.find_one(id=order.id, includes=ORDER_DETAIL_INCLUDES)

        for product_id, quantity in assembled.reservations.items():
            log.info("order.stock_reserved", product_id=str(product_id), quantity=quantity)
        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total_amount=str(order.total_amount),
        )
        return OrderOutputDTO.from_entity(created)

    def cancel_order(self, user_id: Any, order_id: Any) -> OrderOutputDTO:
        """Cancel a pending order and restore the stock of every line.

        The order row is locked first, so two concurrent cancellations
        cannot both see ``PENDING`` and restock twice.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: caller is not the owner.
            OrderAlreadyCancelled: order was already cancelled.
            OrderNotCancellable: order is past ``PENDING``.
        """
        log = logger.bind(order_id=str(order_id), user_id=str(user_id))

        with self._uow_factory() as uow:
            order = uow.orders.find_one(id=order_id, for_update=True)
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")
            if not _owned_by(order, user_id):
                log.warning("order.cancel_forbidden")
                raise OrderAccessDenied("You are not allowed to cancel this order.")
            if order.status == OrderStatus.CANCELLED:
                raise OrderAlreadyCancelled("Order is already cancelled.")
            if not order.can_transition_to(OrderStatus.CANCELLED):
                log.warning("order.cancel_not_allowed", current_status=order.status)
                raise OrderNotCancellable(
                    f"Cannot cancel order with status '{order.status}'. "
                    "Only pending orders can be cancelled."
                )

            restock: Dict[Any, int] = defaultdict(int)
            for item in uow.order_items.find_many(order_id=order.id):
                restock[item.product_id] += item.quantity

            order.status = OrderStatus.CANCELLED
            uow.orders.update(order, fields=["status"])
            for product_id, quantity in sorted(
                restock.items(), key=lambda pair: str(pair[0])
            ):
                uow.products.adjust_stock(product_id, quantity)
            uow.commit()

            cancelled = uow.orders.find_one(id=order.id, includes=ORDER_DETAIL_INCLUDES)

        for product_id, quantity in restock.items():
            log.info("order.stock_released", product_id=str(product_id), quantity=quantity)
        log.info("order.cancelled")
        return OrderOutputDTO.from_entity(cancelled)

    def update_status(self, order_id: Any, new_status: str) -> OrderOutputDTO:
        """Administrative status change (no ownership check).

        Raises:
            InvalidOrderStatus: unknown status, or ``CANCELLED`` as target.
            OrderNotFound: order does not exist.
            InvalidStatusTransition: the order is cancelled.
        """
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise InvalidOrderStatus(
                f"Invalid order status '{new_status}'. Allowed: "
                + ", ".join(OrderStatus.values)
                + "."
            ) from None

        log = logger.bind(order_id=str(order_id), new_status=target.value)

        with self._uow_factory() as uow:
            order = uow.orders.find_one(id=order_id, for_update=True)
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")
            if order.is_terminal:
                log.warning("order.invalid_transition", current_status=order.status)
                raise InvalidStatusTransition(
                    f"Cannot change the status of a {order.status} order."
                )
            if target == OrderStatus.CANCELLED:
                raise InvalidOrderStatus(
                    "Orders are cancelled through the cancel operation, "
                    "which also restores stock."
                )
            if not order.can_transition_to(target):
                log.warning("order.invalid_transition", current_status=order.status)
                raise InvalidStatusTransition(
                    f"Cannot transition from {order.status} to {target}."
                )

            old_status = order.status
            order.status = target
            uow.orders.update(order, fields=["status"])
            uow.commit()

            updated = uow.orders.find_one(id=order.id, includes=ORDER_DETAIL_INCLUDES)

        log.info("order.status_updated", old_status=old_status)
        return OrderOutputDTO.from_entity(updated)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, user_id: Any, reference: str) -> OrderOutputDTO:
        """Fetch one order by UUID or by order number.

        Raises:
            OrderNotFound: no order matches ``reference``.
            OrderAccessDenied: the order belongs to someone else.
        """
        reference = str(reference).strip()
        order_id = parse_uuid(reference)
        lookup = {"id": order_id} if order_id else {"order_number": reference}

        order = self._uow_factory().orders.find_one(
            includes=ORDER_DETAIL_INCLUDES, **lookup
        )
        if not order:
            raise OrderNotFound(f"Order '{reference}' not found.")
        if not _owned_by(order, user_id):
            logger.warning(
                "order.read_forbidden", order_id=str(order.id), user_id=str(user_id)
            )
            raise OrderAccessDenied("You are not allowed to view this order.")
        return OrderOutputDTO.from_entity(order)

    def list_user_orders(self, user_id: Any) -> OrderListDTO:
        """Summaries of the user's orders, newest first."""
        orders: List[Order] = self._uow_factory().orders.find_many(
            includes=("items",),
            order_by=("-created_at", "-id"),
            user_id=user_id,
        )
        return OrderListDTO(
            orders=[OrderSummaryDTO.from_entity(order) for order in orders],
            total_count=len(orders),
        )


def _owned_by(order: Order, user_id: Any) -> bool:
    return str(order.user_id) == str(user_id)
