"""Unit tests for the administrative status change.

Transition table:
  PENDING -> PENDING | PROCESSING | SHIPPED | DELIVERED | CANCELLED (cancel only)
  PROCESSING | SHIPPED | DELIVERED -> PENDING | PROCESSING | SHIPPED | DELIVERED
  CANCELLED -> (terminal)
"""

from __future__ import annotations

import uuid

import pytest

from modules.core.exceptions import ErrorCategory
from modules.orders.assembler import CartLine
from modules.orders.constants import VALID_TRANSITIONS, OrderStatus
from modules.orders.exceptions import (
    InvalidOrderStatus,
    InvalidStatusTransition,
    OrderNotFound,
)
from modules.orders.models import Order
from modules.orders.services import OrderService

pytestmark = pytest.mark.unit

ADMIN_TARGETS = [OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED]


@pytest.fixture()
def service():
    return OrderService()


@pytest.fixture()
def order(service, user, product_a):
    return service.create_order(user.pk, [CartLine(product_a.id, 2)])


class TestTransitionTable:
    def test_cancelled_is_terminal(self):
        assert VALID_TRANSITIONS[OrderStatus.CANCELLED] == frozenset()

    def test_pending_can_be_cancelled(self):
        assert OrderStatus.CANCELLED in VALID_TRANSITIONS[OrderStatus.PENDING]

    @pytest.mark.parametrize("status", ADMIN_TARGETS)
    def test_progressed_orders_can_return_to_pending_but_not_cancel(self, status):
        assert OrderStatus.PENDING in VALID_TRANSITIONS[status]
        assert OrderStatus.CANCELLED not in VALID_TRANSITIONS[status]


class TestUpdateStatus:
    @pytest.mark.parametrize("target", ADMIN_TARGETS)
    def test_pending_to_admin_status(self, service, order, target):
        result = service.update_status(order.id, target)
        assert result.status == target
        assert Order.objects.get(id=order.id).status == target

    def test_delivered_can_move_back_to_shipped(self, service, order):
        service.update_status(order.id, OrderStatus.DELIVERED)
        assert service.update_status(order.id, OrderStatus.SHIPPED).status == "SHIPPED"

    @pytest.mark.parametrize("current", ADMIN_TARGETS)
    def test_progressed_order_can_return_to_pending(self, service, order, current):
        service.update_status(order.id, current)
        result = service.update_status(order.id, OrderStatus.PENDING)
        assert result.status == OrderStatus.PENDING
        assert Order.objects.get(id=order.id).status == OrderStatus.PENDING

    def test_order_returned_to_pending_can_be_cancelled(
        self, service, user, order, product_a
    ):
        service.update_status(order.id, OrderStatus.PROCESSING)
        service.update_status(order.id, OrderStatus.PENDING)
        assert service.cancel_order(user.pk, order.id).status == OrderStatus.CANCELLED
        product_a.refresh_from_db()
        assert product_a.stock_quantity == 100

    def test_no_ownership_check(self, service, order, other_user):
        assert service.update_status(order.id, "PROCESSING").status == "PROCESSING"

    def test_unknown_status(self, service, order):
        with pytest.raises(InvalidOrderStatus) as exc_info:
            service.update_status(order.id, "LOST")
        assert exc_info.value.category == ErrorCategory.VALIDATION

    def test_cancelled_target_is_rejected(self, service, order, product_a):
        with pytest.raises(InvalidOrderStatus):
            service.update_status(order.id, OrderStatus.CANCELLED)
        assert Order.objects.get(id=order.id).status == OrderStatus.PENDING
        product_a.refresh_from_db()
        assert product_a.stock_quantity == 98

    def test_cancelled_order_cannot_change(self, service, user, order):
        service.cancel_order(user.pk, order.id)
        with pytest.raises(InvalidStatusTransition) as exc_info:
            service.update_status(order.id, OrderStatus.PROCESSING)
        assert exc_info.value.category == ErrorCategory.STATE_VIOLATION
        assert Order.objects.get(id=order.id).status == OrderStatus.CANCELLED

    def test_missing_order(self, service):
        with pytest.raises(OrderNotFound):
            service.update_status(uuid.uuid4(), OrderStatus.SHIPPED)
