"""Order domain constants.

Defines status choices and the explicit transition table of the order
state machine.  Cancellation is only reachable from ``PENDING`` and
only through ``OrderService.cancel_order`` (which restocks).  Every other
status may be set administratively from any non-cancelled order,
including a move back to ``PENDING``.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PROCESSING = "PROCESSING", "Processing"
    SHIPPED = "SHIPPED", "Shipped"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


ADMINISTRATIVE_STATUSES: frozenset[str] = frozenset(
    {
        OrderStatus.PENDING,
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
    }
)

VALID_TRANSITIONS: dict[str, frozenset[str]] = {
    OrderStatus.PENDING: ADMINISTRATIVE_STATUSES | {OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: ADMINISTRATIVE_STATUSES,
    OrderStatus.SHIPPED: ADMINISTRATIVE_STATUSES,
    OrderStatus.DELIVERED: ADMINISTRATIVE_STATUSES,
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATES: frozenset[str] = frozenset({OrderStatus.CANCELLED})

ORDER_NUMBER_PREFIX = "ORD"
ORDER_NUMBER_SUFFIX_MIN = 1000
ORDER_NUMBER_SUFFIX_MAX = 9999
ORDER_NUMBER_MAX_RETRIES = 5
ORDER_CREATE_MAX_ATTEMPTS = 3
