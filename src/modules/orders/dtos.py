"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: input for a single cart line.
- ``CreateOrderDTO``: input for order creation (nested lines).
- ``UpdateOrderStatusDTO``: input for the administrative status change.
- ``OrderItemOutputDTO`` / ``OrderOutputDTO``: full order output.
- ``OrderSummaryDTO`` / ``OrderListDTO``: list output.

Line quantities are *not* range-checked here: the inventory guard owns
that rule so the rejection carries the product it applies to.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from modules.orders.assembler import CartLine

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single line in a creation request.

    The client sends ``product_id`` and ``quantity``; the unit price is
    resolved from the catalogue when the order is assembled.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    def to_line(self) -> CartLine:
        return CartLine(product_id=self.product_id, quantity=self.quantity)


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    An empty ``items`` list is accepted here and rejected by the
    assembler as ``EmptyOrder``.  The same product may appear on several
    lines; their quantities are validated cumulatively.
    """

    model_config = ConfigDict(frozen=True)

    items: List[CreateOrderItemDTO] = []

    def to_lines(self) -> List[CartLine]:
        return [item.to_line() for item in self.items]


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str

    @field_validator("status")
    @classmethod
    def normalise(cls, v: str) -> str:
        return (v or "").strip().upper()


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderItemOutputDTO(BaseModel):
    """Immutable DTO for order item API responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    @classmethod
    def from_entity(cls, item: OrderItem) -> OrderItemOutputDTO:
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
        )


class OrderOutputDTO(BaseModel):
    """Immutable DTO for order API responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    order_number: str
    user_id: str
    user_name: str
    status: str
    status_display: str
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOutputDTO]

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Build an output DTO from an Order model instance.

        Assumes ``user`` is joined and ``items`` are prefetched.
        """
        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=str(order.user_id),
            user_name=order.user.get_username(),
            status=order.status,
            status_display=order.get_status_display(),
            total_amount=order.total_amount,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemOutputDTO.from_entity(item) for item in order.items.all()],
        )


class OrderSummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    order_number: str
    total_amount: Decimal
    status: str
    items_count: int
    created_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderSummaryDTO:
        return cls(
            id=order.id,
            order_number=order.order_number,
            total_amount=order.total_amount,
            status=order.status,
            items_count=len(order.items.all()),
            created_at=order.created_at,
        )


class OrderListDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    orders: List[OrderSummaryDTO]
    total_count: int
