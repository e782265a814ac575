"""Order lifecycle controller.

The caller-facing surface of the order engine.  Each operation delegates
to ``OrderService`` and returns a ``ServiceResponse`` envelope: domain
failures, malformed input and store errors come back as tagged failures
instead of exceptions.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from modules.core.responses import ServiceResponse, run_enveloped
from modules.orders.dtos import CreateOrderDTO, UpdateOrderStatusDTO
from modules.orders.services import OrderService


class OrderLifecycleController:
    def __init__(self, service: Optional[OrderService] = None) -> None:
        self._service = service or OrderService()

    def create_order(
        self, user_id: Any, cart: Mapping[str, Any] | CreateOrderDTO
    ) -> ServiceResponse:
        def create():
            dto = (
                cart
                if isinstance(cart, CreateOrderDTO)
                else CreateOrderDTO.model_validate(cart)
            )
            return self._service.create_order(user_id, dto.to_lines())

        return run_enveloped(
            "order.create",
            create,
            "Order created successfully.",
            user_id=str(user_id),
        )

    def get_order(self, user_id: Any, reference: str) -> ServiceResponse:
        return run_enveloped(
            "order.get",
            lambda: self._service.get_order(user_id, reference),
            "Order retrieved successfully.",
            user_id=str(user_id),
            reference=str(reference),
        )

    def list_user_orders(self, user_id: Any) -> ServiceResponse:
        return run_enveloped(
            "order.list",
            lambda: self._service.list_user_orders(user_id),
            lambda result: f"Retrieved {result.total_count} orders.",
            user_id=str(user_id),
        )

    def cancel_order(self, user_id: Any, order_id: Any) -> ServiceResponse:
        return run_enveloped(
            "order.cancel",
            lambda: self._service.cancel_order(user_id, order_id),
            "Order cancelled successfully. Stock has been restored.",
            user_id=str(user_id),
            order_id=str(order_id),
        )

    def update_order_status(
        self, order_id: Any, payload: Mapping[str, Any] | UpdateOrderStatusDTO
    ) -> ServiceResponse:
        def update():
            dto = (
                payload
                if isinstance(payload, UpdateOrderStatusDTO)
                else UpdateOrderStatusDTO.model_validate(payload)
            )
            return self._service.update_status(order_id, dto.status)

        return run_enveloped(
            "order.update_status",
            update,
            lambda order: f"Order status updated to {order.status}.",
            order_id=str(order_id),
        )
