"""Order API views.

Thin HTTP adapter over ``OrderLifecycleController``: every action turns
the request into a controller call and renders the resulting envelope.
Throttle scopes separate order creation from listing.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import ViewSet

from modules.core.http import envelope_response
from modules.orders.lifecycle import OrderLifecycleController
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)


class OrderViewSet(ViewSet):
    """Orders of the authenticated user.

    ``lookup`` accepts either the order UUID or its order number.  The
    status change is an administrative action and needs a staff user.
    """

    lookup_value_regex = r"[^/]+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._controller = OrderLifecycleController()

    def get_permissions(self):
        if self.action == "change_status":
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    @extend_schema(request=CreateOrderSerializer, responses={201: OrderSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        result = self._controller.create_order(request.user.pk, request.data)
        return envelope_response(result, success_status=status.HTTP_201_CREATED)

    @extend_schema(responses=OrderListSerializer)
    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/"""
        return envelope_response(self._controller.list_user_orders(request.user.pk))

    @extend_schema(responses=OrderSerializer)
    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{id or order_number}/"""
        return envelope_response(self._controller.get_order(request.user.pk, pk))

    @extend_schema(request=None, responses=OrderSerializer)
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{id}/cancel/"""
        return envelope_response(self._controller.cancel_order(request.user.pk, pk))

    @extend_schema(request=UpdateOrderStatusSerializer, responses=OrderSerializer)
    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{id}/status/"""
        return envelope_response(self._controller.update_order_status(pk, request.data))
