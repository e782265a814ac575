"""Order DRF serializers.

Describe the request/response shapes for the OpenAPI schema.  Input is
validated by the Pydantic DTOs (``dtos.py``) and by the inventory guard.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class CreateOrderSerializer(serializers.Serializer):
    items = CreateOrderItemSerializer(many=True, allow_empty=False)


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[s for s in OrderStatus.values if s != OrderStatus.CANCELLED]
    )


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.Serializer):
    """Line item with product name/price snapshots."""

    id = serializers.UUIDField()
    product_id = serializers.UUIDField()
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=18, decimal_places=2)
    total_price = serializers.DecimalField(max_digits=18, decimal_places=2)


class OrderSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    order_number = serializers.CharField()
    user_id = serializers.CharField()
    user_name = serializers.CharField()
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    status_display = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
    items = OrderItemSerializer(many=True)


class OrderSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    order_number = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    items_count = serializers.IntegerField()
    created_at = serializers.DateTimeField()


class OrderListSerializer(serializers.Serializer):
    orders = OrderSummarySerializer(many=True)
    total_count = serializers.IntegerField()
