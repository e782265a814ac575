"""Product DRF serializers.

Serializers describe the request/response shapes for the OpenAPI
schema.  Input validation lives in the Pydantic DTOs (``dtos.py``) that
the Service Layer receives.
"""

from __future__ import annotations

from rest_framework import serializers


class ProductSerializer(serializers.Serializer):
    """Read shape of the Product resource."""

    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=18, decimal_places=2)
    stock_quantity = serializers.IntegerField(min_value=0, required=False)
    category_id = serializers.UUIDField(required=False, allow_null=True)
    category_name = serializers.CharField(read_only=True, allow_null=True)
    is_active = serializers.BooleanField(required=False)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)


class ProductUpdateSerializer(ProductSerializer):
    """Partial-update shape: every writable field optional."""

    name = serializers.CharField(max_length=200, required=False)
    price = serializers.DecimalField(max_digits=18, decimal_places=2, required=False)


class StockAvailabilitySerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    requested = serializers.IntegerField()
    available = serializers.IntegerField()
    is_available = serializers.BooleanField()
