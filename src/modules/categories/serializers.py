"""Category DRF serializers (OpenAPI request/response shapes)."""

from __future__ import annotations

from rest_framework import serializers


class CategorySerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(min_length=2, max_length=100)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)


class CategoryUpdateSerializer(CategorySerializer):
    name = serializers.CharField(min_length=2, max_length=100, required=False)


class CategoryProductSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=18, decimal_places=2)
    stock_quantity = serializers.IntegerField()
    is_active = serializers.BooleanField()


class CategoryWithProductsSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    description = serializers.CharField()
    product_count = serializers.IntegerField()
    products = CategoryProductSerializer(many=True)


class CategoryPageSerializer(serializers.Serializer):
    items = CategorySerializer(many=True)
    total_count = serializers.IntegerField()
    page_number = serializers.IntegerField()
    page_size = serializers.IntegerField()
    total_pages = serializers.IntegerField()
