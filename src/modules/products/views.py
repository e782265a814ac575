"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ViewSet.  Every
call goes through ``run_enveloped`` so domain failures come back as a
``ServiceResponse`` envelope with the matching HTTP status; the view
never swallows generic exceptions.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.exceptions import ErrorCategory
from modules.core.http import envelope_response, paging_params
from modules.core.responses import ServiceResponse, run_enveloped
from modules.products.dtos import (
    CreateProductDTO,
    ProductQueryDTO,
    StockCheckQueryDTO,
    UpdateProductDTO,
)
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.serializers import (
    ProductSerializer,
    ProductUpdateSerializer,
    StockAvailabilitySerializer,
)
from modules.products.services import ProductService

ADMIN_ACTIONS = {"create", "update", "partial_update", "destroy", "deactivate"}


class ProductViewSet(ViewSet):
    """ViewSet for Product CRUD operations.

    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.  Reads require authentication; writes
    require a staff user.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService()

    def get_permissions(self):
        if self.action in ADMIN_ACTIONS:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    @extend_schema(
        parameters=[
            OpenApiParameter("name", str),
            OpenApiParameter("category", str),
            OpenApiParameter("min_price", float),
            OpenApiParameter("max_price", float),
            OpenApiParameter("active", bool),
            OpenApiParameter("page", int),
            OpenApiParameter("page_size", int),
        ],
        responses=ProductSerializer(many=True),
    )
    def list(self, request: Request) -> Response:
        """GET /api/v1/products/"""
        filterset = ProductFilter(request.query_params, queryset=Product.objects.none())
        if not filterset.is_valid():
            return envelope_response(
                ServiceResponse.fail(
                    ErrorCategory.VALIDATION, filterset.errors.as_text()
                )
            )
        cleaned = filterset.form.cleaned_data
        query = ProductQueryDTO(
            name=cleaned.get("name") or None,
            category_id=cleaned.get("category"),
            min_price=cleaned.get("min_price"),
            max_price=cleaned.get("max_price"),
            is_active=cleaned.get("active"),
        )
        page_number, page_size = paging_params(request)
        result = run_enveloped(
            "product.list",
            lambda: self._service.list_products(query, page_number, page_size),
            lambda page: f"Retrieved {len(page.items)} products "
            f"(page {page.page_number} of {page.total_pages}).",
        )
        return envelope_response(result)

    @extend_schema(responses=ProductSerializer)
    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        result = run_enveloped(
            "product.get",
            lambda: self._service.get_product(pk),
            "Product retrieved.",
            product_id=pk,
        )
        return envelope_response(result)

    @extend_schema(responses=ProductSerializer)
    @action(detail=False, methods=["get"], url_path=r"by-name/(?P<name>[^/]+)")
    def by_name(self, request: Request, name: str | None = None) -> Response:
        """GET /api/v1/products/by-name/{name}/"""
        result = run_enveloped(
            "product.get_by_name",
            lambda: self._service.get_product_by_name(name),
            "Product retrieved.",
            name=name,
        )
        return envelope_response(result)

    @extend_schema(
        parameters=[OpenApiParameter("quantity", int, required=True)],
        responses=StockAvailabilitySerializer,
    )
    @action(detail=True, methods=["get"], url_path="check-stock")
    def check_stock(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/check-stock/?quantity=N"""

        def check():
            query = StockCheckQueryDTO.model_validate(
                {"quantity": request.query_params.get("quantity")}
            )
            return self._service.check_stock(pk, query.quantity)

        result = run_enveloped(
            "product.check_stock",
            check,
            lambda stock: (
                f"Stock available. Current stock: {stock.available}."
                if stock.is_available
                else f"Insufficient stock. Available: {stock.available}, "
                f"Requested: {stock.requested}."
            ),
            product_id=pk,
        )
        return envelope_response(result)

    @extend_schema(responses=ProductSerializer(many=True))
    @action(detail=False, methods=["get"], url_path=r"by-category/(?P<category_id>[^/.]+)")
    def by_category(self, request: Request, category_id: str | None = None) -> Response:
        """GET /api/v1/products/by-category/{category_id}/"""
        result = run_enveloped(
            "product.list_by_category",
            lambda: self._service.list_by_category(category_id),
            lambda items: f"Retrieved {len(items)} products.",
            category_id=category_id,
        )
        return envelope_response(result)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    @extend_schema(request=ProductSerializer, responses={201: ProductSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        result = run_enveloped(
            "product.create",
            lambda: self._service.create_product(
                CreateProductDTO.model_validate(request.data)
            ),
            "Product created.",
        )
        return envelope_response(result, success_status=status.HTTP_201_CREATED)

    @extend_schema(request=ProductUpdateSerializer, responses=ProductSerializer)
    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/"""
        result = run_enveloped(
            "product.update",
            lambda: self._service.update_product(
                pk, UpdateProductDTO.model_validate(request.data)
            ),
            "Product updated.",
            product_id=pk,
        )
        return envelope_response(result)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    @extend_schema(request=None, responses=ProductSerializer)
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/products/{pk}/deactivate/"""
        result = run_enveloped(
            "product.deactivate",
            lambda: self._service.deactivate_product(pk),
            "Product deactivated.",
            product_id=pk,
        )
        return envelope_response(result)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        result = run_enveloped(
            "product.delete",
            lambda: self._service.delete_product(pk),
            "Product deleted.",
            product_id=pk,
        )
        return envelope_response(result)
