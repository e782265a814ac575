"""Category API views.

Reads require authentication, writes require a staff user.  All calls
go through ``CategoryService`` and come back as ``ServiceResponse``
envelopes.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.categories.dtos import CreateCategoryDTO, UpdateCategoryDTO
from modules.categories.serializers import (
    CategoryPageSerializer,
    CategorySerializer,
    CategoryUpdateSerializer,
    CategoryWithProductsSerializer,
)
from modules.categories.services import CategoryService
from modules.core.http import envelope_response, paging_params
from modules.core.responses import run_enveloped

ADMIN_ACTIONS = {"create", "update", "partial_update", "destroy"}


class CategoryViewSet(ViewSet):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CategoryService()

    def get_permissions(self):
        if self.action in ADMIN_ACTIONS:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    @extend_schema(
        parameters=[OpenApiParameter("page", int), OpenApiParameter("page_size", int)],
        responses=CategoryPageSerializer,
    )
    def list(self, request: Request) -> Response:
        """GET /api/v1/categories/"""
        page_number, page_size = paging_params(request)
        result = run_enveloped(
            "category.list",
            lambda: self._service.list_categories(page_number, page_size),
            lambda page: f"Retrieved {len(page.items)} categories "
            f"(page {page.page_number} of {page.total_pages}).",
        )
        return envelope_response(result)

    @extend_schema(responses=CategorySerializer)
    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/categories/{pk}/"""
        result = run_enveloped(
            "category.get",
            lambda: self._service.get_category(pk),
            "Category retrieved.",
            category_id=pk,
        )
        return envelope_response(result)

    @extend_schema(responses=CategorySerializer)
    @action(detail=False, methods=["get"], url_path=r"by-name/(?P<name>[^/]+)")
    def by_name(self, request: Request, name: str | None = None) -> Response:
        """GET /api/v1/categories/by-name/{name}/"""
        result = run_enveloped(
            "category.get_by_name",
            lambda: self._service.get_category_by_name(name),
            "Category retrieved.",
            name=name,
        )
        return envelope_response(result)

    @extend_schema(responses=CategoryWithProductsSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="with-products")
    def with_products(self, request: Request) -> Response:
        """GET /api/v1/categories/with-products/"""
        result = run_enveloped(
            "category.list_with_products",
            self._service.list_categories_with_products,
            lambda items: f"Retrieved {len(items)} categories.",
        )
        return envelope_response(result)

    @extend_schema(request=CategorySerializer, responses={201: CategorySerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/categories/"""
        result = run_enveloped(
            "category.create",
            lambda: self._service.create_category(
                CreateCategoryDTO.model_validate(request.data)
            ),
            "Category created.",
        )
        return envelope_response(result, success_status=status.HTTP_201_CREATED)

    @extend_schema(request=CategoryUpdateSerializer, responses=CategorySerializer)
    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/categories/{pk}/"""
        result = run_enveloped(
            "category.update",
            lambda: self._service.update_category(
                pk, UpdateCategoryDTO.model_validate(request.data)
            ),
            "Category updated.",
            category_id=pk,
        )
        return envelope_response(result)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/categories/{pk}/"""
        result = run_enveloped(
            "category.delete",
            lambda: self._service.delete_category(pk),
            "Category deleted.",
            category_id=pk,
        )
        return envelope_response(result)
