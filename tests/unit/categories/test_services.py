"""Unit tests for CategoryService."""

from __future__ import annotations

import uuid

import pytest

from modules.categories.dtos import CreateCategoryDTO, UpdateCategoryDTO
from modules.categories.exceptions import (
    CategoryAlreadyExists,
    CategoryInUse,
    CategoryNotFound,
)
from modules.categories.models import Category
from modules.categories.services import CategoryService
from modules.core.exceptions import ErrorCategory
from modules.products.services import ProductService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return CategoryService()


class TestCommands:
    def test_create(self, service):
        result = service.create_category(CreateCategoryDTO(name=" Audio ", description="Sound"))
        assert result.name == "Audio"
        assert Category.objects.filter(id=result.id).exists()

    def test_duplicate_name(self, service, category):
        with pytest.raises(CategoryAlreadyExists) as exc_info:
            service.create_category(CreateCategoryDTO(name="peripherals"))
        assert exc_info.value.category == ErrorCategory.CONFLICT

    def test_update(self, service, category):
        result = service.update_category(
            str(category.id), UpdateCategoryDTO(description="Mice and keyboards")
        )
        assert result.description == "Mice and keyboards"
        assert result.name == "Peripherals"

    def test_update_to_taken_name(self, service, category):
        other = service.create_category(CreateCategoryDTO(name="Storage"))
        with pytest.raises(CategoryAlreadyExists):
            service.update_category(str(other.id), UpdateCategoryDTO(name="Peripherals"))

    def test_update_missing(self, service):
        with pytest.raises(CategoryNotFound):
            service.update_category(str(uuid.uuid4()), UpdateCategoryDTO(name="Nope"))

    def test_rename_refreshes_cached_product_details(self, service, category, product_a):
        products = ProductService()
        assert products.get_product(str(product_a.id)).category_name == "Peripherals"

        service.update_category(str(category.id), UpdateCategoryDTO(name="Accessories"))

        assert products.get_product(str(product_a.id)).category_name == "Accessories"

    def test_delete_empty(self, service, category):
        service.delete_category(str(category.id))
        assert not Category.objects.filter(id=category.id).exists()

    def test_delete_with_products_refused(self, service, category, product_a):
        with pytest.raises(CategoryInUse, match="existing products"):
            service.delete_category(str(category.id))
        assert Category.objects.filter(id=category.id).exists()


class TestQueries:
    def test_get_cached_and_invalidated(self, service, category, django_assert_num_queries):
        service.get_category(str(category.id))
        with django_assert_num_queries(0):
            service.get_category(str(category.id))

        service.update_category(str(category.id), UpdateCategoryDTO(name="Gear"))
        assert service.get_category(str(category.id)).name == "Gear"

    def test_get_missing(self, service):
        with pytest.raises(CategoryNotFound):
            service.get_category(str(uuid.uuid4()))
        with pytest.raises(CategoryNotFound):
            service.get_category("garbage")

    def test_get_by_name(self, service, category):
        assert service.get_category_by_name("PERIPHERALS").id == category.id
        with pytest.raises(CategoryNotFound):
            service.get_category_by_name("Unknown")

    def test_list_is_paged_and_refreshed_after_create(self, service, category):
        first = service.list_categories(1, 10)
        assert first.total_count == 1

        service.create_category(CreateCategoryDTO(name="Audio"))
        second = service.list_categories(1, 10)
        assert [c.name for c in second.items] == ["Audio", "Peripherals"]
        assert second.total_pages == 1

    def test_list_page_size_is_clamped(self, service, category):
        page = service.list_categories(0, 1000)
        assert page.page_number == 1
        assert page.page_size == 100

    def test_with_products(self, service, category, product_a, product_b):
        service.create_category(CreateCategoryDTO(name="Empty"))
        result = {c.name: c for c in service.list_categories_with_products()}
        assert result["Peripherals"].product_count == 2
        assert result["Empty"].products == []
