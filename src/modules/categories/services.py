"""Category service layer (Use Cases).

Business rules enforced here:
- Category names are unique (case-insensitive).
- A category that still has products cannot be deleted.

Reads go through the read-through cache (``categories:detail:{id}`` and
the versioned ``categories:list`` namespace); every write invalidates the
affected keys after its commit.  A rename also drops the cached details
of the category's products, which embed its name.
"""

from __future__ import annotations

from typing import Callable, List, Optional

import structlog

from modules.categories.dtos import (
    CategoryOutputDTO,
    CategoryWithProductsDTO,
    CreateCategoryDTO,
    UpdateCategoryDTO,
)
from modules.categories.exceptions import (
    CategoryAlreadyExists,
    CategoryInUse,
    CategoryNotFound,
)
from modules.categories.models import Category
from modules.core.cache import ReadThroughCache
from modules.core.dtos import PagedResultDTO
from modules.core.models import parse_uuid
from modules.core.repositories.interfaces import (
    DEFAULT_PAGE_SIZE,
    IUnitOfWork,
    normalize_paging,
)
from modules.core.repositories.unit_of_work import DjangoUnitOfWork
from modules.products.services import PRODUCT_DETAIL_KEY

logger = structlog.get_logger(__name__)

CATEGORY_DETAIL_KEY = "categories:detail:{id}"
CATEGORY_LIST_NAMESPACE = "categories:list"


class CategoryService:
    """Application service for Category use-cases."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork] = DjangoUnitOfWork,
        cache: Optional[ReadThroughCache] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._cache = cache or ReadThroughCache()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_category(self, dto: CreateCategoryDTO) -> CategoryOutputDTO:
        """Create a category.

        Raises:
            CategoryAlreadyExists: if the name is taken.
        """
        log = logger.bind(name=dto.name)
        with self._uow_factory() as uow:
            if uow.categories.get_by_name(dto.name):
                log.warning("category.duplicate_name")
                raise CategoryAlreadyExists(f"Category '{dto.name}' already exists.")
            category = uow.categories.add(
                Category(name=dto.name, description=dto.description)
            )
            uow.commit()

        self._cache.invalidate_namespace(CATEGORY_LIST_NAMESPACE)
        log.info("category.created", category_id=str(category.id))
        return CategoryOutputDTO.from_entity(category)

    def update_category(self, id: str, dto: UpdateCategoryDTO) -> CategoryOutputDTO:
        """Apply the supplied fields to an existing category.

        Raises:
            CategoryNotFound: if the category does not exist.
            CategoryAlreadyExists: if the new name belongs to another category.
        """
        with self._uow_factory() as uow:
            category = uow.categories.find_one(id=id, for_update=True)
            if not category:
                raise CategoryNotFound(f"Category {id} not found.")

            if dto.name is not None and dto.name.lower() != category.name.lower():
                clash = uow.categories.get_by_name(dto.name)
                if clash and clash.id != category.id:
                    raise CategoryAlreadyExists(
                        f"Category '{dto.name}' already exists."
                    )

            changed = []
            for field in ("name", "description"):
                value = getattr(dto, field)
                if value is not None:
                    setattr(category, field, value)
                    changed.append(field)
            renamed_products = []
            if "name" in changed:
                renamed_products = [
                    product.id
                    for product in uow.products.find_many(category_id=category.id)
                ]
            if changed:
                uow.categories.update(category, fields=changed)
                uow.commit()

        self._invalidate(category.id)
        if renamed_products:
            self._cache.delete(
                *(PRODUCT_DETAIL_KEY.format(id=pid) for pid in renamed_products)
            )
        logger.info("category.updated", category_id=str(category.id), fields=changed)
        return CategoryOutputDTO.from_entity(category)

    def delete_category(self, id: str) -> None:
        """Physically delete an empty category.

        Raises:
            CategoryNotFound: if the category does not exist.
            CategoryInUse: while products still reference it.
        """
        with self._uow_factory() as uow:
            category = uow.categories.find_one(id=id, for_update=True)
            if not category:
                raise CategoryNotFound(f"Category {id} not found.")
            if uow.categories.has_products(category.id):
                logger.warning("category.delete_refused", category_id=str(id))
                raise CategoryInUse(
                    "Cannot delete category with existing products. "
                    "Please reassign or delete products first."
                )
            category_id = category.id
            uow.categories.delete(category)
            uow.commit()

        self._invalidate(category_id)
        logger.info("category.deleted", category_id=str(category_id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_category(self, id: str) -> CategoryOutputDTO:
        """Raises ``CategoryNotFound``."""
        category_id = parse_uuid(id)
        if category_id is None:
            raise CategoryNotFound(f"Category {id} not found.")

        def load():
            category = self._uow_factory().categories.find_one(id=category_id)
            if not category:
                return None
            return CategoryOutputDTO.from_entity(category).model_dump(mode="json")

        cached = self._cache.get_or_set(CATEGORY_DETAIL_KEY.format(id=category_id), load)
        if cached is None:
            raise CategoryNotFound(f"Category {id} not found.")
        return CategoryOutputDTO.model_validate(cached)

    def get_category_by_name(self, name: str) -> CategoryOutputDTO:
        """Raises ``CategoryNotFound``."""
        category = self._uow_factory().categories.get_by_name(name)
        if not category:
            raise CategoryNotFound(f"Category '{name}' not found.")
        return CategoryOutputDTO.from_entity(category)

    def list_categories(
        self, page_number: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> PagedResultDTO[CategoryOutputDTO]:
        page_number, page_size = normalize_paging(page_number, page_size)
        key = self._cache.namespace_key(
            CATEGORY_LIST_NAMESPACE, f"page_{page_number}:size_{page_size}"
        )

        def load():
            page = self._uow_factory().categories.get_page(
                page_number, page_size, order_by=("name",)
            )
            return PagedResultDTO.from_page(page, CategoryOutputDTO.from_entity).model_dump(
                mode="json"
            )

        cached = self._cache.get_or_set(key, load)
        return PagedResultDTO[CategoryOutputDTO].model_validate(cached)

    def list_categories_with_products(self) -> List[CategoryWithProductsDTO]:
        categories = self._uow_factory().categories.find_many(
            includes=("products",), order_by=("name",)
        )
        return [CategoryWithProductsDTO.from_entity(c) for c in categories]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _invalidate(self, category_id) -> None:
        self._cache.delete(CATEGORY_DETAIL_KEY.format(id=category_id))
        self._cache.invalidate_namespace(CATEGORY_LIST_NAMESPACE)
