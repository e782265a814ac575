"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the unit of work's ``IProductRepository``.

Business rules enforced here:
- Product name must be unique.
- Price must be greater than zero, stock non-negative (validated by DTO).
- Deactivation (``is_active=False``) is the soft delete.
- Hard delete is refused while any order item references the product.

Product details are served read-through from ``products:detail:{id}``.
Order creation and cancellation adjust stock without touching the cache,
so a cached detail may show stock up to ``PRODUCT_DETAIL_CACHE_TTL``
seconds old; the inventory guard always reads the database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional

import structlog
from django.conf import settings

from modules.categories.exceptions import CategoryNotFound
from modules.core.cache import ReadThroughCache
from modules.core.dtos import PagedResultDTO
from modules.core.models import parse_uuid
from modules.core.repositories.interfaces import DEFAULT_PAGE_SIZE, IUnitOfWork
from modules.core.repositories.unit_of_work import DjangoUnitOfWork
from modules.orders.inventory import InventoryGuard, StockOutcome
from modules.products.dtos import ProductOutputDTO, StockAvailabilityDTO
from modules.products.exceptions import (
    ProductAlreadyExists,
    ProductInUse,
    ProductNotFound,
    UnknownCategory,
)
from modules.products.filters import ProductFilter
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import (
        CreateProductDTO,
        ProductQueryDTO,
        UpdateProductDTO,
    )

logger = structlog.get_logger(__name__)

PRODUCT_DETAIL_KEY = "products:detail:{id}"

UPDATABLE_FIELDS = (
    "name",
    "price",
    "description",
    "stock_quantity",
    "category_id",
    "is_active",
)


class ProductService:
    """Application service for Product use-cases.

    Receives a unit-of-work factory via constructor injection (DIP).
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork] = DjangoUnitOfWork,
        cache: Optional[ReadThroughCache] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._cache = cache or ReadThroughCache(
            default_ttl=getattr(settings, "PRODUCT_DETAIL_CACHE_TTL", None)
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_product(self, dto: CreateProductDTO) -> ProductOutputDTO:
        """Create a new product after enforcing uniqueness rules.

        Raises:
            ProductAlreadyExists: if the name is already taken.
            UnknownCategory: if ``category_id`` does not exist.
        """
        log = logger.bind(name=dto.name)

        with self._uow_factory() as uow:
            if uow.products.get_by_name(dto.name):
                log.warning("product.duplicate_name")
                raise ProductAlreadyExists(f"Product '{dto.name}' already exists.")
            if dto.category_id and not uow.categories.exists(id=dto.category_id):
                raise UnknownCategory(f"Category {dto.category_id} does not exist.")

            product = uow.products.add(
                Product(
                    name=dto.name,
                    price=dto.price,
                    description=dto.description,
                    stock_quantity=dto.stock_quantity,
                    category_id=dto.category_id,
                    is_active=dto.is_active,
                )
            )
            uow.commit()

        log.info("product.created", product_id=str(product.id))
        return ProductOutputDTO.from_entity(product)

    def update_product(self, id: str, dto: UpdateProductDTO) -> ProductOutputDTO:
        """Update an existing product with the supplied fields.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductAlreadyExists: if the new name belongs to another product.
            UnknownCategory: if ``category_id`` does not exist.
        """
        log = logger.bind(product_id=str(id))

        with self._uow_factory() as uow:
            product = uow.products.find_one(id=id, for_update=True)
            if not product:
                raise ProductNotFound(f"Product {id} not found.")

            if dto.name is not None and dto.name.lower() != product.name.lower():
                clash = uow.products.get_by_name(dto.name)
                if clash and clash.id != product.id:
                    log.warning("product.duplicate_name", name=dto.name)
                    raise ProductAlreadyExists(f"Product '{dto.name}' already exists.")
            if dto.category_id and not uow.categories.exists(id=dto.category_id):
                raise UnknownCategory(f"Category {dto.category_id} does not exist.")

            changed: List[str] = []
            for field in UPDATABLE_FIELDS:
                value = getattr(dto, field)
                if value is not None:
                    setattr(product, field, value)
                    changed.append(field)
            if changed:
                uow.products.update(product, fields=changed)
                uow.commit()

        self._invalidate(product.id)
        log.info("product.updated", fields=changed)
        return self._reload(product.id)

    def deactivate_product(self, id: str) -> ProductOutputDTO:
        """Soft-delete: the product stays referenceable but is no longer sellable."""
        with self._uow_factory() as uow:
            product = uow.products.find_one(id=id, for_update=True)
            if not product:
                raise ProductNotFound(f"Product {id} not found.")
            product.is_active = False
            uow.products.update(product, fields=["is_active"])
            uow.commit()

        self._invalidate(product.id)
        logger.info("product.deactivated", product_id=str(product.id))
        return self._reload(product.id)

    def delete_product(self, id: str) -> None:
        """Physically delete a product that no order item references.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductInUse: if any order item references it.
        """
        with self._uow_factory() as uow:
            product = uow.products.find_one(id=id, for_update=True)
            if not product:
                raise ProductNotFound(f"Product {id} not found.")
            if uow.products.is_referenced(product.id):
                logger.warning("product.delete_refused", product_id=str(id))
                raise ProductInUse(
                    "Product appears in existing orders; deactivate it instead."
                )
            product_id = product.id
            uow.products.delete(product)
            uow.commit()

        self._invalidate(product_id)
        logger.info("product.deleted", product_id=str(product_id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: str) -> ProductOutputDTO:
        """Retrieve a single product by ID (read-through cache).

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product_id = parse_uuid(id)
        if product_id is None:
            raise ProductNotFound(f"Product {id} not found.")

        def load():
            product = self._uow_factory().products.find_one(
                id=product_id, includes=("category",)
            )
            if not product:
                return None
            return ProductOutputDTO.from_entity(product).model_dump(mode="json")

        cached = self._cache.get_or_set(PRODUCT_DETAIL_KEY.format(id=product_id), load)
        if cached is None:
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.retrieved", product_id=str(product_id))
        return ProductOutputDTO.model_validate(cached)

    def get_product_by_name(self, name: str) -> ProductOutputDTO:
        """Raises ``ProductNotFound``."""
        product = self._uow_factory().products.get_by_name(name)
        if not product:
            raise ProductNotFound(f"Product '{name}' not found.")
        return self._reload(product.id)

    def check_stock(self, id: str, quantity: int) -> StockAvailabilityDTO:
        """Report whether ``quantity`` units of a product can be ordered now.

        Runs the order engine's ``InventoryGuard`` without a row lock, so
        the answer is advisory: another order may claim the stock before
        the caller places its own.  Not enough stock is a regular answer
        (``is_available=False``), not an error.

        Raises:
            ProductNotFound: if the product does not exist.
            InactiveProduct: if the product is no longer sold.
            InvalidQuantity: if ``quantity`` is zero or negative.
        """
        product_id = parse_uuid(id)
        if product_id is None:
            raise ProductNotFound(f"Product {id} not found.")

        check = InventoryGuard(self._uow_factory().products, lock=False).check(
            product_id, quantity
        )
        if check.outcome == StockOutcome.PRODUCT_NOT_FOUND:
            raise ProductNotFound(f"Product {id} not found.")
        if check.outcome != StockOutcome.INSUFFICIENT_STOCK:
            check.raise_for_status()

        logger.info(
            "product.stock_checked",
            product_id=str(product_id),
            requested=quantity,
            available=check.available,
        )
        return StockAvailabilityDTO(
            product_id=product_id,
            requested=quantity,
            available=check.available,
            is_available=check.ok,
        )

    def list_products(
        self,
        query: Optional[ProductQueryDTO] = None,
        page_number: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> PagedResultDTO[ProductOutputDTO]:
        """Return one page of products matching ``query``."""
        filters = (
            ProductFilter(
                query.as_filter_params(), queryset=Product.objects.none()
            ).lookups()
            if query
            else {}
        )
        page = self._uow_factory().products.get_page(
            page_number,
            page_size,
            filters=filters,
            order_by=("name",),
            includes=("category",),
        )
        return PagedResultDTO.from_page(page, ProductOutputDTO.from_entity)

    def list_by_category(self, category_id: str) -> List[ProductOutputDTO]:
        uow = self._uow_factory()
        if not uow.categories.exists(id=category_id):
            raise CategoryNotFound(f"Category {category_id} not found.")
        products = uow.products.find_many(
            includes=("category",), order_by=("name",), category_id=category_id
        )
        return [ProductOutputDTO.from_entity(p) for p in products]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reload(self, product_id) -> ProductOutputDTO:
        product = self._uow_factory().products.find_one(
            id=product_id, includes=("category",)
        )
        return ProductOutputDTO.from_entity(product)

    def _invalidate(self, product_id) -> None:
        self._cache.delete(PRODUCT_DETAIL_KEY.format(id=product_id))
