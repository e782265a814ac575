"""Generic repository and unit-of-work interfaces (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend, and ``IUnitOfWork``, the
transactional boundary that groups staged mutations into one commit.
Service-layer code depends on these abstractions, never on Django ORM
directly.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Generic,
    List,
    Optional,
    Sequence,
    TypeVar,
)

if TYPE_CHECKING:
    from modules.categories.repositories.interfaces import ICategoryRepository
    from modules.orders.repositories.interfaces import (
        IOrderItemRepository,
        IOrderRepository,
    )
    from modules.products.repositories.interfaces import IProductRepository

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def normalize_paging(page_number: int, page_size: int) -> tuple[int, int]:
    """Clamp paging input: page < 1 -> 1, size < 1 -> 10, size > 100 -> 100."""
    if page_number < 1:
        page_number = 1
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    if page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE
    return page_number, page_size


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a filtered, ordered query."""

    items: List[T]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int = field(init=False)

    def __post_init__(self) -> None:
        pages = math.ceil(self.total_count / self.page_size) if self.page_size else 0
        object.__setattr__(self, "total_pages", pages)


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the entity managed by the
    repository (e.g. ``Product``, ``Order``).  Reads hit the store
    immediately; ``add`` / ``update`` / ``delete`` are only staged and
    become durable on ``IUnitOfWork.commit``.
    """

    @abstractmethod
    def find_one(
        self,
        includes: Sequence[str] = (),
        for_update: bool = False,
        **filters: Any,
    ) -> Optional[T]:
        """Return the single entity matching ``filters`` or ``None``."""

    @abstractmethod
    def find_many(
        self,
        includes: Sequence[str] = (),
        order_by: Sequence[str] = (),
        for_update: bool = False,
        **filters: Any,
    ) -> List[T]:
        """Return every entity matching ``filters``."""

    @abstractmethod
    def exists(self, **filters: Any) -> bool:
        """Return ``True`` when at least one entity matches ``filters``."""

    @abstractmethod
    def count(self, **filters: Any) -> int:
        """Count entities matching ``filters``."""

    @abstractmethod
    def get_page(
        self,
        page_number: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Sequence[str] = (),
        includes: Sequence[str] = (),
    ) -> Page[T]:
        """Return one page of entities plus total count and page count."""

    @abstractmethod
    def add(self, entity: T) -> T:
        """Stage a new entity for insertion."""

    @abstractmethod
    def update(self, entity: T, fields: Optional[Sequence[str]] = None) -> T:
        """Stage an update of ``entity`` (optionally restricted to ``fields``)."""

    @abstractmethod
    def delete(self, entity: T) -> None:
        """Stage a physical delete of ``entity``."""


class IUnitOfWork(ABC):
    """Transactional boundary grouping staged mutations into one commit.

    Usage::

        with uow:
            product = uow.products.find_one(id=pk, for_update=True)
            uow.products.adjust_stock(product.id, -2)
            uow.commit()

    Leaving the block without ``commit`` discards staged changes; an
    exception rolls back everything written inside the block.
    """

    users: IRepository[Any]
    categories: ICategoryRepository
    products: IProductRepository
    orders: IOrderRepository
    order_items: IOrderItemRepository

    @abstractmethod
    def __enter__(self) -> IUnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None:
        """Persist every staged change atomically (all-or-nothing)."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every staged change that has not been committed."""
