"""Shared DTOs."""

from __future__ import annotations

from typing import Any, Callable, Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict

from modules.core.repositories.interfaces import Page

T = TypeVar("T")


class PagedResultDTO(BaseModel, Generic[T]):
    """Immutable page of results with paging metadata."""

    model_config = ConfigDict(frozen=True)

    items: List[T]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[Any], mapper: Callable[[Any], T]) -> PagedResultDTO[T]:
        return cls(
            items=[mapper(item) for item in page.items],
            total_count=page.total_count,
            page_number=page.page_number,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )
