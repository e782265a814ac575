"""Category DTOs for the Service Layer.

Framework-agnostic, immutable (``frozen=True``) Pydantic v2 models.

- ``CreateCategoryDTO`` / ``UpdateCategoryDTO``: inputs.
- ``CategoryOutputDTO``: single category.
- ``CategoryWithProductsDTO``: category plus product summaries.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.products.dtos import ProductSummaryDTO

if TYPE_CHECKING:
    from modules.categories.models import Category


def _clean_name(value: str) -> str:
    value = (value or "").strip()
    if len(value) < 2:
        raise ValueError("Category name must be at least 2 characters.")
    if len(value) > 100:
        raise ValueError("Category name cannot exceed 100 characters.")
    return value


class CreateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = Field(default="", max_length=500)

    @field_validator("name")
    @classmethod
    def name_must_be_valid(cls, v: str) -> str:
        return _clean_name(v)


class UpdateCategoryDTO(BaseModel):
    """All fields optional; only supplied fields are applied."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def name_must_be_valid(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_name(v)


class CategoryOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    description: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, category: Category) -> CategoryOutputDTO:
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


class CategoryWithProductsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    description: str
    product_count: int
    products: List[ProductSummaryDTO]

    @classmethod
    def from_entity(cls, category: Category) -> CategoryWithProductsDTO:
        """Build from a category whose ``products`` relation is prefetched."""
        products = [ProductSummaryDTO.from_entity(p) for p in category.products.all()]
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            product_count=len(products),
            products=products,
        )
