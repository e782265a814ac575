"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
- ``ProductOutputDTO``: output with all product fields.
- ``ProductSummaryDTO``: compact output used inside category listings.
- ``ProductQueryDTO``: listing criteria.
- ``StockCheckQueryDTO`` / ``StockAvailabilityDTO``: availability check.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from modules.products.models import Product


def _clean_name(value: str) -> str:
    value = (value or "").strip()
    if len(value) < 2:
        raise ValueError("Product name must be at least 2 characters.")
    if len(value) > 200:
        raise ValueError("Product name cannot exceed 200 characters.")
    return value


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name`` is 2-200 characters after trimming.
    - ``price`` is a Decimal greater than zero.
    - ``stock_quantity`` is non-negative.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    price: Decimal
    description: str = Field(default="", max_length=1000)
    stock_quantity: int = 0
    category_id: Optional[UUID] = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def name_must_be_valid(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("stock_quantity")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional; only supplied fields will be updated.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    price: Optional[Decimal] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    stock_quantity: Optional[int] = None
    category_id: Optional[UUID] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_must_be_valid(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_name(v)

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("stock_quantity")
    @classmethod
    def stock_must_be_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class ProductOutputDTO(BaseModel):
    """Immutable DTO for product API responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    description: str
    price: Decimal
    stock_quantity: int
    category_id: Optional[UUID] = None
    category_name: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product) -> ProductOutputDTO:
        """Build an output DTO from a Product model instance."""
        category = product.category if product.category_id else None
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            stock_quantity=product.stock_quantity,
            category_id=product.category_id,
            category_name=category.name if category else None,
            is_active=product.is_active,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductSummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    price: Decimal
    stock_quantity: int
    is_active: bool

    @classmethod
    def from_entity(cls, product: Product) -> ProductSummaryDTO:
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            stock_quantity=product.stock_quantity,
            is_active=product.is_active,
        )


# ---------------------------------------------------------------------------
# Query DTO
# ---------------------------------------------------------------------------


class ProductQueryDTO(BaseModel):
    """Listing criteria, built from the validated ``ProductFilter`` form.

    Keys of ``as_filter_params`` are the ``ProductFilter`` parameter
    names; the filterset owns the lookups they translate to.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    category_id: Optional[UUID] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    is_active: Optional[bool] = None

    def as_filter_params(self) -> dict:
        params = {
            "name": self.name,
            "category": self.category_id,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "active": self.is_active,
        }
        return {key: value for key, value in params.items() if value is not None}


# ---------------------------------------------------------------------------
# Stock availability
# ---------------------------------------------------------------------------


class StockCheckQueryDTO(BaseModel):
    """``?quantity=`` of an availability check; the guard rejects ``<= 0``."""

    model_config = ConfigDict(frozen=True)

    quantity: int


class StockAvailabilityDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    requested: int
    available: int
    is_available: bool
