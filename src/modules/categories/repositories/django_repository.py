"""Django ORM implementation of the Category repository."""

from __future__ import annotations

from typing import Any, Optional

from modules.categories.models import Category
from modules.categories.repositories.interfaces import ICategoryRepository
from modules.core.repositories.django_repository import DjangoRepository


class CategoryDjangoRepository(DjangoRepository[Category], ICategoryRepository):
    """Concrete Category repository backed by Django ORM."""

    model = Category

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.find_one(name__iexact=(name or "").strip())

    def has_products(self, category_id: Any) -> bool:
        return self.exists(id=category_id, products__isnull=False)
