"""Category model.

Business rules implemented:
- Category name is unique and trimmed on save.
- A category with products cannot be deleted (enforced at service layer);
  deleting one at the database level nulls ``Product.category``.
"""

from __future__ import annotations

import structlog
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class Category(BaseModel):
    """Grouping of products shown together in the storefront."""

    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=500, blank=True, default="")

    class Meta:
        db_table = "categories"
        ordering = ["name"]
        verbose_name_plural = "categories"

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.name:
            self.name = self.name.strip()
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "category_created",
                category_id=str(self.id),
                name=self.name,
            )

    def __str__(self) -> str:
        return self.name
