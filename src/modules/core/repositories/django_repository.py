"""Django ORM implementation of the generic repository.

``DjangoRepository[T]`` satisfies ``IRepository[T]`` for any model.
Reads go straight to the database (inside whatever transaction the
owning unit of work opened); writes are staged on the unit of work and
only applied by ``IUnitOfWork.commit``.

Error handling follows the Null Object pattern: look-ups with malformed
identifiers return ``None`` / ``[]`` instead of raising, and the Service
Layer decides how to translate a missing entity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Sequence,
    Type,
    TypeVar,
)

import structlog
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models.constants import LOOKUP_SEP

from modules.core.repositories.interfaces import (
    DEFAULT_PAGE_SIZE,
    IRepository,
    Page,
    normalize_paging,
)

if TYPE_CHECKING:
    from modules.core.repositories.unit_of_work import DjangoUnitOfWork

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=models.Model)


@dataclass(frozen=True)
class StagedChange:
    """A pending mutation recorded on the unit of work."""

    action: str
    label: str
    apply: Callable[[], None]


class DjangoRepository(IRepository[M], Generic[M]):
    """Concrete generic repository backed by Django ORM."""

    model: Type[M]

    def __init__(self, uow: DjangoUnitOfWork, model: Optional[Type[M]] = None) -> None:
        if model is not None:
            self.model = model
        self._uow = uow

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def _queryset(
        self, includes: Sequence[str] = (), for_update: bool = False
    ) -> models.QuerySet:
        queryset = self.model._default_manager.all()
        if for_update:
            queryset = queryset.select_for_update()
        return self._apply_includes(queryset, includes, for_update)

    def _apply_includes(
        self, queryset: models.QuerySet, includes: Sequence[str], for_update: bool
    ) -> models.QuerySet:
        """Eager-load ``includes``.

        Forward FK chains become a JOIN (``select_related``); reverse and
        many-valued relations use ``prefetch_related``.  Locked reads never
        JOIN, so the row lock only covers the requested table.
        """
        joins: List[str] = []
        prefetches: List[str] = []
        for path in includes:
            if not for_update and self._is_forward_path(path):
                joins.append(path)
            else:
                prefetches.append(path)
        if joins:
            queryset = queryset.select_related(*joins)
        if prefetches:
            queryset = queryset.prefetch_related(*prefetches)
        return queryset

    def _is_forward_path(self, path: str) -> bool:
        model: Any = self.model
        for name in path.split(LOOKUP_SEP):
            field = model._meta.get_field(name)
            if not (field.concrete and (field.many_to_one or field.one_to_one)):
                return False
            model = field.related_model
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_one(
        self,
        includes: Sequence[str] = (),
        for_update: bool = False,
        **filters: Any,
    ) -> Optional[M]:
        try:
            return self._queryset(includes, for_update).filter(**filters).first()
        except (ValueError, ValidationError):
            return None

    def find_many(
        self,
        includes: Sequence[str] = (),
        order_by: Sequence[str] = (),
        for_update: bool = False,
        **filters: Any,
    ) -> List[M]:
        queryset = self._queryset(includes, for_update).filter(**filters)
        if order_by:
            queryset = queryset.order_by(*order_by)
        try:
            return list(queryset)
        except (ValueError, ValidationError):
            return []

    def exists(self, **filters: Any) -> bool:
        try:
            return self.model._default_manager.filter(**filters).exists()
        except (ValueError, ValidationError):
            return False

    def count(self, **filters: Any) -> int:
        try:
            return self.model._default_manager.filter(**filters).count()
        except (ValueError, ValidationError):
            return 0

    def get_page(
        self,
        page_number: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Sequence[str] = (),
        includes: Sequence[str] = (),
    ) -> Page[M]:
        page_number, page_size = normalize_paging(page_number, page_size)
        queryset = self._queryset(includes).filter(**(filters or {}))
        total_count = queryset.count()
        if order_by:
            queryset = queryset.order_by(*order_by)
        offset = (page_number - 1) * page_size
        items = list(queryset[offset : offset + page_size])
        return Page(
            items=items,
            total_count=total_count,
            page_number=page_number,
            page_size=page_size,
        )

    # ------------------------------------------------------------------
    # Staged writes
    # ------------------------------------------------------------------

    @property
    def _label(self) -> str:
        return self.model._meta.model_name

    def add(self, entity: M) -> M:
        self._uow.stage(
            StagedChange(
                action="add",
                label=f"{self._label}.added",
                apply=lambda: entity.save(force_insert=True),
            )
        )
        return entity

    def update(self, entity: M, fields: Optional[Sequence[str]] = None) -> M:
        if fields:
            apply = lambda: entity.save(update_fields=list(fields))  # noqa: E731
        else:
            apply = entity.save
        self._uow.stage(
            StagedChange(action="update", label=f"{self._label}.updated", apply=apply)
        )
        return entity

    def delete(self, entity: M) -> None:
        self._uow.stage(
            StagedChange(
                action="delete",
                label=f"{self._label}.deleted",
                apply=entity.delete,
            )
        )
