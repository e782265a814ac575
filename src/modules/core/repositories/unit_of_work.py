"""Django implementation of the unit of work.

One ``DjangoUnitOfWork`` instance serves one lifecycle operation.  The
``with`` block is a single ``transaction.atomic()`` scope: reads (and row
locks) taken inside it and the flush performed by ``commit`` share the
same database transaction, so a stock check and the decrement that
follows it cannot be interleaved with another request's write.

Store failures are translated at this boundary:

- ``IntegrityError``  -> ``IntegrityConflict``
- any other ``DatabaseError`` (timeouts, lock waits, serialization
  failures) -> ``TransientStoreError``
"""

from __future__ import annotations

from typing import List, Optional

import structlog
from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction

from modules.categories.repositories.django_repository import (
    CategoryDjangoRepository,
)
from modules.core.exceptions import IntegrityConflict, TransientStoreError
from modules.core.repositories.django_repository import (
    DjangoRepository,
    StagedChange,
)
from modules.core.repositories.interfaces import IUnitOfWork
from modules.orders.repositories.django_repository import (
    OrderDjangoRepository,
    OrderItemDjangoRepository,
)
from modules.products.repositories.django_repository import ProductDjangoRepository

logger = structlog.get_logger(__name__)


def translate_database_error(exc: DatabaseError) -> Exception:
    """Map a driver-level error onto the domain taxonomy without leaking details."""
    if isinstance(exc, IntegrityError):
        return IntegrityConflict("The change conflicts with existing data.")
    return TransientStoreError(
        "The data store is temporarily unavailable. Please retry."
    )


class DjangoUnitOfWork(IUnitOfWork):
    """Groups staged repository mutations into one atomic commit."""

    def __init__(self) -> None:
        self._changes: List[StagedChange] = []
        self._atomic: Optional[transaction.Atomic] = None

        self.users = DjangoRepository(self, get_user_model())
        self.categories = CategoryDjangoRepository(self)
        self.products = ProductDjangoRepository(self)
        self.orders = OrderDjangoRepository(self)
        self.order_items = OrderItemDjangoRepository(self)

    # ------------------------------------------------------------------
    # Transaction scope
    # ------------------------------------------------------------------

    def __enter__(self) -> DjangoUnitOfWork:
        self._changes.clear()
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._changes:
            logger.warning("uow.discarded", changes=len(self._changes))
        self._changes.clear()

        atomic, self._atomic = self._atomic, None
        if atomic is None:
            return
        try:
            atomic.__exit__(exc_type, exc, tb)
        except DatabaseError as err:
            if exc is not None:
                raise
            logger.error("uow.transaction_failed", error_type=type(err).__name__)
            raise translate_database_error(err) from err

    # ------------------------------------------------------------------
    # Change set
    # ------------------------------------------------------------------

    def stage(self, change: StagedChange) -> None:
        self._changes.append(change)

    @property
    def pending_changes(self) -> int:
        return len(self._changes)

    def commit(self) -> None:
        """Apply every staged change inside one savepoint/transaction."""
        changes, self._changes = self._changes, []
        if not changes:
            return
        try:
            with transaction.atomic():
                for change in changes:
                    change.apply()
        except DatabaseError as err:
            logger.error(
                "uow.commit_failed",
                changes=len(changes),
                error_type=type(err).__name__,
            )
            raise translate_database_error(err) from err
        logger.info(
            "uow.committed",
            changes=len(changes),
            actions=[change.label for change in changes],
        )

    def rollback(self) -> None:
        self._changes.clear()
