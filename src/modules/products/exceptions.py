"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.  The
envelope boundary translates them using their ``modules.core.exceptions``
category.
"""

from __future__ import annotations

from modules.core.exceptions import ConflictError, NotFoundError, ValidationFailed


class ProductAlreadyExists(ConflictError):
    """A product with the same name already exists."""


class ProductNotFound(NotFoundError):
    """The requested product does not exist."""


class ProductInUse(ConflictError):
    """The product is referenced by order items and cannot be hard-deleted."""


class UnknownCategory(ValidationFailed):
    """The ``category_id`` supplied for a product does not exist."""
