"""Category domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
subclasses a ``modules.core.exceptions`` category, which decides the
envelope error tag and the HTTP status.
"""

from __future__ import annotations

from modules.core.exceptions import ConflictError, NotFoundError


class CategoryNotFound(NotFoundError):
    """The requested category does not exist."""


class CategoryAlreadyExists(ConflictError):
    """Another category already uses this name."""


class CategoryInUse(ConflictError):
    """The category still has products and cannot be deleted."""
