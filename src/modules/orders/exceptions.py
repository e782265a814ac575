"""Order domain exceptions.

Raised by the engine and the Service Layer when business rules are
violated.  The lifecycle controller converts them into failure
envelopes using their ``modules.core.exceptions`` category.
"""

from __future__ import annotations

from modules.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateViolation,
    TransientStoreError,
    ValidationFailed,
)


class OrderNotFound(NotFoundError):
    """The requested order does not exist."""


class OrderAccessDenied(AuthorizationError):
    """The caller does not own the order."""


class UserNotFound(NotFoundError):
    """The user placing the order does not exist."""


class EmptyOrder(ValidationFailed):
    """The cart contains no lines."""


class InvalidOrderStatus(ValidationFailed):
    """The requested status is unknown or not settable administratively."""


class InvalidStatusTransition(StateViolation):
    """The transition is not in the order state machine."""


class OrderAlreadyCancelled(StateViolation):
    """The order was cancelled earlier."""


class OrderNotCancellable(StateViolation):
    """Only pending orders can be cancelled."""


class ProductNotFound(NotFoundError):
    """A product referenced by a cart line does not exist."""


class InvalidQuantity(ValidationFailed):
    """A cart line asks for zero or a negative quantity."""


class InactiveProduct(ConflictError):
    """A product referenced by a cart line is no longer sold."""


class InsufficientStock(ConflictError):
    """Not enough stock to fulfil a cart line."""

    def __init__(self, message: str, available: int = 0, requested: int = 0) -> None:
        super().__init__(message)
        self.available = available
        self.requested = requested


class OrderNumberExhausted(TransientStoreError):
    """Every order number for the current second is taken."""
