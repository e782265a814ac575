"""Domain error taxonomy shared by every module.

Services raise these; the response envelope (``modules.core.responses``)
turns them into tagged failures.  Each subclass carries the category the
caller uses to decide between "retry as-is" and "fix and resubmit".
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCategory(StrEnum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    CONFLICT = "conflict"
    STATE_VIOLATION = "state_violation"
    TRANSIENT = "transient"


class DomainError(Exception):
    """Base class for every recoverable business or store failure."""

    category: ErrorCategory = ErrorCategory.VALIDATION

    @property
    def retryable(self) -> bool:
        return self.category == ErrorCategory.TRANSIENT


class NotFoundError(DomainError):
    category = ErrorCategory.NOT_FOUND


class ValidationFailed(DomainError):
    category = ErrorCategory.VALIDATION


class AuthorizationError(DomainError):
    category = ErrorCategory.AUTHORIZATION


class ConflictError(DomainError):
    category = ErrorCategory.CONFLICT


class StateViolation(DomainError):
    category = ErrorCategory.STATE_VIOLATION


class TransientStoreError(DomainError):
    """The store timed out or was busy; the operation is safe to retry."""

    category = ErrorCategory.TRANSIENT


class ConcurrencyConflict(TransientStoreError):
    """A guarded write lost a race against another transaction."""


class IntegrityConflict(ConflictError):
    """A unique or foreign-key constraint rejected the staged changes."""
