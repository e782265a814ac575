"""Uniform response envelope returned by every lifecycle operation.

``ServiceResponse`` carries either a payload or a categorised failure.
``run_enveloped`` is the single boundary where domain exceptions, input
validation errors and store failures become envelopes; anything else is
a programming error and propagates.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Optional, TypeVar

import structlog
from django.db import DatabaseError
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from modules.core.exceptions import DomainError, ErrorCategory

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ServiceResponse(BaseModel, Generic[T]):
    """Immutable success/failure envelope."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    data: Optional[T] = None
    error: Optional[ErrorCategory] = None
    retryable: bool = False

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> ServiceResponse:
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(
        cls, category: ErrorCategory, message: str, retryable: bool = False
    ) -> ServiceResponse:
        return cls(success=False, message=message, error=category, retryable=retryable)

    @classmethod
    def from_error(cls, exc: DomainError) -> ServiceResponse:
        return cls.fail(exc.category, str(exc), retryable=exc.retryable)


def format_validation_error(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into ``field: message`` pairs."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def run_enveloped(
    operation: str,
    func: Callable[[], Any],
    success_message: str | Callable[[Any], str] = "",
    **log_context: Any,
) -> ServiceResponse:
    """Invoke ``func`` and wrap its outcome in a ``ServiceResponse``."""
    log = logger.bind(operation=operation, **log_context)
    try:
        data = func()
    except DomainError as exc:
        log.warning(
            f"{operation}.rejected",
            error=exc.category.value,
            reason=str(exc),
            retryable=exc.retryable,
        )
        return ServiceResponse.from_error(exc)
    except PydanticValidationError as exc:
        message = format_validation_error(exc)
        log.warning(f"{operation}.invalid_input", reason=message)
        return ServiceResponse.fail(ErrorCategory.VALIDATION, message)
    except DatabaseError as exc:
        log.error(f"{operation}.store_failure", error_type=type(exc).__name__)
        return ServiceResponse.fail(
            ErrorCategory.TRANSIENT,
            "The data store is temporarily unavailable. Please retry.",
            retryable=True,
        )

    message = success_message(data) if callable(success_message) else success_message
    return ServiceResponse.ok(data, message)
