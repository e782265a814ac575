"""Render ``ServiceResponse`` envelopes as DRF responses."""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from modules.core.exceptions import ErrorCategory
from modules.core.repositories.interfaces import DEFAULT_PAGE_SIZE
from modules.core.responses import ServiceResponse

STATUS_BY_CATEGORY = {
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.STATE_VIOLATION: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.TRANSIENT: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def envelope_response(
    result: ServiceResponse, success_status: int = status.HTTP_200_OK
) -> Response:
    if result.success:
        return Response(result.model_dump(mode="json"), status=success_status)
    response = Response(
        result.model_dump(mode="json"),
        status=STATUS_BY_CATEGORY.get(result.error, status.HTTP_400_BAD_REQUEST),
    )
    if result.retryable:
        response["Retry-After"] = "1"
    return response


def paging_params(request) -> tuple[int, int]:
    """Read ``page`` / ``page_size`` query params; bad values fall back to defaults."""

    def _int(name: str, default: int) -> int:
        try:
            return int(request.query_params.get(name, default))
        except (TypeError, ValueError):
            return default

    return _int("page", 1), _int("page_size", DEFAULT_PAGE_SIZE)
