"""Helpers for building the structured error payloads returned by the API.

Every payload carries the current request id and a timezone-aware timestamp.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from fastapi.responses import JSONResponse

from backend.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from backend.utils.request_context import get_request_id

__all__ = [
    "build_error_response",
    "build_validation_error_response",
    "to_json_response",
]


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def build_validation_error_response(
    *,
    errors: Sequence[ValidationErrorDetail],
    message: str,
    detail: str,
    status_code: int,
    path: str,
) -> ValidationErrorResponse:
    return ValidationErrorResponse(
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=get_request_id() or None,
        path=path,
        errors=list(errors),
    )


def build_error_response(
    *,
    error_type: ErrorType,
    message: str,
    detail: str,
    status_code: int,
    path: str,
    retry_after: int | None = None,
) -> ErrorResponse:
    """Construct an ``ErrorResponse``; ``retry_after`` is only set for retryable failures."""

    return ErrorResponse(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=get_request_id() or None,
        path=path,
        retry_after=retry_after,
    )


def to_json_response(payload: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=payload.status_code,
        content=payload.model_dump(mode="json"),
    )
