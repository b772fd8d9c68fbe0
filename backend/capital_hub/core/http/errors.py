from __future__ import annotations

from fastapi import HTTPException, status

from capital_hub.shared.exceptions import (
    AppError,
    ConcurrencyConflict,
    ConsistencyViolation,
    NotFound,
    ValidationError,
)

_STATUS_BY_ERROR: list[tuple[type[AppError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (ConcurrencyConflict, status.HTTP_409_CONFLICT),
    (ConsistencyViolation, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def to_http_exception(exc: AppError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
