"""Map domain errors onto HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tourguide.core.errors import (
    AccessDenied,
    ConflictError,
    DomainError,
    InvalidRequest,
    NotFoundError,
    StoreUnavailable,
)
from tourguide.db.session import STORE_FAILURES

logger = logging.getLogger(__name__)

_STATUS_BY_FAMILY: tuple[tuple[type[DomainError], int], ...] = (
    (InvalidRequest, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: DomainError) -> int:
    for family, status_code in _STATUS_BY_FAMILY:
        if isinstance(exc, family):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.warning("%s on %s: %s", exc.code, request.url.path, exc.message)
        body = {"detail": exc.message, "code": exc.code, **exc.details}
        headers = {"Retry-After": "1"} if exc.retryable else None
        return JSONResponse(body, status_code=status_code, headers=headers)

    async def store_failure_handler(request: Request, exc: Exception) -> JSONResponse:
        return await domain_error_handler(
            request, StoreUnavailable("Storage is temporarily unavailable")
        )

    for failure in STORE_FAILURES:
        app.add_exception_handler(failure, store_failure_handler)


__all__ = ["register_error_handlers", "status_for"]
