# offer_service/api/error_handlers.py
"""Turns OfferServiceError subclasses into JSON error responses."""
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from offer_service.core.exceptions import (
    AdapterError,
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    OfferServiceError,
    PartialFailureError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses first.
STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (InvalidTransitionError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PartialFailureError, status.HTTP_207_MULTI_STATUS),
    (AdapterError, status.HTTP_503_SERVICE_UNAVAILABLE),
)

RETRY_AFTER_SECONDS = "5"


def status_code_for(exc: OfferServiceError) -> int:
    for exc_type, code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def offer_service_error_handler(request: Request, exc: OfferServiceError) -> JSONResponse:
    code = status_code_for(exc)
    if code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.error_code} {exc.message}"
        )
    else:
        logger.info(f"{request.method} {request.url.path} -> {code} {exc.error_code}")

    headers = {"Retry-After": RETRY_AFTER_SECONDS} if isinstance(exc, AdapterError) else None
    return JSONResponse(
        status_code=code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
        headers=headers,
    )
