"""Map domain exceptions to HTTP responses"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bilty_ledger.api.dependencies import get_request_id
from bilty_ledger.domain.exceptions import (
    ConcurrentUpdateError,
    DomainException,
    DuplicateOptionError,
    RecordNotFoundError,
    StoreError,
    ValidationError,
)

_STATUS = [
    (ValidationError, 422),
    (RecordNotFoundError, 404),
    (DuplicateOptionError, 409),
    (ConcurrentUpdateError, 409),
    (StoreError, 503),
]


def status_for(exc: DomainException) -> int:
    for exc_type, status in _STATUS:
        if isinstance(exc, exc_type):
            return status
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status = status_for(exc)
    request_id = get_request_id(request)
    if status >= 500:
        logging.error(f"Store error: {exc}", extra={"request_id": request_id})
        detail = "Record store unavailable" if isinstance(exc, StoreError) else "Internal server error"
    else:
        logging.warning(f"Request rejected: {exc}", extra={"request_id": request_id})
        detail = str(exc)
    return JSONResponse(status_code=status, content={"detail": detail, "error": exc.__class__.__name__})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
