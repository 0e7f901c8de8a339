"""Exception handlers mapping Tax Scanner errors to HTTP responses.

Every error body has the shape ``{"error": "<message>"}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from taxscanner.errors import (
    ConfigurationError,
    LayoutError,
    TaxScannerError,
    UpstreamFetchError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[TaxScannerError], int] = {
    UpstreamFetchError: status.HTTP_502_BAD_GATEWAY,
    LayoutError: status.HTTP_502_BAD_GATEWAY,
    ConfigurationError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_code_for(exc: TaxScannerError) -> int:
    for error_type, code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def format_validation_error(exc: RequestValidationError) -> str:
    """One line per invalid parameter, e.g. "query.state: Field required"."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(messages) or "Invalid request"


async def tax_scanner_error_handler(request: Request, exc: TaxScannerError) -> JSONResponse:
    code = status_code_for(exc)
    logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=code, content={"error": str(exc)})


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": format_validation_error(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaxScannerError, tax_scanner_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
