"""
Exception handlers.

Maps OnlySwapError subclasses to HTTP statuses and renders every error
with the same ``{error, message, details}`` body.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from modules.accounts.exceptions import AccountLockedError
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    OnlySwapError,
    ValidationError,
)

from .models import ErrorResponse, ValidationErrorResponse

logger = logging.getLogger(__name__)

# Checked in order; the first matching base wins.
STATUS_BY_ERROR: tuple[tuple[type[OnlySwapError], int], ...] = (
    (AccountLockedError, 423),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
    (ExternalServiceError, 500),
)


def status_for(exc: OnlySwapError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _server_error(details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="SERVER_ERROR", message="An error occurred", details=details or {}
        ).model_dump(),
    )


async def onlyswap_error_handler(request: Request, exc: OnlySwapError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
        service = getattr(exc, "service", None)
        return _server_error({"service": service} if service else None)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = {
        ".".join(str(part) for part in error["loc"] if part != "body"): error["msg"]
        for error in exc.errors()
    }
    return JSONResponse(
        status_code=400,
        content=ValidationErrorResponse(details={"errors": errors}).model_dump(),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _server_error()


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OnlySwapError, onlyswap_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
