# src/mill_atlas/api/errors.py
"""Translate service exceptions into `{"success": false, "error": ...}` responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mill_atlas.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidLocaleError,
    MillAtlasError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

# Checked in order; the first matching base class wins.
STATUS_BY_ERROR: tuple[tuple[type[MillAtlasError], int], ...] = (
    (InvalidLocaleError, 400),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StorageError, 502),
)


def status_for(exc: MillAtlasError) -> int:
    for error_cls, status in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status
    return 500


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    msg = str(first.get("msg", "Invalid request"))
    if first.get("type") == "value_error":
        # raised by our own validators; already a user-facing message
        return msg.removeprefix("Value error, ")
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    return f"{'.'.join(loc)}: {msg}" if loc else msg


async def _handle_app_error(request: Request, exc: MillAtlasError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(
            "Unhandled service error",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        message = "An unexpected error occurred"
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            status=status,
            error_type=type(exc).__name__,
        )
        message = str(exc)
    return error_response(status, message)


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, _first_validation_message(exc))


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MillAtlasError, _handle_app_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
