"""Domain exceptions and the handlers that render them as JSON envelopes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

logger = structlog.get_logger()

# PostgreSQL SQLSTATE codes for constraint violations
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"
PG_NOT_NULL_VIOLATION = "23502"

_STATUS_ERRORS = {
    400: "bad_request",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    422: "validation_error",
    429: "rate_limited",
    500: "internal_error",
}


class OversightError(Exception):
    """Base class for errors raised by the oversight service."""

    status_code = 500
    error = "internal_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(OversightError):
    status_code = 404
    error = "not_found"


class ConflictError(OversightError):
    """A uniqueness rule was violated."""

    status_code = 409
    error = "conflict"


class ReferenceViolationError(OversightError):
    """A record points at a parent that does not exist."""

    status_code = 400
    error = "invalid_reference"


class InvalidTransitionError(OversightError):
    """A status change is not allowed from the record's current state."""

    status_code = 409
    error = "invalid_transition"


def error_body(error: str, message: str, details: Any = None) -> dict[str, Any]:
    """Build the standard failure envelope."""
    body: dict[str, Any] = {"success": False, "error": error, "message": message}
    if details:
        body["details"] = details
    return body


async def oversight_error_handler(request: Request, exc: OversightError) -> JSONResponse:
    logger.warning(
        "request_failed",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        error=exc.error,
        message=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error, exc.message, exc.details),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    error = _STATUS_ERRORS.get(exc.status_code, "http_error")
    message = exc.detail if isinstance(exc.detail, str) else error.replace("_", " ")
    details = None if isinstance(exc.detail, str) else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error, message, details),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request validation failures are reported as 400 with per-field details."""
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body("validation_error", "Invalid request data provided", details),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Translate database constraint violations by their SQLSTATE code."""
    pgcode = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if pgcode == PG_UNIQUE_VIOLATION:
        status_code, error, message = 409, "conflict", "Record already exists"
    elif pgcode in (PG_FOREIGN_KEY_VIOLATION, PG_NOT_NULL_VIOLATION):
        status_code, error, message = 400, "invalid_reference", "Referenced record is missing"
    else:
        status_code, error, message = 500, "database_error", "Database operation failed"

    logger.warning("integrity_error", path=request.url.path, pgcode=pgcode, status_code=status_code)
    return JSONResponse(status_code=status_code, content=error_body(error, message))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        exc_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=error_body("internal_error", "Internal server error occurred"),
    )


def configure_error_handlers(app: FastAPI) -> None:
    """Register every exception handler on the application."""
    app.add_exception_handler(OversightError, oversight_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
