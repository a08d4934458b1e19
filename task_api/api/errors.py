"""
Error translation stage.

Every failure leaves the app through one of these handlers, so clients only
ever see ``{success: false, error}`` or, for rule violations,
``{success: false, errors: [{field, message}]}``.
"""

import logging
import re

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, IntegrityError, StatementError
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_api.core.errors import AppError, RequestValidationFailed

logger = logging.getLogger(__name__)

# SQLite: "UNIQUE constraint failed: users.email"
# PostgreSQL: 'Key (email)=(a@x.com) already exists.'
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: ([\w., ]+)")
_POSTGRES_UNIQUE = re.compile(r"Key \(([^)]+)\)=")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def duplicate_fields(exc: IntegrityError) -> str:
    text = str(exc.orig)
    match = _SQLITE_UNIQUE.search(text)
    if match:
        return ", ".join(col.strip().split(".")[-1] for col in match.group(1).split(","))
    match = _POSTGRES_UNIQUE.search(text)
    if match:
        return match.group(1)
    return "unknown"


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


async def rule_violation_handler(request: Request, exc: RequestValidationFailed):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "errors": exc.errors},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Body or parameter parsing failures detected by FastAPI itself."""
    errors = []
    for error in exc.errors():
        loc = [str(x) for x in error.get("loc", ()) if x not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "body", "message": error.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "errors": errors},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    if "unique" in str(exc.orig).lower() or "duplicate" in str(exc.orig).lower():
        return error_response(
            status.HTTP_400_BAD_REQUEST, f"Duplicate value in: {duplicate_fields(exc)}"
        )
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid data")


async def statement_error_handler(request: Request, exc: StatementError):
    if isinstance(exc, DBAPIError):
        return await unhandled_error_handler(request, exc)
    # Values the store cannot bind, e.g. a malformed identifier
    logger.warning("Rejected statement on %s %s: %s", request.method, request.url.path, exc.orig)
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid id")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods are both "route not found"
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return error_response(
            status.HTTP_404_NOT_FOUND, f"Route not found: {request.method} {request.url.path}"
        )
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationFailed, rule_violation_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StatementError, statement_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
