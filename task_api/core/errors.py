"""
Application error taxonomy.

Every failure a handler or pipeline stage can produce is an ``AppError``
carrying the HTTP status and the message rendered in the error envelope.
The exception handlers in ``task_api.api.errors`` turn them into responses.
"""

from typing import Dict, List, Optional

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(AppError):
    default_message = "Server is not configured"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class InvalidToken(Unauthorized):
    default_message = "Not authorized: invalid or expired token"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden: insufficient permissions"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class Conflict(BadRequest):
    default_message = "Duplicate value"


class MalformedIdentifier(BadRequest):
    default_message = "Invalid id"


class RequestValidationFailed(BadRequest):
    """Field-level rule violations, rendered as an ``errors`` list."""

    default_message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__()
        self.errors = errors
