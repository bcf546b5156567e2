"""Application error kinds.

Every error carries the HTTP status it maps to. They are raised anywhere
below the API layer and converted to the error envelope by the exception
handlers registered in ``src.main``.
"""

from typing import Any


class AppError(Exception):
    """Base class for errors that are reported to the client."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input. ``details`` lists the violated fields."""

    status_code = 400
    default_message = "Validation failed"


class InvalidReferenceError(AppError):
    """An entity id that is not structurally valid."""

    status_code = 400
    default_message = "Invalid id"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class PermissionDeniedError(AppError):
    """The actor does not own the record it tries to change."""

    status_code = 403
    default_message = "You do not have permission to modify this resource"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class UpstreamError(AppError):
    """A database or asset store call failed."""

    status_code = 500
    default_message = "Upstream service failed"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Not authenticated"
