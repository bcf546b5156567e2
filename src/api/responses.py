"""Uniform response envelope.

Every API response body, success or failure, has the same shape::

    {"success": bool, "status_code": int, "data": ..., "message": str, "errors": [...]}

and the HTTP status equals ``status_code``. Handlers return ``ok(...)``;
failures are raised as ``AppError`` and turned into ``fail(...)`` by the
exception handlers installed with ``register_exception_handlers``.
"""

from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.utils.errors import AppError, UpstreamError
from src.utils.logging import get_logger

logger = get_logger(__name__)


class Envelope(BaseModel):
    success: bool
    status_code: int
    data: Any = None
    message: str
    errors: list[Any] = Field(default_factory=list)


class EnvelopeResponse(JSONResponse):
    """JSON response carrying an Envelope; HTTP status mirrors the envelope."""

    def __init__(self, envelope: Envelope, headers: dict[str, str] | None = None) -> None:
        self.envelope = envelope
        super().__init__(
            content=jsonable_encoder(envelope),
            status_code=envelope.status_code,
            headers=headers,
        )


def ok(status_code: int = 200, payload: Any = None, message: str = "Success") -> EnvelopeResponse:
    return EnvelopeResponse(
        Envelope(
            success=status_code < 400,
            status_code=status_code,
            data=jsonable_encoder(payload),
            message=message,
        )
    )


def fail(
    status_code: int,
    message: str,
    details: list[Any] | None = None,
    headers: dict[str, str] | None = None,
) -> EnvelopeResponse:
    return EnvelopeResponse(
        Envelope(
            success=status_code < 400,
            status_code=status_code,
            data=None,
            message=message,
            errors=list(details or []),
        ),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> EnvelopeResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return fail(exc.status_code, exc.message, exc.details)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> EnvelopeResponse:
    fields = sorted({
        ".".join(str(part) for part in err["loc"] if part not in ("body", "query", "path", "form"))
        or str(err["loc"][0])
        for err in exc.errors()
    })
    return fail(400, f"Invalid or missing fields: {', '.join(fields)}", fields)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> EnvelopeResponse:
    headers = getattr(exc, "headers", None)
    return fail(exc.status_code, str(exc.detail), headers=headers)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> EnvelopeResponse:
    # Raw driver messages stay in the logs
    logger.exception(f"{request.method} {request.url.path}: database error")
    error = UpstreamError("Database operation failed")
    return fail(error.status_code, error.message)


async def unhandled_error_handler(request: Request, exc: Exception) -> EnvelopeResponse:
    logger.exception(f"{request.method} {request.url.path}: unhandled error")
    return fail(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, database_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
