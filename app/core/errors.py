"""Error taxonomy and the JSON error envelope.

Every failure leaves the API as::

    {"error": {"code": ..., "message": ..., "details": ..., "timestamp": ...}}

Not-found and business-rule checks raise before any write. Anything that
blows up inside a write or a report query is caught by ``guarded`` and
reported with a generic code so internals never reach the client.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors rendered in the error envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class NotFoundError(AppError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ValidationFailed(AppError):
    """Field constraints violated."""

    status_code = 422

    def __init__(self, details: dict[str, list[str]], message: str = "Validation failed") -> None:
        super().__init__("VALIDATION_ERROR", message, details)


class BusinessRuleError(AppError):
    """A referential, capacity or uniqueness guard tripped."""

    status_code = 422


class ServerError(AppError):
    """Unexpected failure, cause hidden from the client."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


HTTP_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def error_body(code: str, message: str, details: dict[str, Any] | None = None) -> dict:
    """Build the error envelope."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    error["timestamp"] = datetime.now(timezone.utc).isoformat()
    return {"error": error}


def validation_details(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic errors by field name."""
    details: dict[str, list[str]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        # Drop the "body"/"query"/"path" prefix FastAPI adds
        if len(loc) > 1 and loc[0] in ("body", "query", "path", "form"):
            loc = loc[1:]
        field = ".".join(loc) or "non_field"
        details.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return details


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.details),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_body(
            "VALIDATION_ERROR",
            "Validation failed",
            validation_details(exc.errors()),
        ),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("SERVER_ERROR", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope renderers on the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


@asynccontextmanager
async def guarded(db: AsyncSession, code: str, message: str) -> AsyncIterator[None]:
    """Roll back and downgrade unexpected failures in a block of session work.

    Wraps writes and read-only report queries alike.

    ``AppError`` raised inside the block propagates unchanged (after the
    rollback); anything else becomes a ``ServerError`` with ``code``.
    """
    try:
        yield
    except AppError:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("%s (%s)", message, code)
        raise ServerError(code, message) from None
