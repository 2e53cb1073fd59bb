"""Error taxonomy and the handlers that turn errors into response envelopes."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FlowQuestError(Exception):
    """Base class for every error that is reported to the caller."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str = "", error: str | None = None):
        super().__init__(message or error or self.error)
        self.message = message
        if error is not None:
            self.error = error


class ValidationError(FlowQuestError):
    """Malformed or missing input fields."""

    status_code = 400
    error = "Validation failed"

    def __init__(self, field_errors=None, message: str = "", error: str | None = None):
        from flowquest.services.validation import format_errors

        self.field_errors = list(field_errors or [])
        super().__init__(message or format_errors(self.field_errors), error)


class NotFoundError(FlowQuestError):
    status_code = 404
    error = "Not found"


class MissingKeyError(FlowQuestError):
    """Upsert without a usable _id or a complete natural key."""

    status_code = 400
    error = "Either _id or (activity_id, user_id, session_id) is required"


class UpstreamProviderError(FlowQuestError):
    status_code = 500
    error = "Chat completion provider failed"


class ProviderQuotaError(UpstreamProviderError):
    status_code = 429
    error = "Chat completion provider quota exceeded"


class ProviderAuthError(UpstreamProviderError):
    status_code = 401
    error = "Chat completion provider rejected the credential"


class StoreError(FlowQuestError):
    status_code = 500
    error = "Database operation failed"


def _envelope(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body = {"success": False, "error": error}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=body)


async def _flowquest_error_handler(request: Request, exc: FlowQuestError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return _envelope(exc.status_code, exc.error, exc.message or None)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    from flowquest.services.validation import FieldError, format_errors

    field_errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        field = ".".join(str(part) for part in loc[1:]) or str(loc[0] if loc else "body")
        field_errors.append(FieldError(field, f"{field}: {err.get('msg')}"))
    return _envelope(400, ValidationError.error, format_errors(field_errors))


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail))


async def _store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return _envelope(StoreError.status_code, StoreError.error)


async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return _envelope(429, "Too many requests", f"Rate limit exceeded: {exc.detail}")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FlowQuestError, _flowquest_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(SQLAlchemyError, _store_error_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
