"""
vibe_affiliate.errors

Application error taxonomy and FastAPI exception handlers.

Responsibilities:
- Define `AppError` (code/message/status/details) raised by routers and the provider boundary.
- Render every error as the standard `APIResponse` failure envelope.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from vibe_affiliate.domain.responses import APIResponse
from vibe_affiliate.observability.logging import get_logger

log = get_logger(__name__)


class ErrorCode(StrEnum):
    bad_request = "bad_request"
    unauthorized = "unauthorized"
    forbidden = "forbidden"
    not_found = "not_found"
    validation_error = "validation_error"
    invalid_url = "invalid_url"
    invalid_file = "invalid_file"
    invalid_signature = "invalid_signature"
    csrf_failed = "csrf_failed"
    conflict = "conflict"
    internal_error = "internal_error"


_STATUS_CODES: dict[int, ErrorCode] = {
    HTTP_400_BAD_REQUEST: ErrorCode.bad_request,
    HTTP_401_UNAUTHORIZED: ErrorCode.unauthorized,
    HTTP_403_FORBIDDEN: ErrorCode.forbidden,
    HTTP_404_NOT_FOUND: ErrorCode.not_found,
    HTTP_409_CONFLICT: ErrorCode.conflict,
    HTTP_422_UNPROCESSABLE_ENTITY: ErrorCode.validation_error,
}


class AppError(Exception):
    """
    Structured application error.

    `status_code` is the HTTP status the handler responds with; `details` is
    surfaced to clients, so keep secrets out of it.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        status_code: int = HTTP_400_BAD_REQUEST,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def to_response(self) -> APIResponse[Any]:
        return APIResponse.fail(self.code.value, self.message, details=self.details or None)

    @classmethod
    def not_found(cls, what: str) -> AppError:
        return cls(ErrorCode.not_found, f"{what} not found", status_code=HTTP_404_NOT_FOUND)


def _envelope(status_code: int, body: APIResponse[Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True, exclude_none=True)),
    )


async def _app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    log.info("app_error", code=exc.code.value, status_code=exc.status_code)
    return _envelope(exc.status_code, exc.to_response())


async def _http_error_handler(_: Request, exc: HTTPException) -> JSONResponse:
    code = _STATUS_CODES.get(exc.status_code, ErrorCode.internal_error)
    response = _envelope(exc.status_code, APIResponse.fail(code.value, str(exc.detail)))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return _envelope(
        HTTP_422_UNPROCESSABLE_ENTITY,
        APIResponse.fail(
            ErrorCode.validation_error.value,
            "Request validation failed",
            details={"errors": exc.errors()},
        ),
    )


def internal_error_response(exc: Exception) -> JSONResponse:
    """Log `exc` and render the generic 500 envelope; exception text never reaches clients."""
    log.exception("unhandled_error", error_type=type(exc).__name__)
    return _envelope(
        HTTP_500_INTERNAL_SERVER_ERROR,
        APIResponse.fail(ErrorCode.internal_error.value, "Internal server error"),
    )


async def _unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    return internal_error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)


# --- Module Notes -----------------------------------------------------------
# FastAPI's HTTPException subclasses Starlette's, so auth dependencies that raise
# HTTPException (401/403) still render through the envelope handler above.
# Unhandled exceptions are normally turned into a 500 by `SecurityHeadersMiddleware`
# so the response still gets security headers; the `Exception` handler covers
# apps assembled without it.
