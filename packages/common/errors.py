"""Error taxonomy and FastAPI handlers rendering the shared error shape.

Every failure leaves the service as::

    {"error": {"code": "NOT_FOUND", "message": "Drill not found"}}

with an optional ``details`` list for validation problems.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = logging.getLogger(__name__)

UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
NOT_FOUND = "NOT_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"

_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: VALIDATION_ERROR,
    status.HTTP_401_UNAUTHORIZED: UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: FORBIDDEN,
    status.HTTP_404_NOT_FOUND: NOT_FOUND,
    422: VALIDATION_ERROR,
}


class ApiError(Exception):
    """Base class for errors surfaced to API callers."""

    code = INTERNAL_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class Unauthorized(ApiError):
    code = UNAUTHORIZED
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"


class Forbidden(ApiError):
    code = FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient role"


class NotFound(ApiError):
    code = NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ValidationFailed(ApiError):
    code = VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input data"


def error_body(code: str, message: str, details: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """Build the `{"error": {...}}` payload."""
    err: dict[str, Any] = {"code": code, "message": message}
    if details:
        err["details"] = details
    return {"error": err}


async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(error_body(exc.code, exc.message, exc.details), status_code=exc.status_code)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _STATUS_CODES.get(exc.status_code, INTERNAL_ERROR)
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(error_body(code, message), status_code=exc.status_code, headers=exc.headers)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]
    return JSONResponse(
        error_body(VALIDATION_ERROR, "Invalid input data", details),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        error_body(INTERNAL_ERROR, "Internal server error"),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register handlers so every error leaves the app in the shared shape."""
    app.add_exception_handler(ApiError, _api_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(Exception, _unhandled_error)
