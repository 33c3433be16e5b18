from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)
from pydantic import BaseModel

from app.core.logging import get_logger


class ErrorKind(str, Enum):
    """Closed set of failure classes a request can end in."""
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


class ServiceError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind: ErrorKind = kind
        self.message: str = message

    @classmethod
    def not_found(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def unavailable(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.UNAVAILABLE, message)


class StartupError(RuntimeError):
    """The database never answered the liveness probe before the deadline."""


class ErrorBody(BaseModel):
    """Structured error body."""
    error: str


def status_for(kind: ErrorKind) -> int:
    match kind:
        case ErrorKind.VALIDATION:
            return HTTP_400_BAD_REQUEST
        case ErrorKind.NOT_FOUND:
            return HTTP_404_NOT_FOUND
        case ErrorKind.UNAVAILABLE:
            return HTTP_503_SERVICE_UNAVAILABLE


def _format_location(loc: Sequence[Any]) -> str:
    # ("body", "name") -> "name", ("path", "id") -> "id"
    parts = [str(p) for p in loc if p not in ("body", "path", "query")]
    return ".".join(parts) or "body"


def _format_validation_errors(errors: Sequence[Mapping[Any, Any]]) -> str:
    """Flatten pydantic errors into "<field>: <rule>" messages."""
    messages: list[str] = []
    for error in errors:
        if error.get("type") == "json_invalid":
            loc = "body"
        else:
            loc = _format_location(error.get("loc", ()))
        messages.append(f"{loc}: {error.get('msg', 'invalid value')}")
    return "; ".join(messages) or "Invalid request"


def _error_response(status_code: int, message: str) -> JSONResponse:
    body = ErrorBody(error=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Register centralized exception."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        logger = get_logger(__name__, request)
        status_code = status_for(exc.kind)
        if exc.kind is ErrorKind.UNAVAILABLE:
            logger.error("Database unavailable: %s", exc.message)
        else:
            logger.info("%s: %s", exc.kind.value, exc.message)
        return _error_response(status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.warning("HTTP error", extra={"status_code": exc.status_code})
        message = str(exc.detail) if exc.detail else "HTTP error"
        response = _error_response(exc.status_code, message)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger = get_logger(__name__, request)
        message = _format_validation_errors(exc.errors())
        logger.info("Validation error: %s", message)
        return _error_response(status_for(ErrorKind.VALIDATION), message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.exception("Unhandled server error", exc_info=exc)
        return _error_response(HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")
