from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"
INVALID_PARAMS_MESSAGE = "Parâmetros inválidos"


class ApplicationError(Exception):
    """Domain failure that maps onto an HTTP status and an ``{"error": ...}`` body."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_content(self) -> dict[str, object]:
        return {"error": self.message}

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.to_content())


class ValidationFailed(ApplicationError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing

    def to_content(self) -> dict[str, object]:
        content = super().to_content()
        if self.missing:
            content["missing"] = list(self.missing)
        return content


class ConflictError(ApplicationError):
    # Duplicate resources are reported as plain validation failures.
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationFailed(ApplicationError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    logger.warning(
        "application error: %s",
        exc.message,
        extra={"path": request.url.path, "method": request.method, "status": exc.status_code},
    )
    return exc.to_response()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(
        "rejected request parameters",
        extra={"path": request.url.path, "extra_fields": {"errors": exc.errors()}},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": INVALID_PARAMS_MESSAGE},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled error: %r",
        exc,
        extra={"path": request.url.path, "method": request.method},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "ApplicationError",
    "AuthenticationFailed",
    "ConflictError",
    "NotFoundError",
    "ValidationFailed",
    "register_exception_handlers",
]
