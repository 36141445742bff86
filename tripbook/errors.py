"""
Domain errors raised by the services and rendered by the API layer.
"""
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class DomainError(Exception):
    """Base error for booking, payment and contact operations."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class InvalidArgumentError(DomainError):
    """Malformed input, invalid enum value or exceeded cap."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(DomainError):
    """Caller is authenticated but not allowed to touch the entity."""

    status_code = status.HTTP_403_FORBIDDEN


class InternalError(DomainError):
    """Unexpected persistence or integration failure."""


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message, "code": exc.code},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": message, "code": "InvalidArgumentError"},
        )
