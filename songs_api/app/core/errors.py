"""
Application errors and FastAPI exception handlers.

Services raise subclasses of ``AppError``; the handlers registered by
``register_exception_handlers`` turn them into JSON responses of the
form ``{key: detail, **extra}``.  Most errors use ``message`` as the
key, a few lookups answer with ``error`` to keep the public envelope
stable.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from fastapi import FastAPI, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        key: str = "message",
        headers: Optional[Dict[str, str]] = None,
        **extra: Any,
    ) -> None:
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        self.key = key
        self.headers = headers
        self.extra = extra
        super().__init__(detail)

    def to_content(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {self.key: self.detail}
        content.update(self.extra)
        return content


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials (401)."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "No autenticado", **kwargs: Any) -> None:
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(detail, **kwargs)


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class ValidationError(AppError):
    status_code = 422


class InternalServerError(AppError):
    """Unexpected failure; the underlying message is passed through."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(
            "Error interno del servidor",
            key="error",
            ok=False,
            message=message,
        )


class DuplicateRecordError(Exception):
    """Raised by repositories when a unique index rejects a write."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Duplicate value for {field}")


@contextmanager
def internal_errors(action: str) -> Iterator[None]:
    """Convert unexpected exceptions raised inside the block into a 500.

    ``AppError`` instances propagate unchanged.  Anything else is logged
    with its traceback under ``action`` and re-raised as
    ``InternalServerError`` carrying the original message.
    """
    try:
        yield
    except AppError:
        raise
    except Exception as exc:
        logger.exception("%s: %s", action, exc)
        raise InternalServerError(str(exc)) from exc


def register_exception_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on ``app``."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_content(),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "message": "Completar los campos correctamente",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return PlainTextResponse(
                f"No está disponible este endpoint: {request.url.path}",
                status_code=status.HTTP_404_NOT_FOUND,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )
