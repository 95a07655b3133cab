"""Domain errors and their HTTP rendering.

Services raise these instead of ``HTTPException`` so they stay usable outside
a request; ``register_exception_handlers`` turns them into JSON responses of
the form ``{"detail": <message>, "errors": [...]}``.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class OrderBoardError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Solicitud inválida"

    def __init__(self, message: str | None = None, *, errors: list[dict[str, Any]] | None = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(OrderBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Datos inválidos"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(errors=[{"field": field, "message": message}])


class NotFoundError(OrderBoardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Recurso no encontrado"


class UpstreamFailure(OrderBoardError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Servicio no disponible"

    def __init__(self, message: str | None = None, *, status_code: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if status_code is not None:
            self.status_code = status_code


class UnsupportedMedia(OrderBoardError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    default_message = "Solo se permiten archivos de imagen"

    def __init__(self, message: str | None = None, *, status_code: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if status_code is not None:
            self.status_code = status_code


async def _handle_orderboard_error(request: Request, exc: OrderBoardError) -> JSONResponse:
    extra = {"endpoint": request.url.path, "method": request.method, "status_code": exc.status_code}
    if isinstance(exc, UpstreamFailure):
        logger.error("upstream failure: %s", exc.message, exc_info=exc.__cause__ or exc, extra=extra)
    else:
        logger.warning("request rejected: %s", exc.message, extra=extra)

    content: dict[str, Any] = {"detail": exc.message}
    if exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


async def _handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    failure = UpstreamFailure("Base de datos no disponible")
    failure.__cause__ = exc
    return await _handle_orderboard_error(request, failure)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrderBoardError, _handle_orderboard_error)
    # lecturas que fallan fuera de los commits envueltos por los servicios
    app.add_exception_handler(SQLAlchemyError, _handle_database_error)
