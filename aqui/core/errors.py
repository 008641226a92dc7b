"""
Error taxonomy for live-session and vendor operations.

Services raise these; ``install_error_handlers`` maps them onto HTTP responses
so routers stay thin. Database failures are logged and surfaced as a generic
500 without the driver's message.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

MSG_INTERNAL_ERROR = "Internal server error"


class AquiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = MSG_INTERNAL_ERROR

    def __init__(self, detail: Any = None) -> None:
        self.detail = detail if detail is not None else self.default_detail
        super().__init__(str(self.detail))


class ValidationError(AquiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class AuthError(AquiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"


class PolicyError(AquiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not permitted"


class NotFoundError(AquiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictError(AquiError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class InternalError(AquiError):
    pass


def _render(exc: AquiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def _handle_aqui_error(request: Request, exc: AquiError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc)
        return _render(InternalError())
    return _render(exc)


async def _handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _render(InternalError())


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return _render(ValidationError(errors))


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AquiError, _handle_aqui_error)
    app.add_exception_handler(SQLAlchemyError, _handle_database_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
