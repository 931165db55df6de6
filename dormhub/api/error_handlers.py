# dormhub/api/error_handlers.py
"""
Centralized API error handlers.

Every failure is rendered as the standard envelope
``{"success": false, "message", "error", "details"}`` with a stable
error code.
"""
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from dormhub.config.settings import settings
from dormhub.core.exceptions import ErrorCode
from dormhub.core.logging import get_logger
from dormhub.schemas.common.response import ErrorResponse
from dormhub.services.common.errors import ServiceError

logger = get_logger(__name__)


def _envelope(status_code: int, message: str, code: ErrorCode, details: Any = None) -> JSONResponse:
    body = ErrorResponse.create(message=message, error=code.value, details=details)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle ServiceError and subclasses."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "service_error",
        error_code=exc.error_code.value,
        status_code=exc.status_code,
        path=request.url.path,
        message=exc.message,
    )
    return _envelope(exc.status_code, exc.message, exc.error_code, exc.details or None)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields: List[Dict[str, Any]] = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    logger.info("request_validation_failed", path=request.url.path, errors=len(fields))
    return _envelope(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Request validation failed",
        ErrorCode.VALIDATION_ERROR,
        {"errors": fields},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("integrity_error", path=request.url.path, error=str(exc.orig))
    return _envelope(
        status.HTTP_409_CONFLICT,
        "Operation conflicts with existing data",
        ErrorCode.CONFLICT,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=True,
    )
    details = None
    if not settings.is_production():
        details = {"type": type(exc).__name__, "error": str(exc)}
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An internal error occurred. Please try again later.",
        ErrorCode.INTERNAL_ERROR,
        details,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "register_exception_handlers",
    "service_error_handler",
    "request_validation_handler",
    "integrity_error_handler",
    "unhandled_exception_handler",
]
