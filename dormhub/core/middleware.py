# dormhub/core/middleware.py
"""
Core middleware registration for the FastAPI application.

Provides request tracking, timing, security headers and error logging.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from dormhub.core.logging import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Adds a unique request ID to each incoming request.

    The ID is stored in ``request.state.request_id``, bound to the logging
    context and echoed back in the ``X-Request-ID`` response header.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Reuse an upstream request ID when a proxy supplied one
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())

        request.state.request_id = request_id
        bind_request_context(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            clear_request_context()

        response.headers[self.header_name] = request_id
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """Measures request processing time and logs completion."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        logger.info(
            "request_completed",
            request_id=getattr(request.state, "request_id", None),
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time=round(process_time, 4),
            client_host=request.client.host if request.client else None,
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds common security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Logs error responses and unhandled exceptions."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                request_id=getattr(request.state, "request_id", None),
                method=request.method,
                path=request.url.path,
                error_type=type(exc).__name__,
                exc_info=True,
            )
            raise

        if response.status_code >= 400:
            logger.warning(
                "request_error_status",
                request_id=getattr(request.state, "request_id", None),
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
        return response


def register_middlewares(app: FastAPI, include_security: bool = True) -> None:
    """
    Register all core middlewares on the application.

    Middlewares run in reverse order of registration; the request ID
    middleware is added last so it runs first.
    """
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(TimingMiddleware)
    if include_security:
        app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    logger.debug("core_middlewares_registered", include_security=include_security)


def get_request_id(request: Request) -> Optional[str]:
    """Return the request ID assigned by ``RequestIDMiddleware``, if any."""
    return getattr(request.state, "request_id", None)


__all__ = [
    "RequestIDMiddleware",
    "TimingMiddleware",
    "SecurityHeadersMiddleware",
    "ErrorLoggingMiddleware",
    "register_middlewares",
    "get_request_id",
]
