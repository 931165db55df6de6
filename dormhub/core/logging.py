"""
Structured logging utilities.

Request-scoped context (request id, acting user) lives in context variables
set by the HTTP middleware; structlog processors copy it into every event.
"""

from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from dormhub.config.settings import settings

# Context variables for request tracking
request_id_ctx: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_ctx: ContextVar[Optional[str]] = ContextVar('user_id', default=None)

_SENSITIVE_KEYS = (
    'password', 'token', 'secret', 'authorization', 'cookie', 'credentials',
)


class RequestContextProcessor:
    """Add request context to log records"""

    def __call__(self, logger, method_name, event_dict):
        req_id = request_id_ctx.get()
        if req_id:
            event_dict['request_id'] = req_id

        uid = user_id_ctx.get()
        if uid:
            event_dict['user_id'] = uid

        event_dict['timestamp'] = datetime.now(timezone.utc).isoformat()
        event_dict['service'] = 'dormhub'
        event_dict['environment'] = settings.ENVIRONMENT

        return event_dict


class SensitiveDataProcessor:
    """Mask values whose keys look like credentials"""

    def __call__(self, logger, method_name, event_dict):
        self._sanitize(event_dict)
        return event_dict

    def _sanitize(self, event_dict: Dict[str, Any]) -> None:
        for key in list(event_dict.keys()):
            if any(sensitive in key.lower() for sensitive in _SENSITIVE_KEYS):
                event_dict[key] = '[REDACTED]'
            elif isinstance(event_dict[key], dict):
                self._sanitize(event_dict[key])


def configure_structlog(json_output: bool = False) -> None:
    """Configure structlog to render through the stdlib logging handlers."""
    processors = [
        structlog.stdlib.filter_by_level,
        RequestContextProcessor(),
        SensitiveDataProcessor(),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.processors.KeyValueRenderer(
            key_order=['event', 'request_id', 'user_id'],
            drop_missing=True,
        ))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger bound to the stdlib logger ``name``."""
    return structlog.get_logger(name)


def bind_request_context(
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    if request_id is not None:
        request_id_ctx.set(request_id)
    if user_id is not None:
        user_id_ctx.set(user_id)


def clear_request_context() -> None:
    request_id_ctx.set(None)
    user_id_ctx.set(None)
