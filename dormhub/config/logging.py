"""
Logging configuration for the dormhub housing service.
Provides console and optional rotating-file handlers with text, colored
or JSON formatters.
"""

import logging
import logging.config
import os
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from dormhub.config.settings import settings
from dormhub.core.logging import configure_structlog, request_id_ctx, user_id_ctx


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with additional fields"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['environment'] = settings.ENVIRONMENT

        req_id = getattr(record, 'request_id', None) or request_id_ctx.get()
        if req_id:
            log_record['request_id'] = req_id

        uid = getattr(record, 'user_id', None) or user_id_ctx.get()
        if uid:
            log_record['user_id'] = uid

        if record.exc_info:
            log_record['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info)
            }


def build_logging_config() -> Dict[str, Any]:
    """Build the dictConfig for the current settings."""
    if settings.LOG_FORMAT == "json":
        console_formatter = 'json'
    elif settings.is_development():
        console_formatter = 'colored'
    else:
        console_formatter = 'standard'

    handlers: Dict[str, Any] = {
        'console': {
            'level': 'DEBUG' if settings.DEBUG else settings.LOG_LEVEL,
            'class': 'logging.StreamHandler',
            'formatter': console_formatter,
        },
    }
    root_handlers = ['console']

    if settings.LOG_FILE:
        log_dir = os.path.dirname(settings.LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers['json_file'] = {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': settings.LOG_FILE,
            'maxBytes': 10485760,  # 10MB
            'backupCount': 10,
            'formatter': 'json',
            'encoding': 'utf8',
        }
        root_handlers.append('json_file')

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'json': {
                '()': CustomJsonFormatter,
                'format': '%(timestamp)s %(level)s %(logger)s %(message)s'
            },
            'colored': {
                '()': 'colorlog.ColoredFormatter',
                'format': '%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'log_colors': {
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                },
            },
        },
        'handlers': handlers,
        'loggers': {
            '': {
                'handlers': root_handlers,
                'level': settings.LOG_LEVEL,
            },
            'sqlalchemy.engine': {
                'level': 'INFO' if settings.DB_ECHO else 'WARNING',
                'propagate': True,
            },
            'uvicorn.access': {
                'level': 'WARNING',
                'propagate': True,
            },
        },
    }


def setup_logging() -> logging.Logger:
    """Configure application logging"""
    logging.config.dictConfig(build_logging_config())
    configure_structlog(json_output=settings.LOG_FORMAT == "json")
    logger = logging.getLogger("dormhub")
    logger.info("Logging initialized with level: %s", settings.LOG_LEVEL)
    return logger
