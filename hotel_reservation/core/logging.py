"""
Logging Configuration and Utilities

Structured logging built on structlog and the standard logging module.
Events are rendered as JSON (python-json-logger) or as coloured console
lines (colorlog). Admin sessions bind their session id and the logged-in
admin through context variables so every event emitted on a session
thread carries them.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

import colorlog
import structlog
from pythonjsonlogger import jsonlogger

from hotel_reservation.config.settings import Settings

# Context variables for admin session tracking
session_id: ContextVar[Optional[str]] = ContextVar('session_id', default=None)
admin_user: ContextVar[Optional[str]] = ContextVar('admin_user', default=None)


class SessionContextProcessor:
    """Add admin session context to log records"""

    def __init__(self, environment: str = "development"):
        self.environment = environment

    def __call__(self, logger, method_name, event_dict):
        sid = session_id.get()
        if sid:
            event_dict['session_id'] = sid

        admin = admin_user.get()
        if admin:
            event_dict['admin'] = admin

        event_dict['service'] = 'hotel-reservation'
        event_dict['environment'] = self.environment
        return event_dict


class SecurityLogProcessor:
    """Mask sensitive values before they reach any handler"""

    sensitive_keys = ('password', 'secret', 'token', 'credentials')

    def __call__(self, logger, method_name, event_dict):
        self._sanitize_event_dict(event_dict)
        return event_dict

    def _sanitize_event_dict(self, event_dict: Dict[str, Any]):
        for key in list(event_dict.keys()):
            if any(sensitive in key.lower() for sensitive in self.sensitive_keys):
                event_dict[key] = '[REDACTED]'
            elif isinstance(event_dict[key], dict):
                self._sanitize_event_dict(event_dict[key])


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter for structured logging"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['thread'] = record.threadName

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)


def _build_handler(settings: Settings) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT == "json":
        handler.setFormatter(CustomJsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
    else:
        handler.setFormatter(
            colorlog.ColoredFormatter(
                '%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                log_colors={
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                },
            )
        )
    return handler


def configure_logging(settings: Settings) -> None:
    """Configure standard logging and structlog for the application"""
    log_level = getattr(logging, settings.LOG_LEVEL)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(_build_handler(settings))

    # SQL echo is controlled by DB_ECHO, keep the engine logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DB_ECHO else logging.WARNING
    )

    processors = [
        SessionContextProcessor(settings.ENVIRONMENT),
        SecurityLogProcessor(),
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance"""
    return structlog.get_logger(name)


@contextmanager
def session_log_context(sid: str) -> Iterator[None]:
    """Bind an admin session id (and clear the admin) for the current thread"""
    sid_token = session_id.set(sid)
    admin_token = admin_user.set(None)
    try:
        yield
    finally:
        admin_user.reset(admin_token)
        session_id.reset(sid_token)


def bind_admin(username: Optional[str]) -> None:
    """Record (or clear, with None) the admin logged in on this session"""
    admin_user.set(username)
