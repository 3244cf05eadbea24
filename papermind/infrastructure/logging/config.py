"""Environment-aware logging setup.

- Development / local: colored detailed console output.
- Staging: structured key=value console output, optional rotating file.
- Production: JSON console output, noisy third-party loggers quieted.
- Tests: a null handler at ERROR level.
"""

import contextvars
import logging
import uuid
from typing import List, Optional

from ..config.settings import EnvironmentOption, Settings, get_settings
from .handlers import create_console_handler, create_file_handler, create_null_handler

correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)

NOISY_LOGGERS = {
    "asyncpg": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "anthropic": logging.WARNING,
    "botocore": logging.WARNING,
    "boto3": logging.WARNING,
    "PIL": logging.WARNING,
}


def setup_logging_configuration() -> None:
    """Configure the root logger from application settings.

    Replaces any handlers already attached to the root logger.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        handlers = _production_handlers(settings)
    elif settings.ENVIRONMENT == EnvironmentOption.STAGING:
        handlers = _staging_handlers(settings)
    else:
        handlers = _development_handlers(settings)

    correlation_filter = CorrelationIdFilter()
    for handler in handlers:
        handler.addFilter(correlation_filter)
        root_logger.addHandler(handler)

    root_logger.setLevel(settings.LOG_LEVEL_INT)

    if settings.ENVIRONMENT in (EnvironmentOption.PRODUCTION, EnvironmentOption.STAGING):
        for logger_name, level in NOISY_LOGGERS.items():
            logging.getLogger(logger_name).setLevel(level)


def _file_handler(settings: Settings) -> logging.Handler:
    return create_file_handler(
        filepath=settings.LOG_FILE_PATH,
        format_type="structured",
        level=logging.DEBUG,
        max_bytes=settings.LOG_FILE_MAX_SIZE,
        backup_count=settings.LOG_FILE_BACKUP_COUNT,
    )


def _development_handlers(settings: Settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if settings.LOG_CONSOLE_ENABLED:
        handlers.append(create_console_handler(format_type="detailed", level=settings.LOG_LEVEL_INT, use_colors=True))
    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))
    return handlers


def _staging_handlers(settings: Settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if settings.LOG_CONSOLE_ENABLED:
        handlers.append(create_console_handler(format_type=settings.LOG_FORMAT, level=settings.LOG_LEVEL_INT))
    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))
    return handlers


def _production_handlers(settings: Settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if settings.LOG_CONSOLE_ENABLED:
        handlers.append(create_console_handler(format_type="json", level=settings.LOG_LEVEL_INT))
    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))
    return handlers


def configure_testing_logging() -> None:
    """Silence everything below ERROR; meant to be called from test fixtures."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(create_null_handler())
    root_logger.setLevel(logging.ERROR)


class CorrelationIdFilter(logging.Filter):
    """Stamps the current request's correlation id on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or "no-correlation"
        return True


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    """Bind a correlation id to the current context and return the reset token."""
    return correlation_id_var.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    correlation_id_var.reset(token)


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


def generate_correlation_id() -> str:
    return uuid.uuid4().hex
