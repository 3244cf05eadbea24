"""Logger factory that configures logging lazily on first use."""

import inspect
import logging
from threading import Lock
from typing import Optional, Union

from ..config.settings import get_settings
from .config import setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


def get_logger(name: Optional[str] = None, **extra_context) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a logger, configuring the logging system first if needed.

    Args:
        name: Logger name. Defaults to the calling module's ``__name__``.
        **extra_context: Fields attached to every record from this logger.

    Returns:
        A logger, or a ``LoggerAdapter`` when extra context is given.
    """
    configure_logging()

    if name is None:
        name = _detect_calling_module()

    logger = logging.getLogger(name)
    if extra_context:
        return logging.LoggerAdapter(logger, extra_context)
    return logger


def configure_logging() -> None:
    """Configure the logging system once per process."""
    global _logging_configured

    if _logging_configured:
        return

    with _configuration_lock:
        if _logging_configured:
            return
        setup_logging_configuration()
        _logging_configured = True

    settings = get_settings()
    logging.getLogger(__name__).debug(
        f"Logging configured for {settings.ENVIRONMENT.value} environment",
        extra={"log_level": settings.LOG_LEVEL, "log_format": settings.LOG_FORMAT},
    )


def _detect_calling_module() -> str:
    frame = inspect.currentframe()
    try:
        caller = frame.f_back.f_back if frame is not None and frame.f_back is not None else None
        if caller is None:
            return "papermind"
        return str(caller.f_globals.get("__name__", "papermind"))
    finally:
        del frame
