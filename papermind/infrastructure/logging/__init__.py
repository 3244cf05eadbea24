"""Centralized logging infrastructure for PaperMind.

Every module obtains its logger through ``get_logger`` so the root logger is
configured exactly once, according to ``ENVIRONMENT`` and the ``LOG_*``
settings.

Usage:
    ```python
    from papermind.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Document stored", extra={"document_id": 12})
    ```
"""

from .config import (
    configure_testing_logging,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
    setup_logging_configuration,
)
from .factory import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "configure_testing_logging",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger",
    "reset_correlation_id",
    "set_correlation_id",
    "setup_logging_configuration",
]
