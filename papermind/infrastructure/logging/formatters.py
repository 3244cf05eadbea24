"""Log formatters selected by ``LOG_FORMAT`` or by environment."""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Tuple, Type

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    for key, value in record.__dict__.items():
        if key not in _RESERVED_ATTRIBUTES:
            yield key, value


class SimpleFormatter(logging.Formatter):
    """``[LEVEL] logger: message``"""

    def __init__(self) -> None:
        super().__init__(fmt="[%(levelname)s] %(name)s: %(message)s")


class DetailedFormatter(logging.Formatter):
    """Timestamped console format used in development."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s [%(correlation_id)s]: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            defaults={"correlation_id": "no-correlation"},
        )


class StructuredFormatter(logging.Formatter):
    """Single-line ``key=value`` output, readable by people and log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage().replace('"', '\\"')
        parts = [
            f"timestamp={datetime.fromtimestamp(record.created, timezone.utc).isoformat()}",
            f"level={record.levelname}",
            f"logger={record.name}",
            f'message="{message}"',
        ]
        for key, value in _extra_fields(record):
            if isinstance(value, (int, float, bool)):
                parts.append(f"{key}={value}")
            else:
                parts.append(f'{key}="{value}"')

        if record.exc_info:
            parts.append('exception="{}"'.format(self.formatException(record.exc_info).replace("\n", "\\n")))

        return " ".join(parts)


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log aggregation in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line_number": record.lineno,
        }
        for key, value in _extra_fields(record):
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False)


def get_formatter(format_type: str) -> logging.Formatter:
    """Build a formatter by name.

    Raises:
        ValueError: If ``format_type`` is not one of simple, detailed, structured, json.
    """
    formatters: Dict[str, Type[logging.Formatter]] = {
        "simple": SimpleFormatter,
        "detailed": DetailedFormatter,
        "structured": StructuredFormatter,
        "json": JSONFormatter,
    }

    formatter_class = formatters.get(format_type.lower())
    if formatter_class is None:
        raise ValueError(f"Unknown format type: {format_type}. Available: {', '.join(formatters)}")

    return formatter_class()
