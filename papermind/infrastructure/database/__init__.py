"""Database engine, session factory and shared model mixins."""

from .models import TimestampMixin, utcnow
from .session import Base, async_session, create_tables, dispose_engine, engine, local_session

__all__ = [
    "Base",
    "TimestampMixin",
    "async_session",
    "create_tables",
    "dispose_engine",
    "engine",
    "local_session",
    "utcnow",
]
