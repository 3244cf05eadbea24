"""SQLAlchemy models for user profiles."""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class User(Base, TimestampMixin):
    """Profile row for an identity issued by the external identity provider.

    ``id`` is the token subject; credentials never live here.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    preferences: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, default=None)
