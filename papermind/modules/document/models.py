"""SQLAlchemy models for document entities."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import utcnow
from ...infrastructure.database.session import Base


class Document(Base):
    """An uploaded file and the analysis derived from it.

    ``storage_key`` points at the raw bytes in the object store and never
    changes after creation. ``summary``, ``action_items`` and ``tags`` are
    written by the pipeline together with the status.
    """

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    owner_id: Mapped[str] = mapped_column(String(255), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    original_filename: Mapped[str] = mapped_column(String(255))
    mime_type: Mapped[str] = mapped_column(String(255))
    storage_key: Mapped[str] = mapped_column(String(1024), unique=True)
    status: Mapped[str] = mapped_column(String(32), default="pending", index=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, default=None)
    action_items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default_factory=list, nullable=False)
    tags: Mapped[List[str]] = mapped_column(JSON, default_factory=list, nullable=False)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, default=None)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default_factory=utcnow, nullable=False, init=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default_factory=utcnow, nullable=False, init=False
    )
