"""Pydantic schemas for reminders."""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field

from ..common.schemas import CamelModel, Priority, TimestampSchema


class ReminderCreate(CamelModel):
    """Body for creating a reminder. The owner always comes from the caller's identity."""

    title: Annotated[str, Field(min_length=1, max_length=255)]
    due_date: datetime
    document_id: Optional[int] = None
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM


class ReminderUpdate(CamelModel):
    """Reminders change only through completion, priority and due date."""

    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None


class ReminderRead(TimestampSchema):
    id: int
    owner_id: str
    document_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    due_date: datetime
    priority: Priority
    completed: bool


class ReminderCreateInternal(BaseModel):
    owner_id: str
    title: str
    due_date: datetime
    document_id: Optional[int] = None
    description: Optional[str] = None
    priority: str = Priority.MEDIUM.value
