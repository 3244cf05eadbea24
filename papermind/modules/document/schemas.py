"""Pydantic schemas for document entities."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..common.schemas import CamelModel, Priority


class DocumentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"


# Target statuses reachable from each status. Terminal statuses only accept
# themselves so repeated writes of the same result stay idempotent.
ALLOWED_STATUS_TRANSITIONS: Dict[DocumentStatus, FrozenSet[DocumentStatus]] = {
    DocumentStatus.PENDING: frozenset(DocumentStatus),
    DocumentStatus.PROCESSING: frozenset(
        {DocumentStatus.PROCESSING, DocumentStatus.PROCESSED, DocumentStatus.FAILED}
    ),
    DocumentStatus.PROCESSED: frozenset({DocumentStatus.PROCESSED}),
    DocumentStatus.FAILED: frozenset({DocumentStatus.FAILED}),
}

TERMINAL_STATUSES = frozenset({DocumentStatus.PROCESSED, DocumentStatus.FAILED})


class ActionItem(CamelModel):
    """A task the analyzer found in a document.

    ``due_date`` is kept exactly as the model produced it and may not be a
    valid date.
    """

    task: Annotated[str, Field(min_length=1)]
    due_date: Optional[str] = None
    priority: Optional[Priority] = None

    @field_validator("priority", mode="before")
    @classmethod
    def _unknown_priority_is_none(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return value if value in Priority._value2member_map_ else None
        return value


class DocumentRead(CamelModel):
    """Schema for reading document data."""

    id: int
    owner_id: str
    title: str
    original_filename: str
    mime_type: str
    storage_key: str
    status: DocumentStatus
    summary: Optional[str] = None
    action_items: List[ActionItem] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    failure_reason: Optional[str] = None
    uploaded_at: datetime
    updated_at: Optional[datetime] = None


class DocumentCreateInternal(BaseModel):
    owner_id: str
    title: str
    original_filename: str
    mime_type: str
    storage_key: str
    status: str = DocumentStatus.PENDING.value


class DocumentAnalysisUpdate(BaseModel):
    """Partial update written by the pipeline.

    Only fields that were explicitly set are written; the rest keep their
    stored values.
    """

    summary: Optional[str] = None
    action_items: Optional[List[ActionItem]] = None
    tags: Optional[List[str]] = None
    status: Optional[DocumentStatus] = None
    failure_reason: Optional[str] = None


class DocumentAnalysis(BaseModel):
    """Structured result of analyzing a document's text."""

    summary: str
    action_items: List[ActionItem] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class QuestionRequest(CamelModel):
    question: Annotated[str, Field(min_length=1, max_length=4000)]

    @field_validator("question")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("question must not be blank")
        return value


class AnswerResponse(CamelModel):
    answer: str


class ActionItemReminderCreate(ActionItem):
    """Body for turning one action item into a reminder."""

    description: Optional[str] = None
