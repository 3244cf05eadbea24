"""Ingestion orchestrator: the upload pipeline, follow-up questions and reminders.

All ownership checks live here. A missing resource is reported before a
foreign one: 404 first, then 403.
"""

from datetime import date, datetime, time, timezone
from pathlib import PurePath
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.analysis import DocumentAnalyzer
from ...infrastructure.config import Settings, get_settings
from ...infrastructure.extraction import TextExtractor, normalize_mime_type
from ...infrastructure.logging import get_logger
from ...infrastructure.storage import ObjectStore
from ..common.exceptions import (
    AnalysisError,
    DocumentNotFoundError,
    ExtractionError,
    InvalidStatusTransitionError,
    PermissionDeniedError,
    ProcessingError,
    ReminderNotFoundError,
    StorageError,
    StorageNotFoundError,
    ValidationError,
)
from ..common.schemas import Priority
from ..document.schemas import (
    TERMINAL_STATUSES,
    ActionItemReminderCreate,
    AnswerResponse,
    DocumentAnalysisUpdate,
    DocumentCreateInternal,
    DocumentRead,
    DocumentStatus,
)
from ..document.services import DocumentService
from ..reminder.schemas import ReminderCreate, ReminderRead, ReminderUpdate
from ..reminder.services import ReminderService
from ..user.services import UserService

logger = get_logger(__name__)

EXTRACTION_FAILED_MESSAGE = "Text could not be extracted from the uploaded file."
ANALYSIS_FAILED_MESSAGE = "The document could not be analyzed."
PERSISTENCE_FAILED_MESSAGE = "The analysis result could not be saved."
QUESTION_FAILED_MESSAGE = "The question could not be answered."


def parse_due_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or datetime string; ``None`` if it is not one."""
    if not value:
        return None
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text[:10]), time.min)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def default_title(original_filename: str) -> str:
    stem = PurePath(original_filename).stem.strip()
    return (stem or original_filename.strip() or "Untitled document")[:255]


class IngestionService:
    """Coordinates storage, extraction, analysis and the repositories.

    One instance is built per request around the process-wide storage,
    extractor and analyzer. No database transaction is held open while
    waiting on storage, extraction or the language model.
    """

    def __init__(
        self,
        object_store: ObjectStore,
        extractor: TextExtractor,
        analyzer: DocumentAnalyzer,
        document_service: Optional[DocumentService] = None,
        reminder_service: Optional[ReminderService] = None,
        user_service: Optional[UserService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.object_store = object_store
        self.extractor = extractor
        self.analyzer = analyzer
        self.document_service = document_service or DocumentService()
        self.reminder_service = reminder_service or ReminderService()
        self.user_service = user_service or UserService()
        self.max_upload_bytes = settings.MAX_UPLOAD_BYTES
        self.allowed_mime_types = frozenset(settings.ALLOWED_MIME_TYPES_LIST)
        self.extraction_timeout = settings.EXTRACTION_TIMEOUT_SECONDS
        self.analysis_timeout = settings.ANALYSIS_TIMEOUT_SECONDS

    def validate_upload(self, data: bytes, mime_type: str) -> None:
        """Reject empty, oversized or disallowed uploads before anything is stored.

        Raises:
            ValidationError: If the upload is not acceptable.
        """
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > self.max_upload_bytes:
            raise ValidationError(f"Uploaded file exceeds the {self.max_upload_bytes} byte limit")
        if normalize_mime_type(mime_type) not in self.allowed_mime_types:
            raise ValidationError(f"Unsupported file type: {mime_type}")

    async def submit_document(
        self,
        user_id: str,
        data: bytes,
        mime_type: str,
        original_filename: str,
        db: AsyncSession,
        title: Optional[str] = None,
    ) -> DocumentRead:
        """Store, record, extract and analyze an uploaded file.

        The bytes are stored before the row is created, so a row never points
        at missing storage. Once the row exists every failure leaves it
        ``failed`` (best effort) and raises ``ProcessingError``.

        Args:
            user_id: Caller identity; becomes the document owner
            data: Raw file bytes
            mime_type: Declared content type
            original_filename: Name of the uploaded file
            db: Database session
            title: Display title; defaults to the filename without extension

        Returns:
            The processed document

        Raises:
            ValidationError: If the upload is rejected; nothing is stored.
            StorageError: If the bytes cannot be stored; no row is created.
            ProcessingError: If extraction, analysis or the final write fails.
        """
        self.validate_upload(data, mime_type)
        mime_type = normalize_mime_type(mime_type)
        resolved_title = (title or "").strip()[:255] or default_title(original_filename)

        storage_key = await self.object_store.put(user_id, data, mime_type)
        logger.info(f"Stored upload {original_filename!r} for user {user_id} at {storage_key}")

        try:
            await self.user_service.ensure_user(user_id, db)
            document = await self.document_service.create_document(
                DocumentCreateInternal(
                    owner_id=user_id,
                    title=resolved_title,
                    original_filename=original_filename[:255],
                    mime_type=mime_type,
                    storage_key=storage_key,
                ),
                db,
            )
        except SQLAlchemyError:
            await db.rollback()
            await self._discard_object(storage_key)
            raise

        logger.info(f"Created document {document.id} for user {user_id}")
        return await self._process(document, data, db)

    async def _process(self, document: DocumentRead, data: bytes, db: AsyncSession) -> DocumentRead:
        try:
            await self.document_service.update_document_analysis(
                document.id, DocumentAnalysisUpdate(status=DocumentStatus.PROCESSING), db
            )
        except SQLAlchemyError as exc:
            await self._mark_failed(document.id, PERSISTENCE_FAILED_MESSAGE, db)
            raise ProcessingError(PERSISTENCE_FAILED_MESSAGE, document_id=document.id) from exc

        try:
            text = await self.extractor.extract(data, document.mime_type, timeout=self.extraction_timeout)
        except ExtractionError as exc:
            logger.warning(f"Extraction failed for document {document.id}: {exc}")
            await self._mark_failed(document.id, EXTRACTION_FAILED_MESSAGE, db)
            raise ProcessingError(EXTRACTION_FAILED_MESSAGE, document_id=document.id) from exc
        except Exception as exc:
            logger.error(f"Unexpected extraction failure for document {document.id}", exc_info=exc)
            await self._mark_failed(document.id, EXTRACTION_FAILED_MESSAGE, db)
            raise ProcessingError(EXTRACTION_FAILED_MESSAGE, document_id=document.id) from exc

        try:
            analysis = await self.analyzer.analyze(text, timeout=self.analysis_timeout)
        except AnalysisError as exc:
            logger.warning(f"Analysis failed for document {document.id}: {exc}")
            await self._mark_failed(document.id, ANALYSIS_FAILED_MESSAGE, db)
            raise ProcessingError(ANALYSIS_FAILED_MESSAGE, document_id=document.id) from exc
        except Exception as exc:
            logger.error(f"Unexpected analysis failure for document {document.id}", exc_info=exc)
            await self._mark_failed(document.id, ANALYSIS_FAILED_MESSAGE, db)
            raise ProcessingError(ANALYSIS_FAILED_MESSAGE, document_id=document.id) from exc

        try:
            processed = await self.document_service.update_document_analysis(
                document.id,
                DocumentAnalysisUpdate(
                    summary=analysis.summary,
                    action_items=analysis.action_items,
                    tags=analysis.tags,
                    status=DocumentStatus.PROCESSED,
                ),
                db,
            )
        except (SQLAlchemyError, InvalidStatusTransitionError, DocumentNotFoundError) as exc:
            logger.error(f"Saving analysis for document {document.id} failed: {exc}")
            await self._mark_failed(document.id, PERSISTENCE_FAILED_MESSAGE, db)
            raise ProcessingError(PERSISTENCE_FAILED_MESSAGE, document_id=document.id) from exc

        logger.info(f"Document {document.id} processed")
        return processed

    async def _mark_failed(self, document_id: int, reason: str, db: AsyncSession) -> None:
        """Best-effort move to ``failed``; a second failure is logged, not raised."""
        try:
            await db.rollback()
            await self.document_service.update_document_analysis(
                document_id,
                DocumentAnalysisUpdate(status=DocumentStatus.FAILED, failure_reason=reason),
                db,
            )
        except (SQLAlchemyError, InvalidStatusTransitionError, DocumentNotFoundError) as exc:
            logger.error(f"Could not mark document {document_id} as failed: {exc}", exc_info=exc)
            return
        logger.info(f"Document {document_id} marked failed: {reason}")

    async def _discard_object(self, storage_key: str) -> None:
        try:
            await self.object_store.delete(storage_key)
        except StorageError as exc:
            logger.error(f"Could not remove orphaned object {storage_key}: {exc}")

    async def _owned_document(self, user_id: str, document_id: int, db: AsyncSession) -> DocumentRead:
        document = await self.document_service.get_document(document_id, db)
        # Reads open a transaction; end it before any slow call that follows.
        await db.commit()
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        if document.owner_id != user_id:
            logger.warning(f"User {user_id} denied access to document {document_id}")
            raise PermissionDeniedError("You do not have access to this document")
        return document

    async def get_document(self, user_id: str, document_id: int, db: AsyncSession) -> DocumentRead:
        return await self._owned_document(user_id, document_id, db)

    async def list_documents(self, user_id: str, db: AsyncSession) -> List[DocumentRead]:
        documents = await self.document_service.get_documents_by_user_id(user_id, db)
        await db.commit()
        return documents

    async def get_document_file(self, user_id: str, document_id: int, db: AsyncSession) -> Tuple[DocumentRead, bytes]:
        """Return a document with its stored bytes.

        Raises:
            DocumentNotFoundError: If the document or its stored object is missing.
        """
        document = await self._owned_document(user_id, document_id, db)
        try:
            data = await self.object_store.get(document.storage_key)
        except StorageNotFoundError as exc:
            raise DocumentNotFoundError(f"Stored file for document {document_id} not found") from exc
        return document, data

    async def delete_document(self, user_id: str, document_id: int, db: AsyncSession) -> None:
        """Delete the row first, then its stored object, so no row outlives its bytes."""
        document = await self._owned_document(user_id, document_id, db)
        await self.document_service.delete_document(document.id, db)
        logger.info(f"Deleted document {document.id} for user {user_id}")
        await self._discard_object(document.storage_key)

    async def resubmit_document(self, user_id: str, document_id: int, db: AsyncSession) -> DocumentRead:
        """Run a fresh upload cycle from a finished document's stored bytes.

        The original row is left as it is; the result is a new document.

        Raises:
            InvalidStatusTransitionError: If the document is still being processed.
        """
        document = await self._owned_document(user_id, document_id, db)
        if document.status not in TERMINAL_STATUSES:
            raise InvalidStatusTransitionError(f"Document {document_id} is still {document.status.value}")

        data = await self.object_store.get(document.storage_key)
        return await self.submit_document(
            user_id=user_id,
            data=data,
            mime_type=document.mime_type,
            original_filename=document.original_filename,
            title=document.title,
            db=db,
        )

    async def ask_question(self, user_id: str, document_id: int, question: str, db: AsyncSession) -> AnswerResponse:
        """Answer a question from the document's text.

        Text is extracted again from the stored bytes on every question. The
        document itself is never modified.

        Raises:
            ValidationError: If the question is blank.
            StorageNotFoundError: If the stored bytes are gone.
            ProcessingError: If extraction or the language model fails.
        """
        question = question.strip()
        if not question:
            raise ValidationError("Question must not be empty")

        document = await self._owned_document(user_id, document_id, db)
        data = await self.object_store.get(document.storage_key)

        try:
            text = await self.extractor.extract(data, document.mime_type, timeout=self.extraction_timeout)
            answer = await self.analyzer.ask(text, question, timeout=self.analysis_timeout)
        except (ExtractionError, AnalysisError) as exc:
            logger.warning(f"Question on document {document_id} failed: {exc}")
            raise ProcessingError(QUESTION_FAILED_MESSAGE, document_id=document_id) from exc

        return AnswerResponse(answer=answer)

    async def create_reminder(self, user_id: str, reminder_data: ReminderCreate, db: AsyncSession) -> ReminderRead:
        """Create a reminder for the caller; a referenced document must be theirs."""
        if reminder_data.document_id is not None:
            await self._owned_document(user_id, reminder_data.document_id, db)
        await self.user_service.ensure_user(user_id, db)
        reminder = await self.reminder_service.create_reminder(user_id, reminder_data, db)
        logger.info(f"Created reminder {reminder.id} for user {user_id}")
        return reminder

    async def create_reminder_from_action_item(
        self, user_id: str, document_id: int, action_item: ActionItemReminderCreate, db: AsyncSession
    ) -> ReminderRead:
        """Turn an action item into a reminder tied to its document.

        A missing or unparsable due date becomes today's date.
        """
        due_date = parse_due_date(action_item.due_date)
        if due_date is None:
            logger.info(f"Action item due date {action_item.due_date!r} unusable; defaulting to today")
            due_date = datetime.combine(date.today(), time.min, tzinfo=timezone.utc)

        return await self.create_reminder(
            user_id,
            ReminderCreate(
                title=action_item.task[:255],
                due_date=due_date,
                document_id=document_id,
                description=action_item.description,
                priority=action_item.priority or Priority.MEDIUM,
            ),
            db,
        )

    async def _owned_reminder(self, user_id: str, reminder_id: int, db: AsyncSession) -> ReminderRead:
        reminder = await self.reminder_service.get_reminder(reminder_id, db)
        await db.commit()
        if reminder is None:
            raise ReminderNotFoundError(f"Reminder {reminder_id} not found")
        if reminder.owner_id != user_id:
            logger.warning(f"User {user_id} denied access to reminder {reminder_id}")
            raise PermissionDeniedError("You do not have access to this reminder")
        return reminder

    async def list_reminders(self, user_id: str, db: AsyncSession) -> List[ReminderRead]:
        reminders = await self.reminder_service.get_reminders_by_user_id(user_id, db)
        await db.commit()
        return reminders

    async def update_reminder(
        self, user_id: str, reminder_id: int, reminder_update: ReminderUpdate, db: AsyncSession
    ) -> ReminderRead:
        await self._owned_reminder(user_id, reminder_id, db)
        updated = await self.reminder_service.update_reminder(reminder_id, reminder_update, db)
        if updated is None:
            raise ReminderNotFoundError(f"Reminder {reminder_id} not found")
        return updated

    async def delete_reminder(self, user_id: str, reminder_id: int, db: AsyncSession) -> None:
        await self._owned_reminder(user_id, reminder_id, db)
        if not await self.reminder_service.delete_reminder(reminder_id, db):
            raise ReminderNotFoundError(f"Reminder {reminder_id} not found")
