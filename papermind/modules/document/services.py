"""Document repository: persistence for documents and their analysis."""

from typing import Any, Dict, List, Optional, cast

from sqlalchemy import case, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import utcnow
from ...infrastructure.logging import get_logger
from ..common.exceptions import DocumentNotFoundError, InvalidStatusTransitionError
from .crud import document_crud
from .models import Document
from .schemas import (
    ALLOWED_STATUS_TRANSITIONS,
    TERMINAL_STATUSES,
    DocumentAnalysisUpdate,
    DocumentCreateInternal,
    DocumentRead,
    DocumentStatus,
)

logger = get_logger(__name__)


class DocumentService:
    """Service for storing and reading documents.

    The service knows nothing about callers: ownership checks happen in the
    ingestion layer. Every write commits before returning, so no method
    leaves a transaction open for the caller.
    """

    async def create_document(self, document_data: DocumentCreateInternal, db: AsyncSession) -> DocumentRead:
        """Insert a new document row.

        Args:
            document_data: Fields for the new row
            db: Database session

        Returns:
            The stored document, with its generated id and timestamps
        """
        created_document = Document(**document_data.model_dump())
        db.add(created_document)
        await db.flush()
        document_id = created_document.id
        document = await self.get_document(document_id, db)
        await db.commit()

        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} vanished during creation")
        return document

    async def get_document(self, document_id: int, db: AsyncSession) -> Optional[DocumentRead]:
        """Get a document by id, or ``None`` if it does not exist.

        Args:
            document_id: Document ID to retrieve
            db: Database session
        """
        row = await document_crud.get(db=db, id=document_id)
        if row is None:
            return None
        return DocumentRead.model_validate(row)

    async def get_documents_by_user_id(self, owner_id: str, db: AsyncSession) -> List[DocumentRead]:
        """List every document owned by ``owner_id``, newest upload first.

        Args:
            owner_id: Identity whose documents to list
            db: Database session
        """
        stmt = await document_crud.select(
            owner_id=owner_id, sort_columns=["uploaded_at", "id"], sort_orders=["desc", "desc"]
        )
        result = await db.execute(stmt)
        return [DocumentRead.model_validate(dict(row)) for row in result.mappings().all()]

    async def update_document_analysis(
        self,
        document_id: int,
        analysis: DocumentAnalysisUpdate,
        db: AsyncSession,
    ) -> DocumentRead:
        """Apply a partial analysis update as one atomic write.

        Only explicitly set fields change. A status change is applied only if
        it is allowed from the row's current status; the check and the write
        are the same UPDATE statement. Moving to ``processed`` without a
        summary keeps the stored summary, or an empty one if there is none.
        Rewriting a terminal status onto itself leaves ``updated_at`` alone, so
        repeating the same terminal write yields the same row.

        Args:
            document_id: Document to update
            analysis: Fields to write
            db: Database session

        Returns:
            The document as stored after the update

        Raises:
            DocumentNotFoundError: If the document does not exist
            InvalidStatusTransitionError: If the status change is not allowed
        """
        values: Dict[str, Any] = analysis.model_dump(mode="json", exclude_unset=True)

        stmt = update(Document).where(Document.id == document_id)
        target: Optional[DocumentStatus] = None
        if values.get("status") is not None:
            target = DocumentStatus(values["status"])
            sources = [status.value for status, targets in ALLOWED_STATUS_TRANSITIONS.items() if target in targets]
            stmt = stmt.where(Document.status.in_(sources))
            if target is DocumentStatus.PROCESSED and values.get("summary") is None:
                values["summary"] = func.coalesce(Document.summary, "")
        else:
            values.pop("status", None)

        now = utcnow()
        if target in TERMINAL_STATUSES:
            values["updated_at"] = case((Document.status == target.value, Document.updated_at), else_=now)
        else:
            values["updated_at"] = now
        result = await db.execute(stmt.values(**values).execution_options(synchronize_session=False))

        if result.rowcount == 0:
            await db.rollback()
            current = await self.get_document(document_id, db)
            await db.commit()
            if current is None:
                raise DocumentNotFoundError(f"Document {document_id} not found")
            raise InvalidStatusTransitionError(
                f"Document {document_id} cannot move from {current.status.value} to {target.value if target else None}"
            )

        document = await self.get_document(document_id, db)
        await db.commit()
        logger.debug(f"Updated document {document_id}: {sorted(k for k in values if k != 'updated_at')}")
        return cast(DocumentRead, document)

    async def delete_document(self, document_id: int, db: AsyncSession) -> bool:
        """Delete a document row; its reminders are removed by the foreign key cascade.

        Returns:
            ``False`` if the document did not exist
        """
        if not await document_crud.exists(db=db, id=document_id):
            await db.commit()
            return False

        await document_crud.delete(db=db, id=document_id)
        return True
