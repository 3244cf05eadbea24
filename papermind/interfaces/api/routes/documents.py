"""Document API endpoints."""

from typing import Annotated, List, Optional

from fastapi import APIRouter, File, Form, Path, Response, UploadFile, status

from ....modules.document.schemas import ActionItemReminderCreate, AnswerResponse, DocumentRead, QuestionRequest
from ....modules.reminder.schemas import ReminderRead
from ..dependencies import DbSession, IngestionServiceDep
from ..security import CurrentUserId

router = APIRouter(prefix="/documents", tags=["Documents"])

DocumentId = Annotated[int, Path(ge=1, description="Document id")]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Upload Document",
    description="""
    Uploads a file, extracts its text and analyzes it.

    The request blocks until analysis finishes. On success the document is
    `processed` and carries its summary, action items and tags.

    - **file**: PDF, JPEG, PNG, TIFF, DOC or DOCX, at most 10 MiB
    - **title**: Optional display title; defaults to the filename without extension
    """,
    responses={
        201: {"description": "Document stored and analyzed"},
        400: {"description": "Missing, empty, oversized or unsupported file"},
        401: {"description": "Missing or invalid bearer token"},
        500: {"description": "Storage, extraction or analysis failed"},
    },
)
async def upload_document(
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
    file: UploadFile = File(..., description="The document to analyze"),
    title: Optional[str] = Form(None, max_length=255),
) -> DocumentRead:
    """Upload and analyze a document."""
    # Reading one byte past the limit is enough to reject oversized files.
    data = await file.read(ingestion_service.max_upload_bytes + 1)
    return await ingestion_service.submit_document(
        user_id=user_id,
        data=data,
        mime_type=file.content_type or "application/octet-stream",
        original_filename=file.filename or "document",
        title=title,
        db=db,
    )


@router.get(
    "",
    summary="List Documents",
    description="Lists the caller's documents, newest upload first.",
    responses={401: {"description": "Missing or invalid bearer token"}},
)
async def list_documents(user_id: CurrentUserId, db: DbSession, ingestion_service: IngestionServiceDep) -> List[DocumentRead]:
    """List the caller's documents."""
    return await ingestion_service.list_documents(user_id, db)


@router.get(
    "/{document_id}",
    summary="Get Document",
    responses={
        403: {"description": "Document belongs to another user"},
        404: {"description": "Document not found"},
    },
)
async def get_document(
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
    document_id: DocumentId,
) -> DocumentRead:
    """Get one of the caller's documents."""
    return await ingestion_service.get_document(user_id, document_id, db)


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Document",
    description="Deletes the document, its reminders and its stored file.",
    responses={
        403: {"description": "Document belongs to another user"},
        404: {"description": "Document not found"},
    },
)
async def delete_document(
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
    document_id: DocumentId,
) -> Response:
    """Delete one of the caller's documents."""
    await ingestion_service.delete_document(user_id, document_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{document_id}/file",
    summary="Download Document File",
    response_class=Response,
    responses={
        200: {"description": "The original file bytes"},
        403: {"description": "Document belongs to another user"},
        404: {"description": "Document or stored file not found"},
    },
)
async def download_document_file(
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
    document_id: DocumentId,
) -> Response:
    """Return the originally uploaded bytes."""
    document, data = await ingestion_service.get_document_file(user_id, document_id, db)
    filename = document.original_filename.replace('"', "")
    return Response(
        content=data,
        media_type=document.mime_type,
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.post(
    "/{document_id}/ask",
    summary="Ask About Document",
    description="Answers a question using only the document's text. The document is not modified.",
    responses={
        400: {"description": "Question missing or blank"},
        403: {"description": "Document belongs to another user"},
        404: {"description": "Document not found"},
        500: {"description": "Stored file missing, extraction or the language model failed"},
    },
)
async def ask_document(
    question_request: QuestionRequest,
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
    document_id: DocumentId,
) -> AnswerResponse:
    """Ask a follow-up question about a document."""
    return await ingestion_service.ask_question(user_id, document_id, question_request.question, db)


@router.post(
    "/{document_id}/resubmit",
    status_code=status.HTTP_201_CREATED,
    summary="Resubmit Document",
    description="Runs the stored file through a fresh upload cycle, producing a new document.",
    responses={
        403: {"description": "Document belongs to another user"},
        404: {"description": "Document not found"},
        409: {"description": "Document is still being processed"},
        500: {"description": "Storage, extraction or analysis failed"},
    },
)
async def resubmit_document(
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
    document_id: DocumentId,
) -> DocumentRead:
    """Re-run analysis on a finished document's file."""
    return await ingestion_service.resubmit_document(user_id, document_id, db)


@router.post(
    "/{document_id}/reminders",
    status_code=status.HTTP_201_CREATED,
    summary="Create Reminder From Action Item",
    responses={
        403: {"description": "Document belongs to another user"},
        404: {"description": "Document not found"},
    },
)
async def create_reminder_from_action_item(
    action_item: ActionItemReminderCreate,
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
    document_id: DocumentId,
) -> ReminderRead:
    """Turn one of the document's action items into a reminder."""
    return await ingestion_service.create_reminder_from_action_item(user_id, document_id, action_item, db)
