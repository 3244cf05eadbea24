"""Reminder API endpoints."""

from typing import Annotated, List

from fastapi import APIRouter, Path, Response, status

from ....modules.reminder.schemas import ReminderCreate, ReminderRead, ReminderUpdate
from ..dependencies import DbSession, IngestionServiceDep
from ..security import CurrentUserId

router = APIRouter(prefix="/reminders", tags=["Reminders"])

ReminderId = Annotated[int, Path(ge=1, description="Reminder id")]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Reminder",
    description="""
    Creates a reminder owned by the caller.

    - **title**: What to do
    - **dueDate**: When it is due
    - **documentId**: Optional document the reminder belongs to; must be the caller's
    - **priority**: high, medium (default) or low
    """,
    responses={
        400: {"description": "Invalid reminder data"},
        403: {"description": "Referenced document belongs to another user"},
        404: {"description": "Referenced document not found"},
    },
)
async def create_reminder(
    reminder_data: ReminderCreate,
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
) -> ReminderRead:
    """Create a reminder."""
    return await ingestion_service.create_reminder(user_id, reminder_data, db)


@router.get("", summary="List Reminders", description="Lists the caller's reminders, earliest due first.")
async def list_reminders(user_id: CurrentUserId, db: DbSession, ingestion_service: IngestionServiceDep) -> List[ReminderRead]:
    """List the caller's reminders."""
    return await ingestion_service.list_reminders(user_id, db)


@router.patch(
    "/{reminder_id}",
    summary="Update Reminder",
    description="Marks a reminder completed or changes its priority or due date.",
    responses={
        403: {"description": "Reminder belongs to another user"},
        404: {"description": "Reminder not found"},
    },
)
async def update_reminder(
    reminder_update: ReminderUpdate,
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
    reminder_id: ReminderId,
) -> ReminderRead:
    """Update one of the caller's reminders."""
    return await ingestion_service.update_reminder(user_id, reminder_id, reminder_update, db)


@router.delete(
    "/{reminder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Reminder",
    responses={
        403: {"description": "Reminder belongs to another user"},
        404: {"description": "Reminder not found"},
    },
)
async def delete_reminder(
    user_id: CurrentUserId,
    db: DbSession,
    ingestion_service: IngestionServiceDep,
    reminder_id: ReminderId,
) -> Response:
    """Delete one of the caller's reminders."""
    await ingestion_service.delete_reminder(user_id, reminder_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
