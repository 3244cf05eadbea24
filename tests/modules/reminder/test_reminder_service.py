"""Tests for reminder service."""

from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from papermind.modules.common.schemas import Priority
from papermind.modules.document.schemas import DocumentCreateInternal
from papermind.modules.document.services import DocumentService
from papermind.modules.reminder.schemas import ReminderCreate, ReminderUpdate
from papermind.modules.reminder.services import ReminderService
from papermind.modules.user.services import UserService


@pytest.fixture
def reminder_service():
    return ReminderService()


@pytest.fixture
async def owner(db_session: AsyncSession) -> str:
    await UserService().ensure_user("alice", db_session)
    return "alice"


async def test_create_reminder_defaults(reminder_service: ReminderService, db_session: AsyncSession, owner):
    reminder = await reminder_service.create_reminder(
        owner,
        ReminderCreate(title="Pay rent", due_date=datetime(2025, 3, 1, tzinfo=timezone.utc)),
        db_session,
    )

    assert reminder.id is not None
    assert reminder.owner_id == "alice"
    assert reminder.priority == Priority.MEDIUM
    assert reminder.completed is False
    assert reminder.document_id is None


async def test_list_reminders_sorted_by_due_date(reminder_service: ReminderService, db_session: AsyncSession, owner):
    for title, day in (("later", 20), ("sooner", 5), ("middle", 10)):
        await reminder_service.create_reminder(
            owner, ReminderCreate(title=title, due_date=datetime(2025, 3, day, tzinfo=timezone.utc)), db_session
        )

    reminders = await reminder_service.get_reminders_by_user_id(owner, db_session)

    assert [r.title for r in reminders] == ["sooner", "middle", "later"]
    assert await reminder_service.get_reminders_by_user_id("bob", db_session) == []


async def test_update_reminder(reminder_service: ReminderService, db_session: AsyncSession, owner):
    reminder = await reminder_service.create_reminder(
        owner, ReminderCreate(title="Renew passport", due_date=datetime(2025, 3, 1, tzinfo=timezone.utc)), db_session
    )

    updated = await reminder_service.update_reminder(
        reminder.id, ReminderUpdate(completed=True, priority=Priority.HIGH), db_session
    )

    assert updated.completed is True
    assert updated.priority == Priority.HIGH
    assert updated.title == "Renew passport"


async def test_update_missing_reminder_returns_none(reminder_service: ReminderService, db_session: AsyncSession):
    assert await reminder_service.update_reminder(4242, ReminderUpdate(completed=True), db_session) is None


async def test_delete_reminder(reminder_service: ReminderService, db_session: AsyncSession, owner):
    reminder = await reminder_service.create_reminder(
        owner, ReminderCreate(title="Call bank", due_date=datetime(2025, 3, 1, tzinfo=timezone.utc)), db_session
    )

    assert await reminder_service.delete_reminder(reminder.id, db_session) is True
    assert await reminder_service.get_reminder(reminder.id, db_session) is None
    assert await reminder_service.delete_reminder(reminder.id, db_session) is False


async def test_reminders_removed_with_their_document(
    reminder_service: ReminderService, db_session: AsyncSession, owner
):
    document_service = DocumentService()
    document = await document_service.create_document(
        DocumentCreateInternal(
            owner_id=owner,
            title="Bill",
            original_filename="bill.pdf",
            mime_type="application/pdf",
            storage_key="alice/1-bill.pdf",
        ),
        db_session,
    )
    reminder = await reminder_service.create_reminder(
        owner,
        ReminderCreate(title="Pay bill", due_date=datetime(2025, 3, 1, tzinfo=timezone.utc), document_id=document.id),
        db_session,
    )

    await document_service.delete_document(document.id, db_session)

    assert await reminder_service.get_reminder(reminder.id, db_session) is None
