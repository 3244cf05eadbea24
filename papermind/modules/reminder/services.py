"""Reminder repository."""

from typing import List, Optional, cast

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import utcnow
from .crud import reminder_crud
from .models import Reminder
from .schemas import ReminderCreate, ReminderCreateInternal, ReminderRead, ReminderUpdate


class ReminderService:
    """Service for storing and reading reminders.

    Like the document repository it performs no ownership checks.
    """

    async def create_reminder(self, owner_id: str, reminder_data: ReminderCreate, db: AsyncSession) -> ReminderRead:
        """Insert a reminder owned by ``owner_id``.

        Args:
            owner_id: Identity that owns the reminder
            reminder_data: Reminder fields
            db: Database session
        """
        reminder_internal = ReminderCreateInternal(
            owner_id=owner_id,
            title=reminder_data.title,
            due_date=reminder_data.due_date,
            document_id=reminder_data.document_id,
            description=reminder_data.description,
            priority=reminder_data.priority.value,
        )
        created_reminder = Reminder(**reminder_internal.model_dump())
        db.add(created_reminder)
        await db.flush()
        reminder = await self.get_reminder(created_reminder.id, db)
        await db.commit()
        return cast(ReminderRead, reminder)

    async def get_reminder(self, reminder_id: int, db: AsyncSession) -> Optional[ReminderRead]:
        row = await reminder_crud.get(db=db, id=reminder_id)
        if row is None:
            return None
        return ReminderRead.model_validate(row)

    async def get_reminders_by_user_id(self, owner_id: str, db: AsyncSession) -> List[ReminderRead]:
        """List a user's reminders, earliest due first.

        Reminders never join their document, so a missing document cannot
        break the listing.
        """
        stmt = await reminder_crud.select(owner_id=owner_id, sort_columns=["due_date", "id"], sort_orders=["asc", "asc"])
        result = await db.execute(stmt)
        return [ReminderRead.model_validate(dict(row)) for row in result.mappings().all()]

    async def update_reminder(
        self, reminder_id: int, reminder_update: ReminderUpdate, db: AsyncSession
    ) -> Optional[ReminderRead]:
        """Apply the fields set in ``reminder_update``.

        Returns:
            The updated reminder, or ``None`` if it does not exist
        """
        values = reminder_update.model_dump(exclude_unset=True, exclude_none=True)
        if "priority" in values:
            values["priority"] = values["priority"].value

        if not await reminder_crud.exists(db=db, id=reminder_id):
            await db.commit()
            return None

        if values:
            values["updated_at"] = utcnow()
            await reminder_crud.update(db=db, object=values, id=reminder_id, commit=False)

        reminder = await self.get_reminder(reminder_id, db)
        await db.commit()
        return reminder

    async def delete_reminder(self, reminder_id: int, db: AsyncSession) -> bool:
        if not await reminder_crud.exists(db=db, id=reminder_id):
            await db.commit()
            return False

        await reminder_crud.delete(db=db, id=reminder_id)
        return True
