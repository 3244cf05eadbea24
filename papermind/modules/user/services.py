"""User profile service."""

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from .crud import user_crud

logger = get_logger(__name__)


class UserCreateInternal(BaseModel):
    id: str


class UserService:
    """Keeps a profile row for every identity that writes data."""

    async def ensure_user(self, user_id: str, db: AsyncSession) -> None:
        """Create the profile row for ``user_id`` if it does not exist yet.

        Concurrent first requests from the same identity may both try to
        insert; the loser's integrity error is treated as success.
        """
        if await user_crud.exists(db=db, id=user_id):
            await db.commit()
            return

        try:
            await user_crud.create(db=db, object=UserCreateInternal(id=user_id))
        except IntegrityError:
            await db.rollback()
            logger.debug(f"User profile {user_id} created concurrently")
            return

        logger.info(f"Created user profile {user_id}")
