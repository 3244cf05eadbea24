"""Script to create the PaperMind database tables."""

import asyncio
import sys

from papermind.infrastructure.database.session import create_tables, dispose_engine
from papermind.infrastructure.logging import get_logger
from papermind.modules.document import models as document_models  # noqa: F401
from papermind.modules.reminder import models as reminder_models  # noqa: F401
from papermind.modules.user import models as user_models  # noqa: F401

logger = get_logger(__name__)


async def main() -> None:
    """Create database tables."""
    logger.info("Creating database tables...")

    try:
        await create_tables()
        logger.info("Database tables created")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}", exc_info=True)
        sys.exit(1)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
