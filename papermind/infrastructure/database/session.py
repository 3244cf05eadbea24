from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config.settings import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.LOG_SQL_QUERIES,
    future=True,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
    pool_pre_ping=True,
)

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Declarative base for every PaperMind table.

    Models are mapped dataclasses: columns marked ``init=False`` are filled by
    the database or by a default factory and never passed to ``__init__``.
    """

    pass


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session scoped to one request.

    Used as a FastAPI dependency via ``Depends(async_session)``. Sessions are
    created with ``expire_on_commit=False`` so rows read before a commit stay
    usable afterwards.

    Yields:
        AsyncSession: A configured async database session.
    """
    async with local_session() as db:
        yield db


async def create_tables() -> None:
    """Create all tables registered on ``Base.metadata`` that do not exist yet.

    Model modules must be imported before calling this so their tables are
    registered.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close every pooled connection."""
    await engine.dispose()
