from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, MappedAsDataclass, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current time used for every timestamp column."""
    return datetime.now(UTC)


class TimestampMixin(MappedAsDataclass):
    """Mixin adding ``created_at`` and ``updated_at`` columns.

    Both are UTC and excluded from ``__init__``. ``updated_at`` is refreshed by
    the repositories whenever they write a row.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=False,
        init=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=True,
        init=False,
    )
