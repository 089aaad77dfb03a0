from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from codeshare.core.db import Base
from codeshare.core.utils import utc_now


def timestamp_column(nullable: bool = False, **kwargs) -> Mapped:
    """Timezone-aware column; values are always written in UTC."""
    return mapped_column(DateTime(timezone=True), nullable=nullable, **kwargs)


class BaseModel(Base):
    """UUID key, audit timestamps and a soft-delete flag for every table."""

    __abstract__ = True

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    created_at: Mapped[datetime] = timestamp_column(default=utc_now)
    updated_at: Mapped[datetime] = timestamp_column(default=utc_now, onupdate=utc_now)

    # Superseded OTP codes are flagged rather than removed
    is_deleted: Mapped[bool] = mapped_column(default=False, nullable=False)
    deleted_at: Mapped[datetime | None] = timestamp_column(nullable=True)
