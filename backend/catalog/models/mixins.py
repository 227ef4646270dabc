"""Columns shared by every catalog table."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# Column limits shared with the request schemas
NAME_MAX_LENGTH = 255
INT32_MAX = 2_147_483_647


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordMixin:
    """UUID primary key plus created/updated timestamps (UTC)."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
