"""StatusUpdate ORM — append-only audit trail for trips and requests.

Invariants:
    - Rows are inserted, never updated or deleted
    - entity_type is 'trip' or 'request'; entity_id is not a FK (polymorphic)
    - History reads order by timestamp ascending, id breaking ties

Design Decisions:
    - Attribute meta_data maps to column "metadata": `metadata` is reserved on
      DeclarativeBase
    - notify_users/send_real_time_updates stored: the audit row records what the
      notifier was asked to do
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Boolean, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class StatusUpdateModel(Base):
    """Status update entity — one immutable audit record."""
    __tablename__ = "status_updates"
    __table_args__ = (
        Index("ix_status_updates_entity", "entity_type", "entity_id", "timestamp"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    receipt_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_data: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict,
    )
    notify_users: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    send_real_time_updates: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
