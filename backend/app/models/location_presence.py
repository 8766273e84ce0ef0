"""LocationPresence ORM — a user's check-in at a location.

Invariants:
    - At most one active row per (user_id, location_id): partial unique index
    - checked_out_at is set exactly when is_active flips to false

Design Decisions:
    - Partial unique index over an application-level check: two concurrent check-ins
      are rejected deterministically by the database (ADR: single-writer per presence)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class LocationPresenceModel(Base):
    """Presence entity — open while the user is checked in."""
    __tablename__ = "location_presence"
    __table_args__ = (
        Index(
            "uq_location_presence_active",
            "user_id", "location_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    location_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id"), nullable=False, index=True,
    )
    checked_in_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    checked_out_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
