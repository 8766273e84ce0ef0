"""Trip ORM — persists an announced errand run and its capacity counter.

Invariants:
    - 0 <= available_capacity <= capacity (DB check constraints back the core rule)
    - status holds a TripStatus value; changed only by compare-and-swap updates
    - destination_snapshot is a copy taken at creation, not a live join

Design Decisions:
    - destination_id FK kept next to the JSON snapshot: lets the shell find trips
      for a location while the trip keeps the destination as it was announced
    - No delete path: cancellation is a terminal status
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, Integer, DateTime, JSON, ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class TripModel(Base):
    """Trip entity — owns its capacity counter and destination snapshot."""
    __tablename__ = "trips"
    __table_args__ = (
        CheckConstraint("capacity BETWEEN 1 AND 10", name="ck_trips_capacity"),
        CheckConstraint(
            "available_capacity >= 0 AND available_capacity <= capacity",
            name="ck_trips_available_capacity",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    destination_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id"), nullable=False,
    )
    destination_snapshot: Mapped[dict] = mapped_column(JSON, nullable=False)
    departure_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    estimated_return_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    available_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="announced",
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
