"""DeliveryRequest ORM — persists a shopping list attached to a trip.

Invariants:
    - Always belongs to a Trip (trip_id FK)
    - items is a non-empty JSON list; order is the requester's order
    - status holds a RequestStatus value; changed only by compare-and-swap updates

Design Decisions:
    - items and delivery_address as JSON: owned by the request, never shared or joined
    - Money as Numeric(10, 2) returned as float: cents precision in storage
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Numeric, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class DeliveryRequestModel(Base):
    """Delivery request entity."""
    __tablename__ = "delivery_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    trip_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("trips.id"), nullable=False, index=True,
    )
    requester_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    items: Mapped[list] = mapped_column(JSON, nullable=False)
    delivery_address: Mapped[dict] = mapped_column(JSON, nullable=False)
    max_item_budget: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=False,
    )
    delivery_fee: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=False,
    )
    special_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
