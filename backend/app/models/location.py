"""Location ORM — a physical place users check in to and trips travel to.

Invariants:
    - latitude in [-90, 90], longitude in [-180, 180] (validated by the core before insert)
    - current_user_count >= 0 and equals the number of active presence rows
    - current_user_count is only changed by SQL expressions in the presence repository

Design Decisions:
    - Plain lat/lon Float columns, no PostGIS: nearby search is a bounding query
    - address as JSON: one value object, never queried by component
"""

import uuid

from sqlalchemy import String, Float, Boolean, Integer, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class LocationModel(Base):
    """Location entity — check-in target and trip destination."""
    __tablename__ = "locations"
    __table_args__ = (
        CheckConstraint("current_user_count >= 0", name="ck_locations_user_count"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[dict] = mapped_column(JSON, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(
        String(20), nullable=False, default="other",
    )
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    current_user_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
