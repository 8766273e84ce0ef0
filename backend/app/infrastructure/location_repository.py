"""Location & Presence Repositories — locations and their check-in rows.

Invariants:
    - locations.current_user_count changes only as an SQL expression in the same
      transaction as the presence insert or update that justifies it
    - A second active presence for (user, location) is rejected by the partial unique
      index and surfaces as ConflictError("already checked in")
    - The count never goes below zero (CASE clamp plus the table check constraint)

Design Decisions:
    - Presence and location live in one module: the counter and the rows move together
    - IntegrityError handled by rolling back the unit of work: check-in is the only
      statement in that transaction, nothing else is lost
"""

import logging
from uuid import UUID

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.entities import Location, LocationPresence
from app.core.errors import ConcurrencyError, ConflictError, ErrorContext
from app.infrastructure.mappers import (
    location_from_row, location_to_row, presence_from_row,
)
from app.models.location import LocationModel
from app.models.location_presence import LocationPresenceModel

logger = logging.getLogger(__name__)


class SqlLocationRepository:
    """Location persistence."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_by_id(self, location_id: UUID) -> Location | None:
        result = await self._db.execute(
            select(LocationModel)
            .where(LocationModel.id == location_id)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return location_from_row(row) if row else None

    async def save(self, location: Location) -> Location:
        await self._db.merge(location_to_row(location))
        await self._db.flush()
        return location


class SqlPresenceRepository:
    """Presence rows plus the location user counter they drive."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_active(
        self, user_id: UUID, location_id: UUID,
    ) -> LocationPresence | None:
        result = await self._db.execute(
            select(LocationPresenceModel)
            .where(
                LocationPresenceModel.user_id == user_id,
                LocationPresenceModel.location_id == location_id,
                LocationPresenceModel.is_active.is_(True),
            )
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return presence_from_row(row) if row else None

    async def find_active_by_location(
        self, location_id: UUID,
    ) -> list[LocationPresence]:
        result = await self._db.execute(
            select(LocationPresenceModel)
            .where(
                LocationPresenceModel.location_id == location_id,
                LocationPresenceModel.is_active.is_(True),
            )
            .order_by(LocationPresenceModel.checked_in_at)
            .execution_options(populate_existing=True),
        )
        return [presence_from_row(row) for row in result.scalars().all()]

    async def open(self, presence: LocationPresence) -> LocationPresence:
        """Insert the active row and bump the location count."""
        self._db.add(LocationPresenceModel(
            id=presence.id,
            user_id=presence.user_id,
            location_id=presence.location_id,
            checked_in_at=presence.checked_in_at,
            is_active=True,
        ))
        try:
            await self._db.flush()
        except IntegrityError:
            await self._db.rollback()
            logger.info(
                "Duplicate check-in rejected by index",
                extra={
                    "user_id": str(presence.user_id),
                    "location_id": str(presence.location_id),
                },
            )
            raise ConflictError(
                "already checked in", "ALREADY_CHECKED_IN",
                ErrorContext(
                    entity_type="location", entity_id=str(presence.location_id),
                ),
            ) from None
        await self._db.execute(
            update(LocationModel)
            .where(LocationModel.id == presence.location_id)
            .values(current_user_count=LocationModel.current_user_count + 1)
            .execution_options(synchronize_session=False),
        )
        return presence

    async def close(self, presence: LocationPresence) -> LocationPresence:
        """Deactivate the row (only if still active) and decrement the count."""
        result = await self._db.execute(
            update(LocationPresenceModel)
            .where(
                LocationPresenceModel.id == presence.id,
                LocationPresenceModel.is_active.is_(True),
            )
            .values(is_active=False, checked_out_at=presence.checked_out_at)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            raise ConcurrencyError(
                f"Presence {presence.id} was already closed",
                ErrorContext(
                    entity_type="location", entity_id=str(presence.location_id),
                ),
            )
        await self._db.execute(
            update(LocationModel)
            .where(LocationModel.id == presence.location_id)
            .values(current_user_count=case(
                (LocationModel.current_user_count > 0,
                 LocationModel.current_user_count - 1),
                else_=0,
            ))
            .execution_options(synchronize_session=False),
        )
        return presence
