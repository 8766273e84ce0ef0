"""Trip Repository — SQLAlchemy implementation of TripRepository.

Invariants:
    - available_capacity is only written by single conditional UPDATE statements
    - Zero affected rows on a guarded UPDATE raises ConcurrencyError (lost race)
    - Repositories flush, services commit
    - Reads use populate_existing so rows changed by UPDATE statements are never stale

Design Decisions:
    - UPDATE ... RETURNING over read-then-write: the database decides the race, the
      entity is refreshed from what the database actually stored
    - synchronize_session=False on guarded updates: entities are rebuilt from rows,
      the identity map is refreshed on the next read
"""

import logging
from uuid import UUID

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import TripStatus
from app.core.entities import Trip
from app.core.errors import ConcurrencyError, ErrorContext
from app.infrastructure.mappers import as_utc, trip_from_row, trip_to_row
from app.models.trip import TripModel

logger = logging.getLogger(__name__)


def _lost_race(trip: Trip, message: str) -> ConcurrencyError:
    return ConcurrencyError(
        message, ErrorContext(entity_type="trip", entity_id=str(trip.id)),
    )


class SqlTripRepository:
    """Trip persistence with atomic capacity and status updates."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_by_id(self, trip_id: UUID) -> Trip | None:
        result = await self._db.execute(
            select(TripModel)
            .where(TripModel.id == trip_id)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return trip_from_row(row) if row else None

    async def save(self, trip: Trip) -> Trip:
        await self._db.merge(trip_to_row(trip))
        await self._db.flush()
        return trip

    async def find_by_owner(self, owner_id: UUID) -> list[Trip]:
        result = await self._db.execute(
            select(TripModel)
            .where(TripModel.owner_id == owner_id)
            .order_by(TripModel.departure_time),
        )
        return [trip_from_row(row) for row in result.scalars().all()]

    async def compare_and_set_status(self, trip: Trip, expected: TripStatus) -> None:
        """Write trip.status only if the stored status is still `expected`."""
        result = await self._db.execute(
            update(TripModel)
            .where(TripModel.id == trip.id, TripModel.status == expected.value)
            .values(status=trip.status.value, updated_at=trip.updated_at)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            raise _lost_race(
                trip, f"Trip {trip.id} is no longer {expected.value}",
            )

    async def reserve_capacity(self, trip: Trip, amount: int) -> None:
        """available_capacity -= amount WHERE available_capacity >= amount."""
        result = await self._db.execute(
            update(TripModel)
            .where(
                TripModel.id == trip.id,
                TripModel.available_capacity >= amount,
            )
            .values(
                available_capacity=TripModel.available_capacity - amount,
                updated_at=trip.updated_at,
            )
            .returning(TripModel.available_capacity, TripModel.updated_at)
            .execution_options(synchronize_session=False),
        )
        stored = result.one_or_none()
        if stored is None:
            raise _lost_race(
                trip, f"Trip {trip.id} no longer has {amount} slot(s) available",
            )
        trip.available_capacity, trip.updated_at = stored[0], as_utc(stored[1])

    async def release_capacity(self, trip: Trip, amount: int) -> None:
        """available_capacity += amount, clamped to capacity."""
        released = TripModel.available_capacity + amount
        result = await self._db.execute(
            update(TripModel)
            .where(TripModel.id == trip.id)
            .values(
                available_capacity=case(
                    (released > TripModel.capacity, TripModel.capacity),
                    else_=released,
                ),
                updated_at=trip.updated_at,
            )
            .returning(TripModel.available_capacity, TripModel.updated_at)
            .execution_options(synchronize_session=False),
        )
        stored = result.one_or_none()
        if stored is None:
            raise _lost_race(trip, f"Trip {trip.id} disappeared during release")
        trip.available_capacity, trip.updated_at = stored[0], as_utc(stored[1])

    async def set_available_capacity(self, trip: Trip) -> None:
        """Absolute override, still bounded by the stored capacity."""
        result = await self._db.execute(
            update(TripModel)
            .where(
                TripModel.id == trip.id,
                TripModel.capacity >= trip.available_capacity,
            )
            .values(
                available_capacity=trip.available_capacity,
                updated_at=trip.updated_at,
            )
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            raise _lost_race(trip, f"Trip {trip.id} capacity changed concurrently")
        logger.debug(
            "Trip capacity set", extra={"trip_id": str(trip.id)},
        )
