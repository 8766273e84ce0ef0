"""Trip Service — imperative shell around core.trip_lifecycle.

Invariants:
    - Load -> pure core decision -> guarded repository write -> status record -> commit
    - Every status change is a compare-and-swap against the status that was loaded
    - Capacity is only written through the repository's atomic UPDATE path
    - Notifications go out after commit, never before

Design Decisions:
    - One service instance per request (holds the request's AsyncSession)
    - Cancellation policy read from Settings, passed into the core
    - "Trip full" is CapacityExhaustedError (core said no); a lost race is
      ConcurrencyError (database said no) so clients can tell retry from give up
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core import trip_lifecycle
from app.core.domain_types import EntityType, TripStatus
from app.core.entities import StatusTrackingOptions, Trip
from app.core.errors import CapacityExhaustedError, ErrorContext, NotFoundError
from app.core.repository_protocols import LocationRepository, TripRepository
from app.infrastructure.location_repository import SqlLocationRepository
from app.infrastructure.trip_repository import SqlTripRepository
from app.services.status_tracking import StatusTrackingService

logger = logging.getLogger(__name__)


class TripService:
    """Trip use cases: create, transition, cancel, capacity."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        trips: TripRepository | None = None,
        locations: LocationRepository | None = None,
        status: StatusTrackingService | None = None,
    ):
        self._db = db
        self._settings = settings or get_settings()
        self._trips = trips or SqlTripRepository(db)
        self._locations = locations or SqlLocationRepository(db)
        self._status = status or StatusTrackingService(db)

    async def get_trip(self, trip_id: UUID) -> Trip:
        trip = await self._trips.find_by_id(trip_id)
        if trip is None:
            raise NotFoundError(
                "Trip", str(trip_id),
                ErrorContext(entity_type="trip", entity_id=str(trip_id)),
            )
        return trip

    async def list_for_owner(self, owner_id: UUID) -> list[Trip]:
        return await self._trips.find_by_owner(owner_id)

    async def create_trip(
        self,
        owner_id: UUID,
        destination_id: UUID,
        departure_time: datetime,
        estimated_return_time: datetime,
        capacity: int,
        description: str | None = None,
    ) -> Trip:
        destination = await self._locations.find_by_id(destination_id)
        if destination is None:
            raise NotFoundError("Location", str(destination_id))
        trip = trip_lifecycle.create_trip({
            "owner_id": owner_id,
            "destination": destination,
            "departure_time": departure_time,
            "estimated_return_time": estimated_return_time,
            "capacity": capacity,
            "description": description,
        })
        await self._trips.save(trip)
        update = await self._status.record(EntityType.TRIP, trip.id, trip.status)
        await self._db.commit()
        logger.info("Trip announced", extra={"trip_id": str(trip.id)})
        await self._status.publish(update)
        return trip

    async def update_status(
        self,
        trip_id: UUID,
        new_status: TripStatus,
        options: StatusTrackingOptions | None = None,
    ) -> Trip:
        trip = await self.get_trip(trip_id)
        previous = trip.status
        if new_status == TripStatus.CANCELLED:
            trip_lifecycle.cancel_trip(trip, self._settings.trip_cancellation_policy)
        else:
            trip_lifecycle.update_trip_status(trip, new_status)
        return await self._persist_transition(trip, previous, options)

    async def cancel_trip(
        self, trip_id: UUID, options: StatusTrackingOptions | None = None,
    ) -> Trip:
        trip = await self.get_trip(trip_id)
        previous = trip.status
        trip_lifecycle.cancel_trip(trip, self._settings.trip_cancellation_policy)
        return await self._persist_transition(trip, previous, options)

    async def _persist_transition(
        self, trip: Trip, previous: TripStatus, options: StatusTrackingOptions | None,
    ) -> Trip:
        await self._trips.compare_and_set_status(trip, previous)
        update = await self._status.record(
            EntityType.TRIP, trip.id, trip.status, options,
        )
        await self._db.commit()
        logger.info(
            f"Trip {previous.value} -> {trip.status.value}",
            extra={"trip_id": str(trip.id), "status": trip.status.value,
                   "from_status": previous.value},
        )
        await self._status.publish(update)
        return trip

    # ─── Capacity ────────────────────────────────────────────────

    async def reserve(self, trip_id: UUID, amount: int = 1) -> Trip:
        trip = await self.get_trip(trip_id)
        await self.reserve_loaded(trip, amount)
        await self._db.commit()
        return trip

    async def reserve_loaded(self, trip: Trip, amount: int = 1) -> None:
        """Reserve on an already loaded trip inside the caller's unit of work."""
        available = trip.available_capacity
        if not trip_lifecycle.reserve_capacity(trip, amount):
            raise CapacityExhaustedError(
                available, amount,
                ErrorContext(entity_type="trip", entity_id=str(trip.id)),
            )
        await self._trips.reserve_capacity(trip, amount)
        logger.info(
            "Trip capacity reserved",
            extra={"trip_id": str(trip.id), "amount": amount},
        )

    async def release(self, trip_id: UUID, amount: int = 1) -> Trip:
        trip = await self.get_trip(trip_id)
        await self.release_loaded(trip, amount)
        await self._db.commit()
        return trip

    async def release_loaded(self, trip: Trip, amount: int = 1) -> None:
        if trip_lifecycle.release_capacity(trip, amount):
            await self._trips.release_capacity(trip, amount)
            logger.info(
                "Trip capacity released",
                extra={"trip_id": str(trip.id), "amount": amount},
            )

    async def set_available_capacity(self, trip_id: UUID, available: int) -> Trip:
        trip = await self.get_trip(trip_id)
        trip_lifecycle.set_available_capacity(trip, available)
        await self._trips.set_available_capacity(trip)
        await self._db.commit()
        return trip
