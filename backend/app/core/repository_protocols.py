"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Counter changes (available_capacity, current_user_count) happen inside the
      repository as single atomic statements, never read-then-write from the core
    - Status writes are compare-and-swap on the persisted status

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves —
      the shell orchestrates the async calls around the pure logic
"""

from typing import Protocol
from uuid import UUID

from app.core.domain_types import (
    EntityType, LocationId, RequestId, RequestStatus, TripId, TripStatus, UserId,
)
from app.core.entities import (
    DeliveryRequest, Location, LocationPresence, StatusUpdate, Trip,
)


class TripRepository(Protocol):
    """Contract for trip persistence — implemented by shell."""
    async def find_by_id(self, trip_id: TripId) -> Trip | None: ...
    async def save(self, trip: Trip) -> Trip: ...
    async def compare_and_set_status(
        self, trip: Trip, expected: TripStatus,
    ) -> None: ...
    async def reserve_capacity(self, trip: Trip, amount: int) -> None: ...
    async def release_capacity(self, trip: Trip, amount: int) -> None: ...
    async def set_available_capacity(self, trip: Trip) -> None: ...
    async def find_by_owner(self, owner_id: UserId) -> list[Trip]: ...


class RequestRepository(Protocol):
    """Contract for delivery request persistence — implemented by shell."""
    async def find_by_id(self, request_id: RequestId) -> DeliveryRequest | None: ...
    async def save(self, request: DeliveryRequest) -> DeliveryRequest: ...
    async def compare_and_set_status(
        self, request: DeliveryRequest, expected: RequestStatus,
    ) -> None: ...
    async def find_by_trip(self, trip_id: TripId) -> list[DeliveryRequest]: ...


class LocationRepository(Protocol):
    """Contract for location persistence — implemented by shell."""
    async def find_by_id(self, location_id: LocationId) -> Location | None: ...
    async def save(self, location: Location) -> Location: ...


class PresenceRepository(Protocol):
    """Contract for presence rows + location user counters — implemented by shell."""
    async def find_active(
        self, user_id: UserId, location_id: LocationId,
    ) -> LocationPresence | None: ...
    async def find_active_by_location(
        self, location_id: LocationId,
    ) -> list[LocationPresence]: ...
    async def open(self, presence: LocationPresence) -> LocationPresence: ...
    async def close(self, presence: LocationPresence) -> LocationPresence: ...


class StatusUpdateRepository(Protocol):
    """Append-only status history — implemented by shell."""
    async def append(self, update: StatusUpdate) -> StatusUpdate: ...
    async def query_history(
        self, entity_type: EntityType, entity_id: UUID, limit: int, offset: int,
    ) -> list[StatusUpdate]: ...
    async def latest(
        self, entity_type: EntityType, entity_id: UUID,
    ) -> StatusUpdate | None: ...


class Notifier(Protocol):
    """Delivers notification intents carried by StatusUpdate.options."""
    async def notify(self, update: StatusUpdate) -> None: ...
