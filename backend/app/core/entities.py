"""Entities — in-memory domain values passed into and returned from the core.

Invariants:
    - Trip.destination is a snapshot copy, never a live reference to a Location
    - Only trip_lifecycle mutates Trip.available_capacity
    - StatusUpdate is frozen: corrections are new records, never edits
    - All timestamps are timezone-aware UTC

Design Decisions:
    - Plain dataclasses, not ORM rows: the core never touches the DB; the shell maps
      rows to entities and back
    - Lifecycle functions validate fully before mutating, so a raised error never
      leaves a half-applied change behind
"""

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from app.core.domain_types import (
    EntityType, LocationCategory, LocationId, PresenceId, RequestId, RequestStatus,
    StatusUpdateId, TripId, TripStatus, UserId,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Coordinates:
    latitude: float
    longitude: float


@dataclass
class Address:
    street: str
    city: str
    state: str
    zip_code: str
    country: str


@dataclass
class Location:
    """A physical place users check in to and trips travel to."""
    name: str
    address: Address
    coordinates: Coordinates
    category: LocationCategory = LocationCategory.OTHER
    verified: bool = False
    current_user_count: int = 0
    id: LocationId = field(default_factory=uuid.uuid4)

    def snapshot(self) -> "Location":
        """Deep copy used as a trip destination."""
        return copy.deepcopy(self)


@dataclass
class Trip:
    """An announced errand run with finite request capacity."""
    owner_id: UserId
    destination: Location
    departure_time: datetime
    estimated_return_time: datetime
    capacity: int
    available_capacity: int
    status: TripStatus = TripStatus.ANNOUNCED
    description: str | None = None
    id: TripId = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass
class RequestItem:
    name: str
    quantity: int
    estimated_price: float
    description: str | None = None
    actual_price: float | None = None
    image_url: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class DeliveryRequest:
    """A requester's shopping list attached to a trip."""
    trip_id: TripId
    requester_id: UserId
    items: list[RequestItem]
    delivery_address: Address
    max_item_budget: float
    delivery_fee: float
    special_instructions: str | None = None
    status: RequestStatus = RequestStatus.PENDING
    id: RequestId = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utc_now)
    accepted_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass
class LocationPresence:
    user_id: UserId
    location_id: LocationId
    checked_in_at: datetime = field(default_factory=utc_now)
    checked_out_at: datetime | None = None
    is_active: bool = True
    id: PresenceId = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class StatusTrackingOptions:
    """Notification intent consumed by the shell's Notifier."""
    notify_users: bool = True
    send_real_time_updates: bool = True


@dataclass(frozen=True)
class Attachment:
    photo_url: str | None = None
    receipt_url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StatusUpdate:
    """Immutable audit record of a status change on a trip or request."""
    entity_type: EntityType
    entity_id: uuid.UUID
    status: str
    timestamp: datetime
    options: StatusTrackingOptions = field(default_factory=StatusTrackingOptions)
    photo_url: str | None = None
    receipt_url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    id: StatusUpdateId = field(default_factory=uuid.uuid4)

    @property
    def should_notify(self) -> bool:
        return self.options.notify_users or self.options.send_real_time_updates
