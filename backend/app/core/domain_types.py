"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - TripId, RequestId, LocationId, PresenceId, StatusUpdateId, UserId wrap UUIDs
    - All valid states encoded as Enums — no raw string matching
    - Trip capacity is bounded MIN_TRIP_CAPACITY..MAX_TRIP_CAPACITY

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to DB String columns without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
TripId = NewType("TripId", UUID)
RequestId = NewType("RequestId", UUID)
LocationId = NewType("LocationId", UUID)
PresenceId = NewType("PresenceId", UUID)
StatusUpdateId = NewType("StatusUpdateId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Kilometers = NewType("Kilometers", float)


# ─── Constants ───────────────────────────────────────────────────

MIN_TRIP_CAPACITY: int = 1
MAX_TRIP_CAPACITY: int = 10
EARTH_RADIUS_KM: float = 6371.0
MAX_HISTORY_PAGE_SIZE: int = 100


# ─── Enums ───────────────────────────────────────────────────────

class TripStatus(str, Enum):
    """Trip lifecycle states — maps to DB `trips.status` column."""
    ANNOUNCED = "announced"
    TRAVELING = "traveling"
    AT_DESTINATION = "at_destination"
    RETURNING = "returning"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RequestStatus(str, Enum):
    """Delivery request lifecycle states — maps to DB `delivery_requests.status`."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    PURCHASED = "purchased"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class EntityType(str, Enum):
    """Entities that carry a status history."""
    TRIP = "trip"
    REQUEST = "request"


class LocationCategory(str, Enum):
    GROCERY = "grocery"
    PHARMACY = "pharmacy"
    RETAIL = "retail"
    RESTAURANT = "restaurant"
    OTHER = "other"


class ConfirmationType(str, Enum):
    """Attachment kinds carried by a StatusUpdate."""
    PHOTO = "photo"
    RECEIPT = "receipt"


class CancellationPolicy(str, Enum):
    """Which states a trip may be cancelled from (see trip_lifecycle.cancel_trip)."""
    TRANSITION_TABLE = "transition_table"
    ANNOUNCED_ONLY = "announced_only"
