"""Trip Lifecycle — creation defaults, status transitions, capacity arithmetic.

Invariants:
    - 0 <= available_capacity <= capacity at all times
    - Status changes ONLY through TRIP_TRANSITIONS; COMPLETED and CANCELLED are terminal
    - Every operation validates fully before mutating: a raised error leaves the trip untouched
    - updated_at is bumped only when something actually changed

Design Decisions:
    - Transition table as dict[TripStatus, frozenset]: exhaustively checkable, single source
      of truth shared with the shell's compare-and-swap status update
    - reserve_capacity returns bool (not raise): callers decide between "trip full" (409)
      and retry; the shell turns False into CapacityExhaustedError
    - Cancellation scope is a policy argument, chosen by configuration
"""

import math
import uuid
from datetime import datetime, timedelta
from typing import Any, Mapping

from app.core.domain_types import CancellationPolicy, TripStatus
from app.core.entities import Location, Trip, utc_now
from app.core.errors import ConflictError, InvalidTransitionError, ValidationError
from app.core import validation


TRIP_TRANSITIONS: dict[TripStatus, frozenset[TripStatus]] = {
    TripStatus.ANNOUNCED: frozenset({TripStatus.TRAVELING, TripStatus.CANCELLED}),
    TripStatus.TRAVELING: frozenset({TripStatus.AT_DESTINATION, TripStatus.CANCELLED}),
    TripStatus.AT_DESTINATION: frozenset({TripStatus.RETURNING, TripStatus.CANCELLED}),
    TripStatus.RETURNING: frozenset({TripStatus.COMPLETED, TripStatus.CANCELLED}),
    TripStatus.COMPLETED: frozenset(),
    TripStatus.CANCELLED: frozenset(),
}

TERMINAL_TRIP_STATUSES = frozenset({TripStatus.COMPLETED, TripStatus.CANCELLED})
IN_PROGRESS_TRIP_STATUSES = frozenset({
    TripStatus.TRAVELING, TripStatus.AT_DESTINATION, TripStatus.RETURNING,
})

DEPARTING_SOON_MINUTES: int = 30


# ─── Creation ────────────────────────────────────────────────────

def validate_trip_data(data: Mapping[str, Any], now: datetime) -> list[str]:
    """Collect every violated creation rule."""
    errors: list[str] = []
    if not isinstance(data.get("owner_id"), uuid.UUID):
        errors.append("owner_id: Owner ID is required")
    destination = data.get("destination")
    if not isinstance(destination, Location):
        errors.append("destination: Destination is required")
    else:
        errors.extend(validation.validate_coordinates(
            destination.coordinates.latitude, destination.coordinates.longitude,
        ))
        errors.extend(validation.validate_address(
            destination.address, "destination.address",
        ))
    errors.extend(validation.validate_timing(
        data.get("departure_time"), data.get("estimated_return_time"), now,
    ))
    errors.extend(validation.validate_capacity(data.get("capacity")))
    description = data.get("description")
    if description is not None and not isinstance(description, str):
        errors.append("description: Description must be text")
    return errors


def create_trip(data: Mapping[str, Any], now: datetime | None = None) -> Trip:
    """Build a new ANNOUNCED trip with full capacity available."""
    now = now or utc_now()
    errors = validate_trip_data(data, now)
    if errors:
        raise ValidationError(errors)
    capacity = data["capacity"]
    return Trip(
        owner_id=data["owner_id"],
        destination=data["destination"].snapshot(),
        departure_time=data["departure_time"],
        estimated_return_time=data["estimated_return_time"],
        capacity=capacity,
        available_capacity=capacity,
        status=TripStatus.ANNOUNCED,
        description=data.get("description"),
        created_at=now,
        updated_at=now,
    )


# ─── Status transitions ──────────────────────────────────────────

def allowed_trip_transitions(current: TripStatus) -> frozenset[TripStatus]:
    return TRIP_TRANSITIONS[current]


def can_transition_trip(current: TripStatus, new_status: TripStatus) -> bool:
    return new_status in TRIP_TRANSITIONS[current]


def update_trip_status(
    trip: Trip, new_status: TripStatus, now: datetime | None = None,
) -> Trip:
    """Apply a table-approved transition; raises InvalidTransitionError otherwise."""
    if not can_transition_trip(trip.status, new_status):
        raise InvalidTransitionError("trip", trip.status.value, new_status.value)
    trip.status = new_status
    trip.updated_at = now or utc_now()
    return trip


def cancel_trip(
    trip: Trip,
    policy: CancellationPolicy = CancellationPolicy.TRANSITION_TABLE,
    now: datetime | None = None,
) -> Trip:
    """Cancel a trip under the configured policy.

    TRANSITION_TABLE: any non-terminal status may cancel (same as update_trip_status).
    ANNOUNCED_ONLY: only trips that have not started may cancel.
    """
    if policy == CancellationPolicy.ANNOUNCED_ONLY and trip.status != TripStatus.ANNOUNCED:
        raise ConflictError(
            "Only announced trips can be cancelled", "TRIP_ALREADY_STARTED",
        )
    return update_trip_status(trip, TripStatus.CANCELLED, now)


# ─── Capacity ────────────────────────────────────────────────────

def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 1:
        raise ValidationError(["amount: Amount must be a positive integer"])


def reserve_capacity(trip: Trip, amount: int = 1, now: datetime | None = None) -> bool:
    """Take `amount` slots if available. False (and no mutation) when short."""
    _check_amount(amount)
    if trip.available_capacity < amount:
        return False
    trip.available_capacity -= amount
    trip.updated_at = now or utc_now()
    return True


def release_capacity(trip: Trip, amount: int = 1, now: datetime | None = None) -> bool:
    """Return `amount` slots, clamped to capacity. Returns whether anything changed."""
    _check_amount(amount)
    released = min(trip.available_capacity + amount, trip.capacity)
    if released == trip.available_capacity:
        return False
    trip.available_capacity = released
    trip.updated_at = now or utc_now()
    return True


def set_available_capacity(
    trip: Trip, available: int, now: datetime | None = None,
) -> Trip:
    """Absolute capacity override, bounded by 0..capacity."""
    errors = validation.validate_capacity(trip.capacity, available)
    if errors:
        raise ValidationError(errors)
    if available != trip.available_capacity:
        trip.available_capacity = available
        trip.updated_at = now or utc_now()
    return trip


def has_available_capacity(trip: Trip) -> bool:
    return trip.available_capacity > 0


def can_accept_requests(trip: Trip) -> bool:
    return trip.status == TripStatus.ANNOUNCED and has_available_capacity(trip)


# ─── Queries ─────────────────────────────────────────────────────

def is_trip_active(trip: Trip) -> bool:
    return trip.status not in TERMINAL_TRIP_STATUSES


def is_trip_in_progress(trip: Trip) -> bool:
    return trip.status in IN_PROGRESS_TRIP_STATUSES


def trip_duration_hours(trip: Trip) -> int:
    """Planned duration, rounded up to whole hours."""
    seconds = (trip.estimated_return_time - trip.departure_time).total_seconds()
    return math.ceil(seconds / 3600)


def minutes_until_departure(trip: Trip, now: datetime | None = None) -> int:
    delta = trip.departure_time - (now or utc_now())
    return max(0, math.floor(delta / timedelta(minutes=1)))


def is_departing_soon(
    trip: Trip, within_minutes: int = DEPARTING_SOON_MINUTES,
    now: datetime | None = None,
) -> bool:
    minutes = minutes_until_departure(trip, now)
    return 0 < minutes <= within_minutes
