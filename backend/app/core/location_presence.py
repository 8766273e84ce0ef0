"""Location Presence — geofence math and check-in/check-out state.

Invariants:
    - distance_km(a, a) == 0 and distance_km(a, b) == distance_km(b, a)
    - check_in requires the user within tolerance_km of the location (GeofenceError otherwise)
    - At most one active presence per (user, location): a second check_in is a ConflictError
    - current_user_count never drops below 0
    - Pure: callers pass the user's current active presence in; the core never queries

Design Decisions:
    - Haversine on a spherical Earth (6371 km): sub-percent error is fine for geofences
    - Tolerance is a parameter, never a constant here: comes from Settings in the shell
"""

import math
import uuid
from datetime import datetime, timedelta
from typing import Iterable

from app.core.domain_types import EARTH_RADIUS_KM, Kilometers
from app.core.entities import Coordinates, Location, LocationPresence, utc_now
from app.core.errors import ConflictError, GeofenceError, NotFoundError


# ─── Distance ────────────────────────────────────────────────────

def distance_km(a: Coordinates, b: Coordinates) -> Kilometers:
    """Great-circle distance between two coordinates, in kilometers."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    central_angle = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return Kilometers(EARTH_RADIUS_KM * central_angle)


def is_within_radius(a: Coordinates, b: Coordinates, radius_km: Kilometers) -> bool:
    return distance_km(a, b) <= radius_km


def verify_user_location(
    location: Location, user_coordinates: Coordinates, tolerance_km: Kilometers,
) -> bool:
    return distance_km(location.coordinates, user_coordinates) <= tolerance_km


def find_closest(
    origin: Coordinates, candidates: Iterable[Coordinates],
) -> tuple[Coordinates, Kilometers] | None:
    """Nearest candidate and its distance, or None for an empty input."""
    ranked = sort_by_distance(origin, candidates)
    return ranked[0] if ranked else None


def sort_by_distance(
    origin: Coordinates, candidates: Iterable[Coordinates],
) -> list[tuple[Coordinates, Kilometers]]:
    pairs = [(c, distance_km(origin, c)) for c in candidates]
    pairs.sort(key=lambda pair: pair[1])
    return pairs


def formatted_address(location: Location) -> str:
    a = location.address
    return f"{a.street}, {a.city}, {a.state} {a.zip_code}"


# ─── Check-in / check-out ────────────────────────────────────────

def check_in(
    user_id: uuid.UUID,
    location: Location,
    user_coordinates: Coordinates,
    tolerance_km: Kilometers,
    active: LocationPresence | None = None,
    now: datetime | None = None,
) -> LocationPresence:
    """Open a presence for the user and bump the location's user count.

    `active` is the user's current active presence at this location, if any.
    """
    if active is not None and active.is_active:
        raise ConflictError("already checked in", "ALREADY_CHECKED_IN")
    distance = distance_km(location.coordinates, user_coordinates)
    if distance > tolerance_km:
        raise GeofenceError(distance, tolerance_km)
    presence = LocationPresence(
        user_id=user_id,
        location_id=location.id,
        checked_in_at=now or utc_now(),
    )
    location.current_user_count += 1
    return presence


def check_out(
    user_id: uuid.UUID,
    location: Location,
    active: LocationPresence | None,
    now: datetime | None = None,
) -> LocationPresence:
    """Close the user's active presence and decrement the count (floor 0)."""
    if (
        active is None
        or not active.is_active
        or active.user_id != user_id
        or active.location_id != location.id
    ):
        raise NotFoundError("Active presence", f"{user_id}@{location.id}")
    active.is_active = False
    active.checked_out_at = now or utc_now()
    location.current_user_count = max(0, location.current_user_count - 1)
    return active


def has_active_users(location: Location) -> bool:
    return location.current_user_count > 0


# ─── Presence queries ────────────────────────────────────────────

def is_currently_active(presence: LocationPresence) -> bool:
    return presence.is_active and presence.checked_out_at is None


def presence_duration_minutes(
    presence: LocationPresence, now: datetime | None = None,
) -> int:
    end = presence.checked_out_at or now or utc_now()
    return math.floor((end - presence.checked_in_at) / timedelta(minutes=1))


def was_active_within(
    presence: LocationPresence, minutes: int, now: datetime | None = None,
) -> bool:
    if presence.is_active:
        return True
    if presence.checked_out_at is None:
        return False
    return presence.checked_out_at > (now or utc_now()) - timedelta(minutes=minutes)


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} minutes"
    hours, remainder = divmod(minutes, 60)
    return f"{hours}h {remainder}m"
