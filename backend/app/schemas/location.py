"""Location Schemas — location creation, check-in/out payloads and responses."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.core import location_presence
from app.core.domain_types import LocationCategory
from app.core.entities import Location, LocationPresence
from app.schemas.common import AddressIn, AddressOut, CoordinatesIn


class LocationCreate(BaseModel):
    name: str = Field(max_length=200)
    address: AddressIn
    coordinates: CoordinatesIn
    category: LocationCategory = LocationCategory.OTHER
    verified: bool = False


class LocationResponse(BaseModel):
    id: UUID
    name: str
    address: AddressOut
    formatted_address: str
    coordinates: CoordinatesIn
    category: LocationCategory
    verified: bool
    current_user_count: int
    has_active_users: bool

    @classmethod
    def from_entity(cls, location: Location) -> "LocationResponse":
        return cls(
            id=location.id,
            name=location.name,
            address=AddressOut.from_entity(location.address),
            formatted_address=location_presence.formatted_address(location),
            coordinates=CoordinatesIn(
                latitude=location.coordinates.latitude,
                longitude=location.coordinates.longitude,
            ),
            category=location.category,
            verified=location.verified,
            current_user_count=location.current_user_count,
            has_active_users=location_presence.has_active_users(location),
        )


class CheckInRequest(BaseModel):
    user_id: UUID
    coordinates: CoordinatesIn


class CheckOutRequest(BaseModel):
    user_id: UUID


class PresenceResponse(BaseModel):
    id: UUID
    user_id: UUID
    location_id: UUID
    checked_in_at: datetime
    checked_out_at: datetime | None
    is_active: bool
    duration_minutes: int
    duration: str

    @classmethod
    def from_entity(cls, presence: LocationPresence) -> "PresenceResponse":
        minutes = location_presence.presence_duration_minutes(presence)
        return cls(
            id=presence.id,
            user_id=presence.user_id,
            location_id=presence.location_id,
            checked_in_at=presence.checked_in_at,
            checked_out_at=presence.checked_out_at,
            is_active=presence.is_active,
            duration_minutes=minutes,
            duration=location_presence.format_duration(minutes),
        )


class PresenceChangeResponse(BaseModel):
    presence: PresenceResponse
    location: LocationResponse
