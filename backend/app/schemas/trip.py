"""Trip Schemas — API shapes for trip creation, transitions and capacity.

Invariants:
    - Datetimes must carry a UTC offset (AwareDatetime); naive input is a 400
    - TripCapacityUpdate is EITHER a relative action OR an absolute value
    - Capacity bounds and timing rules are checked by the core, not here

Design Decisions:
    - One capacity endpoint with two body forms over two endpoints: mirrors the
      public PUT /trips/{id}/capacity contract
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, Field, model_validator

from app.core import trip_lifecycle
from app.core.domain_types import TripStatus
from app.core.entities import Trip
from app.schemas.common import NotificationOptions
from app.schemas.location import LocationResponse


class TripCreate(BaseModel):
    owner_id: UUID
    destination_id: UUID
    departure_time: AwareDatetime
    estimated_return_time: AwareDatetime
    capacity: int
    description: str | None = Field(None, max_length=2000)


class TripStatusUpdate(NotificationOptions):
    status: TripStatus


class TripCapacityUpdate(BaseModel):
    action: Literal["reserve", "release"] | None = None
    amount: int = Field(1, ge=1)
    available_capacity: int | None = None

    @model_validator(mode="after")
    def exactly_one_form(self):
        if (self.action is None) == (self.available_capacity is None):
            raise ValueError(
                "provide either action (reserve|release) or available_capacity",
            )
        return self


class TripResponse(BaseModel):
    id: UUID
    owner_id: UUID
    destination: LocationResponse
    departure_time: datetime
    estimated_return_time: datetime
    capacity: int
    available_capacity: int
    status: TripStatus
    description: str | None
    created_at: datetime
    updated_at: datetime
    can_accept_requests: bool
    allowed_transitions: list[TripStatus]
    duration_hours: int
    minutes_until_departure: int
    is_departing_soon: bool

    @classmethod
    def from_entity(cls, trip: Trip) -> "TripResponse":
        return cls(
            id=trip.id,
            owner_id=trip.owner_id,
            destination=LocationResponse.from_entity(trip.destination),
            departure_time=trip.departure_time,
            estimated_return_time=trip.estimated_return_time,
            capacity=trip.capacity,
            available_capacity=trip.available_capacity,
            status=trip.status,
            description=trip.description,
            created_at=trip.created_at,
            updated_at=trip.updated_at,
            can_accept_requests=trip_lifecycle.can_accept_requests(trip),
            allowed_transitions=sorted(
                trip_lifecycle.allowed_trip_transitions(trip.status),
                key=lambda s: s.value,
            ),
            duration_hours=trip_lifecycle.trip_duration_hours(trip),
            minutes_until_departure=trip_lifecycle.minutes_until_departure(trip),
            is_departing_soon=trip_lifecycle.is_departing_soon(trip),
        )
