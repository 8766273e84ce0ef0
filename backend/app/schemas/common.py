"""Shared Schemas — value objects reused by every resource.

Invariants:
    - Schemas check shape and types only; range and business rules are the core's
      job so one ValidationError reports every violation together
"""

from pydantic import BaseModel, Field

from app.core.entities import Address, Coordinates, StatusTrackingOptions


class AddressIn(BaseModel):
    street: str = Field(max_length=200)
    city: str = Field(max_length=100)
    state: str = Field(max_length=100)
    zip_code: str = Field(max_length=20)
    country: str = Field(max_length=100)


class AddressOut(AddressIn):
    @classmethod
    def from_entity(cls, address: Address) -> "AddressOut":
        return cls(**vars(address))


class CoordinatesIn(BaseModel):
    latitude: float
    longitude: float

    def to_entity(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class NotificationOptions(BaseModel):
    """Notification intent flags carried into the status record."""
    notify_users: bool = True
    send_real_time_updates: bool = True

    def to_options(self) -> StatusTrackingOptions:
        return StatusTrackingOptions(
            notify_users=self.notify_users,
            send_real_time_updates=self.send_real_time_updates,
        )
