"""Row Mappers — translate ORM rows to core entities and back.

Invariants:
    - Every datetime leaving this module is timezone-aware UTC (SQLite drops tzinfo)
    - Entities never hold ORM instances; ORM rows never hold entities
    - JSON columns store plain str/float/int values only (UUIDs as strings)
"""

import uuid
from dataclasses import asdict
from datetime import datetime, timezone

from app.core.domain_types import (
    EntityType, LocationCategory, RequestStatus, TripStatus,
)
from app.core.entities import (
    Address, Coordinates, DeliveryRequest, Location, LocationPresence,
    RequestItem, StatusTrackingOptions, StatusUpdate, Trip,
)
from app.models.delivery_request import DeliveryRequestModel
from app.models.location import LocationModel
from app.models.location_presence import LocationPresenceModel
from app.models.status_update import StatusUpdateModel
from app.models.trip import TripModel


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ─── Location ────────────────────────────────────────────────────

def location_to_dict(location: Location) -> dict:
    """JSON-safe snapshot (used for trips.destination_snapshot)."""
    return {
        "id": str(location.id),
        "name": location.name,
        "address": asdict(location.address),
        "coordinates": asdict(location.coordinates),
        "category": location.category.value,
        "verified": location.verified,
        "current_user_count": location.current_user_count,
    }


def location_from_dict(data: dict) -> Location:
    return Location(
        id=uuid.UUID(data["id"]),
        name=data["name"],
        address=Address(**data["address"]),
        coordinates=Coordinates(**data["coordinates"]),
        category=LocationCategory(data["category"]),
        verified=data["verified"],
        current_user_count=data["current_user_count"],
    )


def location_to_row(location: Location) -> LocationModel:
    return LocationModel(
        id=location.id,
        name=location.name,
        address=asdict(location.address),
        latitude=location.coordinates.latitude,
        longitude=location.coordinates.longitude,
        category=location.category.value,
        verified=location.verified,
        current_user_count=location.current_user_count,
    )


def location_from_row(row: LocationModel) -> Location:
    return Location(
        id=row.id,
        name=row.name,
        address=Address(**row.address),
        coordinates=Coordinates(latitude=row.latitude, longitude=row.longitude),
        category=LocationCategory(row.category),
        verified=row.verified,
        current_user_count=row.current_user_count,
    )


# ─── Trip ────────────────────────────────────────────────────────

def trip_to_row(trip: Trip) -> TripModel:
    return TripModel(
        id=trip.id,
        owner_id=trip.owner_id,
        destination_id=trip.destination.id,
        destination_snapshot=location_to_dict(trip.destination),
        departure_time=trip.departure_time,
        estimated_return_time=trip.estimated_return_time,
        capacity=trip.capacity,
        available_capacity=trip.available_capacity,
        status=trip.status.value,
        description=trip.description,
        created_at=trip.created_at,
        updated_at=trip.updated_at,
    )


def trip_from_row(row: TripModel) -> Trip:
    return Trip(
        id=row.id,
        owner_id=row.owner_id,
        destination=location_from_dict(row.destination_snapshot),
        departure_time=as_utc(row.departure_time),
        estimated_return_time=as_utc(row.estimated_return_time),
        capacity=row.capacity,
        available_capacity=row.available_capacity,
        status=TripStatus(row.status),
        description=row.description,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


# ─── Delivery request ────────────────────────────────────────────

def item_to_dict(item: RequestItem) -> dict:
    data = asdict(item)
    data["id"] = str(item.id)
    return data


def item_from_dict(data: dict) -> RequestItem:
    return RequestItem(**{**data, "id": uuid.UUID(data["id"])})


def request_to_row(request: DeliveryRequest) -> DeliveryRequestModel:
    return DeliveryRequestModel(
        id=request.id,
        trip_id=request.trip_id,
        requester_id=request.requester_id,
        items=[item_to_dict(i) for i in request.items],
        delivery_address=asdict(request.delivery_address),
        max_item_budget=request.max_item_budget,
        delivery_fee=request.delivery_fee,
        special_instructions=request.special_instructions,
        status=request.status.value,
        created_at=request.created_at,
        accepted_at=request.accepted_at,
        completed_at=request.completed_at,
    )


def request_from_row(row: DeliveryRequestModel) -> DeliveryRequest:
    return DeliveryRequest(
        id=row.id,
        trip_id=row.trip_id,
        requester_id=row.requester_id,
        items=[item_from_dict(i) for i in row.items],
        delivery_address=Address(**row.delivery_address),
        max_item_budget=float(row.max_item_budget),
        delivery_fee=float(row.delivery_fee),
        special_instructions=row.special_instructions,
        status=RequestStatus(row.status),
        created_at=as_utc(row.created_at),
        accepted_at=as_utc(row.accepted_at),
        completed_at=as_utc(row.completed_at),
    )


# ─── Presence ────────────────────────────────────────────────────

def presence_from_row(row: LocationPresenceModel) -> LocationPresence:
    return LocationPresence(
        id=row.id,
        user_id=row.user_id,
        location_id=row.location_id,
        checked_in_at=as_utc(row.checked_in_at),
        checked_out_at=as_utc(row.checked_out_at),
        is_active=row.is_active,
    )


# ─── Status update ───────────────────────────────────────────────

def status_update_to_row(update: StatusUpdate) -> StatusUpdateModel:
    return StatusUpdateModel(
        id=update.id,
        entity_type=update.entity_type.value,
        entity_id=update.entity_id,
        status=update.status,
        timestamp=update.timestamp,
        photo_url=update.photo_url,
        receipt_url=update.receipt_url,
        meta_data=dict(update.metadata),
        notify_users=update.options.notify_users,
        send_real_time_updates=update.options.send_real_time_updates,
    )


def status_update_from_row(row: StatusUpdateModel) -> StatusUpdate:
    return StatusUpdate(
        id=row.id,
        entity_type=EntityType(row.entity_type),
        entity_id=row.entity_id,
        status=row.status,
        timestamp=as_utc(row.timestamp),
        options=StatusTrackingOptions(
            notify_users=row.notify_users,
            send_real_time_updates=row.send_real_time_updates,
        ),
        photo_url=row.photo_url,
        receipt_url=row.receipt_url,
        metadata=dict(row.meta_data or {}),
    )
