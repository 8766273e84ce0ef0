"""Location Routes — register locations and track check-in presence.

Invariants:
    - Check-in is geofenced against Settings.geofence_tolerance_km (409 outside)
    - A second check-in without check-out is 409; check-out without check-in is 404
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.database import get_db
from app.schemas.location import (
    CheckInRequest, CheckOutRequest, LocationCreate, LocationResponse,
    PresenceChangeResponse, PresenceResponse,
)
from app.services.location_service import LocationService

router = APIRouter(prefix="/api/v1/locations", tags=["locations"])


@router.post(
    "", response_model=LocationResponse, status_code=status.HTTP_201_CREATED,
)
async def create_location(body: LocationCreate, db: AsyncSession = Depends(get_db)):
    location = await LocationService(db).create_location(body.model_dump())
    return LocationResponse.from_entity(location)


@router.get("/{location_id}", response_model=LocationResponse)
async def get_location(location_id: UUID, db: AsyncSession = Depends(get_db)):
    return LocationResponse.from_entity(
        await LocationService(db).get_location(location_id),
    )


@router.post("/{location_id}/checkin", response_model=PresenceChangeResponse)
async def check_in(
    location_id: UUID, body: CheckInRequest, db: AsyncSession = Depends(get_db),
):
    """Open a presence if the user's coordinates are inside the geofence."""
    presence, location = await LocationService(db).check_in(
        location_id, body.user_id, body.coordinates.to_entity(),
    )
    return PresenceChangeResponse(
        presence=PresenceResponse.from_entity(presence),
        location=LocationResponse.from_entity(location),
    )


@router.post("/{location_id}/checkout", response_model=PresenceChangeResponse)
async def check_out(
    location_id: UUID, body: CheckOutRequest, db: AsyncSession = Depends(get_db),
):
    presence, location = await LocationService(db).check_out(location_id, body.user_id)
    return PresenceChangeResponse(
        presence=PresenceResponse.from_entity(presence),
        location=LocationResponse.from_entity(location),
    )


@router.get("/{location_id}/presence", response_model=list[PresenceResponse])
async def active_presence(location_id: UUID, db: AsyncSession = Depends(get_db)):
    """Users currently checked in, earliest first."""
    presences = await LocationService(db).active_presence(location_id)
    return [PresenceResponse.from_entity(p) for p in presences]
