"""Trip Routes — announce, read, transition, cancel and size trips.

Invariants:
    - Handlers only translate HTTP <-> service calls; no lifecycle rules here
    - Domain errors propagate to the global ErrandError handler (no try/except)
    - DELETE cancels (terminal status); nothing is ever hard-deleted

Design Decisions:
    - Ranked requests live under /trips/{id} because the trip is the query anchor
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.request_lifecycle import DEFAULT_RANKING_LIMIT
from app.infrastructure.database import get_db
from app.schemas.request import RequestResponse
from app.schemas.trip import (
    TripCapacityUpdate, TripCreate, TripResponse, TripStatusUpdate,
)
from app.services.request_service import RequestService
from app.services.trip_service import TripService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/trips", tags=["trips"])


@router.post(
    "", response_model=TripResponse, status_code=status.HTTP_201_CREATED,
)
async def create_trip(body: TripCreate, db: AsyncSession = Depends(get_db)):
    """Announce a new trip to an existing location."""
    trip = await TripService(db).create_trip(
        owner_id=body.owner_id,
        destination_id=body.destination_id,
        departure_time=body.departure_time,
        estimated_return_time=body.estimated_return_time,
        capacity=body.capacity,
        description=body.description,
    )
    return TripResponse.from_entity(trip)


@router.get("", response_model=list[TripResponse])
async def list_trips(owner_id: UUID, db: AsyncSession = Depends(get_db)):
    """Trips announced by one owner, soonest departure first."""
    trips = await TripService(db).list_for_owner(owner_id)
    return [TripResponse.from_entity(t) for t in trips]


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(trip_id: UUID, db: AsyncSession = Depends(get_db)):
    return TripResponse.from_entity(await TripService(db).get_trip(trip_id))


@router.put("/{trip_id}/status", response_model=TripResponse)
async def update_trip_status(
    trip_id: UUID, body: TripStatusUpdate, db: AsyncSession = Depends(get_db),
):
    """Move the trip along its transition table."""
    trip = await TripService(db).update_status(
        trip_id, body.status, body.to_options(),
    )
    return TripResponse.from_entity(trip)


@router.put("/{trip_id}/capacity", response_model=TripResponse)
async def update_trip_capacity(
    trip_id: UUID, body: TripCapacityUpdate, db: AsyncSession = Depends(get_db),
):
    """Reserve/release slots, or set available capacity outright."""
    service = TripService(db)
    if body.action == "reserve":
        trip = await service.reserve(trip_id, body.amount)
    elif body.action == "release":
        trip = await service.release(trip_id, body.amount)
    else:
        trip = await service.set_available_capacity(trip_id, body.available_capacity)
    return TripResponse.from_entity(trip)


@router.delete("/{trip_id}", response_model=TripResponse)
async def cancel_trip(trip_id: UUID, db: AsyncSession = Depends(get_db)):
    """Cancel the trip under the configured cancellation policy."""
    return TripResponse.from_entity(await TripService(db).cancel_trip(trip_id))


@router.get("/{trip_id}/requests/ranked", response_model=list[RequestResponse])
async def ranked_requests(
    trip_id: UUID,
    limit: int = Query(DEFAULT_RANKING_LIMIT, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Pending requests for the trip, best delivery fee first."""
    requests = await RequestService(db).ranked_for_trip(trip_id, limit)
    return [RequestResponse.from_entity(r) for r in requests]
