"""Delivery Request Routes — create, read, accept and move requests.

Invariants:
    - Accept reserves one trip slot; cancelling an accepted request returns it
    - Actual item prices ride on the purchased status change
    - Domain errors propagate to the global ErrandError handler
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.database import get_db
from app.schemas.common import NotificationOptions
from app.schemas.request import RequestCreate, RequestResponse, RequestStatusUpdate
from app.services.request_service import RequestService

router = APIRouter(prefix="/api/v1/requests", tags=["requests"])


@router.post(
    "", response_model=RequestResponse, status_code=status.HTTP_201_CREATED,
)
async def create_request(body: RequestCreate, db: AsyncSession = Depends(get_db)):
    """Attach a shopping list to a trip that is accepting requests."""
    request = await RequestService(db).create_request(body.model_dump())
    return RequestResponse.from_entity(request)


@router.get("/{request_id}", response_model=RequestResponse)
async def get_request(request_id: UUID, db: AsyncSession = Depends(get_db)):
    return RequestResponse.from_entity(
        await RequestService(db).get_request(request_id),
    )


@router.put("/{request_id}/accept", response_model=RequestResponse)
async def accept_request(
    request_id: UUID,
    body: NotificationOptions | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Accept a pending request and reserve a slot on its trip."""
    options = body.to_options() if body else None
    request = await RequestService(db).accept_request(request_id, options)
    return RequestResponse.from_entity(request)


@router.put("/{request_id}/status", response_model=RequestResponse)
async def update_request_status(
    request_id: UUID, body: RequestStatusUpdate, db: AsyncSession = Depends(get_db),
):
    request = await RequestService(db).update_status(
        request_id, body.status, body.to_options(), body.actual_prices,
    )
    return RequestResponse.from_entity(request)
