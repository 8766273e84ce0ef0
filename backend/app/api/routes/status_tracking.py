"""Status Tracking Routes — confirmations and status history.

Invariants:
    - entity_type is 'trip' or 'request' (400 otherwise, raised by the core)
    - /latest is 404 when the entity has no history
    - Page limit defaults to Settings.status_history_page_size, capped at 100
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.infrastructure.database import get_db
from app.schemas.status import (
    PhotoConfirmationCreate, ReceiptConfirmationCreate,
    StatusHistoryResponse, StatusUpdateResponse,
)
from app.services.status_tracking import StatusTrackingService

router = APIRouter(prefix="/api/v1/status", tags=["status"])


@router.post(
    "/photo", response_model=StatusUpdateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_photo_confirmation(
    body: PhotoConfirmationCreate, db: AsyncSession = Depends(get_db),
):
    update = await StatusTrackingService(db).add_photo_confirmation(
        body.entity_type, body.entity_id, body.photo_url,
        metadata=body.metadata, options=body.to_options(), status=body.status,
    )
    return StatusUpdateResponse.from_entity(update)


@router.post(
    "/receipt", response_model=StatusUpdateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_receipt_confirmation(
    body: ReceiptConfirmationCreate, db: AsyncSession = Depends(get_db),
):
    update = await StatusTrackingService(db).add_receipt_confirmation(
        body.entity_type, body.entity_id, body.receipt_url,
        metadata=body.metadata, options=body.to_options(), status=body.status,
    )
    return StatusUpdateResponse.from_entity(update)


@router.get(
    "/{entity_type}/{entity_id}/history", response_model=StatusHistoryResponse,
)
async def status_history(
    entity_type: str,
    entity_id: UUID,
    limit: int | None = Query(None),
    offset: int = Query(0),
    db: AsyncSession = Depends(get_db),
):
    """Status records for one entity, oldest first."""
    if limit is None:
        limit = get_settings().status_history_page_size
    updates = await StatusTrackingService(db).get_status_history(
        entity_type, entity_id, limit, offset,
    )
    return StatusHistoryResponse(
        updates=[StatusUpdateResponse.from_entity(u) for u in updates],
        pagination={"limit": limit, "offset": offset},
    )


@router.get(
    "/{entity_type}/{entity_id}/latest", response_model=StatusUpdateResponse,
)
async def latest_status(
    entity_type: str, entity_id: UUID, db: AsyncSession = Depends(get_db),
):
    update = await StatusTrackingService(db).get_latest_status(entity_type, entity_id)
    return StatusUpdateResponse.from_entity(update)
