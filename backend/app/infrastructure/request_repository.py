"""Request Repository — SQLAlchemy implementation of RequestRepository.

Invariants:
    - Status writes are compare-and-swap on the stored status
    - accepted_at/completed_at and recorded item prices travel with the status
      in the same UPDATE
    - Repositories flush, services commit
"""

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import RequestStatus
from app.core.entities import DeliveryRequest
from app.core.errors import ConcurrencyError, ErrorContext
from app.infrastructure.mappers import item_to_dict, request_from_row, request_to_row
from app.models.delivery_request import DeliveryRequestModel


class SqlRequestRepository:
    """Delivery request persistence."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_by_id(self, request_id: UUID) -> DeliveryRequest | None:
        result = await self._db.execute(
            select(DeliveryRequestModel)
            .where(DeliveryRequestModel.id == request_id)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return request_from_row(row) if row else None

    async def save(self, request: DeliveryRequest) -> DeliveryRequest:
        await self._db.merge(request_to_row(request))
        await self._db.flush()
        return request

    async def find_by_trip(self, trip_id: UUID) -> list[DeliveryRequest]:
        result = await self._db.execute(
            select(DeliveryRequestModel)
            .where(DeliveryRequestModel.trip_id == trip_id)
            .order_by(DeliveryRequestModel.created_at),
        )
        return [request_from_row(row) for row in result.scalars().all()]

    async def compare_and_set_status(
        self, request: DeliveryRequest, expected: RequestStatus,
    ) -> None:
        result = await self._db.execute(
            update(DeliveryRequestModel)
            .where(
                DeliveryRequestModel.id == request.id,
                DeliveryRequestModel.status == expected.value,
            )
            .values(
                status=request.status.value,
                accepted_at=request.accepted_at,
                completed_at=request.completed_at,
                items=[item_to_dict(i) for i in request.items],
            )
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            raise ConcurrencyError(
                f"Request {request.id} is no longer {expected.value}",
                ErrorContext(entity_type="request", entity_id=str(request.id)),
            )
