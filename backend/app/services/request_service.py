"""Request Service — imperative shell around core.request_lifecycle.

Invariants:
    - A request is only created on a trip that exists and can accept requests
    - Accepting reserves one trip slot in the same transaction as the status change
    - Cancelling an ACCEPTED request releases that slot in the same transaction
    - Status writes are compare-and-swap against the loaded status
    - Actual item prices are recorded only together with the PURCHASED transition

Design Decisions:
    - Reuses TripService's loaded-trip capacity helpers: one capacity path
    - Cancel through PUT /status only: cancel_request's no-op path is for
      internal callers, the API reports an illegal cancel as 409
"""

import logging
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core import request_lifecycle, trip_lifecycle
from app.core.domain_types import EntityType, RequestStatus
from app.core.entities import DeliveryRequest, StatusTrackingOptions
from app.core.errors import (
    ConflictError, ErrorContext, NotFoundError, ValidationError,
)
from app.core.repository_protocols import RequestRepository
from app.infrastructure.request_repository import SqlRequestRepository
from app.services.status_tracking import StatusTrackingService
from app.services.trip_service import TripService

logger = logging.getLogger(__name__)


class RequestService:
    """Delivery request use cases."""

    def __init__(
        self,
        db: AsyncSession,
        requests: RequestRepository | None = None,
        trips: TripService | None = None,
        status: StatusTrackingService | None = None,
    ):
        self._db = db
        self._requests = requests or SqlRequestRepository(db)
        self._status = status or StatusTrackingService(db)
        self._trips = trips or TripService(db, status=self._status)

    async def get_request(self, request_id: UUID) -> DeliveryRequest:
        request = await self._requests.find_by_id(request_id)
        if request is None:
            raise NotFoundError(
                "Delivery request", str(request_id),
                ErrorContext(entity_type="request", entity_id=str(request_id)),
            )
        return request

    async def create_request(self, data: Mapping[str, Any]) -> DeliveryRequest:
        request = request_lifecycle.create_request(data)
        trip = await self._trips.get_trip(request.trip_id)
        if not trip_lifecycle.can_accept_requests(trip):
            raise ConflictError(
                "Trip is not accepting requests", "TRIP_NOT_ACCEPTING_REQUESTS",
                ErrorContext(entity_type="trip", entity_id=str(trip.id)),
            )
        await self._requests.save(request)
        update = await self._status.record(
            EntityType.REQUEST, request.id, request.status,
        )
        await self._db.commit()
        logger.info(
            "Delivery request created",
            extra={"request_id": str(request.id), "trip_id": str(trip.id)},
        )
        await self._status.publish(update)
        return request

    async def accept_request(
        self, request_id: UUID, options: StatusTrackingOptions | None = None,
    ) -> DeliveryRequest:
        return await self.update_status(request_id, RequestStatus.ACCEPTED, options)

    async def update_status(
        self,
        request_id: UUID,
        new_status: RequestStatus,
        options: StatusTrackingOptions | None = None,
        actual_prices: Mapping[UUID, float] | None = None,
    ) -> DeliveryRequest:
        """Move the request; `actual_prices` (item id -> unit price) only with PURCHASED."""
        if actual_prices and new_status != RequestStatus.PURCHASED:
            raise ValidationError(
                ["actual_prices: Actual prices can only be recorded on purchase"],
            )
        request = await self.get_request(request_id)
        previous = request.status
        request_lifecycle.update_request_status(request, new_status)
        if actual_prices:
            request_lifecycle.record_actual_prices(request, actual_prices)

        if new_status == RequestStatus.ACCEPTED:
            trip = await self._trips.get_trip(request.trip_id)
            await self._trips.reserve_loaded(trip)
        elif new_status == RequestStatus.CANCELLED and previous == RequestStatus.ACCEPTED:
            trip = await self._trips.get_trip(request.trip_id)
            await self._trips.release_loaded(trip)

        await self._requests.compare_and_set_status(request, previous)
        update = await self._status.record(
            EntityType.REQUEST, request.id, request.status, options,
        )
        await self._db.commit()
        logger.info(
            f"Request {previous.value} -> {request.status.value}",
            extra={"request_id": str(request.id), "trip_id": str(request.trip_id),
                   "status": request.status.value, "from_status": previous.value},
        )
        await self._status.publish(update)
        return request

    async def ranked_for_trip(
        self, trip_id: UUID, limit: int = request_lifecycle.DEFAULT_RANKING_LIMIT,
    ) -> list[DeliveryRequest]:
        await self._trips.get_trip(trip_id)
        requests = await self._requests.find_by_trip(trip_id)
        return request_lifecycle.rank_requests_for_trip(requests, limit)
