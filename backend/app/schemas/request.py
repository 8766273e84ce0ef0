"""Delivery Request Schemas — creation payload, status changes, responses.

Invariants:
    - Item and budget rules (non-empty, quantity >= 1, total <= budget) are the core's
    - Responses carry the cost summary computed by request_lifecycle
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.core import request_lifecycle
from app.core.domain_types import RequestStatus
from app.core.entities import DeliveryRequest, RequestItem
from app.schemas.common import AddressIn, AddressOut, NotificationOptions


class RequestItemIn(BaseModel):
    name: str = Field(max_length=200)
    quantity: int
    estimated_price: float
    description: str | None = Field(None, max_length=1000)
    image_url: str | None = None


class RequestCreate(BaseModel):
    trip_id: UUID
    requester_id: UUID
    items: list[RequestItemIn]
    delivery_address: AddressIn
    max_item_budget: float
    delivery_fee: float
    special_instructions: str | None = Field(None, max_length=2000)


class RequestStatusUpdate(NotificationOptions):
    status: RequestStatus
    actual_prices: dict[UUID, float] | None = None


class RequestItemOut(BaseModel):
    id: UUID
    name: str
    quantity: int
    estimated_price: float
    actual_price: float | None
    description: str | None
    image_url: str | None

    @classmethod
    def from_entity(cls, item: RequestItem) -> "RequestItemOut":
        return cls(**vars(item))


class RequestResponse(BaseModel):
    id: UUID
    trip_id: UUID
    requester_id: UUID
    items: list[RequestItemOut]
    delivery_address: AddressOut
    max_item_budget: float
    delivery_fee: float
    special_instructions: str | None
    status: RequestStatus
    created_at: datetime
    accepted_at: datetime | None
    completed_at: datetime | None
    total_estimated_cost: float
    total_actual_cost: float | None
    cost_difference: float | None
    is_within_budget: bool

    @classmethod
    def from_entity(cls, request: DeliveryRequest) -> "RequestResponse":
        return cls(
            id=request.id,
            trip_id=request.trip_id,
            requester_id=request.requester_id,
            items=[RequestItemOut.from_entity(i) for i in request.items],
            delivery_address=AddressOut.from_entity(request.delivery_address),
            max_item_budget=request.max_item_budget,
            delivery_fee=request.delivery_fee,
            special_instructions=request.special_instructions,
            status=request.status,
            created_at=request.created_at,
            accepted_at=request.accepted_at,
            completed_at=request.completed_at,
            **request_lifecycle.cost_summary(request),
        )
