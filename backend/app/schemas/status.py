"""Status Schemas — confirmation payloads and status history responses."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.domain_types import EntityType
from app.core.entities import StatusUpdate
from app.schemas.common import NotificationOptions


class ConfirmationBase(NotificationOptions):
    entity_type: str
    entity_id: UUID
    metadata: dict[str, Any] = Field(default_factory=dict)
    status: str | None = None


class PhotoConfirmationCreate(ConfirmationBase):
    photo_url: str


class ReceiptConfirmationCreate(ConfirmationBase):
    receipt_url: str


class StatusUpdateResponse(BaseModel):
    id: UUID
    entity_type: EntityType
    entity_id: UUID
    status: str
    timestamp: datetime
    photo_url: str | None
    receipt_url: str | None
    metadata: dict[str, Any]
    notify_users: bool
    send_real_time_updates: bool

    @classmethod
    def from_entity(cls, update: StatusUpdate) -> "StatusUpdateResponse":
        return cls(
            id=update.id,
            entity_type=update.entity_type,
            entity_id=update.entity_id,
            status=update.status,
            timestamp=update.timestamp,
            photo_url=update.photo_url,
            receipt_url=update.receipt_url,
            metadata=update.metadata,
            notify_users=update.options.notify_users,
            send_real_time_updates=update.options.send_real_time_updates,
        )


class StatusHistoryResponse(BaseModel):
    updates: list[StatusUpdateResponse]
    pagination: dict[str, int]
