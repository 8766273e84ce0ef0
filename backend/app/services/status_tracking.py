"""Status Tracking Service — DB-backed status history and confirmations.

Invariants:
    - Records are built by core.status_tracker.build_status_update (one factory)
    - record() appends inside the caller's unit of work; it never commits
    - publish() runs only after the caller committed: intents for rolled-back
      changes are never announced
    - Confirmations restate the owning trip's or request's current stored status;
      an unknown entity is a 404 and a mismatching explicit status a 400

Design Decisions:
    - Page limit defaults to Settings.status_history_page_size
    - Notifier injected (default LoggingNotifier): push transport lives outside
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.domain_types import ConfirmationType, EntityType
from app.core.entities import Attachment, StatusTrackingOptions, StatusUpdate
from app.core.errors import ErrorContext, NotFoundError, ValidationError
from app.core.repository_protocols import (
    Notifier, RequestRepository, StatusUpdateRepository, TripRepository,
)
from app.core.status_tracker import (
    build_status_update, confirmation_attachment, parse_entity_type, validate_page,
    validate_status,
)
from app.infrastructure.notifier import LoggingNotifier
from app.infrastructure.request_repository import SqlRequestRepository
from app.infrastructure.status_repository import SqlStatusUpdateRepository
from app.infrastructure.trip_repository import SqlTripRepository

logger = logging.getLogger(__name__)


class StatusTrackingService:
    """Append, query and announce status updates."""

    def __init__(
        self,
        db: AsyncSession,
        repository: StatusUpdateRepository | None = None,
        notifier: Notifier | None = None,
        trips: TripRepository | None = None,
        requests: RequestRepository | None = None,
    ):
        self._db = db
        self._repo = repository or SqlStatusUpdateRepository(db)
        self._trips = trips or SqlTripRepository(db)
        self._requests = requests or SqlRequestRepository(db)
        self._notifier = notifier or LoggingNotifier()

    # ─── Recording (caller commits) ──────────────────────────────

    async def record(
        self,
        entity_type: EntityType,
        entity_id: UUID,
        status: Any,
        options: StatusTrackingOptions | None = None,
        attachment: Attachment | None = None,
    ) -> StatusUpdate:
        update = build_status_update(
            entity_type, entity_id, status, options, attachment,
        )
        return await self._repo.append(update)

    async def publish(self, update: StatusUpdate) -> None:
        try:
            await self._notifier.notify(update)
        except Exception as e:
            logger.warning(
                f"Notifier failed: {e}",
                extra={
                    "entity_type": update.entity_type.value,
                    "entity_id": str(update.entity_id),
                },
            )

    # ─── Confirmations (commit here) ─────────────────────────────

    async def add_confirmation(
        self,
        kind: ConfirmationType,
        entity_type: Any,
        entity_id: UUID,
        url: str,
        metadata: dict[str, Any] | None = None,
        options: StatusTrackingOptions | None = None,
        status: str | None = None,
    ) -> StatusUpdate:
        """Attach a photo or receipt to the entity's history."""
        entity_type = parse_entity_type(entity_type)
        attachment = confirmation_attachment(kind, url, metadata)
        current = await self._current_status(entity_type, entity_id)
        if status is not None and validate_status(entity_type, status) != current:
            raise ValidationError([
                f"status: Confirmation status '{status}' does not match the "
                f"{entity_type.value}'s current status '{current}'",
            ])
        update = await self.record(entity_type, entity_id, current, options, attachment)
        await self._db.commit()
        logger.info(
            f"{kind.value.capitalize()} confirmation recorded",
            extra={"entity_type": entity_type.value, "entity_id": str(entity_id)},
        )
        await self.publish(update)
        return update

    async def _current_status(self, entity_type: EntityType, entity_id: UUID) -> str:
        """Status of the trip or request being confirmed; 404 when it does not exist."""
        if entity_type == EntityType.TRIP:
            entity, label = await self._trips.find_by_id(entity_id), "Trip"
        else:
            entity, label = await self._requests.find_by_id(entity_id), "Delivery request"
        if entity is None:
            raise NotFoundError(
                label, str(entity_id),
                ErrorContext(entity_type=entity_type.value, entity_id=str(entity_id)),
            )
        return entity.status.value

    async def add_photo_confirmation(self, entity_type, entity_id, photo_url, **kwargs):
        return await self.add_confirmation(
            ConfirmationType.PHOTO, entity_type, entity_id, photo_url, **kwargs,
        )

    async def add_receipt_confirmation(self, entity_type, entity_id, receipt_url, **kwargs):
        return await self.add_confirmation(
            ConfirmationType.RECEIPT, entity_type, entity_id, receipt_url, **kwargs,
        )

    # ─── Queries ─────────────────────────────────────────────────

    async def get_status_history(
        self,
        entity_type: Any,
        entity_id: UUID,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[StatusUpdate]:
        entity_type = parse_entity_type(entity_type)
        if limit is None:
            limit = get_settings().status_history_page_size
        errors = validate_page(limit, offset)
        if errors:
            raise ValidationError(errors)
        return await self._repo.query_history(entity_type, entity_id, limit, offset)

    async def get_latest_status(self, entity_type: Any, entity_id: UUID) -> StatusUpdate:
        entity_type = parse_entity_type(entity_type)
        latest = await self._repo.latest(entity_type, entity_id)
        if latest is None:
            raise NotFoundError(
                "Status history", str(entity_id),
                ErrorContext(entity_type=entity_type.value, entity_id=str(entity_id)),
            )
        return latest
