"""Status Tracker — append-only audit log of trip and request status changes.

Invariants:
    - Records are frozen StatusUpdate values: never edited, never deleted
    - History per entity is returned ascending by timestamp (insertion order breaks ties)
    - entity_type is restricted to EntityType; anything else is a ValidationError
    - status belongs to the entity's own enum (TripStatus or RequestStatus)
    - Photo/receipt URLs are validated before anything is appended
    - Notification is an INTENT on StatusUpdate.options; the tracker never dispatches

Design Decisions:
    - build_status_update is the pure record factory shared by this in-memory tracker and
      the shell's DB-backed service: one place decides what a record looks like
    - In-memory dict keyed by (EntityType, entity_id): the reference store for the engine
      and its tests; production history lives behind StatusUpdateRepository
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from app.core.domain_types import (
    ConfirmationType, EntityType, MAX_HISTORY_PAGE_SIZE, RequestStatus, TripStatus,
)
from app.core.entities import (
    Attachment, StatusTrackingOptions, StatusUpdate, utc_now,
)
from app.core.errors import NotFoundError, ValidationError
from app.core import validation


DEFAULT_HISTORY_LIMIT: int = 20


def parse_entity_type(value: Any) -> EntityType:
    """Coerce 'trip'/'request' (or an EntityType) into EntityType."""
    if isinstance(value, EntityType):
        return value
    try:
        return EntityType(value)
    except ValueError:
        allowed = ", ".join(e.value for e in EntityType)
        raise ValidationError(
            [f"entity_type: '{value}' is not one of {allowed}"],
        ) from None


def validate_page(limit: Any, offset: Any) -> list[str]:
    errors = []
    if not isinstance(limit, int) or not 1 <= limit <= MAX_HISTORY_PAGE_SIZE:
        errors.append(f"limit: Limit must be between 1 and {MAX_HISTORY_PAGE_SIZE}")
    if not isinstance(offset, int) or offset < 0:
        errors.append("offset: Offset cannot be negative")
    return errors


STATUS_ENUMS: dict[EntityType, type[Enum]] = {
    EntityType.TRIP: TripStatus,
    EntityType.REQUEST: RequestStatus,
}


def validate_status(entity_type: EntityType, status: Any) -> str:
    """Return the status string, which must belong to the entity's status enum."""
    status_value = getattr(status, "value", status)
    if not isinstance(status_value, str) or not status_value:
        raise ValidationError(["status: Status is required"])
    allowed = [s.value for s in STATUS_ENUMS[entity_type]]
    if status_value not in allowed:
        raise ValidationError([
            f"status: '{status_value}' is not a {entity_type.value} status "
            f"(one of {', '.join(allowed)})",
        ])
    return status_value


def build_status_update(
    entity_type: EntityType | str,
    entity_id: uuid.UUID,
    status: Any,
    options: StatusTrackingOptions | None = None,
    attachment: Attachment | None = None,
    now: datetime | None = None,
) -> StatusUpdate:
    """Pure factory for one audit record."""
    entity_type = parse_entity_type(entity_type)
    status_value = validate_status(entity_type, status)
    attachment = attachment or Attachment()
    errors = []
    if attachment.photo_url is not None:
        errors.extend(validation.validate_url(attachment.photo_url, "photo_url"))
    if attachment.receipt_url is not None:
        errors.extend(validation.validate_url(attachment.receipt_url, "receipt_url"))
    if errors:
        raise ValidationError(errors)
    return StatusUpdate(
        entity_type=entity_type,
        entity_id=entity_id,
        status=status_value,
        timestamp=now or utc_now(),
        options=options or StatusTrackingOptions(),
        photo_url=attachment.photo_url,
        receipt_url=attachment.receipt_url,
        metadata=dict(attachment.metadata),
    )


def confirmation_attachment(
    kind: ConfirmationType, url: str, metadata: dict[str, Any] | None = None,
) -> Attachment:
    """Attachment for a photo or receipt confirmation, tagged with its kind."""
    if not isinstance(url, str) or not url.strip():
        raise ValidationError([f"{kind.value}_url: URL is required"])
    tagged = {**(metadata or {}), "confirmation_type": kind.value}
    if kind == ConfirmationType.PHOTO:
        return Attachment(photo_url=url, metadata=tagged)
    return Attachment(receipt_url=url, metadata=tagged)


def paginate(updates: list[StatusUpdate], limit: int, offset: int) -> list[StatusUpdate]:
    errors = validate_page(limit, offset)
    if errors:
        raise ValidationError(errors)
    ordered = sorted(updates, key=lambda u: u.timestamp)
    return ordered[offset:offset + limit]


@dataclass
class StatusTracker:
    """In-memory append-only status log."""

    clock: Callable[[], datetime] = utc_now
    _history: dict[tuple[EntityType, uuid.UUID], list[StatusUpdate]] = field(
        default_factory=dict,
    )

    def record(
        self,
        entity_type: EntityType | str,
        entity_id: uuid.UUID,
        status: Any,
        options: StatusTrackingOptions | None = None,
        attachment: Attachment | None = None,
    ) -> StatusUpdate:
        update = build_status_update(
            entity_type, entity_id, status, options, attachment, self.clock(),
        )
        self._history.setdefault((update.entity_type, entity_id), []).append(update)
        return update

    def add_photo_confirmation(
        self,
        entity_type: EntityType | str,
        entity_id: uuid.UUID,
        photo_url: str,
        metadata: dict[str, Any] | None = None,
        options: StatusTrackingOptions | None = None,
        status: Any = None,
    ) -> StatusUpdate:
        attachment = confirmation_attachment(ConfirmationType.PHOTO, photo_url, metadata)
        return self._confirm(entity_type, entity_id, attachment, options, status)

    def add_receipt_confirmation(
        self,
        entity_type: EntityType | str,
        entity_id: uuid.UUID,
        receipt_url: str,
        metadata: dict[str, Any] | None = None,
        options: StatusTrackingOptions | None = None,
        status: Any = None,
    ) -> StatusUpdate:
        attachment = confirmation_attachment(ConfirmationType.RECEIPT, receipt_url, metadata)
        return self._confirm(entity_type, entity_id, attachment, options, status)

    def _confirm(self, entity_type, entity_id, attachment, options, status) -> StatusUpdate:
        """Confirmations restate the entity's status; default is the latest recorded one."""
        if status is None:
            latest = self.get_latest_status(entity_type, entity_id)
            if latest is None:
                raise NotFoundError("Status history", str(entity_id))
            status = latest.status
        return self.record(entity_type, entity_id, status, options, attachment)

    def get_status_history(
        self,
        entity_type: EntityType | str,
        entity_id: uuid.UUID,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
    ) -> list[StatusUpdate]:
        key = (parse_entity_type(entity_type), entity_id)
        return paginate(self._history.get(key, []), limit, offset)

    def get_latest_status(
        self, entity_type: EntityType | str, entity_id: uuid.UUID,
    ) -> StatusUpdate | None:
        """Most recent record; among equal timestamps the last appended one."""
        updates = self._history.get((parse_entity_type(entity_type), entity_id))
        if not updates:
            return None
        return sorted(updates, key=lambda u: u.timestamp)[-1]
