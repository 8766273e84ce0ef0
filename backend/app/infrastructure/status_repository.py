"""Status Update Repository — append-only status history in `status_updates`.

Invariants:
    - append() inserts; nothing in this module updates or deletes
    - History is ascending by (timestamp, id); latest() is the last row of that order

Design Decisions:
    - No insertion sequence column: equal timestamps fall back to the id, which is
      stable across pages and keeps latest() equal to the last history row, but is not
      insertion order. Microsecond UTC timestamps make such ties rare
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import EntityType
from app.core.entities import StatusUpdate
from app.infrastructure.mappers import status_update_from_row, status_update_to_row
from app.models.status_update import StatusUpdateModel


class SqlStatusUpdateRepository:
    """Status history persistence."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def append(self, update: StatusUpdate) -> StatusUpdate:
        self._db.add(status_update_to_row(update))
        await self._db.flush()
        return update

    async def query_history(
        self, entity_type: EntityType, entity_id: UUID, limit: int, offset: int,
    ) -> list[StatusUpdate]:
        result = await self._db.execute(
            select(StatusUpdateModel)
            .where(
                StatusUpdateModel.entity_type == entity_type.value,
                StatusUpdateModel.entity_id == entity_id,
            )
            .order_by(
                StatusUpdateModel.timestamp.asc(), StatusUpdateModel.id.asc(),
            )
            .limit(limit)
            .offset(offset),
        )
        return [status_update_from_row(row) for row in result.scalars().all()]

    async def latest(
        self, entity_type: EntityType, entity_id: UUID,
    ) -> StatusUpdate | None:
        result = await self._db.execute(
            select(StatusUpdateModel)
            .where(
                StatusUpdateModel.entity_type == entity_type.value,
                StatusUpdateModel.entity_id == entity_id,
            )
            .order_by(
                StatusUpdateModel.timestamp.desc(), StatusUpdateModel.id.desc(),
            )
            .limit(1),
        )
        row = result.scalar_one_or_none()
        return status_update_from_row(row) if row else None
