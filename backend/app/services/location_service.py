"""Location Service — locations plus geofenced check-in/check-out.

Invariants:
    - Geofence tolerance comes from Settings.geofence_tolerance_km
    - The core decides (geofence, duplicate, missing presence); the repository
      writes the presence row and the counter in one transaction
    - Returned locations are re-read after the write: counts are what the DB holds
"""

import logging
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core import location_presence, validation
from app.core.domain_types import Kilometers, LocationCategory
from app.core.entities import (
    Address, Coordinates, Location, LocationPresence,
)
from app.core.errors import ErrorContext, NotFoundError, ValidationError
from app.core.repository_protocols import LocationRepository, PresenceRepository
from app.infrastructure.location_repository import (
    SqlLocationRepository, SqlPresenceRepository,
)

logger = logging.getLogger(__name__)


class LocationService:
    """Location and presence use cases."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        locations: LocationRepository | None = None,
        presence: PresenceRepository | None = None,
    ):
        self._db = db
        self._settings = settings or get_settings()
        self._locations = locations or SqlLocationRepository(db)
        self._presence = presence or SqlPresenceRepository(db)

    async def get_location(self, location_id: UUID) -> Location:
        location = await self._locations.find_by_id(location_id)
        if location is None:
            raise NotFoundError(
                "Location", str(location_id),
                ErrorContext(entity_type="location", entity_id=str(location_id)),
            )
        return location

    async def create_location(self, data: Mapping[str, Any]) -> Location:
        coordinates = data.get("coordinates") or {}
        errors = []
        if not isinstance(data.get("name"), str) or not data["name"].strip():
            errors.append("name: Name is required")
        errors.extend(validation.validate_coordinates(
            coordinates.get("latitude"), coordinates.get("longitude"),
        ))
        errors.extend(validation.validate_address(data.get("address")))
        if errors:
            raise ValidationError(errors)
        location = Location(
            name=data["name"].strip(),
            address=Address(**{
                name: data["address"][name].strip()
                for name in validation.ADDRESS_FIELDS
            }),
            coordinates=Coordinates(
                latitude=coordinates["latitude"], longitude=coordinates["longitude"],
            ),
            category=LocationCategory(data.get("category") or LocationCategory.OTHER),
            verified=bool(data.get("verified", False)),
        )
        await self._locations.save(location)
        await self._db.commit()
        logger.info("Location created", extra={"location_id": str(location.id)})
        return location

    async def check_in(
        self, location_id: UUID, user_id: UUID, user_coordinates: Coordinates,
    ) -> tuple[LocationPresence, Location]:
        location = await self.get_location(location_id)
        active = await self._presence.find_active(user_id, location_id)
        presence = location_presence.check_in(
            user_id, location, user_coordinates,
            Kilometers(self._settings.geofence_tolerance_km), active,
        )
        await self._presence.open(presence)
        await self._db.commit()
        logger.info(
            "User checked in",
            extra={"location_id": str(location_id), "user_id": str(user_id)},
        )
        return presence, await self.get_location(location_id)

    async def check_out(
        self, location_id: UUID, user_id: UUID,
    ) -> tuple[LocationPresence, Location]:
        location = await self.get_location(location_id)
        active = await self._presence.find_active(user_id, location_id)
        presence = location_presence.check_out(user_id, location, active)
        await self._presence.close(presence)
        await self._db.commit()
        logger.info(
            "User checked out",
            extra={"location_id": str(location_id), "user_id": str(user_id)},
        )
        return presence, await self.get_location(location_id)

    async def active_presence(self, location_id: UUID) -> list[LocationPresence]:
        await self.get_location(location_id)
        return await self._presence.find_active_by_location(location_id)
