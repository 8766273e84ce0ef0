"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Models are storage shapes only; lifecycle rules live in core/

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from app.models.location import LocationModel  # noqa: F401
from app.models.trip import TripModel  # noqa: F401
from app.models.delivery_request import DeliveryRequestModel  # noqa: F401
from app.models.location_presence import LocationPresenceModel  # noqa: F401
from app.models.status_update import StatusUpdateModel  # noqa: F401
