"""Initial schema — locations, trips, delivery_requests, location_presence, status_updates.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "locations",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("address", sa.JSON, nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("category", sa.String(20), nullable=False, server_default="other"),
        sa.Column("verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("current_user_count", sa.Integer, nullable=False, server_default="0"),
        sa.CheckConstraint("current_user_count >= 0", name="ck_locations_user_count"),
    )

    op.create_table(
        "trips",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_id", UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("destination_id", UUID(as_uuid=True), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("destination_snapshot", sa.JSON, nullable=False),
        sa.Column("departure_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("estimated_return_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("available_capacity", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="announced"),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("capacity BETWEEN 1 AND 10", name="ck_trips_capacity"),
        sa.CheckConstraint(
            "available_capacity >= 0 AND available_capacity <= capacity",
            name="ck_trips_available_capacity",
        ),
    )

    op.create_table(
        "delivery_requests",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("trip_id", UUID(as_uuid=True), sa.ForeignKey("trips.id"), nullable=False, index=True),
        sa.Column("requester_id", UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("items", sa.JSON, nullable=False),
        sa.Column("delivery_address", sa.JSON, nullable=False),
        sa.Column("max_item_budget", sa.Numeric(10, 2), nullable=False),
        sa.Column("delivery_fee", sa.Numeric(10, 2), nullable=False),
        sa.Column("special_instructions", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "location_presence",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("location_id", UUID(as_uuid=True), sa.ForeignKey("locations.id"), nullable=False, index=True),
        sa.Column("checked_in_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("checked_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
    )
    op.create_index(
        "uq_location_presence_active",
        "location_presence",
        ["user_id", "location_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "status_updates",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("entity_type", sa.String(20), nullable=False),
        sa.Column("entity_id", UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("photo_url", sa.Text, nullable=True),
        sa.Column("receipt_url", sa.Text, nullable=True),
        sa.Column("metadata", sa.JSON, nullable=False),
        sa.Column("notify_users", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("send_real_time_updates", sa.Boolean, nullable=False, server_default="true"),
    )
    op.create_index(
        "ix_status_updates_entity",
        "status_updates",
        ["entity_type", "entity_id", "timestamp"],
    )


def downgrade() -> None:
    op.drop_index("ix_status_updates_entity", table_name="status_updates")
    op.drop_table("status_updates")
    op.drop_index("uq_location_presence_active", table_name="location_presence")
    op.drop_table("location_presence")
    op.drop_table("delivery_requests")
    op.drop_table("trips")
    op.drop_table("locations")
