"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2024-05-01

Creates the booking engine tables:
- Room catalog (room types, rooms)
- Bookings
- Booking status history

On PostgreSQL it also adds an exclusion constraint so no two blocking
bookings (unpaid, confirmed, checked_in) of one room overlap.
daterange(check_in, check_out, '[)') is half-open: a stay ending on D and
one starting on D do not collide.
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== ROOM CATALOG ====================
    op.create_table(
        "room_types",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("max_occupancy", sa.Integer, nullable=False, server_default="2"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("base_price >= 0", name="ck_room_types_base_price_non_negative"),
        sa.CheckConstraint("max_occupancy > 0", name="ck_room_types_max_occupancy_positive"),
    )

    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("room_number", sa.String(20), unique=True, nullable=False, index=True),
        sa.Column("floor", sa.Integer, nullable=False, server_default="1"),
        sa.Column("room_type_id", sa.Integer, sa.ForeignKey("room_types.id"), nullable=False, index=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("room_id", sa.Integer, sa.ForeignKey("rooms.id"), nullable=False, index=True),
        sa.Column("user_id", sa.Integer, nullable=False, index=True),
        sa.Column("check_in", sa.Date, nullable=False, index=True),
        sa.Column("check_out", sa.Date, nullable=False, index=True),
        sa.Column("guests", sa.Integer, nullable=False, server_default="1"),
        sa.Column("nightly_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="PKR"),
        sa.Column("special_requests", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="unpaid", index=True),
        sa.Column("cancellation_reason", sa.Text),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
        sa.Column("checked_in_at", sa.DateTime(timezone=True)),
        sa.Column("checked_out_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("check_in < check_out", name="ck_bookings_dates_ordered"),
        sa.CheckConstraint("guests > 0", name="ck_bookings_guests_positive"),
        sa.CheckConstraint("total_price >= 0", name="ck_bookings_total_price_non_negative"),
        sa.CheckConstraint(
            "status IN ('unpaid', 'confirmed', 'checked_in', 'checked_out', 'cancelled')",
            name="ck_bookings_status",
        ),
    )
    op.create_index(
        "ix_bookings_room_status_dates",
        "bookings",
        ["room_id", "status", "check_in", "check_out"],
    )

    op.create_table(
        "booking_status_changes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("booking_id", sa.Integer, sa.ForeignKey("bookings.id"), nullable=False, index=True),
        sa.Column("from_status", sa.String(20)),
        sa.Column("to_status", sa.String(20), nullable=False),
        sa.Column("actor_id", sa.Integer, nullable=False),
        sa.Column("actor_role", sa.String(20), nullable=False),
        sa.Column("forced", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("reason", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== OVERLAP CONSTRAINT ====================
    if op.get_bind().dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            """
            ALTER TABLE bookings
            ADD CONSTRAINT no_room_overlap
            EXCLUDE USING gist (
                room_id WITH =,
                daterange(check_in, check_out, '[)') WITH &&
            )
            WHERE (status IN ('unpaid', 'confirmed', 'checked_in'))
            """
        )


def downgrade() -> None:
    """Drop all tables."""
    if op.get_bind().dialect.name == "postgresql":
        op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS no_room_overlap")
    op.drop_table("booking_status_changes")
    op.drop_index("ix_bookings_room_status_dates", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("rooms")
    op.drop_table("room_types")
