"""Initial guide booking schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column(
            "role", sa.Enum("TRAVELLER", "GUIDE", name="userrole"), nullable=False
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "guides",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("languages", sa.JSON(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("bio", sa.Text(), nullable=False, server_default=""),
        sa.Column("expertise", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "guide_availability_slots",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "guide_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("guides.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("total_slots", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("guide_id", "date", name="uq_guide_availability_date"),
        sa.CheckConstraint(
            "total_slots >= 0", name="ck_guide_availability_slots_nonneg"
        ),
    )

    op.create_table(
        "attractions",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "guide_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("guides.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("category", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("duration", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("image", sa.String(length=1024), nullable=False, server_default=""),
        sa.Column("available_dates", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "attraction_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("attractions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "guide_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("guides.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "customer_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("party_size", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "PENDING", "CONFIRMED", "CANCELLED", "COMPLETED", name="bookingstatus"
            ),
            nullable=False,
        ),
        *_timestamps(),
        sa.CheckConstraint("party_size > 0", name="ck_bookings_party_size_positive"),
    )
    op.create_index("ix_bookings_guide_date", "bookings", ["guide_id", "date"])
    op.create_index("ix_bookings_customer_id", "bookings", ["customer_id"])

    op.create_table(
        "itineraries",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("traveler_name", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("attraction_ids", sa.JSON(), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_itineraries_user_id", "itineraries", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_itineraries_user_id", table_name="itineraries")
    op.drop_table("itineraries")
    op.drop_index("ix_bookings_customer_id", table_name="bookings")
    op.drop_index("ix_bookings_guide_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("attractions")
    op.drop_table("guide_availability_slots")
    op.drop_table("guides")
    op.drop_table("users")
    sa.Enum(name="bookingstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
