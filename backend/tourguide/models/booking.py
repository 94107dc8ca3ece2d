"""Booking ledger models."""
from __future__ import annotations

import datetime as dt
import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourguide.db.base import Base
from tourguide.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from tourguide.models.attraction import Attraction
    from tourguide.models.guide import Guide


class BookingStatus(str, enum.Enum):
    """Lifecycle states for bookings."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(TimestampMixin, Base):
    """A traveller's request for a party to join a guide on a date."""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("party_size > 0", name="ck_bookings_party_size_positive"),
        Index("ix_bookings_guide_date", "guide_id", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    attraction_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("attractions.id", ondelete="CASCADE"), nullable=False
    )
    guide_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("guides.id", ondelete="CASCADE"), nullable=False
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False
    )

    attraction: Mapped["Attraction"] = relationship("Attraction")
    guide: Mapped["Guide"] = relationship("Guide")
