"""Guide profiles and their published daily capacity."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourguide.db.base import Base
from tourguide.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from tourguide.models.attraction import Attraction
    from tourguide.models.user import User


class Guide(TimestampMixin, Base):
    """Public guide profile linked to a guide user."""

    __tablename__ = "guides"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    languages: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    expertise: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="guide_profile")
    availability: Mapped[list["GuideAvailabilitySlot"]] = relationship(
        "GuideAvailabilitySlot",
        back_populates="guide",
        cascade="all, delete-orphan",
        order_by="GuideAvailabilitySlot.date",
    )
    attractions: Mapped[list["Attraction"]] = relationship(
        "Attraction", back_populates="guide"
    )


class GuideAvailabilitySlot(TimestampMixin, Base):
    """Total bookable party size a guide offers on one calendar date."""

    __tablename__ = "guide_availability_slots"
    __table_args__ = (
        UniqueConstraint("guide_id", "date", name="uq_guide_availability_date"),
        CheckConstraint("total_slots >= 0", name="ck_guide_availability_slots_nonneg"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    guide_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("guides.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    total_slots: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    guide: Mapped["Guide"] = relationship("Guide", back_populates="availability")
