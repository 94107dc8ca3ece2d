"""Traveller itineraries."""
from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import JSON, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tourguide.db.base import Base
from tourguide.models.mixins import TimestampMixin


class Itinerary(TimestampMixin, Base):
    """A traveller's trip plan; dated itineraries may not overlap."""

    __tablename__ = "itineraries"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    traveler_name: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[dt.date | None] = mapped_column(Date)
    end_date: Mapped[dt.date | None] = mapped_column(Date)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    attraction_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    # [{"day": "Day 1", "activities": [...]}, ...]
    items: Mapped[list[dict]] = mapped_column(JSON, default=list, nullable=False)

    @property
    def is_dated(self) -> bool:
        return self.start_date is not None and self.end_date is not None
