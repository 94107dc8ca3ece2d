"""Attraction catalog entries offered by guides."""

from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Float, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourguide.db.base import Base
from tourguide.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from tourguide.models.guide import Guide


class Attraction(TimestampMixin, Base):
    """A bookable experience run by a single guide."""

    __tablename__ = "attractions"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    guide_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("guides.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    category: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    duration: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    image: Mapped[str] = mapped_column(String(1024), default="", nullable=False)
    # ISO dates; empty means the attraction runs whenever the guide does.
    available_dates: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    guide: Mapped["Guide"] = relationship("Guide", back_populates="attractions")

    @property
    def offered_dates(self) -> set[dt.date]:
        return {dt.date.fromisoformat(value[:10]) for value in self.available_dates or []}
