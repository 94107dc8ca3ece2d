"""Pydantic schemas for bookings."""
from __future__ import annotations

import datetime as dt
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict

from tourguide.models.booking import BookingStatus
from tourguide.schemas.attraction import AttractionRead
from tourguide.schemas.guide import GuideSummary


class BookingCreate(BaseModel):
    """Payload for requesting a booking.

    Values are checked by the booking service so that malformed input is
    reported with the same error kinds as every other admission failure.
    """

    attraction_id: str | None = None
    guide_id: str | None = None
    date: str | None = None
    party_size: Any = None


class BookingStatusUpdate(BaseModel):
    """Guide-initiated status change."""

    status: BookingStatus


class BookingRead(BaseModel):
    """Serialized booking with attraction and guide display data."""

    id: uuid.UUID
    attraction_id: uuid.UUID
    guide_id: uuid.UUID
    customer_id: uuid.UUID
    customer_name: str
    email: str
    date: dt.date
    party_size: int
    status: BookingStatus
    created_at: dt.datetime
    updated_at: dt.datetime
    attraction: AttractionRead | None = None
    guide: GuideSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class BookingList(BaseModel):
    count: int
    bookings: list[BookingRead]
