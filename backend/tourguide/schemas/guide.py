"""Schemas for guides and their availability."""
from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict, Field


class GuideSummary(BaseModel):
    """Guide display data attached to bookings."""

    id: uuid.UUID
    name: str
    languages: list[str] = Field(default_factory=list)
    rating: float = 0.0
    bio: str = ""
    expertise: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class AvailabilitySlotRead(BaseModel):
    """Published capacity for one date."""

    date: dt.date
    total_slots: int

    model_config = ConfigDict(from_attributes=True)


class GuideRead(GuideSummary):
    """Guide profile including published availability."""

    availability: list[AvailabilitySlotRead] = Field(default_factory=list)


class AvailabilityPublish(BaseModel):
    """Payload a guide sends to publish or overwrite a day's capacity."""

    date: str
    slots: int


class DailyAvailability(BaseModel):
    """Capacity summary for one date."""

    date: dt.date
    total_slots: int
    available_slots: int
    is_available: bool


class GuideAvailabilityResponse(BaseModel):
    """Availability for a guide across one or all published dates."""

    guide_id: uuid.UUID
    guide_name: str
    availability: list[DailyAvailability]
