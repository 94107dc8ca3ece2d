"""Pydantic schemas for itineraries."""
from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict, Field

from tourguide.schemas.attraction import AttractionRead


class ItineraryItem(BaseModel):
    """One day of an itinerary plan."""

    day: str
    activities: list[str] = Field(default_factory=list)


class ItineraryCreate(BaseModel):
    title: str
    start_date: str | None = None
    end_date: str | None = None
    notes: str | None = None
    attraction_ids: list[str] = Field(default_factory=list)
    items: list[ItineraryItem] = Field(default_factory=list)


class ItineraryUpdate(BaseModel):
    """Mutable itinerary fields; omitted dates keep their stored values."""

    title: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    notes: str | None = None
    items: list[ItineraryItem] | None = None


class ItineraryAttractionIds(BaseModel):
    attraction_ids: list[str]


class ItineraryRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    traveler_name: str
    title: str
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    notes: str = ""
    attraction_ids: list[str] = Field(default_factory=list)
    items: list[ItineraryItem] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime
    attractions: list[AttractionRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ItineraryList(BaseModel):
    count: int
    itineraries: list[ItineraryRead]


class ItineraryAttractionsRemoved(BaseModel):
    removed: int
    itinerary: ItineraryRead
