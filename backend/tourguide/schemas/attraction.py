"""Schemas for attraction catalog entries."""
from __future__ import annotations

import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AttractionRead(BaseModel):
    """Serialized attraction."""

    id: uuid.UUID
    guide_id: uuid.UUID
    name: str
    location: str
    description: str = ""
    category: str = ""
    duration: str = ""
    price: Decimal = Decimal("0")
    rating: float = 0.0
    tags: list[str] = Field(default_factory=list)
    image: str = ""
    available_dates: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
