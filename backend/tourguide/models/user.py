"""User identities issued by the authentication layer."""
from __future__ import annotations

import enum
import uuid

from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourguide.db.base import Base
from tourguide.models.mixins import TimestampMixin


class UserRole(str, enum.Enum):
    """Roles recognised by the booking core."""

    TRAVELLER = "traveller"
    GUIDE = "guide"


class User(TimestampMixin, Base):
    """Traveller or guide account."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    guide_profile: Mapped["Guide | None"] = relationship(
        "Guide", back_populates="user", uselist=False
    )
