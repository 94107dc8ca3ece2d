"""Role helper for explicit authorization checks."""

from __future__ import annotations

from tourguide.core.errors import AccessDenied
from tourguide.models.user import User, UserRole


def require_roles(user: User, allowed: set[UserRole]) -> None:
    """Raise ``AccessDenied`` if a user is not a member of the allowed role set."""

    if user.role not in allowed:
        raise AccessDenied("Insufficient permissions")


__all__ = ["require_roles"]
