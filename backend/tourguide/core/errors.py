"""Domain errors raised by the booking and itinerary services.

Services raise these instead of returning sentinel values; the HTTP layer maps
each family onto a status code in ``tourguide.api.errors``. Nothing here knows
about HTTP.
"""

from __future__ import annotations

import datetime as dt
from typing import Any


class DomainError(Exception):
    """Base class for every failure a core operation can report."""

    retryable = False

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class InvalidRequest(DomainError):
    """Malformed input: missing field, bad date, non-positive party size."""


class AccessDenied(DomainError):
    """The caller does not own the resource or lacks the required role."""


class StoreUnavailable(DomainError):
    """Persistence failed or timed out; the request left no partial state."""

    retryable = True


# Not found


class NotFoundError(DomainError):
    """A referenced record does not exist."""


class AttractionNotFound(NotFoundError):
    def __init__(self, attraction_id: object) -> None:
        super().__init__("Attraction not found", details={"attraction_id": str(attraction_id)})


class GuideNotFound(NotFoundError):
    def __init__(self, guide_id: object | None = None) -> None:
        details = {"guide_id": str(guide_id)} if guide_id is not None else {}
        super().__init__("Guide not found", details=details)


class BookingNotFound(NotFoundError):
    def __init__(self, booking_id: object) -> None:
        super().__init__("Booking not found", details={"booking_id": str(booking_id)})


class ItineraryNotFound(NotFoundError):
    def __init__(self, itinerary_id: object) -> None:
        super().__init__("Itinerary not found", details={"itinerary_id": str(itinerary_id)})


# Conflicts


class ConflictError(DomainError):
    """The request is well formed but violates a business invariant."""


class AttractionGuideMismatch(ConflictError):
    def __init__(self) -> None:
        super().__init__("This attraction is not available with the selected guide")


class DateNotOfferedByAttraction(ConflictError):
    def __init__(self, day: dt.date) -> None:
        super().__init__(
            f"This attraction is not available on {day.isoformat()}",
            details={"date": day.isoformat()},
        )


class InsufficientCapacity(ConflictError):
    """Raised when a party does not fit into what is left of a guide's day.

    ``remaining`` is the capacity observed at rejection time, whether the slot
    was already full or filled up while the request waited for its turn.
    """

    def __init__(self, *, remaining: int, requested: int) -> None:
        self.remaining = remaining
        self.requested = requested
        super().__init__(
            f"Only {remaining} slot(s) available. Requested: {requested}",
            details={"available_slots": remaining, "requested_slots": requested},
        )


class CapacityBelowBooked(ConflictError):
    def __init__(self, *, total_slots: int, booked: int) -> None:
        super().__init__(
            f"Cannot set {total_slots} slot(s); {booked} already booked",
            details={"total_slots": total_slots, "booked_slots": booked},
        )


class DateRangeConflict(ConflictError):
    def __init__(self) -> None:
        super().__init__("Itinerary dates overlap with an existing itinerary")


class AlreadyCancelled(ConflictError):
    def __init__(self) -> None:
        super().__init__("Booking is already cancelled")


class CannotCancelCompleted(ConflictError):
    def __init__(self) -> None:
        super().__init__("Cannot cancel a completed booking")


class CancellationWindowClosed(ConflictError):
    def __init__(self, day: dt.date) -> None:
        super().__init__(
            "Confirmed bookings cannot be cancelled after the booking date",
            details={"date": day.isoformat()},
        )


class InvalidStatusTransition(ConflictError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            f"Invalid status transition from {current} to {target}",
            details={"current_status": current, "requested_status": target},
        )


__all__ = [
    "AccessDenied",
    "AlreadyCancelled",
    "AttractionGuideMismatch",
    "AttractionNotFound",
    "BookingNotFound",
    "CancellationWindowClosed",
    "CannotCancelCompleted",
    "CapacityBelowBooked",
    "ConflictError",
    "DateNotOfferedByAttraction",
    "DateRangeConflict",
    "DomainError",
    "GuideNotFound",
    "InsufficientCapacity",
    "InvalidRequest",
    "InvalidStatusTransition",
    "ItineraryNotFound",
    "NotFoundError",
    "StoreUnavailable",
]
