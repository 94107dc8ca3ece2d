"""ORM models package export."""

from tourguide.models.attraction import Attraction
from tourguide.models.booking import Booking, BookingStatus
from tourguide.models.guide import Guide, GuideAvailabilitySlot
from tourguide.models.itinerary import Itinerary
from tourguide.models.user import User, UserRole

__all__ = [
    "Attraction",
    "Booking",
    "BookingStatus",
    "Guide",
    "GuideAvailabilitySlot",
    "Itinerary",
    "User",
    "UserRole",
]
