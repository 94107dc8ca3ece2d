"""Versioned API router."""

from fastapi import APIRouter

from . import bookings, guides, health, itineraries

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(guides.router, prefix="/guides", tags=["guides"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
router.include_router(
    itineraries.router, prefix="/itineraries", tags=["itineraries"]
)

__all__ = ["router"]
