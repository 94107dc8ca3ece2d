"""Booking API."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from tourguide.api.deps import CurrentUser, DbSession
from tourguide.models.booking import BookingStatus
from tourguide.models.user import UserRole
from tourguide.schemas.booking import (
    BookingCreate,
    BookingList,
    BookingRead,
    BookingStatusUpdate,
)
from tourguide.schemas.guide import DailyAvailability, GuideAvailabilityResponse
from tourguide.security.permissions import require_roles
from tourguide.services import availability_service, booking_service

router = APIRouter()


@router.post(
    "",
    response_model=BookingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
)
async def create_booking(
    payload: BookingCreate,
    session: DbSession,
    current_user: CurrentUser,
) -> BookingRead:
    require_roles(current_user, {UserRole.TRAVELLER})
    booking = await booking_service.submit_booking(
        session,
        attraction_id=payload.attraction_id,
        guide_id=payload.guide_id,
        customer=current_user,
        day=payload.date,
        party_size=payload.party_size,
    )
    return BookingRead.model_validate(booking)


@router.get("", response_model=BookingList, summary="List visible bookings")
async def list_bookings(
    session: DbSession,
    current_user: CurrentUser,
    status: BookingStatus | None = None,
    date: str | None = None,
    guide_id: uuid.UUID | None = None,
    customer_id: uuid.UUID | None = None,
) -> BookingList:
    bookings = await booking_service.list_bookings(
        session,
        user=current_user,
        status=status,
        day=date,
        guide_id=guide_id,
        customer_id=customer_id,
    )
    return BookingList(
        count=len(bookings),
        bookings=[BookingRead.model_validate(obj) for obj in bookings],
    )


@router.get(
    "/availability/{guide_id}",
    response_model=GuideAvailabilityResponse,
    summary="Remaining capacity for a guide",
)
async def get_availability(
    guide_id: uuid.UUID,
    session: DbSession,
    current_user: CurrentUser,
    date: str | None = None,
) -> GuideAvailabilityResponse:
    days = await availability_service.get_guide_availability(
        session, guide_id=guide_id, day=date
    )
    guide = await availability_service.get_guide(session, guide_id=guide_id)
    return GuideAvailabilityResponse(
        guide_id=guide.id,
        guide_name=guide.name,
        availability=[DailyAvailability.model_validate(day) for day in days],
    )


@router.get("/{booking_id}", response_model=BookingRead, summary="Get booking")
async def get_booking(
    booking_id: uuid.UUID,
    session: DbSession,
    current_user: CurrentUser,
) -> BookingRead:
    booking = await booking_service.get_booking(
        session, user=current_user, booking_id=booking_id
    )
    return BookingRead.model_validate(booking)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingRead,
    summary="Update booking status",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    payload: BookingStatusUpdate,
    session: DbSession,
    current_user: CurrentUser,
) -> BookingRead:
    booking = await booking_service.update_booking_status(
        session,
        user=current_user,
        booking_id=booking_id,
        status=payload.status,
    )
    return BookingRead.model_validate(booking)


@router.patch(
    "/{booking_id}/cancel",
    response_model=BookingRead,
    summary="Cancel booking",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    session: DbSession,
    current_user: CurrentUser,
) -> BookingRead:
    booking = await booking_service.cancel_booking(
        session, user=current_user, booking_id=booking_id
    )
    return BookingRead.model_validate(booking)
