"""Booking admission and lifecycle.

Admission re-checks capacity and inserts the booking while holding the
per guide/day lock from ``tourguide.core.locks``; the slot row is also read
``FOR UPDATE`` so databases with row locks serialize across processes. A
request that loses the race for the last seats gets the same
``InsufficientCapacity`` as one that found the day already full.
"""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tourguide.core.config import get_settings
from tourguide.core.errors import (
    AccessDenied,
    AlreadyCancelled,
    AttractionGuideMismatch,
    AttractionNotFound,
    BookingNotFound,
    CancellationWindowClosed,
    CannotCancelCompleted,
    ConflictError,
    DateNotOfferedByAttraction,
    GuideNotFound,
    InsufficientCapacity,
    InvalidRequest,
    InvalidStatusTransition,
)
from tourguide.core.locks import LockRegistry, booking_key, get_lock_registry
from tourguide.db.session import end_read, translate_store_errors
from tourguide.models.attraction import Attraction
from tourguide.models.booking import Booking, BookingStatus
from tourguide.models.guide import Guide
from tourguide.models.user import User, UserRole
from tourguide.services import availability_service

logger = logging.getLogger(__name__)

_GUIDE_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}

_CUSTOMER_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}


def _validate_party_size(party_size: object) -> int:
    if isinstance(party_size, bool) or not isinstance(party_size, int) or party_size <= 0:
        raise InvalidRequest(
            "Party size must be a positive integer", details={"field": "party_size"}
        )
    return party_size


def _coerce_uuid(value: uuid.UUID | str | None, *, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if not value:
        raise InvalidRequest(f"Missing required field: {field}", details={"field": field})
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise InvalidRequest(f"Invalid {field}", details={"field": field}) from exc


def _booking_query():
    return (
        select(Booking)
        .options(selectinload(Booking.attraction), selectinload(Booking.guide))
        .order_by(Booking.created_at.desc())
    )


@translate_store_errors
async def submit_booking(
    session: AsyncSession,
    *,
    attraction_id: uuid.UUID | str,
    guide_id: uuid.UUID | str,
    customer: User,
    day: dt.date | str,
    party_size: int,
    locks: LockRegistry | None = None,
) -> Booking:
    """Admit a new ``pending`` booking if the guide still has room for it."""
    party_size = _validate_party_size(party_size)
    attraction_id = _coerce_uuid(attraction_id, field="attraction_id")
    guide_id = _coerce_uuid(guide_id, field="guide_id")
    day = availability_service.coerce_date(day)

    attraction = await session.get(Attraction, attraction_id)
    if attraction is None:
        raise AttractionNotFound(attraction_id)
    guide = await session.get(Guide, guide_id)
    if guide is None:
        raise GuideNotFound(guide_id)
    if attraction.guide_id != guide.id:
        raise AttractionGuideMismatch()
    offered = attraction.offered_dates
    if offered and day not in offered:
        raise DateNotOfferedByAttraction(day)

    customer_id = customer.id
    customer_name = customer.full_name
    customer_email = customer.email

    locks = locks or get_lock_registry()
    # The locked section must not reuse a snapshot taken before the lock.
    await session.commit()
    async with locks.hold(booking_key(guide.id, day)):
        remaining = await availability_service.remaining_capacity(
            session, guide_id=guide.id, day=day, for_update=True
        )
        if remaining < party_size:
            await end_read(session)
            logger.info(
                "Rejected booking guide=%s date=%s requested=%s remaining=%s",
                guide_id,
                day,
                party_size,
                remaining,
            )
            raise InsufficientCapacity(remaining=remaining, requested=party_size)

        booking = Booking(
            attraction_id=attraction.id,
            guide_id=guide.id,
            customer_id=customer_id,
            customer_name=customer_name,
            email=customer_email,
            date=day,
            party_size=party_size,
            status=BookingStatus.PENDING,
        )
        booking.attraction = attraction
        booking.guide = guide
        session.add(booking)
        await session.commit()

    logger.info(
        "Admitted booking id=%s guide=%s date=%s party_size=%s remaining=%s",
        booking.id,
        guide_id,
        day,
        party_size,
        remaining - party_size,
    )
    return booking


@translate_store_errors
async def list_bookings(
    session: AsyncSession,
    *,
    user: User,
    status: BookingStatus | None = None,
    day: dt.date | str | None = None,
    guide_id: uuid.UUID | None = None,
    customer_id: uuid.UUID | None = None,
) -> Sequence[Booking]:
    """List bookings visible to ``user``, newest first."""
    stmt = _booking_query()
    if user.role == UserRole.TRAVELLER:
        stmt = stmt.where(Booking.customer_id == user.id)
    elif user.role == UserRole.GUIDE:
        guide = await availability_service.get_guide_for_user(session, user=user)
        if guide is None:
            return []
        stmt = stmt.where(Booking.guide_id == guide.id)
        if customer_id is not None:
            stmt = stmt.where(Booking.customer_id == customer_id)
    if guide_id is not None and user.role != UserRole.TRAVELLER:
        stmt = stmt.where(Booking.guide_id == guide_id)
    if status is not None:
        stmt = stmt.where(Booking.status == status)
    if day is not None:
        stmt = stmt.where(Booking.date == availability_service.coerce_date(day))
    result = await session.execute(stmt)
    return result.scalars().unique().all()


async def _load_booking(
    session: AsyncSession, booking_id: uuid.UUID, *, refresh: bool = False
) -> Booking:
    stmt = _booking_query().where(Booking.id == booking_id)
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    booking = (await session.execute(stmt)).scalars().unique().one_or_none()
    if booking is None:
        raise BookingNotFound(booking_id)
    return booking


async def _ensure_access(session: AsyncSession, booking: Booking, user: User) -> None:
    if user.role == UserRole.TRAVELLER:
        if booking.customer_id != user.id:
            raise AccessDenied("Access denied")
        return
    guide = await availability_service.get_guide_for_user(session, user=user)
    if guide is None or guide.id != booking.guide_id:
        raise AccessDenied("Access denied")


@translate_store_errors
async def get_booking(
    session: AsyncSession,
    *,
    user: User,
    booking_id: uuid.UUID,
) -> Booking:
    booking = await _load_booking(session, booking_id)
    await _ensure_access(session, booking, user)
    return booking


def _validate_transition(
    booking: Booking,
    target: BookingStatus,
    *,
    actor: UserRole,
    today: dt.date,
    allow_cancel_after_date: bool,
) -> None:
    current = booking.status
    if target == BookingStatus.CANCELLED:
        if current == BookingStatus.CANCELLED:
            raise AlreadyCancelled()
        if current == BookingStatus.COMPLETED:
            raise CannotCancelCompleted()
    elif target == current:
        return

    allowed = (
        _GUIDE_TRANSITIONS if actor == UserRole.GUIDE else _CUSTOMER_TRANSITIONS
    ).get(current, set())
    if target not in allowed:
        raise InvalidStatusTransition(current.value, target.value)

    if (
        target == BookingStatus.CANCELLED
        and actor == UserRole.TRAVELLER
        and current == BookingStatus.CONFIRMED
        and booking.date < today
        and not allow_cancel_after_date
    ):
        raise CancellationWindowClosed(booking.date)


async def _transition(
    session: AsyncSession,
    *,
    user: User,
    booking_id: uuid.UUID,
    target: BookingStatus,
    today: dt.date | None,
    locks: LockRegistry | None,
) -> Booking:
    booking = await _load_booking(session, booking_id)
    await _ensure_access(session, booking, user)
    actor = user.role
    guide_id, day = booking.guide_id, booking.date
    settings = get_settings()
    locks = locks or get_lock_registry()

    await session.commit()
    async with locks.hold(booking_key(guide_id, day)):
        # Another request may have moved the booking while we waited.
        booking = await _load_booking(session, booking_id, refresh=True)
        previous = booking.status
        try:
            _validate_transition(
                booking,
                target,
                actor=actor,
                today=today or dt.date.today(),
                allow_cancel_after_date=settings.allow_cancel_after_booking_date,
            )
        except ConflictError:
            await end_read(session)
            raise
        booking.status = target
        await session.commit()

    logger.info(
        "Booking %s status %s -> %s by %s",
        booking.id,
        previous.value,
        target.value,
        actor.value,
    )
    return booking


@translate_store_errors
async def update_booking_status(
    session: AsyncSession,
    *,
    user: User,
    booking_id: uuid.UUID,
    status: BookingStatus,
    today: dt.date | None = None,
    locks: LockRegistry | None = None,
) -> Booking:
    """Apply a guide-initiated status change."""
    if user.role != UserRole.GUIDE:
        raise AccessDenied("Only guides can update booking status")
    return await _transition(
        session,
        user=user,
        booking_id=booking_id,
        target=status,
        today=today,
        locks=locks,
    )


@translate_store_errors
async def cancel_booking(
    session: AsyncSession,
    *,
    user: User,
    booking_id: uuid.UUID,
    today: dt.date | None = None,
    locks: LockRegistry | None = None,
) -> Booking:
    """Cancel a booking on behalf of its traveller or its guide.

    The released party size becomes bookable again immediately.
    """
    return await _transition(
        session,
        user=user,
        booking_id=booking_id,
        target=BookingStatus.CANCELLED,
        today=today,
        locks=locks,
    )
