"""Guide capacity: published slots and what is left of them."""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tourguide.core.errors import CapacityBelowBooked, GuideNotFound, InvalidRequest
from tourguide.core.locks import LockRegistry, booking_key, get_lock_registry
from tourguide.db.session import end_read, translate_store_errors
from tourguide.models.booking import Booking, BookingStatus
from tourguide.models.guide import Guide, GuideAvailabilitySlot
from tourguide.models.user import User

logger = logging.getLogger(__name__)

# Only these statuses hold capacity. Every capacity read goes through here.
ACTIVE_BOOKING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED}
)


def coerce_date(value: dt.date | dt.datetime | str | None, *, field: str = "date") -> dt.date:
    """Normalise a calendar date, dropping any time component."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return dt.date.fromisoformat(value.strip().split("T", 1)[0])
        except ValueError as exc:
            raise InvalidRequest(
                f"Invalid {field}: expected YYYY-MM-DD", details={"field": field}
            ) from exc
    raise InvalidRequest(f"Missing required field: {field}", details={"field": field})


def remaining_from(total_slots: int, booked_slots: int) -> int:
    """Capacity left on a day; never negative."""
    return max(0, total_slots - booked_slots)


@translate_store_errors
async def get_total_slots(
    session: AsyncSession,
    *,
    guide_id: uuid.UUID,
    day: dt.date,
    for_update: bool = False,
) -> int:
    """Return the published capacity, or 0 when the guide has no slot that day."""
    stmt = select(GuideAvailabilitySlot.total_slots).where(
        GuideAvailabilitySlot.guide_id == guide_id,
        GuideAvailabilitySlot.date == day,
    )
    if for_update:
        stmt = stmt.with_for_update()
    total = (await session.execute(stmt)).scalar_one_or_none()
    return total or 0


@translate_store_errors
async def get_booked_slots(
    session: AsyncSession,
    *,
    guide_id: uuid.UUID,
    day: dt.date,
) -> int:
    """Sum party sizes of bookings that currently hold capacity."""
    result = await session.execute(
        select(func.coalesce(func.sum(Booking.party_size), 0)).where(
            Booking.guide_id == guide_id,
            Booking.date == day,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
    )
    return int(result.scalar_one())


@translate_store_errors
async def remaining_capacity(
    session: AsyncSession,
    *,
    guide_id: uuid.UUID,
    day: dt.date | str,
    for_update: bool = False,
) -> int:
    """Return how much party size a guide can still accept on ``day``.

    An unknown guide or a day without a published slot both yield 0. The value
    is only stable while the caller holds the ``booking_key`` lock for the
    same guide and day.
    """
    day = coerce_date(day)
    total = await get_total_slots(
        session, guide_id=guide_id, day=day, for_update=for_update
    )
    booked = await get_booked_slots(session, guide_id=guide_id, day=day)
    remaining = remaining_from(total, booked)
    logger.debug(
        "Capacity guide=%s date=%s total=%s booked=%s remaining=%s",
        guide_id,
        day,
        total,
        booked,
        remaining,
    )
    return remaining


@translate_store_errors
async def get_guide(session: AsyncSession, *, guide_id: uuid.UUID) -> Guide:
    guide = await session.get(Guide, guide_id)
    if guide is None:
        raise GuideNotFound(guide_id)
    return guide


@translate_store_errors
async def get_guide_for_user(session: AsyncSession, *, user: User) -> Guide | None:
    """Return the guide profile owned by ``user``, if any."""
    result = await session.execute(select(Guide).where(Guide.user_id == user.id))
    return result.scalar_one_or_none()


@translate_store_errors
async def list_guides(
    session: AsyncSession,
    *,
    day: dt.date | str | None = None,
) -> Sequence[Guide]:
    """List guides, optionally only those who published a slot on ``day``."""
    stmt = select(Guide).options(selectinload(Guide.availability)).order_by(Guide.name)
    if day is not None:
        stmt = stmt.where(
            Guide.availability.any(GuideAvailabilitySlot.date == coerce_date(day))
        )
    result = await session.execute(stmt)
    return result.scalars().unique().all()


@translate_store_errors
async def get_guide_availability(
    session: AsyncSession,
    *,
    guide_id: uuid.UUID,
    day: dt.date | str | None = None,
) -> list[dict[str, object]]:
    """Return total and available slots for one day or every published day."""
    await get_guide(session, guide_id=guide_id)

    if day is not None:
        days = [coerce_date(day)]
    else:
        result = await session.execute(
            select(GuideAvailabilitySlot.date)
            .where(GuideAvailabilitySlot.guide_id == guide_id)
            .order_by(GuideAvailabilitySlot.date)
        )
        days = list(result.scalars().all())

    summary: list[dict[str, object]] = []
    for current in days:
        total = await get_total_slots(session, guide_id=guide_id, day=current)
        booked = await get_booked_slots(session, guide_id=guide_id, day=current)
        available = remaining_from(total, booked)
        summary.append(
            {
                "date": current,
                "total_slots": total,
                "available_slots": available,
                "is_available": available > 0,
            }
        )
    return summary


@translate_store_errors
async def publish_availability(
    session: AsyncSession,
    *,
    guide: Guide,
    day: dt.date | str,
    total_slots: int,
    locks: LockRegistry | None = None,
) -> GuideAvailabilitySlot:
    """Create or overwrite the guide's capacity for a date.

    Runs under the same per guide/day lock as admission so a shrinking slot
    can never slip under bookings admitted concurrently.
    """
    day = coerce_date(day)
    if isinstance(total_slots, bool) or not isinstance(total_slots, int) or total_slots < 0:
        raise InvalidRequest("total_slots must be a non-negative integer")

    guide_id = guide.id
    locks = locks or get_lock_registry()
    await session.commit()
    async with locks.hold(booking_key(guide_id, day)):
        result = await session.execute(
            select(GuideAvailabilitySlot)
            .where(
                GuideAvailabilitySlot.guide_id == guide_id,
                GuideAvailabilitySlot.date == day,
            )
            .with_for_update()
        )
        slot = result.scalar_one_or_none()
        booked = await get_booked_slots(session, guide_id=guide_id, day=day)
        if total_slots < booked:
            await end_read(session)
            raise CapacityBelowBooked(total_slots=total_slots, booked=booked)
        if slot is None:
            slot = GuideAvailabilitySlot(
                guide_id=guide_id, date=day, total_slots=total_slots
            )
            session.add(slot)
        else:
            slot.total_slots = total_slots
        await session.commit()
    await session.refresh(slot)
    logger.info(
        "Published availability guide=%s date=%s total=%s", guide_id, day, total_slots
    )
    return slot
