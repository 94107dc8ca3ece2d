"""Traveller itineraries and the non-overlapping date range rule."""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourguide.core.errors import (
    AccessDenied,
    DateRangeConflict,
    InvalidRequest,
    ItineraryNotFound,
)
from tourguide.core.locks import LockRegistry, get_lock_registry, itinerary_key
from tourguide.db.session import end_read, translate_store_errors
from tourguide.models.attraction import Attraction
from tourguide.models.itinerary import Itinerary
from tourguide.models.user import User
from tourguide.services.availability_service import coerce_date

logger = logging.getLogger(__name__)


def dates_overlap(
    start1: dt.date | None,
    end1: dt.date | None,
    start2: dt.date | None,
    end2: dt.date | None,
) -> bool:
    """Inclusive range overlap; a trip ending on the day another starts conflicts.

    Ranges missing either endpoint never overlap anything.
    """
    if start1 is None or end1 is None or start2 is None or end2 is None:
        return False
    return start1 <= end2 and start2 <= end1


def _optional_date(value: dt.date | str | None, *, field: str) -> dt.date | None:
    if value is None or value == "":
        return None
    return coerce_date(value, field=field)


def _validate_range(start_date: dt.date | None, end_date: dt.date | None) -> None:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise InvalidRequest("Start date must be before or equal to end date")


@translate_store_errors
async def check_overlap(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    start_date: dt.date | str | None,
    end_date: dt.date | str | None,
    exclude_itinerary_id: uuid.UUID | None = None,
) -> bool:
    """Return True when the range collides with another dated itinerary of the user."""
    start = _optional_date(start_date, field="start_date")
    end = _optional_date(end_date, field="end_date")
    if start is None or end is None:
        return False

    stmt = select(Itinerary.id).where(
        Itinerary.user_id == user_id,
        Itinerary.start_date.is_not(None),
        Itinerary.end_date.is_not(None),
        Itinerary.start_date <= end,
        Itinerary.end_date >= start,
    )
    if exclude_itinerary_id is not None:
        stmt = stmt.where(Itinerary.id != exclude_itinerary_id)
    result = await session.execute(stmt.limit(1))
    return result.scalar_one_or_none() is not None


async def _validate_attractions(
    session: AsyncSession, attraction_ids: Iterable[str | uuid.UUID]
) -> list[str]:
    ids: list[str] = []
    for raw in attraction_ids:
        try:
            value = str(uuid.UUID(str(raw)))
        except ValueError as exc:
            raise InvalidRequest("One or more attractions not found") from exc
        if value not in ids:
            ids.append(value)
    if not ids:
        return ids
    found = await session.execute(
        select(func.count())
        .select_from(Attraction)
        .where(Attraction.id.in_([uuid.UUID(value) for value in ids]))
    )
    if found.scalar_one() != len(ids):
        raise InvalidRequest("One or more attractions not found")
    return ids


@translate_store_errors
async def list_itineraries(session: AsyncSession, *, user: User) -> Sequence[Itinerary]:
    result = await session.execute(
        select(Itinerary)
        .where(Itinerary.user_id == user.id)
        .order_by(Itinerary.created_at.desc())
    )
    return result.scalars().all()


async def _load_itinerary(
    session: AsyncSession,
    *,
    user: User,
    itinerary_id: uuid.UUID,
    refresh: bool = False,
) -> Itinerary:
    stmt = select(Itinerary).where(Itinerary.id == itinerary_id)
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    itinerary = (await session.execute(stmt)).scalar_one_or_none()
    if itinerary is None:
        raise ItineraryNotFound(itinerary_id)
    if itinerary.user_id != user.id:
        raise AccessDenied("Access denied")
    return itinerary


@translate_store_errors
async def get_itinerary(
    session: AsyncSession, *, user: User, itinerary_id: uuid.UUID
) -> Itinerary:
    return await _load_itinerary(session, user=user, itinerary_id=itinerary_id)


@translate_store_errors
async def get_attractions(
    session: AsyncSession, itinerary: Itinerary
) -> Sequence[Attraction]:
    """Resolve the attractions referenced by an itinerary."""
    if not itinerary.attraction_ids:
        return []
    result = await session.execute(
        select(Attraction).where(
            Attraction.id.in_([uuid.UUID(value) for value in itinerary.attraction_ids])
        )
    )
    return result.scalars().all()


@translate_store_errors
async def create_itinerary(
    session: AsyncSession,
    *,
    user: User,
    title: str,
    start_date: dt.date | str | None = None,
    end_date: dt.date | str | None = None,
    notes: str | None = None,
    attraction_ids: Iterable[str | uuid.UUID] | None = None,
    items: list[dict[str, Any]] | None = None,
    locks: LockRegistry | None = None,
) -> Itinerary:
    """Persist a new itinerary unless its dates collide with another one."""
    if not title or not title.strip():
        raise InvalidRequest("Title is required", details={"field": "title"})
    start = _optional_date(start_date, field="start_date")
    end = _optional_date(end_date, field="end_date")
    _validate_range(start, end)

    user_id = user.id
    traveler_name = user.full_name
    locks = locks or get_lock_registry()

    await session.commit()
    async with locks.hold(itinerary_key(user_id)):
        if await check_overlap(
            session, user_id=user_id, start_date=start, end_date=end
        ):
            await end_read(session)
            raise DateRangeConflict()
        ids = await _validate_attractions(session, attraction_ids or [])
        itinerary = Itinerary(
            user_id=user_id,
            traveler_name=traveler_name,
            title=title.strip(),
            start_date=start,
            end_date=end,
            notes=notes or "",
            attraction_ids=ids,
            items=list(items or []),
        )
        session.add(itinerary)
        await session.commit()

    logger.info(
        "Created itinerary id=%s user=%s range=%s..%s", itinerary.id, user_id, start, end
    )
    return itinerary


@translate_store_errors
async def update_itinerary(
    session: AsyncSession,
    *,
    user: User,
    itinerary_id: uuid.UUID,
    title: str | None = None,
    start_date: dt.date | str | None = None,
    end_date: dt.date | str | None = None,
    notes: str | None = None,
    items: list[dict[str, Any]] | None = None,
    locks: LockRegistry | None = None,
) -> Itinerary:
    """Apply a partial update, re-checking the date rule against merged dates.

    Omitted dates keep their stored values, so changing only one end of a trip
    is still checked against the user's other itineraries.
    """
    new_start = _optional_date(start_date, field="start_date")
    new_end = _optional_date(end_date, field="end_date")
    if title is not None and not title.strip():
        raise InvalidRequest("Title is required", details={"field": "title"})

    user_id = user.id
    locks = locks or get_lock_registry()

    await session.commit()
    async with locks.hold(itinerary_key(user_id)):
        itinerary = await _load_itinerary(
            session, user=user, itinerary_id=itinerary_id, refresh=True
        )
        effective_start = new_start if new_start is not None else itinerary.start_date
        effective_end = new_end if new_end is not None else itinerary.end_date
        try:
            _validate_range(effective_start, effective_end)
        except InvalidRequest:
            await end_read(session)
            raise
        if await check_overlap(
            session,
            user_id=user_id,
            start_date=effective_start,
            end_date=effective_end,
            exclude_itinerary_id=itinerary.id,
        ):
            await end_read(session)
            raise DateRangeConflict()

        if title is not None:
            itinerary.title = title.strip()
        if notes is not None:
            itinerary.notes = notes
        if items is not None:
            itinerary.items = list(items)
        itinerary.start_date = effective_start
        itinerary.end_date = effective_end
        await session.commit()

    return itinerary


@translate_store_errors
async def delete_itinerary(
    session: AsyncSession, *, user: User, itinerary_id: uuid.UUID
) -> None:
    itinerary = await _load_itinerary(session, user=user, itinerary_id=itinerary_id)
    await session.delete(itinerary)
    await session.commit()


@translate_store_errors
async def add_attractions(
    session: AsyncSession,
    *,
    user: User,
    itinerary_id: uuid.UUID,
    attraction_ids: Sequence[str | uuid.UUID],
) -> Itinerary:
    """Append attractions to an itinerary, ignoring ones already present."""
    if not attraction_ids:
        raise InvalidRequest("attraction_ids must be a non-empty list")
    itinerary = await _load_itinerary(session, user=user, itinerary_id=itinerary_id)
    ids = await _validate_attractions(session, attraction_ids)
    existing = list(itinerary.attraction_ids or [])
    itinerary.attraction_ids = existing + [value for value in ids if value not in existing]
    await session.commit()
    return itinerary


@translate_store_errors
async def remove_attractions(
    session: AsyncSession,
    *,
    user: User,
    itinerary_id: uuid.UUID,
    attraction_ids: Sequence[str | uuid.UUID],
) -> tuple[Itinerary, int]:
    """Drop the listed attractions and report how many were actually present."""
    if not attraction_ids:
        raise InvalidRequest("attraction_ids must be a non-empty list")
    itinerary = await _load_itinerary(session, user=user, itinerary_id=itinerary_id)
    targets = {str(value) for value in attraction_ids}
    existing = list(itinerary.attraction_ids or [])
    kept = [value for value in existing if value not in targets]
    removed = len(existing) - len(kept)
    if removed:
        itinerary.attraction_ids = kept
        await session.commit()
    return itinerary, removed
