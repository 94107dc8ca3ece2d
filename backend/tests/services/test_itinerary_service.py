"""Tests for itinerary date range enforcement."""

from __future__ import annotations

import asyncio
import datetime as dt
import os
import uuid

import pytest

from tourguide.core.errors import (
    AccessDenied,
    DateRangeConflict,
    InvalidRequest,
    ItineraryNotFound,
)
from tourguide.db.session import get_sessionmaker
from tourguide.models import User
from tourguide.services import itinerary_service
from tourguide.services.itinerary_service import dates_overlap

pytestmark = pytest.mark.asyncio

D = dt.date


def _sessionmaker():
    return get_sessionmaker(os.environ["DATABASE_URL"])


async def _create(seeded, user_key: str = "traveller_id", **kwargs):
    kwargs.setdefault("title", "Trip")
    async with _sessionmaker()() as session:
        user = await session.get(User, seeded[user_key])
        return await itinerary_service.create_itinerary(session, user=user, **kwargs)


async def _update(seeded, itinerary_id: uuid.UUID, user_key: str = "traveller_id", **kwargs):
    async with _sessionmaker()() as session:
        user = await session.get(User, seeded[user_key])
        return await itinerary_service.update_itinerary(
            session, user=user, itinerary_id=itinerary_id, **kwargs
        )


async def test_dates_overlap_is_inclusive_and_symmetric() -> None:
    a = (D(2030, 3, 1), D(2030, 3, 5))
    touching = (D(2030, 3, 5), D(2030, 3, 8))
    apart = (D(2030, 3, 6), D(2030, 3, 8))
    inside = (D(2030, 3, 2), D(2030, 3, 3))

    assert dates_overlap(*a, *touching) and dates_overlap(*touching, *a)
    assert not dates_overlap(*a, *apart) and not dates_overlap(*apart, *a)
    assert dates_overlap(*a, *inside) and dates_overlap(*inside, *a)
    assert not dates_overlap(None, D(2030, 3, 5), *a)
    assert not dates_overlap(*a, D(2030, 3, 1), None)


async def test_boundary_day_conflicts(seeded) -> None:
    await _create(seeded, start_date=D(2030, 3, 1), end_date=D(2030, 3, 5))

    with pytest.raises(DateRangeConflict):
        await _create(seeded, start_date="2030-03-05", end_date="2030-03-08")

    later = await _create(seeded, start_date="2030-03-06", end_date="2030-03-08")
    assert later.start_date == D(2030, 3, 6)


async def test_undated_itineraries_never_conflict(seeded) -> None:
    await _create(seeded, start_date=D(2030, 3, 1), end_date=D(2030, 3, 5))
    first = await _create(seeded, title="Someday")
    second = await _create(seeded, title="Maybe", start_date=D(2030, 3, 2))

    assert first.start_date is None and first.end_date is None
    assert second.end_date is None


async def test_ranges_are_per_user(seeded) -> None:
    await _create(seeded, start_date=D(2030, 3, 1), end_date=D(2030, 3, 5))
    other = await _create(
        seeded,
        user_key="other_traveller_id",
        start_date=D(2030, 3, 1),
        end_date=D(2030, 3, 5),
    )
    assert other.traveler_name == "Sam Second"


async def test_start_after_end_rejected(seeded) -> None:
    with pytest.raises(InvalidRequest):
        await _create(seeded, start_date=D(2030, 3, 5), end_date=D(2030, 3, 1))


async def test_blank_title_rejected(seeded) -> None:
    with pytest.raises(InvalidRequest):
        await _create(seeded, title="   ")


async def test_update_excludes_itself(seeded) -> None:
    trip = await _create(seeded, start_date=D(2030, 3, 1), end_date=D(2030, 3, 5))

    updated = await _update(
        seeded, trip.id, start_date=D(2030, 3, 2), end_date=D(2030, 3, 6)
    )
    assert (updated.start_date, updated.end_date) == (D(2030, 3, 2), D(2030, 3, 6))


async def test_partial_date_update_checks_merged_range(seeded) -> None:
    await _create(seeded, start_date=D(2030, 3, 10), end_date=D(2030, 3, 12))
    trip = await _create(seeded, start_date=D(2030, 3, 1), end_date=D(2030, 3, 5))

    with pytest.raises(DateRangeConflict):
        await _update(seeded, trip.id, end_date=D(2030, 3, 10))
    with pytest.raises(InvalidRequest):
        await _update(seeded, trip.id, start_date=D(2030, 3, 7))

    updated = await _update(seeded, trip.id, end_date=D(2030, 3, 9), title="Longer")
    assert updated.start_date == D(2030, 3, 1)
    assert updated.end_date == D(2030, 3, 9)
    assert updated.title == "Longer"


async def test_check_overlap_reports_collisions(seeded) -> None:
    trip = await _create(seeded, start_date=D(2030, 3, 1), end_date=D(2030, 3, 5))
    async with _sessionmaker()() as session:
        kwargs = {"user_id": seeded["traveller_id"]}
        assert await itinerary_service.check_overlap(
            session, start_date=D(2030, 3, 5), end_date=D(2030, 3, 6), **kwargs
        )
        assert not await itinerary_service.check_overlap(
            session,
            start_date=D(2030, 3, 5),
            end_date=D(2030, 3, 6),
            exclude_itinerary_id=trip.id,
            **kwargs,
        )
        assert not await itinerary_service.check_overlap(
            session, start_date=None, end_date=D(2030, 3, 6), **kwargs
        )


async def test_concurrent_overlapping_creates_admit_one(seeded) -> None:
    async def attempt(offset: int) -> bool:
        try:
            await _create(
                seeded,
                title=f"Trip {offset}",
                start_date=D(2030, 5, 1) + dt.timedelta(days=offset),
                end_date=D(2030, 5, 4) + dt.timedelta(days=offset),
            )
        except DateRangeConflict:
            return False
        return True

    outcomes = await asyncio.gather(*(attempt(offset) for offset in range(3)))
    assert outcomes.count(True) == 1

    async with _sessionmaker()() as session:
        user = await session.get(User, seeded["traveller_id"])
        stored = await itinerary_service.list_itineraries(session, user=user)
    assert len(stored) == 1


async def test_attractions_are_validated_and_appended(seeded) -> None:
    trip = await _create(seeded, attraction_ids=[str(seeded["attraction_id"])])
    assert trip.attraction_ids == [str(seeded["attraction_id"])]

    with pytest.raises(InvalidRequest):
        await _create(seeded, attraction_ids=[str(uuid.uuid4())])

    async with _sessionmaker()() as session:
        user = await session.get(User, seeded["traveller_id"])
        updated = await itinerary_service.add_attractions(
            session,
            user=user,
            itinerary_id=trip.id,
            attraction_ids=[
                str(seeded["attraction_id"]),
                str(seeded["open_attraction_id"]),
            ],
        )
        assert updated.attraction_ids == [
            str(seeded["attraction_id"]),
            str(seeded["open_attraction_id"]),
        ]
        attractions = await itinerary_service.get_attractions(session, updated)
        assert {item.name for item in attractions} == {"Old Town Walk", "Harbour Cruise"}

        with pytest.raises(InvalidRequest):
            await itinerary_service.add_attractions(
                session, user=user, itinerary_id=trip.id, attraction_ids=[]
            )


async def test_itineraries_are_private(seeded) -> None:
    trip = await _create(seeded)
    async with _sessionmaker()() as session:
        other = await session.get(User, seeded["other_traveller_id"])
        owner = await session.get(User, seeded["traveller_id"])
        with pytest.raises(AccessDenied):
            await itinerary_service.get_itinerary(
                session, user=other, itinerary_id=trip.id
            )
        with pytest.raises(AccessDenied):
            await itinerary_service.delete_itinerary(
                session, user=other, itinerary_id=trip.id
            )

        await itinerary_service.delete_itinerary(
            session, user=owner, itinerary_id=trip.id
        )
        with pytest.raises(ItineraryNotFound):
            await itinerary_service.get_itinerary(
                session, user=owner, itinerary_id=trip.id
            )


async def test_remove_attractions_reports_removed_count(seeded) -> None:
    kept = str(seeded["attraction_id"])
    dropped = str(seeded["open_attraction_id"])
    trip = await _create(seeded, attraction_ids=[kept, dropped])

    async with _sessionmaker()() as session:
        user = await session.get(User, seeded["traveller_id"])
        other = await session.get(User, seeded["other_traveller_id"])

        updated, removed = await itinerary_service.remove_attractions(
            session, user=user, itinerary_id=trip.id, attraction_ids=[dropped, str(uuid.uuid4())]
        )
        assert removed == 1
        assert updated.attraction_ids == [kept]

        _, removed = await itinerary_service.remove_attractions(
            session, user=user, itinerary_id=trip.id, attraction_ids=[dropped]
        )
        assert removed == 0

        with pytest.raises(AccessDenied):
            await itinerary_service.remove_attractions(
                session, user=other, itinerary_id=trip.id, attraction_ids=[kept]
            )
        with pytest.raises(InvalidRequest):
            await itinerary_service.remove_attractions(
                session, user=user, itinerary_id=trip.id, attraction_ids=[]
            )
