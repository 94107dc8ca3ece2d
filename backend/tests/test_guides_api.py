"""Guide directory and availability publishing API tests."""

from __future__ import annotations

import pytest

from conftest import DAILY_SLOTS, OFF_DAY, TOUR_DAY

pytestmark = pytest.mark.asyncio


async def test_list_guides_with_date_filter(app_context) -> None:
    client = app_context["client"]
    everyone = await client.get("/api/v1/guides")
    assert everyone.status_code == 200
    assert len(everyone.json()) == 2

    working = await client.get("/api/v1/guides", params={"date": TOUR_DAY.isoformat()})
    guides = working.json()
    assert [guide["id"] for guide in guides] == [str(app_context["guide_id"])]
    assert guides[0]["availability"] == [
        {"date": TOUR_DAY.isoformat(), "total_slots": DAILY_SLOTS}
    ]


async def test_guide_publishes_availability(app_context) -> None:
    client = app_context["client"]
    response = await client.patch(
        "/api/v1/guides/availability",
        json={"date": OFF_DAY.isoformat(), "slots": 4},
        headers=app_context["guide_headers"],
    )
    assert response.status_code == 200, response.text
    slots = {item["date"]: item["total_slots"] for item in response.json()["availability"]}
    assert slots == {TOUR_DAY.isoformat(): DAILY_SLOTS, OFF_DAY.isoformat(): 4}


async def test_publish_rejects_capacity_below_bookings(app_context) -> None:
    client = app_context["client"]
    await client.post(
        "/api/v1/bookings",
        json={
            "attraction_id": str(app_context["attraction_id"]),
            "guide_id": str(app_context["guide_id"]),
            "date": TOUR_DAY.isoformat(),
            "party_size": 3,
        },
        headers=app_context["traveller_headers"],
    )
    response = await client.patch(
        "/api/v1/guides/availability",
        json={"date": TOUR_DAY.isoformat(), "slots": 1},
        headers=app_context["guide_headers"],
    )
    assert response.status_code == 400
    assert response.json()["code"] == "CapacityBelowBooked"


async def test_travellers_cannot_publish(app_context) -> None:
    response = await app_context["client"].patch(
        "/api/v1/guides/availability",
        json={"date": OFF_DAY.isoformat(), "slots": 4},
        headers=app_context["traveller_headers"],
    )
    assert response.status_code == 403
