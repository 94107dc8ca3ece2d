"""Seed a demo guide, bookable attractions and a traveller."""
from __future__ import annotations

import asyncio
import datetime as dt

from sqlalchemy import select

from tourguide.db.session import get_sessionmaker
from tourguide.models import Attraction, Guide, GuideAvailabilitySlot, User, UserRole

DEFAULT_DAYS = 14
DEFAULT_SLOTS = 8

GUIDE_EMAIL = "demo.guide@example.com"
TRAVELLER_EMAIL = "demo.traveller@example.com"


async def _get_or_create_user(session, *, email: str, full_name: str, role: UserRole) -> User:
    user = (await session.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if user is None:
        user = User(email=email, full_name=full_name, role=role)
        session.add(user)
        await session.flush()
    return user


async def seed_demo(days: int = DEFAULT_DAYS, slots: int = DEFAULT_SLOTS) -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        guide_user = await _get_or_create_user(
            session, email=GUIDE_EMAIL, full_name="Demo Guide", role=UserRole.GUIDE
        )
        await _get_or_create_user(
            session, email=TRAVELLER_EMAIL, full_name="Demo Traveller", role=UserRole.TRAVELLER
        )

        guide = (
            await session.execute(select(Guide).where(Guide.user_id == guide_user.id))
        ).scalar_one_or_none()
        if guide is None:
            guide = Guide(
                user_id=guide_user.id,
                name="Demo Guide",
                languages=["English"],
                expertise=["History", "Food"],
                bio="Walking tours of the old town.",
            )
            session.add(guide)
            await session.flush()
            session.add_all(
                [
                    Attraction(
                        guide_id=guide.id,
                        name="Old Town Walk",
                        location="Old Town",
                        category="Walking tour",
                        duration="2h",
                    ),
                    Attraction(
                        guide_id=guide.id,
                        name="Market Tasting",
                        location="Central Market",
                        category="Food",
                        duration="3h",
                    ),
                ]
            )

        existing = set(
            (
                await session.execute(
                    select(GuideAvailabilitySlot.date).where(
                        GuideAvailabilitySlot.guide_id == guide.id
                    )
                )
            ).scalars()
        )
        created = 0
        today = dt.date.today()
        for offset in range(days):
            day = today + dt.timedelta(days=offset)
            if day not in existing:
                session.add(GuideAvailabilitySlot(guide_id=guide.id, date=day, total_slots=slots))
                created += 1
        await session.commit()
        print(f"Seeded guide {guide.id} with {created} availability slot(s).")


def main() -> None:
    asyncio.run(seed_demo())


if __name__ == "__main__":
    main()
