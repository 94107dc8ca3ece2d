"""Test fixtures for the tour guide backend."""
from __future__ import annotations

import datetime as dt
import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from tourguide.core.config import get_settings
from tourguide.core.security import create_access_token
from tourguide.db.base import Base
from tourguide.db.session import dispose_engine, get_sessionmaker
from tourguide.main import app
from tourguide.models import (
    Attraction,
    Guide,
    GuideAvailabilitySlot,
    User,
    UserRole,
)

TOUR_DAY = dt.date(2030, 6, 1)
OFF_DAY = dt.date(2030, 6, 2)
DAILY_SLOTS = 5


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def seeded(reset_database: None, db_url: str) -> dict[str, object]:
    """Seed one guide with a bookable attraction and two travellers."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        guide_user = User(
            email="guide@example.com",
            full_name="Gia Guide",
            role=UserRole.GUIDE,
        )
        other_guide_user = User(
            email="other.guide@example.com",
            full_name="Oscar Other",
            role=UserRole.GUIDE,
        )
        traveller = User(
            email="traveller@example.com",
            full_name="Tara Traveller",
            role=UserRole.TRAVELLER,
        )
        other_traveller = User(
            email="second.traveller@example.com",
            full_name="Sam Second",
            role=UserRole.TRAVELLER,
        )
        session.add_all([guide_user, other_guide_user, traveller, other_traveller])
        await session.flush()

        guide = Guide(
            user_id=guide_user.id,
            name="Gia Guide",
            languages=["English", "Italian"],
            expertise=["History"],
            rating=4.8,
        )
        other_guide = Guide(user_id=other_guide_user.id, name="Oscar Other")
        session.add_all([guide, other_guide])
        await session.flush()

        attraction = Attraction(
            guide_id=guide.id,
            name="Old Town Walk",
            location="Old Town",
            category="Walking tour",
            duration="2h",
            available_dates=[TOUR_DAY.isoformat()],
        )
        open_attraction = Attraction(
            guide_id=guide.id,
            name="Harbour Cruise",
            location="Harbour",
        )
        foreign_attraction = Attraction(
            guide_id=other_guide.id,
            name="Castle Climb",
            location="Hilltop",
        )
        session.add_all([attraction, open_attraction, foreign_attraction])
        session.add(
            GuideAvailabilitySlot(
                guide_id=guide.id, date=TOUR_DAY, total_slots=DAILY_SLOTS
            )
        )
        await session.commit()

        return {
            "guide_user_id": guide_user.id,
            "other_guide_user_id": other_guide_user.id,
            "traveller_id": traveller.id,
            "other_traveller_id": other_traveller.id,
            "guide_id": guide.id,
            "other_guide_id": other_guide.id,
            "attraction_id": attraction.id,
            "open_attraction_id": open_attraction.id,
            "foreign_attraction_id": foreign_attraction.id,
        }


def auth_headers(user_id: object) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}


@pytest_asyncio.fixture()
async def app_context(seeded: dict[str, object]) -> AsyncIterator[dict[str, object]]:
    """Yield an async client, seeded ids and per-role auth headers."""
    context = dict(seeded)
    context["guide_headers"] = auth_headers(seeded["guide_user_id"])
    context["other_guide_headers"] = auth_headers(seeded["other_guide_user_id"])
    context["traveller_headers"] = auth_headers(seeded["traveller_id"])
    context["other_traveller_headers"] = auth_headers(seeded["other_traveller_id"])

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
