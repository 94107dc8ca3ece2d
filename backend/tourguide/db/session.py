"""Database session and engine helpers."""

from __future__ import annotations

import functools
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Concatenate, ParamSpec, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tourguide.core.config import get_settings
from tourguide.core.errors import InvalidRequest, StoreUnavailable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Driver failures reported as StoreUnavailable.
STORE_FAILURES: tuple[type[BaseException], ...] = (
    DBAPIError,
    PoolTimeoutError,
    TimeoutError,
)

_engine_cache: dict[str, AsyncEngine] = {}
_sessionmaker_cache: dict[str, async_sessionmaker[AsyncSession]] = {}


def _resolve_database_url(override: str | None = None) -> str:
    settings = get_settings()
    return override or settings.database_url


def get_sessionmaker(
    database_url: str | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Return (and cache) an async sessionmaker for the given database URL."""
    url = _resolve_database_url(database_url)
    sessionmaker = _sessionmaker_cache.get(url)
    if sessionmaker is None:
        engine = create_async_engine(url, echo=False, future=True)
        sessionmaker = async_sessionmaker(
            engine, expire_on_commit=False, class_=AsyncSession
        )
        _engine_cache[url] = engine
        _sessionmaker_cache[url] = sessionmaker
    return sessionmaker


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an async database session using the configured engine."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        yield session


async def dispose_engine(database_url: str | None = None) -> None:
    """Dispose the cached engine/sessionmaker for the given database URL."""
    url = _resolve_database_url(database_url)
    engine = _engine_cache.pop(url, None)
    if engine is not None:
        await engine.dispose()
    _sessionmaker_cache.pop(url, None)


async def _rollback_quietly(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except SQLAlchemyError:
        logger.exception("Rollback failed after store error")


@asynccontextmanager
async def store_errors(session: AsyncSession) -> AsyncIterator[None]:
    """Roll back and translate driver failures raised inside the block.

    Integrity violations mean the caller sent something the schema rejects;
    every other driver error or pool timeout is reported as
    ``StoreUnavailable``.
    """
    try:
        yield
    except IntegrityError as exc:
        await _rollback_quietly(session)
        raise InvalidRequest("Request conflicts with stored data") from exc
    except STORE_FAILURES as exc:
        await _rollback_quietly(session)
        logger.warning("Store operation failed: %s", exc.__class__.__name__)
        raise StoreUnavailable("Storage is temporarily unavailable") from exc


def translate_store_errors(
    func: Callable[Concatenate[AsyncSession, P], Awaitable[R]],
) -> Callable[Concatenate[AsyncSession, P], Awaitable[R]]:
    """Run a service coroutine taking the session first inside ``store_errors``."""

    @functools.wraps(func)
    async def wrapper(session: AsyncSession, *args: P.args, **kwargs: P.kwargs) -> R:
        async with store_errors(session):
            return await func(session, *args, **kwargs)

    return wrapper


async def end_read(session: AsyncSession) -> None:
    """Close the current transaction after a rejected write.

    Nothing was written, so committing keeps loaded objects usable where a
    rollback would expire them.
    """
    await session.commit()
