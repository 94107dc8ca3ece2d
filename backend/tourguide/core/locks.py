"""Keyed mutual exclusion for admission and itinerary writes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Hashable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from functools import lru_cache
from typing import Protocol

import redis.asyncio as redis  # type: ignore[import-untyped]
from redis.exceptions import LockError, RedisError  # type: ignore[import-untyped]

from tourguide.core.config import get_settings
from tourguide.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class LockRegistry(Protocol):
    def hold(
        self, key: Hashable, *, timeout: float | None = None
    ) -> AbstractAsyncContextManager[None]: ...


class KeyedLockRegistry:
    """In-process locks, one ``asyncio.Lock`` per key.

    Entries are reference counted and dropped once no task holds or waits for
    them, so the map only ever contains keys with in-flight work.
    """

    def __init__(self, default_timeout: float | None = None) -> None:
        self._default_timeout = default_timeout
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._refs: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(
        self, key: Hashable, *, timeout: float | None = None
    ) -> AsyncIterator[None]:
        wait = self._default_timeout if timeout is None else timeout
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._refs[key] = self._refs.get(key, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), wait)
            except asyncio.TimeoutError as exc:
                logger.warning("Timed out waiting for lock %r after %ss", key, wait)
                raise StoreUnavailable(
                    "Timed out waiting for a concurrent request to finish"
                ) from exc
            try:
                yield
            finally:
                lock.release()
        finally:
            self._refs[key] -= 1
            if not self._refs[key]:
                del self._refs[key]
                self._locks.pop(key, None)


class RedisKeyedLockRegistry:
    """Cross-process locks backed by Redis, for multi-worker deployments."""

    def __init__(
        self,
        client: redis.Redis,
        *,
        namespace: str = "tourguide:lock",
        ttl_seconds: int = 30,
        default_timeout: float | None = None,
    ) -> None:
        self._client = client
        self._namespace = namespace
        self._ttl_seconds = ttl_seconds
        self._default_timeout = default_timeout

    def _name(self, key: Hashable) -> str:
        parts = key if isinstance(key, tuple) else (key,)
        return ":".join([self._namespace, *(str(part) for part in parts)])

    @asynccontextmanager
    async def hold(
        self, key: Hashable, *, timeout: float | None = None
    ) -> AsyncIterator[None]:
        wait = self._default_timeout if timeout is None else timeout
        lock = self._client.lock(
            self._name(key), timeout=self._ttl_seconds, blocking_timeout=wait
        )
        try:
            acquired = await lock.acquire()
        except RedisError as exc:
            logger.warning("Redis lock acquire failed for %r: %s", key, exc)
            raise StoreUnavailable("Lock service unavailable") from exc
        if not acquired:
            logger.warning("Timed out waiting for redis lock %r after %ss", key, wait)
            raise StoreUnavailable("Timed out waiting for a concurrent request to finish")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                logger.warning("Redis lock %r expired before release", key)


@lru_cache
def get_lock_registry() -> KeyedLockRegistry | RedisKeyedLockRegistry:
    """Return the process-wide lock registry selected by configuration."""
    settings = get_settings()
    if settings.lock_backend == "redis":
        client = redis.from_url(
            settings.redis_url or "redis://redis:6379/0",
            encoding="utf-8",
            decode_responses=True,
        )
        return RedisKeyedLockRegistry(
            client,
            ttl_seconds=settings.lock_ttl_seconds,
            default_timeout=settings.lock_timeout_seconds,
        )
    return KeyedLockRegistry(default_timeout=settings.lock_timeout_seconds)


def booking_key(guide_id: object, day: object) -> tuple[str, str, str]:
    return ("booking", str(guide_id), str(day))


def itinerary_key(user_id: object) -> tuple[str, str]:
    return ("itinerary", str(user_id))


__all__ = [
    "KeyedLockRegistry",
    "LockRegistry",
    "RedisKeyedLockRegistry",
    "booking_key",
    "get_lock_registry",
    "itinerary_key",
]
