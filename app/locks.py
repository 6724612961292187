import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as redis
from redis.exceptions import LockError, RedisError

from app.config import settings

logger = logging.getLogger(__name__)


class SlugLockManager:
    """
    Short-lived advisory locks keyed by slug candidate, backed by Redis.

    Two creations with the same title serialise on the candidate's lock for
    the duration of resolve + insert + commit.  The unique index on
    ``articles.slug`` stays the source of truth: when Redis is unavailable
    (or a lock cannot be acquired in time) ``hold`` proceeds unlocked and the
    conflict retry in ``article_service`` takes over.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except (RedisError, OSError) as exc:
            logger.warning("Redis ping failed — slug locks disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        """Close the connection pool.  Called once at application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    @staticmethod
    def key_for(candidate: str) -> str:
        return f"articles:slug-lock:{candidate}"

    @asynccontextmanager
    async def hold(self, candidate: str) -> AsyncIterator[bool]:
        """
        Hold the lock for *candidate* while the block runs.

        Yields True when the lock was actually acquired, False when running
        unlocked.
        """
        if not self._redis:
            yield False
            return

        lock = self._redis.lock(
            self.key_for(candidate),
            timeout=settings.SLUG_LOCK_TIMEOUT,
            blocking_timeout=settings.SLUG_LOCK_BLOCKING_TIMEOUT,
        )
        try:
            acquired = bool(await lock.acquire())
        except RedisError as exc:
            logger.warning("Slug lock unavailable for %r, continuing unlocked: %s", candidate, exc)
            acquired = False
        if not acquired:
            logger.debug("Slug lock for %r not acquired in time", candidate)

        try:
            yield acquired
        finally:
            if acquired:
                try:
                    await lock.release()
                except (LockError, RedisError) as exc:
                    # Expired under us; the unique index still guards the write.
                    logger.debug("Slug lock release failed for %r: %s", candidate, exc)


# Module-level singleton shared across all request handlers.
slug_locks = SlugLockManager()
