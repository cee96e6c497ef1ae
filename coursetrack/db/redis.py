"""Redis client lifecycle.

Redis is optional.  When REDIS_URL is set the lifespan opens a pooled
client and passes it down; token revocations then live in Redis so every
API instance sees a logout.  Without it, the in-memory blacklist is used.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from coursetrack.core.config import Settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan_redis(settings: Settings) -> AsyncIterator[aioredis.Redis | None]:
    if not settings.redis_url:
        logger.info("No REDIS_URL configured, token revocation stays in-process")
        yield None
        return

    client: aioredis.Redis = aioredis.from_url(  # type: ignore[type-arg]
        settings.redis_url,
        decode_responses=True,
        max_connections=20,
    )
    try:
        await client.ping()  # type: ignore[misc]
        logger.info("Redis connected: %s", settings.redis_url)
    except Exception:
        # Keep serving; revocation checks will surface the outage per request.
        logger.exception("Redis connection failed on startup")

    try:
        yield client
    finally:
        await client.aclose()
        logger.info("Redis connection pool closed")
