"""Revoked access tokens, keyed by the token's jti claim.

Logout adds the jti with a lifetime equal to the token's remaining validity;
require_user rejects any token whose jti is present.  Entries for expired
tokens are dropped, since the signature check rejects those anyway.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

from coursetrack.core.metrics import TOKEN_REVOCATION_CHECKS


@runtime_checkable
class TokenBlacklist(Protocol):
    async def revoke(self, jti: str, expires_at: float) -> None:
        """Add a token's JTI to the blacklist until it would have expired."""
        ...

    async def is_revoked(self, jti: str) -> bool: ...


def _count(revoked: bool) -> bool:
    TOKEN_REVOCATION_CHECKS.labels(result="revoked" if revoked else "valid").inc()
    return revoked


class InMemoryTokenBlacklist:
    """Per-process blacklist for tests and local dev (no Redis)."""

    def __init__(self) -> None:
        # jti -> expiry timestamp (Unix seconds)
        self._revoked: dict[str, float] = {}

    async def revoke(self, jti: str, expires_at: float) -> None:
        self._revoked[jti] = expires_at

    async def is_revoked(self, jti: str) -> bool:
        exp = self._revoked.get(jti)
        if exp is None:
            return _count(False)
        if exp < time.time():
            del self._revoked[jti]
            return _count(False)
        return _count(True)


class RedisTokenBlacklist:
    """Shared across API instances; keys expire with the token."""

    _PREFIX = "blacklist:jti:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def revoke(self, jti: str, expires_at: float) -> None:
        ttl_seconds = int(expires_at - time.time())
        if ttl_seconds <= 0:
            return
        # SETEX sets value and TTL atomically.
        await self._redis.setex(f"{self._PREFIX}{jti}", ttl_seconds, "1")

    async def is_revoked(self, jti: str) -> bool:
        return _count(bool(await self._redis.exists(f"{self._PREFIX}{jti}")))


def build_token_blacklist(redis_client) -> TokenBlacklist:
    if redis_client is not None:
        return RedisTokenBlacklist(redis_client)
    return InMemoryTokenBlacklist()
