"""
Redis client - revocation list for logged-out access tokens.
Design: Single client instance, dependency injection for testability.
"""

import logging
from typing import Annotated

from fastapi import Depends
from redis.asyncio import Redis

from solarpanels.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Shared async Redis client (connection pool managed by redis-py)
_redis: Redis | None = None

BLACKLIST_PREFIX = "jwt:blacklist:"


async def get_redis() -> Redis:
    """Get Redis connection."""
    global _redis
    if _redis is None:
        _redis = Redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


class TokenBlacklist:
    """
    Revoked tokens keyed by the raw token string.
    Entries expire with the token itself, so the set never outgrows live tokens.
    Errors are not swallowed: a gate that cannot reach Redis must not accept tokens.
    """

    def __init__(self, client: Redis):
        self.client = client

    async def revoke(self, token: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            # Already expired; signature check rejects it anyway
            return
        await self.client.setex(BLACKLIST_PREFIX + token, ttl_seconds, "revoked")
        logger.info("Token revoked for %s seconds", ttl_seconds)

    async def is_revoked(self, token: str) -> bool:
        return bool(await self.client.exists(BLACKLIST_PREFIX + token))


async def get_token_blacklist() -> TokenBlacklist:
    """FastAPI dependency; tests override it with an in-memory client."""
    return TokenBlacklist(await get_redis())


Blacklist = Annotated[TokenBlacklist, Depends(get_token_blacklist)]
