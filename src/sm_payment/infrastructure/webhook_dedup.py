"""At-most-once claim of Telegram update ids in Redis.

Only trims duplicate work; the order compare-and-set stays the real guard.
"""

import redis.asyncio as aioredis

_KEY_PREFIX = "tg:update:"


async def claim_update(redis: aioredis.Redis, update_id: int, ttl_seconds: int) -> bool:
    """True the first time ``update_id`` is seen within ``ttl_seconds``."""
    claimed = await redis.set(f"{_KEY_PREFIX}{update_id}", "1", nx=True, ex=ttl_seconds)
    return bool(claimed)


async def release_update(redis: aioredis.Redis, update_id: int) -> None:
    """Forget a claim so a redelivery of ``update_id`` is processed again."""
    await redis.delete(f"{_KEY_PREFIX}{update_id}")
