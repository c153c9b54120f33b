"""Redis-backed storage for refresh-token records and the access-token blacklist."""

from __future__ import annotations

import time
from typing import Callable, Mapping, Protocol, runtime_checkable

from core import settings


@runtime_checkable
class SupportsTokenStoreClient(Protocol):
    async def set(self, name: str, value: str, ex: int | None = None) -> object: ...

    async def get(self, name: str) -> str | None: ...

    async def delete(self, *names: str) -> int: ...

    async def zadd(self, name: str, mapping: Mapping[str, float]) -> int: ...

    async def zscore(self, name: str, value: str) -> float | None: ...

    async def zremrangebyscore(self, name: str, min: float | str, max: float | str) -> int: ...

    async def ttl(self, name: str) -> int: ...

    async def expire(self, name: str, time: int) -> bool: ...


class CacheStore(Protocol):
    """Key-value capability the auth orchestrator depends on.

    ``set`` is a last-writer-wins replace: writing a key that already holds a
    value discards the previous value and resets its TTL.
    """

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def get(self, key: str) -> str | None: ...

    async def delete(self, key: str) -> None: ...

    async def add_to_set(self, set_key: str, member: str, ttl_seconds: int) -> None: ...

    async def is_member(self, set_key: str, member: str) -> bool: ...


def refresh_token_key(user_id: str, *, prefix: str | None = None) -> str:
    return f"{prefix or settings.refresh_token_key}:{user_id}"


class RedisCacheStore:
    """CacheStore over an async Redis client.

    Set members expire individually: each set is a sorted set scored by the
    member's expiry timestamp, and members whose score has passed are treated
    as absent. The key itself expires together with its longest-lived member.
    """

    def __init__(
        self,
        redis_client: SupportsTokenStoreClient,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.redis = redis_client
        self.clock = clock

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.redis.set(key, value, ex=ttl_seconds)

    async def get(self, key: str) -> str | None:
        value = await self.redis.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)

    async def add_to_set(self, set_key: str, member: str, ttl_seconds: int) -> None:
        now = self.clock()
        await self.redis.zremrangebyscore(set_key, "-inf", now)
        await self.redis.zadd(set_key, {member: now + ttl_seconds})
        remaining = await self.redis.ttl(set_key)
        if remaining < ttl_seconds:
            await self.redis.expire(set_key, ttl_seconds)

    async def is_member(self, set_key: str, member: str) -> bool:
        expires_at = await self.redis.zscore(set_key, member)
        return expires_at is not None and expires_at > self.clock()
