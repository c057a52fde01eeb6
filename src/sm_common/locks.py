"""Per-key asyncio locks shared by the auction engine and settlement.

Serializes coroutines of this process that read-modify-write the same
listing. Cross-process safety comes from SELECT ... FOR UPDATE inside the
same transaction. A key's lock is dropped once no coroutine holds or waits
on it, so the map only tracks listings in use.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLocks:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def for_key(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


_listing_locks: KeyedLocks | None = None


def get_listing_locks() -> KeyedLocks:
    global _listing_locks  # noqa: PLW0603
    if _listing_locks is None:
        _listing_locks = KeyedLocks()
    return _listing_locks
