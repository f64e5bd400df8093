"""Per-deal serialization of recomputes."""

import asyncio
import weakref
from typing import Tuple


class DealLockRegistry:
    """
    Hands out one asyncio.Lock per (team_id, deal_id).

    Locks are held weakly: once no coroutine holds or waits on a deal's
    lock it is dropped, so the registry does not grow with the number of
    deals ever scored.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[Tuple[str, str], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def lock_for(self, team_id: str, deal_id: str) -> asyncio.Lock:
        key = (team_id, deal_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


deal_locks = DealLockRegistry()
